"""Exception hierarchy for the shard balancer."""

from __future__ import annotations


class ShardBalancerError(Exception):
    """Base exception for all shard balancer errors."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


# ── Input Errors ──────────────────────────────────────────────────

class InvalidGroupCountError(ShardBalancerError):
    """Raised when a rebalance is requested for an empty group set."""

    def __init__(self, group_count: int = 0) -> None:
        self.group_count = group_count
        super().__init__(
            f"Cannot rebalance shards across {group_count} groups. At least one group is required."
        )


class InvalidAssignmentError(ShardBalancerError):
    """Raised when a shard assignment is inconsistent with its group set."""

    def __init__(
        self,
        reason: str,
        shard: int | None = None,
        gid: int | None = None,
    ) -> None:
        self.reason = reason
        self.shard = shard
        self.gid = gid
        msg = f"Invalid shard assignment: {reason}"
        if shard is not None:
            msg += f" (shard {shard}"
            if gid is not None:
                msg += f", group {gid}"
            msg += ")"
        super().__init__(msg)
