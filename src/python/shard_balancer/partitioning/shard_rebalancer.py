"""Shard rebalancer: computes a balanced, movement-minimal assignment.

The rebalancer is stateless: it takes a :class:`ShardConfig` snapshot
and returns a new one in which every group owns either ``floor`` or
``ceiling`` shards.  Groups that already own the most shards keep the
``ceiling`` slots, so only the shards that have to move do.  The
configuration service calls this whenever groups join or leave.
"""

from __future__ import annotations

import logging

from ..exceptions import InvalidAssignmentError, InvalidGroupCountError
from ..models import UNASSIGNED_GID, ShardConfig
from .assignment_codec import clone_config, to_array_form, to_group_form
from .group_classifier import compute_quota
from .shard_transfer import ShardTransferEngine

logger = logging.getLogger(__name__)


class ShardRebalancer:
    """Computes balanced shard → group assignments.

    Parameters:
        shard_count: Total number of shards (fixed for the cluster).
    """

    def __init__(self, shard_count: int) -> None:
        if shard_count < 1:
            raise ValueError("shard_count must be >= 1")
        self._shard_count = shard_count

    @property
    def shard_count(self) -> int:
        return self._shard_count

    def rebalance(self, config: ShardConfig) -> ShardConfig:
        """Return a balanced copy of ``config``.

        Unassigned shards are handed out along with the surplus of
        overloaded groups.  ``config`` itself is never modified.

        Raises:
            InvalidGroupCountError: If ``config`` has no groups.
            InvalidAssignmentError: If the assignment has the wrong length
                or references a gid missing from ``config.groups``.
        """
        self._validate(config)
        quota = compute_quota(self._shard_count, len(config.groups))

        shards_by_gid = to_group_form(config.shards, config.group_ids)
        unassigned = shards_by_gid.pop(UNASSIGNED_GID, [])
        engine = ShardTransferEngine(shards_by_gid, quota, unassigned)
        balanced = engine.run()

        logger.info(
            "Rebalanced %d shards across %d groups (%d moved, %d previously unassigned)",
            self._shard_count,
            quota.group_count,
            engine.moves,
            len(unassigned),
        )
        return clone_config(config, to_array_form(balanced, self._shard_count))

    def _validate(self, config: ShardConfig) -> None:
        if not config.groups:
            raise InvalidGroupCountError(0)
        if config.shard_count != self._shard_count:
            raise InvalidAssignmentError(
                f"expected {self._shard_count} shards, got {config.shard_count}"
            )
        for shard, gid in enumerate(config.shards):
            if gid != UNASSIGNED_GID and gid not in config.groups:
                raise InvalidAssignmentError("shard owned by unknown group", shard=shard, gid=gid)


# ── Analysis ──────────────────────────────────────────────────────


def is_balanced(config: ShardConfig) -> bool:
    """True if every shard is owned and every group holds ``floor`` or ``ceiling``."""
    if not config.groups:
        return False
    quota = compute_quota(config.shard_count, len(config.groups))
    shards_by_gid = to_group_form(config.shards, config.group_ids)
    if set(shards_by_gid) != set(config.groups):
        return False
    return all(
        len(owned) in (quota.floor, quota.ceiling)
        for owned in shards_by_gid.values()
    )


def count_movements(before: ShardConfig, after: ShardConfig) -> int:
    """Number of shards whose owning group differs between two snapshots."""
    return len(compute_diff(before, after))


def compute_diff(
    before: ShardConfig,
    after: ShardConfig,
) -> dict[int, tuple[int, int]]:
    """Compute which shards changed ownership.

    Returns:
        Dict mapping shard → (old_gid, new_gid) for shards that moved.
        ``old_gid`` is ``UNASSIGNED_GID`` if the shard had no owner.
    """
    if before.shard_count != after.shard_count:
        raise InvalidAssignmentError(
            f"cannot compare {before.shard_count} shards with {after.shard_count}"
        )
    changes: dict[int, tuple[int, int]] = {}
    for shard, (old_gid, new_gid) in enumerate(zip(before.shards, after.shards)):
        if old_gid != new_gid:
            changes[shard] = (old_gid, new_gid)
    return changes


def minimum_movements(config: ShardConfig) -> int:
    """Fewest shard moves any balanced assignment of ``config`` needs.

    Every unassigned shard has to move.  Of the owned shards, the groups
    holding the most keep ``ceiling`` and the rest keep ``floor``;
    everything above that must leave.
    """
    quota = compute_quota(config.shard_count, len(config.groups))
    shards_by_gid = to_group_form(config.shards, config.group_ids)
    unassigned = len(shards_by_gid.pop(UNASSIGNED_GID, []))
    counts = sorted((len(owned) for owned in shards_by_gid.values()), reverse=True)
    excess = 0
    for rank, count in enumerate(counts):
        target = quota.ceiling if rank < quota.oversized_groups else quota.floor
        excess += max(0, count - target)
    return unassigned + excess
