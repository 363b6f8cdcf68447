"""Data models for the shard balancer.

All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Group id recorded for a shard that no group owns yet.
UNASSIGNED_GID = 0


# ── Enums ─────────────────────────────────────────────────────────


class GroupStanding(str, enum.Enum):
    """Where a group sits relative to its shard quota."""

    PRIMARY_DONOR = "primary_donor"
    """Owns more than ``ceiling`` shards and must shed the excess."""

    SECONDARY_DONOR = "secondary_donor"
    """Owns more than ``floor`` but at most ``ceiling`` shards."""

    RECIPIENT = "recipient"
    """Owns fewer than ``floor`` shards and must receive more."""

    AT_TARGET = "at_target"
    """Owns exactly ``floor`` shards."""


# ── Assignment Models ─────────────────────────────────────────────


class ShardQuota(BaseModel):
    """Per-group shard bounds for ``shard_count`` shards over ``group_count`` groups."""

    model_config = ConfigDict(frozen=True)

    shard_count: int
    """Total number of shards being balanced."""

    group_count: int
    """Number of groups sharing the shards."""

    floor: int
    """Fewest shards a balanced group may own (``shard_count // group_count``)."""

    ceiling: int
    """Most shards a balanced group may own."""

    @property
    def oversized_groups(self) -> int:
        """Number of groups that own ``ceiling`` shards once balanced."""
        return self.shard_count % self.group_count


class ShardConfig(BaseModel):
    """Immutable snapshot of a shard assignment and its group membership."""

    model_config = ConfigDict(frozen=True)

    shards: list[int] = Field(default_factory=list)
    """Array form: ``shards[s]`` is the gid that owns shard ``s``."""

    groups: dict[int, list[str]] = Field(default_factory=dict)
    """Mapping of gid → server addresses of that group."""

    @field_validator("groups")
    @classmethod
    def _reject_reserved_gid(cls, groups: dict[int, list[str]]) -> dict[int, list[str]]:
        if UNASSIGNED_GID in groups:
            raise ValueError(f"gid {UNASSIGNED_GID} is reserved for unassigned shards")
        return groups

    @property
    def shard_count(self) -> int:
        return len(self.shards)

    @property
    def group_ids(self) -> list[int]:
        """Group ids in ascending order."""
        return sorted(self.groups)

    def shards_by_group(self) -> dict[int, list[int]]:
        """Return the group form of this snapshot's assignment."""
        from .partitioning.assignment_codec import to_group_form

        return to_group_form(self.shards, self.group_ids)

    @classmethod
    def from_group_form(
        cls,
        shards_by_gid: dict[int, list[int]],
        shard_count: int,
        groups: dict[int, list[str]] | None = None,
    ) -> ShardConfig:
        """Build a snapshot from a gid → shards mapping.

        Shards missing from every list stay unassigned.  When ``groups``
        is omitted, each gid gets a single empty server address.
        """
        from .partitioning.assignment_codec import to_array_form

        shards = to_array_form(shards_by_gid, shard_count)
        if groups is None:
            groups = {gid: [""] for gid in shards_by_gid}
        return cls(
            shards=shards,
            groups={gid: list(servers) for gid, servers in groups.items()},
        )
