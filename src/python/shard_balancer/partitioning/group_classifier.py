"""Group classifier: buckets groups by shard count against their quota."""

from __future__ import annotations

from ..exceptions import InvalidGroupCountError
from ..models import GroupStanding, ShardQuota


def compute_quota(shard_count: int, group_count: int) -> ShardQuota:
    """Compute the ``floor``/``ceiling`` bounds of a balanced assignment.

    Raises:
        InvalidGroupCountError: If ``group_count`` is not positive.
    """
    if group_count <= 0:
        raise InvalidGroupCountError(group_count)
    floor = shard_count // group_count
    ceiling = floor if shard_count % group_count == 0 else floor + 1
    return ShardQuota(
        shard_count=shard_count,
        group_count=group_count,
        floor=floor,
        ceiling=ceiling,
    )


def classify_group(count: int, quota: ShardQuota) -> GroupStanding:
    """Return the standing of a group owning ``count`` shards."""
    if count > quota.ceiling:
        return GroupStanding.PRIMARY_DONOR
    if count > quota.floor:
        return GroupStanding.SECONDARY_DONOR
    if count < quota.floor:
        return GroupStanding.RECIPIENT
    return GroupStanding.AT_TARGET


def classify_groups(
    shards_by_gid: dict[int, list[int]],
    quota: ShardQuota,
) -> dict[GroupStanding, list[int]]:
    """Partition group ids into the four standings.

    Every standing has an entry; gids within a bucket are ascending.
    """
    buckets: dict[GroupStanding, list[int]] = {standing: [] for standing in GroupStanding}
    for gid in sorted(shards_by_gid):
        buckets[classify_group(len(shards_by_gid[gid]), quota)].append(gid)
    return buckets
