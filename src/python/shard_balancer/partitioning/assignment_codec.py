"""Conversions between the two shard assignment forms.

*Array form* is a list indexed by shard id whose values are owning group
ids.  *Group form* maps each group id to the shard ids it owns.
"""

from __future__ import annotations

from ..models import UNASSIGNED_GID, ShardConfig


def to_group_form(shards: list[int], group_ids: list[int]) -> dict[int, list[int]]:
    """Group shard ids by owning gid.

    Every gid in ``group_ids`` gets an entry, even when it owns nothing.
    Shards pointing at a gid outside ``group_ids`` land in a bucket of
    their own for that gid; keeping the assignment consistent with the
    group set is up to the caller.
    """
    shards_by_gid: dict[int, list[int]] = {gid: [] for gid in group_ids}
    for shard, gid in enumerate(shards):
        shards_by_gid.setdefault(gid, []).append(shard)
    return shards_by_gid


def to_array_form(shards_by_gid: dict[int, list[int]], shard_count: int) -> list[int]:
    """Inverse of :func:`to_group_form`.

    Shard ids not listed under any gid are left as ``UNASSIGNED_GID``.
    """
    shards = [UNASSIGNED_GID] * shard_count
    for gid, owned in shards_by_gid.items():
        for shard in owned:
            shards[shard] = gid
    return shards


def clone_config(config: ShardConfig, shards: list[int] | None = None) -> ShardConfig:
    """Return a value-independent copy of ``config``.

    Passing ``shards`` replaces the assignment in the copy.
    """
    return ShardConfig(
        shards=list(config.shards if shards is None else shards),
        groups={gid: list(servers) for gid, servers in config.groups.items()},
    )
