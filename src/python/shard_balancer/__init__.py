"""Shard Balancer: movement-minimal shard reassignment.

Computes how a fixed number of shards should be spread over a changing
set of groups (e.g. replica groups in a sharded store) so that every
group owns ``shard_count // group_count`` or one more shard, while
moving as few shards as possible.

Quick Start::

    from shard_balancer import ShardConfig, ShardRebalancer

    config = ShardConfig.from_group_form(
        {1: list(range(10)), 2: [], 3: []},
        shard_count=10,
    )
    balanced = ShardRebalancer(shard_count=10).rebalance(config)
    # group 1 keeps 4 shards, groups 2 and 3 receive 3 each
"""

from .exceptions import (
    InvalidAssignmentError,
    InvalidGroupCountError,
    ShardBalancerError,
)
from .models import UNASSIGNED_GID, GroupStanding, ShardConfig, ShardQuota
from .partitioning.assignment_codec import clone_config, to_array_form, to_group_form
from .partitioning.shard_rebalancer import (
    ShardRebalancer,
    compute_diff,
    count_movements,
    is_balanced,
    minimum_movements,
)

__all__ = [
    # Main entry point
    "ShardRebalancer",
    # Analysis
    "compute_diff",
    "count_movements",
    "is_balanced",
    "minimum_movements",
    # Codec
    "clone_config",
    "to_array_form",
    "to_group_form",
    # Models
    "UNASSIGNED_GID",
    "GroupStanding",
    "ShardConfig",
    "ShardQuota",
    # Exceptions
    "InvalidAssignmentError",
    "InvalidGroupCountError",
    "ShardBalancerError",
]
