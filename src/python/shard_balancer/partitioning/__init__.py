from .assignment_codec import clone_config, to_array_form, to_group_form
from .group_classifier import classify_group, classify_groups, compute_quota
from .shard_rebalancer import (
    ShardRebalancer,
    compute_diff,
    count_movements,
    is_balanced,
    minimum_movements,
)
from .shard_transfer import ShardTransferEngine

__all__ = [
    "ShardRebalancer",
    "ShardTransferEngine",
    "classify_group",
    "classify_groups",
    "clone_config",
    "compute_diff",
    "compute_quota",
    "count_movements",
    "is_balanced",
    "minimum_movements",
    "to_array_form",
    "to_group_form",
]
