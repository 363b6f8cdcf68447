import copy
import logging
import random

import pytest

from shard_balancer.exceptions import InvalidAssignmentError, InvalidGroupCountError, ShardBalancerError
from shard_balancer.models import UNASSIGNED_GID, ShardConfig
from shard_balancer.partitioning.shard_rebalancer import (
    ShardRebalancer,
    compute_diff,
    count_movements,
    is_balanced,
    minimum_movements,
)


def _check(config, expected_movements, shard_count=10):
    new_config = ShardRebalancer(shard_count).rebalance(config)
    assert is_balanced(new_config), f"Unbalanced: {config.shards} -> {new_config.shards}"
    assert count_movements(config, new_config) == expected_movements
    return new_config


def _with_empty_groups(shards_by_gid, empty_gids):
    shards_by_gid = dict(shards_by_gid)
    for gid in empty_gids:
        shards_by_gid[gid] = []
    return shards_by_gid


# ── Scenarios ─────────────────────────────────────────────────────


def test_no_change():
    config = ShardConfig.from_group_form({1: [0, 1, 2, 3], 2: [4, 5, 6], 3: [7, 8, 9]}, 10)
    new_config = _check(config, 0)
    assert new_config.shards == config.shards


def test_one_group_owns_everything():
    config = ShardConfig.from_group_form({1: list(range(10)), 2: [], 3: []}, 10)
    new_config = _check(config, 6)
    assert sorted(len(owned) for owned in new_config.shards_by_group().values()) == [3, 3, 4]
    assert len(new_config.shards_by_group()[1]) == 4


def test_many_groups_few_shards():
    shards_by_gid = _with_empty_groups({1: [0, 1, 2, 3], 2: [4, 5, 6], 3: [7, 8], 4: [9]}, range(5, 15))
    new_config = _check(ShardConfig.from_group_form(shards_by_gid, 10), 6)
    counts = [len(owned) for owned in new_config.shards_by_group().values()]
    assert counts.count(1) == 10
    assert counts.count(0) == 4


def test_many_groups_shards_on_three():
    shards_by_gid = _with_empty_groups({1: [0, 1, 2, 3], 2: [4, 5, 6], 3: [7, 8, 9]}, range(4, 15))
    _check(ShardConfig.from_group_form(shards_by_gid, 10), 7)


def test_single_group():
    _check(ShardConfig.from_group_form({1: list(range(10))}, 10), 0)


def test_one_shard_per_group_with_spare_groups():
    shards_by_gid = _with_empty_groups({gid: [gid - 1] for gid in range(1, 11)}, range(11, 15))
    _check(ShardConfig.from_group_form(shards_by_gid, 10), 0)


def test_six_four_split():
    config = ShardConfig.from_group_form({1: [0, 1, 2, 3, 4, 5], 2: [6, 7, 8, 9]}, 10)
    new_config = _check(config, 1)
    assert new_config.shards_by_group()[2] == [5, 6, 7, 8, 9]


def test_group_joins():
    config = ShardConfig.from_group_form({1: list(range(5)), 2: list(range(5, 10)), 3: []}, 10)
    new_config = _check(config, 3)
    assert len(new_config.shards_by_group()[3]) == 3


def test_secondary_donors_give_when_primaries_run_out():
    config = ShardConfig.from_group_form({1: [0, 1, 2, 3], 2: [4, 5, 6], 3: [7, 8, 9], 4: []}, 10)
    new_config = _check(config, 2)
    assert sorted(len(owned) for owned in new_config.shards_by_group().values()) == [2, 2, 3, 3]


def test_fresh_cluster_assigns_every_shard():
    config = ShardConfig(shards=[UNASSIGNED_GID] * 10, groups={1: ["a:1"], 2: ["b:1"], 3: ["c:1"]})
    new_config = _check(config, 10)
    assert UNASSIGNED_GID not in new_config.shards


def test_orphaned_shards_after_group_leaves():
    # Group 3 left; its shards were released by the caller.
    shards = [1, 1, 1, 1, 2, 2, 2, UNASSIGNED_GID, UNASSIGNED_GID, UNASSIGNED_GID]
    config = ShardConfig(shards=shards, groups={1: [], 2: []})
    new_config = _check(config, 3)
    assert new_config.shards[:7] == shards[:7]


def test_other_shard_counts():
    config = ShardConfig.from_group_form({1: list(range(64)), 2: [], 3: [], 4: [], 5: []}, 64)
    new_config = _check(config, 51, shard_count=64)
    assert len(new_config.shards_by_group()[1]) == 13

    config = ShardConfig.from_group_form({1: [0], 2: []}, 1)
    _check(config, 0, shard_count=1)


# ── Guarantees ────────────────────────────────────────────────────


def test_input_is_not_mutated():
    config = ShardConfig.from_group_form(
        {1: list(range(8)), 2: [8], 3: [9]},
        10,
        groups={1: ["a:1", "a:2"], 2: ["b:1"], 3: ["c:1"]},
    )
    snapshot = copy.deepcopy(config)
    new_config = ShardRebalancer(10).rebalance(config)
    assert config == snapshot
    assert new_config is not config
    assert new_config.groups == config.groups
    assert new_config.groups[1] is not config.groups[1]


def test_rebalance_is_idempotent():
    config = ShardConfig.from_group_form({1: list(range(7)), 2: [7], 3: [8, 9], 4: []}, 10)
    rebalancer = ShardRebalancer(10)
    once = rebalancer.rebalance(config)
    twice = rebalancer.rebalance(once)
    assert count_movements(once, twice) == 0
    assert twice == once


def test_random_assignments_are_balanced_with_minimum_moves():
    for seed in range(200):
        rng = random.Random(seed)
        shard_count = rng.choice([1, 3, 10, 17, 64, 257])
        gids = rng.sample(range(1, 100), rng.randint(1, 20))
        owners = gids + [UNASSIGNED_GID] * rng.randint(0, 2)
        weights = [rng.random() ** 3 + 0.01 for _ in owners]
        shards = rng.choices(owners, weights=weights, k=shard_count)
        config = ShardConfig(shards=shards, groups={gid: [f"10.0.0.{gid}:9100"] for gid in gids})
        snapshot = copy.deepcopy(config)

        rebalancer = ShardRebalancer(shard_count)
        new_config = rebalancer.rebalance(config)

        assert config == snapshot, f"seed {seed}"
        assert is_balanced(new_config), f"seed {seed}"
        assert sorted(new_config.shards_by_group()) == sorted(gids), f"seed {seed}"
        assert sum(len(owned) for owned in new_config.shards_by_group().values()) == shard_count
        assert count_movements(config, new_config) == minimum_movements(config), f"seed {seed}"
        assert rebalancer.rebalance(new_config) == new_config, f"seed {seed}"


# ── Errors ────────────────────────────────────────────────────────


def test_zero_groups_rejected():
    config = ShardConfig(shards=[UNASSIGNED_GID] * 10, groups={})
    with pytest.raises(InvalidGroupCountError):
        ShardRebalancer(10).rebalance(config)


def test_unknown_group_rejected():
    config = ShardConfig(shards=[1] * 9 + [4], groups={1: [], 2: []})
    with pytest.raises(InvalidAssignmentError) as exc:
        ShardRebalancer(10).rebalance(config)
    assert exc.value.shard == 9
    assert exc.value.gid == 4
    assert isinstance(exc.value, ShardBalancerError)


def test_wrong_shard_count_rejected():
    config = ShardConfig.from_group_form({1: [0, 1, 2]}, 3)
    with pytest.raises(InvalidAssignmentError):
        ShardRebalancer(10).rebalance(config)


def test_shard_count_must_be_positive():
    with pytest.raises(ValueError):
        ShardRebalancer(0)


def test_rebalance_logs_summary(caplog):
    config = ShardConfig.from_group_form({1: list(range(10)), 2: [], 3: []}, 10)
    with caplog.at_level(logging.INFO, logger="shard_balancer"):
        ShardRebalancer(10).rebalance(config)
    assert "Rebalanced 10 shards across 3 groups (6 moved" in caplog.text


# ── Analysis helpers ──────────────────────────────────────────────


def test_is_balanced():
    assert is_balanced(ShardConfig.from_group_form({1: [0, 1], 2: [2]}, 3))
    assert not is_balanced(ShardConfig.from_group_form({1: [0, 1, 2], 2: []}, 3))
    assert not is_balanced(ShardConfig.from_group_form({1: [0], 2: [1]}, 3))
    assert not is_balanced(ShardConfig(shards=[UNASSIGNED_GID], groups={}))


def test_compute_diff():
    before = ShardConfig(shards=[1, 1, UNASSIGNED_GID], groups={1: [], 2: []})
    after = ShardConfig(shards=[1, 2, 2], groups={1: [], 2: []})
    assert compute_diff(before, after) == {1: (1, 2), 2: (UNASSIGNED_GID, 2)}
    assert count_movements(before, after) == 2


def test_compute_diff_rejects_different_sizes():
    with pytest.raises(InvalidAssignmentError):
        compute_diff(ShardConfig(shards=[1]), ShardConfig(shards=[1, 1]))


def test_minimum_movements():
    config = ShardConfig.from_group_form({1: list(range(10)), 2: [], 3: []}, 10)
    assert minimum_movements(config) == 6
    shards = [1, 1, 1, 1, 1, 1, 1, UNASSIGNED_GID, UNASSIGNED_GID, 2]
    assert minimum_movements(ShardConfig(shards=shards, groups={1: [], 2: []})) == 4
