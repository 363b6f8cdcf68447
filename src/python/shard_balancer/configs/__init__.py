from shard_balancer.configs.balancer_config import BalancerConfig, DEFAULT_CONFIG_PATH
from shard_balancer.configs.bindings import build_injector
from shard_balancer.configs.logging_config import configure_logging

__all__ = [
    "BalancerConfig",
    "DEFAULT_CONFIG_PATH",
    "build_injector",
    "configure_logging",
]
