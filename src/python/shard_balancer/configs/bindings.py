from injector import Binder, Injector
from shard_balancer.configs.balancer_config import BalancerConfig
from shard_balancer.partitioning.shard_rebalancer import ShardRebalancer


def build_injector(config: BalancerConfig | None = None) -> Injector:
    """Create an injector exposing the config and a matching :class:`ShardRebalancer`."""
    if config is None:
        config = BalancerConfig.load()

    rebalancer = ShardRebalancer(config.shard_count)

    def configure_bindings(binder: Binder):
        binder.bind(BalancerConfig, to=config)
        binder.bind(ShardRebalancer, to=rebalancer)

    return Injector([configure_bindings])
