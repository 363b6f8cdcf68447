import logging
import yaml
from pathlib import Path
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "resources" / "default.yaml"

_logger = logging.getLogger(__name__)


class BalancerConfig(BaseModel):
    """Settings for the shard balancer, read from the ``shard_balancer`` YAML section."""

    shard_count: int = Field(default=10, ge=1)
    """Fixed number of shards in the cluster."""

    log_level: str = "INFO"
    """Root logging level applied by :func:`configure_logging`."""

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "BalancerConfig":
        path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

        if not path.exists():
            raise FileNotFoundError(f"Config file not found at: {path}")

        with open(path, "r") as f:
            raw_config = yaml.safe_load(f) or {}

        balancer_config = raw_config.get("shard_balancer", {})
        logging_config = balancer_config.get("logging", {})

        config = cls(
            shard_count=balancer_config.get("shard_count", 10),
            log_level=logging_config.get("level", "INFO"),
        )
        _logger.info(f"BalancerConfig loaded from {path}")
        return config
