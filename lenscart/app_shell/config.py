import logging
import os
from pathlib import Path

from lenscart.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigurationError: data dir unusable or required env vars missing.
    """
    ops = rules.ops

    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Data directory {data_dir} is not usable: {e}") from e
        if not os.access(data_dir, os.W_OK):
            raise ConfigurationError(f"Data directory {data_dir} is not writable")

    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Configuration validated (data dir %s).", data_dir)
