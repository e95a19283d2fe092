import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Operational requirements are not met; the process must not start."""

    def __init__(self, missing_env: list[str] | None = None, message: str | None = None):
        self.missing_env = missing_env or []
        if message is None:
            message = f"Missing required environment variables: {', '.join(self.missing_env)}"
        super().__init__(message)


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.
    """
    ops = rules.ops

    # 1. Data dir must exist (created if absent) and be writable
    if ops.data_dir_required:
        data_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(data_dir, os.W_OK):
            raise ConfigurationError(message=f"Data directory is not writable: {data_dir}")

    # 2. Check Required Env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        raise ConfigurationError(missing)

    logger.info("Configuration validated (rules %s)", rules.project.rules_version)
