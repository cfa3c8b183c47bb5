import logging
import os
from pathlib import Path

from humsafar.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.
    """
    missing = [name for name in rules.ops.required_env if name not in os.environ]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Configuration validated (rules %s)", rules.project.rules_version)
