import logging
import os

from patronage.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Startup configuration is unusable."""


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigurationError: if any environment variable named in
            ops.required_env is unset.
    """
    missing = [name for name in rules.ops.required_env if name not in os.environ]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    if rules.pagination.default_limit > rules.pagination.max_limit:
        raise ConfigurationError("pagination.default_limit exceeds pagination.max_limit")

    logger.info("Configuration validated")
