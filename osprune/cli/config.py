"""CLI configuration defaults.

Values are read from a YAML file and then from the environment, which wins.
Command line options override both.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/osprune/config.yaml")

# Environment variable -> Config attribute
ENVIRONMENT_VARIABLES = {
    "OS_CLOUD": "cloud",
    "OSPRUNE_RESOURCE_TTL": "resource_ttl",
    "SLACK_HOOK": "slack_hook",
    "CLUSTER_TYPE": "cluster_label",
    "OSPRUNE_IGNORE_FILE": "ignore_file",
    "OSPRUNE_LOG_LEVEL": "log_level",
}


@dataclass
class Config:
    """Defaults for the ``run`` command.

    Attributes:
        cloud: clouds.yaml entry name
        resource_ttl: Minimum age of resources to prune, as a duration string
        slack_hook: Slack incoming webhook URL
        cluster_label: Label prefixed to notifications
        ignore_file: Path of the ignore list
        protection_tag: Tag that exempts a resource from pruning
        log_level: Log level name
    """

    cloud: Optional[str] = None
    resource_ttl: Optional[str] = None
    slack_hook: Optional[str] = None
    cluster_label: Optional[str] = None
    ignore_file: Optional[str] = None
    protection_tag: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """Load configuration from file and environment.

        Args:
            path: Config file path (default: $OSPRUNE_CONFIG or ~/.config/osprune/config.yaml)

        Returns:
            Config instance

        Raises:
            ValueError: If the file exists but does not hold a mapping
        """
        config_path = Path(path or os.environ.get("OSPRUNE_CONFIG") or DEFAULT_CONFIG_PATH).expanduser()

        values: Dict[str, Any] = {}
        if config_path.is_file():
            logger.debug(f"Loading configuration from {config_path}")
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Configuration file {config_path} must contain a mapping")

            known = {f.name for f in fields(cls)}
            for key, value in data.items():
                attribute = str(key).replace("-", "_")
                if attribute not in known:
                    logger.warning(f"Ignoring unknown configuration key {key!r} in {config_path}")
                    continue
                if value is not None:
                    values[attribute] = str(value)

        for variable, attribute in ENVIRONMENT_VARIABLES.items():
            value = os.environ.get(variable)
            if value:
                values[attribute] = value

        return cls(**values)
