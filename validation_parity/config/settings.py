"""
Configuration loader for the validation parity harness.

Settings come from three places, highest priority first:

1. ``PARITY_*`` environment variables
2. an optional YAML file (``PARITY_CONFIG_FILE``), validated with jsonschema
3. built-in defaults
"""

import logging
import os
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from validation_parity.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DIR = "parity-results"
DEFAULT_METRICS_REGION = "us-east-1"

HARNESS_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "api_versions": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "verify_disabled_equivalence": {"type": "boolean"},
        "reports": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "enabled": {"type": "boolean"},
                "dir": {"type": "string", "minLength": 1},
            },
        },
        "metrics": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "enabled": {"type": "boolean"},
                "region": {"type": "string", "minLength": 1},
            },
        },
        "log_level": {"enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
    },
}


def _read_flag(name: str) -> Optional[bool]:
    """Return the boolean value of an env flag, or None when unset."""
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _read_list(name: str) -> Optional[List[str]]:
    raw = os.getenv(name)
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """
    Harness settings.

    Attributes:
        api_versions: Versions to exercise; empty means "use the caller's list"
        verify_disabled_equivalence: Add the declarative-on/takeover-off run
        reports_enabled: Write JSON/Markdown reports per case
        report_dir: Directory for reports
        metrics_enabled: Publish campaign metrics to CloudWatch
        metrics_region: CloudWatch region
        log_level: Harness log level
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: YAML config file; defaults to ``PARITY_CONFIG_FILE``

        Raises:
            ConfigurationError: If the config file is missing or invalid
        """
        self.api_versions: List[str] = []
        self.verify_disabled_equivalence = False
        self.reports_enabled = False
        self.report_dir = DEFAULT_REPORT_DIR
        self.metrics_enabled = False
        self.metrics_region = DEFAULT_METRICS_REGION
        self.log_level = "INFO"

        config_path = config_path or os.getenv("PARITY_CONFIG_FILE")
        if config_path:
            self.apply_config(self.load_config_file(config_path))
        self.apply_environment()

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """
        Load and validate a YAML harness configuration.

        Raises:
            ConfigurationError: On missing file, invalid YAML or schema violation
        """
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError as e:
            logger.error(f"Harness configuration file not found: {config_path}")
            raise ConfigurationError(f"Harness configuration file not found: {config_path}") from e
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in harness configuration: {e}")
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not config:
            logger.warning(f"Empty harness configuration: {config_path}")
            return {}

        try:
            jsonschema.validate(instance=config, schema=HARNESS_CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            logger.error(f"Harness configuration failed schema validation: {e.message}")
            raise ConfigurationError(f"Harness configuration validation failed: {e.message}") from e

        logger.debug(f"Loaded harness configuration from {config_path}")
        return config

    def apply_config(self, config: Dict[str, Any]) -> None:
        self.api_versions = list(config.get("api_versions", self.api_versions))
        self.verify_disabled_equivalence = config.get(
            "verify_disabled_equivalence", self.verify_disabled_equivalence
        )
        reports = config.get("reports", {})
        self.reports_enabled = reports.get("enabled", self.reports_enabled)
        self.report_dir = reports.get("dir", self.report_dir)
        metrics = config.get("metrics", {})
        self.metrics_enabled = metrics.get("enabled", self.metrics_enabled)
        self.metrics_region = metrics.get("region", self.metrics_region)
        self.log_level = config.get("log_level", self.log_level)

    def apply_environment(self) -> None:
        versions = _read_list("PARITY_API_VERSIONS")
        if versions is not None:
            self.api_versions = versions

        for attr, env_name in (
            ("verify_disabled_equivalence", "PARITY_VERIFY_DISABLED_EQUIVALENCE"),
            ("reports_enabled", "PARITY_REPORTS_ENABLED"),
            ("metrics_enabled", "PARITY_METRICS_ENABLED"),
        ):
            flag = _read_flag(env_name)
            if flag is not None:
                setattr(self, attr, flag)

        self.report_dir = os.getenv("PARITY_REPORT_DIR", self.report_dir)
        self.metrics_region = os.getenv("PARITY_METRICS_REGION", self.metrics_region)
        self.log_level = os.getenv("PARITY_LOG_LEVEL", self.log_level).upper()
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ConfigurationError(f"Unsupported PARITY_LOG_LEVEL: {self.log_level}")

    def resolve_api_versions(self, default_versions: List[str]) -> List[str]:
        """Configured versions if any, otherwise the caller's defaults."""
        return list(self.api_versions) if self.api_versions else list(default_versions)


def get_settings(config_path: Optional[str] = None) -> Settings:
    """Build settings from the environment (and config file, if any)."""
    return Settings(config_path)
