"""Configuration loading for the route expansion engine.

Settings live in a YAML file (``config/airroute.yaml`` by default). The
``route`` section tunes how the resolver reasons about position in the
route and how coordinates without a hemisphere letter are read.

Typical usage example:
    from airroute.core.config import ConfigLoader, RouteSettings

    config = ConfigLoader.load("config/airroute.yaml")
    settings = RouteSettings.from_config(config)
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration operations fail."""


class ConfigLoader:
    """Configuration loader for YAML files.

    Provides loading, nested access, and default values for configuration.

    Examples:
        >>> config = ConfigLoader.load("config/airroute.yaml")
        >>> window = config.get("route.departure_window", default=2)
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize with configuration data.

        Args:
            data: Configuration dictionary.
        """
        self._data = data or {}

    @classmethod
    def load(cls, path: str | Path) -> "ConfigLoader":
        """Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            ConfigLoader instance with loaded data.

        Raises:
            ConfigError: If the file is missing, unreadable or not a mapping.
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")

        logger.info("Loaded configuration from: %s", path)
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value using dot notation.

        Args:
            key: Configuration key (e.g. "route.departure_window").
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        value: Any = self._data

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def merge(self, other: "ConfigLoader") -> None:
        """Merge another configuration into this one.

        Values from ``other`` win over existing ones.
        """
        self._data = _merge_dicts(self._data, other._data)


def _merge_dicts(base: dict, override: dict) -> dict:
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


@dataclass(frozen=True)
class RouteSettings:
    """Tunable parameters of the route resolver.

    Attributes:
        departure_window: Nodes at index <= this value prefer DP lookups and
            the departure airport. Later nodes prefer STARs and the
            destination airport.
        strip_dp_transition_labels: Remove leading procedure/transition labels
            from explicit DP transitions.
        default_latitude_hemisphere: Hemisphere for coordinates without N/S.
        default_longitude_hemisphere: Hemisphere for coordinates without E/W.
        airway_designator_pattern: Shape of an airway identifier, used when
            the token classifier has no entry for the middle of a triple.
    """

    departure_window: int = 2
    strip_dp_transition_labels: bool = True
    default_latitude_hemisphere: str = "N"
    default_longitude_hemisphere: str = "W"
    airway_designator_pattern: str = r"^[JVQTABGR]\d+$"

    def __post_init__(self) -> None:
        if self.departure_window < 0:
            raise ConfigError("Departure window must be non-negative")
        if self.default_latitude_hemisphere not in ("N", "S"):
            raise ConfigError(
                f"Invalid latitude hemisphere: {self.default_latitude_hemisphere!r}"
            )
        if self.default_longitude_hemisphere not in ("E", "W"):
            raise ConfigError(
                f"Invalid longitude hemisphere: {self.default_longitude_hemisphere!r}"
            )
        try:
            re.compile(self.airway_designator_pattern)
        except re.error as e:
            raise ConfigError(f"Invalid airway designator pattern: {e}") from e

    @classmethod
    def from_config(cls, config: ConfigLoader) -> "RouteSettings":
        """Build settings from the ``route`` section of a configuration.

        Missing keys keep their defaults.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        defaults = cls()
        try:
            return cls(
                departure_window=int(
                    config.get("route.departure_window", defaults.departure_window)
                ),
                strip_dp_transition_labels=bool(
                    config.get(
                        "route.strip_dp_transition_labels",
                        defaults.strip_dp_transition_labels,
                    )
                ),
                default_latitude_hemisphere=str(
                    config.get(
                        "route.default_latitude_hemisphere",
                        defaults.default_latitude_hemisphere,
                    )
                ).upper(),
                default_longitude_hemisphere=str(
                    config.get(
                        "route.default_longitude_hemisphere",
                        defaults.default_longitude_hemisphere,
                    )
                ).upper(),
                airway_designator_pattern=str(
                    config.get(
                        "route.airway_designator_pattern",
                        defaults.airway_designator_pattern,
                    )
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid route settings: {e}") from e
