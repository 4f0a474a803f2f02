"""Resource path resolution for configuration and data files.

Paths resolve against the project root when running from a source checkout.
Setting the ``AIRROUTE_HOME`` environment variable points them at another
directory instead (e.g. an installed deployment with its own ``config/``).

Typical usage:
    from airroute.core.resource_path import get_config_path

    logging_config = get_config_path("logging.yaml")
    settings = get_config_path("airroute.yaml")
"""

import os
from pathlib import Path

HOME_ENV_VAR = "AIRROUTE_HOME"


def get_project_root() -> Path:
    """Get the project root directory.

    Returns:
        ``$AIRROUTE_HOME`` when set, otherwise the source checkout root
        (three levels above ``src/airroute/core``).

    Examples:
        >>> get_project_root()
        PosixPath('/Users/user/dev/airroute')
    """
    home = os.environ.get(HOME_ENV_VAR)
    if home:
        return Path(home)
    return Path(__file__).parent.parent.parent.parent


def get_resource_path(relative_path: str) -> Path:
    """Get absolute path to a resource file or directory.

    Args:
        relative_path: Relative path from project root (e.g., "config/logging.yaml")

    Returns:
        Absolute path to the resource.
    """
    return get_project_root() / relative_path


def get_config_path(config_file: str) -> Path:
    """Get path to a configuration file.

    Args:
        config_file: Config filename (e.g., "logging.yaml")

    Returns:
        Absolute path to the config file.

    Examples:
        >>> str(get_config_path("airroute.yaml"))
        '/Users/user/dev/airroute/config/airroute.yaml'
    """
    return get_resource_path(f"config/{config_file}")


def get_data_path(data_file: str) -> Path:
    """Get path to a data file or directory.

    Args:
        data_file: Data filename or relative path (e.g., "navigation/sample.yaml")

    Returns:
        Absolute path to the data file or directory.
    """
    return get_resource_path(f"data/{data_file}")
