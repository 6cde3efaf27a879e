"""pchtxt2ips - Configuration Package.

Defaults ship in ``config.json`` next to this module; a JSON or YAML file
and ``PCHTXT_*`` environment variables can override them.
"""

from .io import get_config_path, load_config, load_config_data, save_config
from .models import AppConfig, LoggingSettings, OutputSettings, validate_config

__all__ = [
    "AppConfig",
    "LoggingSettings",
    "OutputSettings",
    "get_config_path",
    "load_config",
    "load_config_data",
    "save_config",
    "validate_config",
]
