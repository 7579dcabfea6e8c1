"""Configuration for the OX3 API client."""

from .loader import (
    CONFIG_TEMPLATE,
    DEFAULT_CONFIG_FILENAME,
    create_config_template,
    load_credentials,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "load_credentials",
    "create_config_template",
    "CONFIG_TEMPLATE",
    "DEFAULT_CONFIG_FILENAME",
]
