"""OpenX OX3 API client.

This package authenticates against the OpenX SSO host with the OAuth1
three-legged handshake and exposes a small request gateway over the
``/ox/4.0`` API. Responses are returned undecoded.

:var __version__: Current package version
:type __version__: str
"""

from .auth import establish, establish_from_env, establish_from_file
from .client import OX3Client
from .config import Settings, create_config_template, load_credentials
from .exceptions import (
    AuthenticationError,
    ConfigError,
    HandshakeError,
    OX3Error,
    ParameterTypeError,
    ProtocolError,
    ValidationError,
)
from .models import AccessToken, Credentials, RequestToken

__version__ = "0.1.0"

__all__ = [
    "establish",
    "establish_from_file",
    "establish_from_env",
    "OX3Client",
    "Credentials",
    "RequestToken",
    "AccessToken",
    "Settings",
    "load_credentials",
    "create_config_template",
    "OX3Error",
    "ValidationError",
    "ConfigError",
    "HandshakeError",
    "AuthenticationError",
    "ProtocolError",
    "ParameterTypeError",
]
