"""OAuth1 handshake and request signing for the OX3 API.

:var __all__: List of public exports from this module
:type __all__: List[str]
"""

from .handshake import (
    build_session,
    establish,
    establish_from_env,
    establish_from_file,
    extract_verifier,
)
from .oauth1 import (
    ACCESS_TOKEN_URL,
    AUTHORIZATION_URL,
    REQUEST_TOKEN_URL,
    OAuth1Auth,
    OAuth1Consumer,
)

__all__ = [
    "establish",
    "establish_from_file",
    "establish_from_env",
    "extract_verifier",
    "build_session",
    "OAuth1Auth",
    "OAuth1Consumer",
    "REQUEST_TOKEN_URL",
    "ACCESS_TOKEN_URL",
    "AUTHORIZATION_URL",
]
