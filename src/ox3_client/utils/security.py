"""Sanitization helpers and secure logging setup.

The handshake moves passwords, OAuth signatures and tokens over the wire.
Everything in this module exists so that none of those values end up in
log output, even with the debug flag enabled:

- String and URL sanitization for OAuth parameters
- Header sanitization for Authorization, Cookie and Set-Cookie
- A logging formatter that sanitizes every record
- httpx event hooks that trace handshake traffic
"""

import copy
import logging
import re
import sys
from typing import Any, Dict, List, Optional

import httpx

# Regexes for OAuth material, access cookies and passwords
SENSITIVE_PATTERNS = {
    "oauth_header": re.compile(r"OAuth\s+\w+=\"[^\"]*\"(,\s*\w+=\"[^\"]*\")*"),
    "access_cookie": re.compile(r"openx3_access_token=[^;\s]+"),
    "oauth_param": re.compile(
        r"(oauth_(?:token|token_secret|verifier|signature)=)[^&\s]+"
    ),
    "password_param": re.compile(r"(password=)[^&\s]+", re.IGNORECASE),
}

# Header values replaced wholesale in trace output
SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
}

# Query parameter names redacted by sanitize_url
SENSITIVE_PARAMS = [
    "oauth_token",
    "oauth_token_secret",
    "oauth_verifier",
    "oauth_signature",
    "password",
    "token",
    "secret",
]

# =============================================================================
# Redaction helpers
# =============================================================================


def sanitize_string(value: str) -> str:
    """Redact OAuth values, access cookies and passwords inside ``value``.

    Query-style parameters keep their name and lose their value; whole
    ``OAuth ...`` header values and access-token cookies are replaced.

    :param value: String to sanitize
    :type value: str
    :return: Sanitized string
    :rtype: str
    """
    if not value:
        return value
    value = SENSITIVE_PATTERNS["oauth_header"].sub("<oauth_header:REDACTED>", value)
    value = SENSITIVE_PATTERNS["access_cookie"].sub(
        "openx3_access_token=<REDACTED>", value
    )
    value = SENSITIVE_PATTERNS["oauth_param"].sub(r"\1<REDACTED>", value)
    value = SENSITIVE_PATTERNS["password_param"].sub(r"\1<REDACTED>", value)
    return value


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: Dictionary of HTTP headers
    :type headers: Dict[str, Any]
    :return: Sanitized copy of the headers
    :rtype: Dict[str, Any]
    """
    if not headers:
        return headers
    sanitized = copy.deepcopy(dict(headers))
    for key, value in sanitized.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and len(value) > 0:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
    return sanitized


def sanitize_url(url: str) -> str:
    """Redact sensitive query parameters from ``url``.

    :param url: URL to sanitize
    :type url: str
    :return: URL with sensitive parameter values replaced
    :rtype: str
    """
    if not url:
        return url
    for param in SENSITIVE_PARAMS:
        url = re.sub(
            rf"([?&]{param}=)[^&\s]+", r"\1<REDACTED>", url, flags=re.IGNORECASE
        )
    return url


def safe_log_dict(
    data: Dict[str, Any], sanitize_keys: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Create a copy of ``data`` with secret-looking keys redacted.

    Used for form bodies such as the SSO login form.

    :param data: Dictionary to sanitize
    :param sanitize_keys: Additional key fragments to redact
    :return: Sanitized dictionary safe for logging
    """
    if not data:
        return data
    keys = {"password", "token", "secret", "verifier", "signature"}
    if sanitize_keys:
        keys.update(sanitize_keys)
    sanitized = copy.deepcopy(dict(data))
    for key, value in sanitized.items():
        if any(fragment in key.lower() for fragment in keys):
            sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
    return sanitized


# =============================================================================
# Root logger setup
# =============================================================================


class SanitizingFormatter(logging.Formatter):
    """Formatter that sanitizes every record before formatting it."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with automatic sanitization.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log message
        :rtype: str
        """
        if record.args:
            try:
                record.msg = sanitize_string(record.msg % record.args)
                record.args = None
            except (TypeError, ValueError):
                record.msg = sanitize_string(str(record.msg))
                record.args = tuple(
                    sanitize_string(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        else:
            record.msg = sanitize_string(str(record.msg))
        return super().format(record)


# Set once the root handler is installed
_LOGGING_CONFIGURED = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Set up root logging with automatic sanitization.

    Safe to call more than once; later calls only adjust the level.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    """
    global _LOGGING_CONFIGURED

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if _LOGGING_CONFIGURED:
        logging.getLogger().setLevel(numeric_level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        SanitizingFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)

    # httpx logs full URLs at INFO, including oauth_token query params
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    _LOGGING_CONFIGURED = True


# =============================================================================
# HTTP traffic tracing
# =============================================================================


def make_trace_hooks(logger: logging.Logger) -> Dict[str, List[Any]]:
    """Build httpx event hooks that log sanitized request/response details.

    :param logger: Logger that receives the trace records
    :type logger: logging.Logger
    :return: Mapping suitable for ``httpx.Client(event_hooks=...)``
    :rtype: Dict[str, List[Any]]
    """

    def log_request(request: httpx.Request) -> None:
        logger.info("-> %s %s", request.method, sanitize_url(str(request.url)))
        logger.info("   Headers: %s", sanitize_headers(dict(request.headers)))

    def log_response(response: httpx.Response) -> None:
        logger.info(
            "<- %s %s",
            response.status_code,
            sanitize_url(str(response.request.url)),
        )
        logger.info("   Headers: %s", sanitize_headers(dict(response.headers)))

    return {"request": [log_request], "response": [log_response]}
