"""Structured exception classes for the OX3 API client."""

import json
from typing import Any, Dict, Optional


class OX3Error(Exception):
    """Base exception for all OX3 client errors.

    This exception serves as the parent class for every error raised by
    the client itself, providing a consistent interface for error
    handling across the handshake and the request gateway. Transport
    failures raised by httpx are not wrapped.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ValidationError(OX3Error):
    """Raised when a credential field is blank.

    Validation is purely local; no network call is made once this
    error is raised.

    :param message: Description of the validation error
    :param field: Name of the field that failed validation
    """

    def __init__(self, message: str, field: Optional[str] = None):
        """Initialize validation error with message and optional field."""
        details = {}
        if field:
            details["field"] = field
        super().__init__(message=message, code="VALIDATION_ERROR", details=details)
        self.field = field


class ConfigError(OX3Error):
    """Raised when a credentials file cannot be read, decoded or written.

    :param message: Description of the configuration error
    :param path: Optional path of the offending file
    """

    def __init__(self, message: str, path: Optional[str] = None):
        """Initialize configuration error with message and optional path."""
        details = {}
        if path:
            details["path"] = path
        super().__init__(message=message, code="CONFIG_ERROR", details=details)
        self.path = path


class HandshakeError(OX3Error):
    """Raised when an OAuth1 token exchange fails.

    Covers both the request-token and the access-token legs of the
    handshake.

    :param message: Description of the handshake failure
    :param stage: Optional handshake stage ("request_token", "access_token")
    :param status_code: Optional HTTP status code returned by the provider
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        """Initialize handshake error with message and optional context."""
        details: Dict[str, Any] = {}
        if stage:
            details["stage"] = stage
        if status_code:
            details["status_code"] = status_code
        super().__init__(message=message, code="HANDSHAKE_ERROR", details=details)
        self.stage = stage
        self.status_code = status_code


class AuthenticationError(OX3Error):
    """Raised when the provider rejects the account email or password.

    :param message: Description of the authentication failure
    :param status_code: Optional HTTP status code of the login response
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize authentication error with message and status code."""
        details = {}
        if status_code:
            details["status_code"] = status_code
        super().__init__(
            message=message, code="AUTHENTICATION_ERROR", details=details
        )
        self.status_code = status_code


class ProtocolError(OX3Error):
    """Raised when the provider answers with an unexpected response shape.

    :param message: Description of the protocol error
    :param missing: Optional name of the value that was expected
    """

    def __init__(self, message: str, missing: Optional[str] = None):
        """Initialize protocol error with message and missing value name."""
        details = {}
        if missing:
            details["missing"] = missing
        super().__init__(message=message, code="PROTOCOL_ERROR", details=details)


class ParameterTypeError(OX3Error, TypeError):
    """Raised when a query parameter has an unsupported type.

    Only ``str``, ``int``, ``float`` and ``bool`` values are accepted.

    :param message: Description of the type error
    :param key: Optional query parameter name
    :param value_type: Optional name of the rejected type
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        value_type: Optional[str] = None,
    ):
        """Initialize parameter type error with the offending key and type."""
        details = {}
        if key:
            details["key"] = key
        if value_type:
            details["type"] = value_type
        super().__init__(
            message=message, code="PARAMETER_TYPE_ERROR", details=details
        )
