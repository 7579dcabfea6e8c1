"""Unit tests for credential validation and the error model."""

import json

import pydantic
import pytest

from ox3_client.exceptions import (
    AuthenticationError,
    HandshakeError,
    OX3Error,
    ParameterTypeError,
    ValidationError,
)
from ox3_client.models import AccessToken, Credentials

FIELDS = ["domain", "realm", "consumer_key", "consumer_secret", "email", "password"]


def _complete(**overrides):
    values = {name: f"{name}-value" for name in FIELDS}
    values.update(overrides)
    return Credentials(**values)


@pytest.mark.unit
@pytest.mark.parametrize("field", FIELDS)
@pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
def test_blank_field_is_named(field, blank):
    with pytest.raises(ValidationError) as exc_info:
        _complete(**{field: blank}).validate_fields()
    assert exc_info.value.field == field
    assert exc_info.value.details == {"field": field}
    assert "cannot be empty" in exc_info.value.message


@pytest.mark.unit
def test_first_blank_field_wins():
    with pytest.raises(ValidationError) as exc_info:
        _complete(consumer_key="", password="").validate_fields()
    assert exc_info.value.field == "consumer_key"


@pytest.mark.unit
def test_credentials_are_immutable():
    creds = _complete()
    with pytest.raises(pydantic.ValidationError):
        creds.domain = "other.example.com"


@pytest.mark.unit
def test_secrets_stay_out_of_repr():
    creds = _complete(password="hunter2")
    token = AccessToken(token="tok", secret="very-secret")
    assert "hunter2" not in repr(creds)
    assert "very-secret" not in repr(token)


@pytest.mark.unit
def test_dump_uses_historic_secret_key():
    dumped = _complete().model_dump(by_alias=True)
    assert "consumer_secrect" in dumped


@pytest.mark.unit
def test_error_serialization():
    err = HandshakeError(
        "access token could not be generated", stage="access_token", status_code=401
    )
    assert isinstance(err, OX3Error)
    assert err.to_dict() == {
        "error": "HANDSHAKE_ERROR",
        "message": "access token could not be generated",
        "details": {"stage": "access_token", "status_code": 401},
    }
    assert json.loads(err.to_json())["error"] == "HANDSHAKE_ERROR"


@pytest.mark.unit
def test_error_codes():
    assert AuthenticationError("no").code == "AUTHENTICATION_ERROR"
    assert ValidationError("no").code == "VALIDATION_ERROR"
    type_error = ParameterTypeError("no", key="k", value_type="dict")
    assert isinstance(type_error, TypeError)
    assert type_error.details == {"key": "k", "type": "dict"}
