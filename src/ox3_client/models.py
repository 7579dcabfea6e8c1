"""Shared Pydantic models for the OX3 API client.

The models cover the two kinds of values that flow through the
handshake: the user-supplied credentials and the OAuth1 tokens handed
out by the OpenX SSO host.
"""

from typing import Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .exceptions import ValidationError

# field name -> label used in error messages
_FIELD_LABELS = {
    "domain": "domain",
    "realm": "realm",
    "consumer_key": "consumer key",
    "consumer_secret": "consumer secret",
    "email": "email",
    "password": "password",
}


class Credentials(BaseModel):
    """Credentials needed to open an authenticated OX3 session.

    The model is immutable. Fields may be constructed blank; call
    :meth:`validate_fields` to reject blank values before any network
    traffic happens.

    The consumer secret is read from either ``consumer_secret`` or the
    historic ``consumer_secrect`` key used by existing config files.

    :param domain: OX3 UI host, e.g. ``example-ui.openx.net``
    :type domain: str
    :param realm: OAuth realm assigned to the account
    :type realm: str
    :param consumer_key: OAuth1 consumer key
    :type consumer_key: str
    :param consumer_secret: OAuth1 consumer secret
    :type consumer_secret: str
    :param email: Account email used on the SSO login form
    :type email: str
    :param password: Account password used on the SSO login form
    :type password: str
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    domain: str = ""
    realm: str = ""
    consumer_key: str = ""
    consumer_secret: str = Field(
        "",
        validation_alias=AliasChoices("consumer_secret", "consumer_secrect"),
        serialization_alias="consumer_secrect",
    )
    email: str = ""
    password: str = Field("", repr=False)

    def validate_fields(self) -> None:
        """Ensure every field is non-blank.

        Fields are checked in declaration order and the first blank one
        is reported.

        :raises ValidationError: If a field is empty or whitespace only
        """
        for name, label in _FIELD_LABELS.items():
            if not getattr(self, name).strip():
                raise ValidationError(f"{label} cannot be empty", field=name)


class OAuthToken(BaseModel):
    """OAuth1 token/secret pair returned by the SSO host.

    :param token: The ``oauth_token`` value
    :type token: str
    :param secret: The ``oauth_token_secret`` value
    :type secret: str
    :param extra: Any other parameters present in the token response
    :type extra: Dict[str, str]
    """

    model_config = ConfigDict(frozen=True)

    token: str
    secret: str = Field(repr=False)
    extra: Dict[str, str] = Field(default_factory=dict)


class RequestToken(OAuthToken):
    """Temporary credentials from the token-initiation endpoint."""


class AccessToken(OAuthToken):
    """Durable credentials from the access-token endpoint.

    The ``token`` value becomes the session's authorization cookie.
    """
