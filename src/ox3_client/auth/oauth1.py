"""OAuth 1.0a signing and token exchange for the OpenX SSO host.

This module covers the pieces of RFC 5849 the OX3 handshake needs:

1. HMAC-SHA1 request signing, exposed as an :class:`httpx.Auth` so that a
   session can sign every request it sends
2. Obtaining temporary credentials (request token)
3. Exchanging the request token and verifier for an access token

The user-authorization leg is not a browser redirect for OX3; it is a form
POST handled in :mod:`ox3_client.auth.handshake`.

Reference: RFC 5849 - The OAuth 1.0 Protocol
"""

import base64
import hashlib
import hmac
import logging
import secrets
import time
from typing import Dict, Generator, List, Optional, Tuple
from urllib.parse import parse_qsl, quote, urlencode

import httpx

from ..exceptions import HandshakeError
from ..models import AccessToken, OAuthToken, RequestToken

logger = logging.getLogger(__name__)

REQUEST_TOKEN_URL = "https://sso.openx.com/api/index/initiate"
ACCESS_TOKEN_URL = "https://sso.openx.com/api/index/token"
AUTHORIZATION_URL = "https://sso.openx.com/login/process"

# out-of-band callback: the verifier comes back in the login response
CALLBACK_OOB = "oob"

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
_DEFAULT_PORTS = {"http": 80, "https": 443}


def percent_encode(value: str) -> str:
    """Percent-encode a value according to RFC 3986.

    Encodes all characters except unreserved: A-Z, a-z, 0-9, -, ., _, ~
    """
    return quote(str(value), safe="~")


def generate_nonce() -> str:
    """Generate a cryptographically secure random nonce."""
    return secrets.token_urlsafe(32)


def generate_timestamp() -> str:
    """Get current Unix timestamp as string."""
    return str(int(time.time()))


def normalize_base_url(url: httpx.URL) -> str:
    """Return the base string URI: scheme, host, non-default port and path."""
    scheme = url.scheme.lower()
    host = url.host.lower()
    port = url.port
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    path = url.raw_path.decode("ascii").split("?", 1)[0] or "/"
    return f"{scheme}://{host}{path}"


def build_signature_base_string(
    method: str, base_url: str, params: List[Tuple[str, str]]
) -> str:
    """Build the signature base string per RFC 5849 section 3.4.1.

    Format: HTTP_METHOD&URL&NORMALIZED_PARAMS
    """
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params)
    param_str = "&".join(f"{k}={v}" for k, v in encoded)
    return "&".join(
        [method.upper(), percent_encode(base_url), percent_encode(param_str)]
    )


def sign_hmac_sha1(
    base_string: str, consumer_secret: str, token_secret: str = ""
) -> str:
    """Sign the base string using HMAC-SHA1.

    Signing key: percent_encode(consumer_secret)&percent_encode(token_secret)
    """
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(
        key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1
    ).digest()
    return base64.b64encode(digest).decode("utf-8")


def build_authorization_header(
    oauth_params: List[Tuple[str, str]], realm: Optional[str] = None
) -> str:
    """Build the OAuth1 Authorization header value.

    Format: OAuth realm="...", oauth_consumer_key="...", ...
    The realm is not part of the signature.
    """
    parts = []
    if realm:
        parts.append(f'realm="{percent_encode(realm)}"')
    parts.extend(
        f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(oauth_params)
    )
    return "OAuth " + ", ".join(parts)


class OAuth1Auth(httpx.Auth):
    """httpx auth that signs each request with OAuth1 HMAC-SHA1.

    Query parameters and url-encoded form bodies take part in the
    signature as required by RFC 5849; other bodies do not.

    :param consumer_key: OAuth1 consumer key
    :param consumer_secret: OAuth1 consumer secret
    :param token: Request or access token, if any
    :param callback: ``oauth_callback`` value (request-token leg only)
    :param verifier: ``oauth_verifier`` value (access-token leg only)
    :param realm: Optional realm announced in the Authorization header
    """

    requires_request_body = True

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        token: Optional[OAuthToken] = None,
        callback: Optional[str] = None,
        verifier: Optional[str] = None,
        realm: Optional[str] = None,
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.token = token
        self.callback = callback
        self.verifier = verifier
        self.realm = realm

    def oauth_params(self) -> List[Tuple[str, str]]:
        """Return the protocol parameters for a fresh signature."""
        params = [
            ("oauth_consumer_key", self.consumer_key),
            ("oauth_nonce", generate_nonce()),
            ("oauth_signature_method", "HMAC-SHA1"),
            ("oauth_timestamp", generate_timestamp()),
            ("oauth_version", "1.0"),
        ]
        if self.token is not None:
            params.append(("oauth_token", self.token.token))
        if self.callback is not None:
            params.append(("oauth_callback", self.callback))
        if self.verifier is not None:
            params.append(("oauth_verifier", self.verifier))
        return params

    def sign(self, request: httpx.Request) -> None:
        """Compute the signature for ``request`` and set its Authorization header."""
        oauth_params = self.oauth_params()

        params = list(oauth_params)
        params.extend(request.url.params.multi_items())
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(_FORM_CONTENT_TYPE) and request.content:
            params.extend(
                parse_qsl(request.content.decode("utf-8"), keep_blank_values=True)
            )

        base_string = build_signature_base_string(
            request.method, normalize_base_url(request.url), params
        )
        token_secret = self.token.secret if self.token is not None else ""
        signature = sign_hmac_sha1(base_string, self.consumer_secret, token_secret)
        oauth_params.append(("oauth_signature", signature))
        request.headers["Authorization"] = build_authorization_header(
            oauth_params, self.realm
        )

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        self.sign(request)
        yield request


class OAuth1Consumer:
    """OAuth1 consumer bound to the OpenX SSO endpoints.

    One consumer is created per handshake and discarded with it, so
    tokens of concurrent handshakes never mix.

    :param consumer_key: OAuth1 consumer key
    :param consumer_secret: OAuth1 consumer secret
    :param http: Client used for the token legs; owned by the caller
    :param realm: Optional realm announced on signed API requests
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        http: httpx.Client,
        realm: Optional[str] = None,
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.http = http
        self.realm = realm

    def get_request_token(self, callback: str = CALLBACK_OOB) -> RequestToken:
        """Obtain temporary credentials from the token-initiation endpoint.

        :param callback: ``oauth_callback`` value, ``oob`` for OX3
        :return: Request token with its secret
        :rtype: RequestToken
        :raises HandshakeError: If the provider refuses or answers malformed
        """
        auth = OAuth1Auth(self.consumer_key, self.consumer_secret, callback=callback)
        response = self.http.post(
            REQUEST_TOKEN_URL,
            headers={"Content-Type": _FORM_CONTENT_TYPE},
            auth=auth,
        )
        token, secret, extra = self._parse_token_response(response, "request_token")
        return RequestToken(token=token, secret=secret, extra=extra)

    def authorization_url(self, request_token: RequestToken) -> str:
        """Return the login endpoint URL carrying the request token."""
        return f"{AUTHORIZATION_URL}?{urlencode({'oauth_token': request_token.token})}"

    def authorize_token(
        self, request_token: RequestToken, verifier: str
    ) -> AccessToken:
        """Exchange the request token and verifier for an access token.

        :param request_token: Token obtained from :meth:`get_request_token`
        :param verifier: ``oauth_verifier`` returned by the login step
        :return: Access token with its secret
        :rtype: AccessToken
        :raises HandshakeError: If the provider refuses or answers malformed
        """
        auth = OAuth1Auth(
            self.consumer_key,
            self.consumer_secret,
            token=request_token,
            verifier=verifier,
        )
        response = self.http.post(
            ACCESS_TOKEN_URL,
            headers={"Content-Type": _FORM_CONTENT_TYPE},
            auth=auth,
        )
        token, secret, extra = self._parse_token_response(response, "access_token")
        return AccessToken(token=token, secret=secret, extra=extra)

    def session_auth(self, access_token: AccessToken) -> OAuth1Auth:
        """Return an auth that signs API requests with ``access_token``."""
        return OAuth1Auth(
            self.consumer_key,
            self.consumer_secret,
            token=access_token,
            realm=self.realm,
        )

    @staticmethod
    def _parse_token_response(
        response: httpx.Response, stage: str
    ) -> Tuple[str, str, Dict[str, str]]:
        if not response.is_success:
            logger.error(
                f"OAuth1 {stage} request failed with status {response.status_code}"
            )
            raise HandshakeError(
                f"{stage.replace('_', ' ')} could not be generated: "
                f"provider returned HTTP {response.status_code}",
                stage=stage,
                status_code=response.status_code,
            )

        params = dict(parse_qsl(response.text, keep_blank_values=True))
        token = params.pop("oauth_token", "")
        secret = params.pop("oauth_token_secret", "")
        if not token or not secret:
            raise HandshakeError(
                f"{stage.replace('_', ' ')} response is missing "
                "oauth_token or oauth_token_secret",
                stage=stage,
                status_code=response.status_code,
            )
        return token, secret, params
