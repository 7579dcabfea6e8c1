"""OAuth1 handshake and session establishment for OX3.

The handshake runs once per client:

1. Validate the credentials locally
2. Obtain a request token from the SSO host
3. Log in with email, password and request token to obtain a verifier
4. Exchange request token and verifier for an access token
5. Build a session carrying the access token cookie and an OAuth1 signer

Every step either succeeds or raises; a client is only returned when the
whole sequence completed. Nothing here retries or terminates the process.
"""

import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import parse_qs, urlsplit

import httpx

from ..client import ACCESS_TOKEN_COOKIE, OX3Client, new_transport_client
from ..config.loader import load_credentials
from ..config.settings import Settings, get_settings
from ..exceptions import AuthenticationError, ProtocolError
from ..models import AccessToken, Credentials, RequestToken
from ..utils.security import make_trace_hooks, safe_log_dict
from ..utils.url import normalize_domain
from .oauth1 import OAuth1Consumer

logger = logging.getLogger(__name__)

VERIFIER_PARAM = "oauth_verifier"


def _trace(debug: bool, message: str, *args) -> None:
    if debug:
        logger.info(message, *args)


def _first_param(query: str, name: str) -> Optional[str]:
    values = parse_qs(query, keep_blank_values=False).get(name)
    return values[0] if values else None


def extract_verifier(response: httpx.Response) -> Optional[str]:
    """Find the ``oauth_verifier`` in a login response.

    The SSO host has returned it in different places over time; they are
    checked in this order:

    1. The response body, parsed as a URL or bare query string
       (``oob?oauth_token=...&oauth_verifier=...``)
    2. The query string of the ``Location`` header of a redirect
    3. An ``oauth_verifier`` response header

    :param response: Response of the login form POST
    :type response: httpx.Response
    :return: The verifier, or None if none of the carriers holds one
    :rtype: Optional[str]
    """
    body = response.text.strip()
    if body:
        parts = urlsplit(body)
        query = parts.query or (parts.path if "=" in parts.path else "")
        verifier = _first_param(query, VERIFIER_PARAM)
        if verifier:
            return verifier

    location = response.headers.get("location")
    if location:
        verifier = _first_param(urlsplit(location).query, VERIFIER_PARAM)
        if verifier:
            return verifier

    return response.headers.get(VERIFIER_PARAM) or None


def _login(
    credentials: Credentials,
    consumer: OAuth1Consumer,
    request_token: RequestToken,
    debug: bool,
) -> str:
    """Submit the SSO login form and return the verifier."""
    form = {
        "email": credentials.email,
        "password": credentials.password,
        "oauth_token": request_token.token,
    }
    _trace(debug, "Submitting login form: %s", safe_log_dict(form))

    hooks = make_trace_hooks(logger) if debug else None
    # plain client: the login form is not OAuth-signed
    with new_transport_client(event_hooks=hooks) as http:
        response = http.post(consumer.authorization_url(request_token), data=form)

    verifier = None
    if response.is_success or response.is_redirect:
        verifier = extract_verifier(response)

    # a redirect without a verifier sends the user back to the login form
    if not response.is_success and not verifier:
        logger.error(f"SSO login rejected with status {response.status_code}")
        raise AuthenticationError(
            f"could not authenticate {credentials.email}: "
            f"login returned HTTP {response.status_code}",
            status_code=response.status_code,
        )

    if not verifier:
        raise ProtocolError(
            "oauth_verifier not found in login response", missing=VERIFIER_PARAM
        )
    _trace(debug, "Received oauth_verifier")
    return verifier


def build_session(
    consumer: OAuth1Consumer,
    access_token: AccessToken,
    domain: str,
    scheme: str = "http",
) -> httpx.Client:
    """Create the authenticated transport for a client.

    The cookie jar holds a single ``openx3_access_token`` cookie scoped
    to ``domain`` (path ``/``, not secure). Because the cookie carries a
    ``Domain`` attribute it is not host-only, so it is also sent to
    ``www.<domain>``.

    :param consumer: Consumer of the finished handshake
    :param access_token: Access token obtained by the handshake
    :param domain: Normalized domain
    :param scheme: Scheme of the API base URL
    :return: Client that sends the cookie and signs every request
    :rtype: httpx.Client
    """
    cookies = httpx.Cookies()
    cookies.set(ACCESS_TOKEN_COOKIE, access_token.token, domain=domain, path="/")
    logger.debug(f"Access cookie scoped to {domain} for {scheme}://www.{domain}/")
    return new_transport_client(
        auth=consumer.session_auth(access_token),
        cookies=cookies,
    )


def establish(credentials: Credentials, debug: bool = False) -> OX3Client:
    """Run the OAuth1 handshake and return an authenticated client.

    :param credentials: Account and consumer credentials
    :type credentials: Credentials
    :param debug: Log each handshake step and the handshake HTTP traffic
    :type debug: bool
    :return: Authenticated client
    :rtype: OX3Client
    :raises ValidationError: If a credential field is blank (no network
        call is made)
    :raises HandshakeError: If the request or access token cannot be
        obtained
    :raises AuthenticationError: If the login is rejected
    :raises ProtocolError: If the login response carries no verifier
    :raises httpx.TransportError: On network or TLS failures
    """
    credentials.validate_fields()

    hooks = make_trace_hooks(logger) if debug else None
    with new_transport_client(event_hooks=hooks) as http:
        consumer = OAuth1Consumer(
            credentials.consumer_key,
            credentials.consumer_secret,
            http=http,
            realm=credentials.realm,
        )

        request_token = consumer.get_request_token()
        _trace(debug, "Request token generated")

        verifier = _login(credentials, consumer, request_token, debug)

        access_token = consumer.authorize_token(request_token, verifier)
        _trace(debug, "Access token generated")

    domain = normalize_domain(credentials.domain)
    _trace(debug, "Creating cookie jar")
    session = build_session(consumer, access_token, domain)
    _trace(debug, "Set %s in cookie jar for %s", ACCESS_TOKEN_COOKIE, domain)
    _trace(debug, "Created OAuth1 session")

    return OX3Client(
        domain=domain,
        realm=credentials.realm,
        consumer_key=credentials.consumer_key,
        consumer_secret=credentials.consumer_secret,
        session=session,
    )


def establish_from_file(path: Union[str, Path], debug: bool = False) -> OX3Client:
    """Load credentials from a JSON file and run :func:`establish`.

    :param path: Path of the JSON credentials file
    :param debug: Log each handshake step
    :return: Authenticated client
    :rtype: OX3Client
    :raises ConfigError: If the file cannot be read or decoded
    """
    return establish(load_credentials(path), debug=debug)


def establish_from_env(settings: Optional[Settings] = None) -> OX3Client:
    """Run the handshake with credentials taken from :class:`Settings`.

    ``config_file`` wins over the individual credential fields.

    :param settings: Settings to use; defaults to the process settings
    :return: Authenticated client
    :rtype: OX3Client
    """
    settings = settings or get_settings()
    if settings.config_file:
        return establish_from_file(settings.config_file, debug=settings.debug)
    return establish(settings.to_credentials(), debug=settings.debug)
