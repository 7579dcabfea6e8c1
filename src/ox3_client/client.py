"""Request gateway for the OX3 API.

An :class:`OX3Client` is produced by :func:`ox3_client.auth.establish`
once the OAuth1 handshake has completed. It turns logical endpoint paths
such as ``/adunit`` into URLs under ``http://<domain>/ox/4.0/`` and sends
them through a session that carries the ``openx3_access_token`` cookie and
signs every request with OAuth1.

Responses are returned as raw :class:`httpx.Response` objects; decoding
JSON payloads, pagination and status handling are left to the caller.

A client is not synchronized. Requests may be issued from several threads
only as far as :class:`httpx.Client` allows, and :meth:`OX3Client.log_off`
must not race with in-flight requests; callers serialize the two.

Examples:
    >>> client = establish(credentials)
    >>> response = client.get("/adunit", {"offset": 0, "limit": 500})
    >>> response.json()
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

import httpx

from .utils.url import QueryParams, append_query, encode_query, resolve_url

logger = logging.getLogger(__name__)

API_PATH = "/ox/4.0/"
DEFAULT_SCHEME = "http"
ACCESS_TOKEN_COOKIE = "openx3_access_token"
JSON_CONTENT_TYPE = "application/json"

DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=10.0, pool=5.0)

RequestBody = Union[bytes, str, Iterable[bytes]]


def new_transport_client(**kwargs: Any) -> httpx.Client:
    """Create an httpx client with the package defaults applied."""
    kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
    return httpx.Client(**kwargs)


class OX3Client:
    """Authenticated OX3 API client.

    :param domain: Normalized API host (no scheme, no ``www.``)
    :type domain: str
    :param realm: OAuth realm of the account
    :type realm: str
    :param consumer_key: OAuth1 consumer key
    :type consumer_key: str
    :param consumer_secret: OAuth1 consumer secret
    :type consumer_secret: str
    :param session: Authenticated transport holding cookies and auth
    :type session: httpx.Client
    """

    def __init__(
        self,
        domain: str,
        realm: str,
        consumer_key: str,
        consumer_secret: str,
        session: httpx.Client,
    ):
        self.domain = domain
        self.realm = realm
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.scheme = DEFAULT_SCHEME
        self.api_path = API_PATH
        self.session = session

    def __repr__(self) -> str:
        return f"OX3Client(domain={self.domain!r}, realm={self.realm!r})"

    def __enter__(self) -> "OX3Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_authenticated(self) -> bool:
        """Return True while the session still carries the access cookie."""
        return self.session.cookies.get(ACCESS_TOKEN_COOKIE) is not None

    def resolve_url(self, endpoint: str) -> str:
        """Resolve ``endpoint`` against the client's domain and API prefix.

        Endpoints that already carry a scheme and host are returned as-is.

        :param endpoint: Logical endpoint path, e.g. ``/adunit``
        :return: Fully qualified URL
        :rtype: str
        """
        return resolve_url(self.scheme, self.domain, self.api_path, endpoint)

    def get(
        self, endpoint: str, params: Optional[QueryParams] = None
    ) -> httpx.Response:
        """Send a GET request.

        :param endpoint: Logical endpoint path or absolute URL
        :type endpoint: str
        :param params: Optional query parameters; values must be str, int,
            float or bool
        :type params: Optional[Mapping[str, Union[str, int, float, bool]]]
        :return: Raw HTTP response
        :rtype: httpx.Response
        :raises ParameterTypeError: If a parameter has an unsupported type;
            no request is sent in that case
        """
        url = append_query(self.resolve_url(endpoint), encode_query(params))
        return self.session.get(url)

    def put(
        self, endpoint: str, body: Optional[RequestBody] = None
    ) -> httpx.Response:
        """Send a PUT request with ``body`` passed through verbatim.

        :param endpoint: Logical endpoint path or absolute URL
        :param body: Request body
        :return: Raw HTTP response
        :rtype: httpx.Response
        """
        return self.session.put(self.resolve_url(endpoint), content=body)

    def post(
        self, endpoint: str, body: Optional[RequestBody] = None
    ) -> httpx.Response:
        """Send a POST request with a JSON content type.

        The body is not serialized here; pass already encoded JSON.

        :param endpoint: Logical endpoint path or absolute URL
        :param body: Encoded JSON request body
        :return: Raw HTTP response
        :rtype: httpx.Response
        """
        return self.session.post(
            self.resolve_url(endpoint),
            content=body,
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )

    def post_form(self, endpoint: str, data: Mapping[str, Any]) -> httpx.Response:
        """Send a url-encoded form POST.

        :param endpoint: Logical endpoint path or absolute URL
        :param data: Form fields
        :return: Raw HTTP response
        :rtype: httpx.Response
        """
        return self.session.post(self.resolve_url(endpoint), data=data)

    def delete(
        self, endpoint: str, body: Optional[RequestBody] = None
    ) -> httpx.Response:
        """Send a DELETE request, optionally with a body.

        :param endpoint: Logical endpoint path or absolute URL
        :param body: Optional request body
        :return: Raw HTTP response
        :rtype: httpx.Response
        """
        return self.session.request(
            "DELETE", self.resolve_url(endpoint), content=body
        )

    def options(self, endpoint: str = "") -> httpx.Response:
        """GET an entry of the ``/options`` discovery endpoint.

        ``/options`` is prefixed unless ``endpoint`` already contains it,
        so ``options("ad_category_options")`` and
        ``options("/options/ad_category_options")`` hit the same URL.

        :param endpoint: Options entry, empty for the index
        :return: Raw HTTP response
        :rtype: httpx.Response
        """
        if "/options" not in endpoint:
            endpoint = "/options/" + endpoint.lstrip("/")
        return self.session.get(self.resolve_url(endpoint))

    def log_off(self) -> None:
        """Discard cookies and authentication state.

        The current transport is closed and replaced by a fresh,
        unauthenticated one. Later requests reach the server anonymously.
        Calling this more than once is harmless.
        """
        previous = self.session
        self.session = new_transport_client()
        previous.close()
        logger.debug(f"Logged off from {self.domain}")

    def close(self) -> None:
        """Release the underlying transport."""
        self.session.close()
