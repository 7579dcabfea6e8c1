"""URL shaping helpers for the OX3 request gateway.

These helpers only build strings. They never touch the network and never
add authentication; the session's cookie jar and OAuth1 signer take care
of that when the request is sent.
"""

import math
import posixpath
import re
from decimal import Decimal
from typing import Mapping, Optional, Union
from urllib.parse import quote, urlsplit

from ..exceptions import ParameterTypeError

# Closed set of value kinds accepted in a query string
QueryValue = Union[str, int, float, bool]
QueryParams = Mapping[str, QueryValue]

_SCHEME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")

# unreserved characters plus ',' which OX3 uses for list-valued filters
_QUERY_SAFE = "-._~,"


def normalize_domain(domain: str) -> str:
    """Reduce a user supplied domain to a bare host name.

    Strips surrounding whitespace, a ``scheme://`` prefix, any path and a
    leading ``www.`` so the result can be embedded both in the base URL
    and in a cookie ``Domain`` attribute.

    :param domain: Domain as entered by the user
    :type domain: str
    :return: Normalized host name
    :rtype: str

    Example:
        >>> normalize_domain("http://www.example.com/")
        'example.com'
    """
    host = _SCHEME_PREFIX.sub("", domain.strip())
    host = host.lstrip("/").split("/", 1)[0]
    if host.lower().startswith("www."):
        host = host[4:]
    return host


def has_scheme(endpoint: str) -> bool:
    """Return True when ``endpoint`` is an absolute URL with scheme and host."""
    parts = urlsplit(endpoint)
    return bool(parts.scheme and parts.netloc)


def join_path(*segments: str) -> str:
    """Join path segments, collapsing duplicate slashes and dot segments.

    :param segments: Path pieces to join; empty pieces are skipped
    :return: Joined path without a trailing slash
    :rtype: str
    """
    pieces = [s.strip("/") for s in segments if s and s.strip("/")]
    if not pieces:
        return ""
    joined = posixpath.normpath("/".join(pieces))
    return joined.lstrip("/")


def resolve_url(scheme: str, domain: str, api_path: str, endpoint: str) -> str:
    """Resolve a logical endpoint into a fully qualified URL.

    Absolute URLs are returned untouched. Anything else is joined onto
    ``domain`` and ``api_path``; a query string on the endpoint is kept.

    :param scheme: Transport scheme, e.g. ``http``
    :param domain: Normalized API host
    :param api_path: Fixed API prefix, e.g. ``/ox/4.0/``
    :param endpoint: Logical endpoint path such as ``/adunit``
    :return: Fully qualified URL
    :rtype: str
    """
    if has_scheme(endpoint):
        return endpoint

    parts = urlsplit(endpoint)
    url = f"{scheme}://" + join_path(domain, api_path, parts.path)
    if parts.query:
        url += "?" + parts.query
    return url


def format_query_value(key: str, value: QueryValue) -> str:
    """Render a query parameter value in its canonical string form.

    ``bool`` renders as ``true``/``false``, ``int`` in decimal, ``float``
    in the shortest positional notation that round-trips (``0.5``,
    ``2``, ``100000000000000000000``), non-finite floats as ``NaN``,
    ``+Inf`` or ``-Inf`` and ``str`` as-is.

    :param key: Parameter name, used in the error message
    :param value: Parameter value
    :return: String form of the value
    :rtype: str
    :raises ParameterTypeError: If the value is not str, int, float or bool
    """
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        return format(Decimal(repr(value)).normalize(), "f")
    if isinstance(value, str):
        return value
    raise ParameterTypeError(
        f"query parameter {key!r} must be of type str, int, float or bool, "
        f"got {type(value).__name__}",
        key=key,
        value_type=type(value).__name__,
    )


def encode_query(params: Optional[QueryParams]) -> str:
    """Encode ``params`` as ``key=value`` pairs joined by ``&``.

    Pairs keep the mapping's iteration order. Every value is checked
    before anything is returned, so a bad value never produces a partial
    query string.

    :param params: Mapping of parameter names to values, or None
    :return: Encoded query without the leading ``?``; empty if no params
    :rtype: str
    :raises ParameterTypeError: If a key is not a string or a value has
        an unsupported type
    """
    if not params:
        return ""

    pairs = []
    for key, value in params.items():
        if not isinstance(key, str):
            raise ParameterTypeError(
                f"query parameter names must be str, got {type(key).__name__}",
                value_type=type(key).__name__,
            )
        rendered = format_query_value(key, value)
        pairs.append(
            f"{quote(key, safe=_QUERY_SAFE)}={quote(rendered, safe=_QUERY_SAFE)}"
        )
    return "&".join(pairs)


def append_query(url: str, query: str) -> str:
    """Append an encoded query string to ``url``."""
    if not query:
        return url
    separator = "&" if urlsplit(url).query else "?"
    return f"{url}{separator}{query}"
