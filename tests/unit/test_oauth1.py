"""Unit tests for OAuth1 signing.

The signature vectors come from the OAuth Core 1.0 appendix
(photos.example.net), which RFC 5849 kept as its worked example.
"""

import base64
import hashlib
import hmac

import httpx
import pytest

from ox3_client.auth import oauth1
from ox3_client.auth.oauth1 import (
    OAuth1Auth,
    build_authorization_header,
    build_signature_base_string,
    normalize_base_url,
    percent_encode,
    sign_hmac_sha1,
)
from ox3_client.models import AccessToken

CONSUMER_KEY = "dpf43f3p2l4k3l03"
CONSUMER_SECRET = "kd94hf93k423kf44"
TOKEN = AccessToken(token="nnch734d00sl2jdk", secret="pfkkdhi9sl3r4s00")
NONCE = "kllo9940pd9333jh"
TIMESTAMP = "1191242096"

EXPECTED_BASE_STRING = (
    "GET&http%3A%2F%2Fphotos.example.net%2Fphotos&file%3Dvacation.jpg"
    "%26oauth_consumer_key%3Ddpf43f3p2l4k3l03%26oauth_nonce%3Dkllo9940pd9333jh"
    "%26oauth_signature_method%3DHMAC-SHA1%26oauth_timestamp%3D1191242096"
    "%26oauth_token%3Dnnch734d00sl2jdk%26oauth_version%3D1.0%26size%3Doriginal"
)


def _expected_signature(base_string: str, token_secret: str = TOKEN.secret) -> str:
    key = f"{CONSUMER_SECRET}&{token_secret}".encode()
    digest = hmac.new(key, base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def _header_params(header: str) -> dict:
    assert header.startswith("OAuth ")
    params = {}
    for part in header[len("OAuth "):].split(", "):
        key, _, value = part.partition("=")
        value = value.strip('"')
        params[key] = httpx.QueryParams(f"v={value}")["v"]
    return params


@pytest.fixture
def fixed_nonce(monkeypatch):
    monkeypatch.setattr(oauth1, "generate_nonce", lambda: NONCE)
    monkeypatch.setattr(oauth1, "generate_timestamp", lambda: TIMESTAMP)


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("abcABC123-._~", "abcABC123-._~"),
        ("a b", "a%20b"),
        ("a+b", "a%2Bb"),
        ("a/b", "a%2Fb"),
        ("a=b&c", "a%3Db%26c"),
        ("é", "%C3%A9"),
    ],
)
def test_percent_encode(raw, expected):
    assert percent_encode(raw) == expected


@pytest.mark.unit
def test_signature_base_string_known_vector():
    params = [
        ("file", "vacation.jpg"),
        ("size", "original"),
        ("oauth_consumer_key", CONSUMER_KEY),
        ("oauth_token", TOKEN.token),
        ("oauth_signature_method", "HMAC-SHA1"),
        ("oauth_timestamp", TIMESTAMP),
        ("oauth_nonce", NONCE),
        ("oauth_version", "1.0"),
    ]
    base = build_signature_base_string(
        "get", "http://photos.example.net/photos", params
    )
    assert base == EXPECTED_BASE_STRING


@pytest.mark.unit
def test_sign_hmac_sha1_matches_manual_hmac():
    assert sign_hmac_sha1(
        EXPECTED_BASE_STRING, CONSUMER_SECRET, TOKEN.secret
    ) == _expected_signature(EXPECTED_BASE_STRING)


@pytest.mark.unit
@pytest.mark.parametrize(
    "url,expected",
    [
        ("http://Photos.Example.net/photos?size=1", "http://photos.example.net/photos"),
        ("https://example.com:443/a", "https://example.com/a"),
        ("http://example.com:8080/a", "http://example.com:8080/a"),
        ("http://example.com", "http://example.com/"),
    ],
)
def test_normalize_base_url(url, expected):
    assert normalize_base_url(httpx.URL(url)) == expected


@pytest.mark.unit
def test_authorization_header_puts_realm_first():
    header = build_authorization_header(
        [("oauth_token", "t"), ("oauth_consumer_key", "k")], realm="my realm"
    )
    assert header == 'OAuth realm="my%20realm", oauth_consumer_key="k", oauth_token="t"'


class TestOAuth1Auth:
    """Signing of whole httpx requests."""

    @pytest.mark.unit
    def test_signs_query_parameters(self, fixed_nonce):
        request = httpx.Request(
            "GET", "http://photos.example.net/photos?file=vacation.jpg&size=original"
        )
        OAuth1Auth(CONSUMER_KEY, CONSUMER_SECRET, token=TOKEN).sign(request)

        params = _header_params(request.headers["Authorization"])
        assert params["oauth_signature"] == _expected_signature(EXPECTED_BASE_STRING)
        assert params["oauth_token"] == TOKEN.token
        assert params["oauth_nonce"] == NONCE
        assert "realm" not in params

    @pytest.mark.unit
    def test_form_body_takes_part_in_signature(self, fixed_nonce):
        request = httpx.Request(
            "POST", "http://example.com/ox/4.0/adunit", data={"name": "a b"}
        )
        OAuth1Auth(CONSUMER_KEY, CONSUMER_SECRET, token=TOKEN, realm="r").sign(request)

        base = build_signature_base_string(
            "POST",
            "http://example.com/ox/4.0/adunit",
            [
                ("name", "a b"),
                ("oauth_consumer_key", CONSUMER_KEY),
                ("oauth_nonce", NONCE),
                ("oauth_signature_method", "HMAC-SHA1"),
                ("oauth_timestamp", TIMESTAMP),
                ("oauth_token", TOKEN.token),
                ("oauth_version", "1.0"),
            ],
        )
        params = _header_params(request.headers["Authorization"])
        assert params["oauth_signature"] == _expected_signature(base)
        assert params["realm"] == "r"

    @pytest.mark.unit
    def test_json_body_is_not_signed(self, fixed_nonce):
        url = "http://example.com/ox/4.0/adunit"
        with_body = httpx.Request(
            "POST", url, content=b'{"a": 1}', headers={"Content-Type": "application/json"}
        )
        without_body = httpx.Request("POST", url)
        auth = OAuth1Auth(CONSUMER_KEY, CONSUMER_SECRET, token=TOKEN)
        auth.sign(with_body)
        auth.sign(without_body)

        assert (
            _header_params(with_body.headers["Authorization"])["oauth_signature"]
            == _header_params(without_body.headers["Authorization"])["oauth_signature"]
        )

    @pytest.mark.unit
    def test_request_token_leg_uses_callback_and_empty_token_secret(self, fixed_nonce):
        request = httpx.Request("POST", oauth1.REQUEST_TOKEN_URL)
        OAuth1Auth(CONSUMER_KEY, CONSUMER_SECRET, callback="oob").sign(request)

        params = _header_params(request.headers["Authorization"])
        assert params["oauth_callback"] == "oob"
        assert "oauth_token" not in params

        base = build_signature_base_string(
            "POST",
            oauth1.REQUEST_TOKEN_URL,
            [
                ("oauth_callback", "oob"),
                ("oauth_consumer_key", CONSUMER_KEY),
                ("oauth_nonce", NONCE),
                ("oauth_signature_method", "HMAC-SHA1"),
                ("oauth_timestamp", TIMESTAMP),
                ("oauth_version", "1.0"),
            ],
        )
        assert params["oauth_signature"] == _expected_signature(base, token_secret="")

    @pytest.mark.unit
    def test_every_request_gets_a_fresh_nonce(self):
        auth = OAuth1Auth(CONSUMER_KEY, CONSUMER_SECRET, token=TOKEN)
        first = httpx.Request("GET", "http://example.com/ox/4.0/adunit")
        second = httpx.Request("GET", "http://example.com/ox/4.0/adunit")
        auth.sign(first)
        auth.sign(second)

        assert (
            _header_params(first.headers["Authorization"])["oauth_nonce"]
            != _header_params(second.headers["Authorization"])["oauth_nonce"]
        )
