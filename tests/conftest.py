"""Shared fakes and fixtures. No test touches the network."""

import json
import threading
import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from landing_seo.config import TOKEN_URL
from landing_seo.generation import FixtureProvider, TextGenerationClient
from landing_seo.retry import RetryPolicy


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json is None:
            return json.loads(self.text)
        return self._json


class FakeSession:
    """Stands in for requests.Session.

    Token endpoint calls are answered with ``token-1``, ``token-2``, ...
    unless ``token_handler`` is given; everything else goes to ``handler``.
    """

    def __init__(self, handler=None, token_handler=None, token_delay=0.0, expires_in=3600):
        self.handler = handler or (lambda method, url, kwargs: FakeResponse(200, {}))
        self.token_handler = token_handler
        self.token_delay = token_delay
        self.expires_in = expires_in
        self.calls = []
        self.token_requests = 0
        self._lock = threading.Lock()

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def request(self, method, url, **kwargs):
        with self._lock:
            self.calls.append((method, url, kwargs))
        if url == TOKEN_URL:
            if self.token_delay:
                time.sleep(self.token_delay)
            with self._lock:
                self.token_requests += 1
                n = self.token_requests
            if self.token_handler is not None:
                return self.token_handler(kwargs)
            return FakeResponse(200, {"access_token": f"token-{n}", "expires_in": self.expires_in})
        return self.handler(method, url, kwargs)

    @property
    def api_calls(self):
        return [call for call in self.calls if call[1] != TOKEN_URL]


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture(scope="session")
def rsa_key():
    """(private key PEM, public key) generated once per test session."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    return pem, key.public_key()


@pytest.fixture
def service_account_info(rsa_key):
    pem, _ = rsa_key
    return {
        "type": "service_account",
        "client_email": "pipeline@webnova-seo.iam.gserviceaccount.com",
        "private_key_id": "key-1",
        "private_key": pem,
        "token_uri": TOKEN_URL,
    }


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def no_wait_policy():
    return RetryPolicy(max_attempts=3, base_delay=1.0, sleep=lambda seconds: None)


@pytest.fixture
def fixture_provider():
    return FixtureProvider()


@pytest.fixture
def fixture_client(fixture_provider, no_wait_policy):
    return TextGenerationClient(fixture_provider, retry_policy=no_wait_policy)
