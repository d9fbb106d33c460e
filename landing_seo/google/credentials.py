"""Service-account authentication shared by the Google API clients.

Mints a short-lived bearer token from a signed JWT assertion (RS256),
exchanges it at the OAuth2 token endpoint and caches it until it is within
``TOKEN_SAFETY_MARGIN`` seconds of expiry.

Setup requirements:
1. Create a Google Cloud project and enable the Indexing / Search Console APIs
2. Create a service account and download its JSON key
3. Add the service account email to Search Console as an owner of the site
"""

from __future__ import annotations

import base64
import json
import logging
import os
import threading
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union

import requests
from google.auth import crypt

from landing_seo.config import (
    ASSERTION_LIFETIME,
    GOOGLE_CREDENTIALS_PATH,
    HTTP_TIMEOUT,
    TOKEN_SAFETY_MARGIN,
    TOKEN_URL,
)
from landing_seo.errors import (
    CredentialsMissing,
    TokenExchangeFailed,
    UpstreamRequestFailed,
)
from landing_seo.retry import RetryError, RetryPolicy

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


@dataclass(frozen=True)
class ServiceCredential:
    client_email: str
    private_key_id: str
    private_key: str = field(repr=False)
    token_uri: str = TOKEN_URL
    scope: str = ""

    @classmethod
    def from_info(cls, info: Union[dict, str, bytes], scope: str = "") -> "ServiceCredential":
        """Build from a service-account key (parsed dict or raw JSON text)."""
        if isinstance(info, (str, bytes)):
            info = json.loads(info)
        missing = [key for key in ("client_email", "private_key") if not info.get(key)]
        if missing:
            raise ValueError(f"Service account key is missing: {', '.join(missing)}")
        return cls(
            client_email=info["client_email"],
            private_key_id=info.get("private_key_id", ""),
            private_key=info["private_key"],
            token_uri=info.get("token_uri") or TOKEN_URL,
            scope=scope,
        )

    def with_scope(self, scope: str) -> "ServiceCredential":
        return replace(self, scope=scope)


def load_credential_from_env(
    env_var: str = "GOOGLE_APPLICATION_CREDENTIALS_JSON",
    path: Optional[Union[str, Path]] = None,
) -> Optional[ServiceCredential]:
    """Inline JSON in ``env_var`` wins; otherwise read the key file, if any."""
    raw = os.getenv(env_var)
    if raw:
        return ServiceCredential.from_info(raw)
    key_file = Path(path or GOOGLE_CREDENTIALS_PATH)
    if key_file.exists():
        return ServiceCredential.from_info(key_file.read_text())
    return None


@dataclass(frozen=True)
class AccessToken:
    token: str = field(repr=False)
    expires_at: float  # epoch seconds
    # Re-mint this long before expiry; never more than half the lifetime
    margin: float = TOKEN_SAFETY_MARGIN

    @classmethod
    def issued(cls, token: str, now: float, expires_in: float) -> "AccessToken":
        return cls(
            token=token,
            expires_at=now + expires_in,
            margin=min(TOKEN_SAFETY_MARGIN, expires_in / 2),
        )

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at - self.margin


def base64url(data: Union[str, bytes]) -> str:
    """URL-safe base64 without padding."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def build_assertion(credential: ServiceCredential, now: int) -> str:
    """Return ``header.payload.signature`` signed with the account's RSA key."""
    header = {"alg": "RS256", "typ": "JWT", "kid": credential.private_key_id}
    payload = {
        "iss": credential.client_email,
        "sub": credential.client_email,
        "aud": credential.token_uri,
        "iat": now,
        "exp": now + ASSERTION_LIFETIME,
        "scope": credential.scope,
    }
    signing_input = ".".join(
        base64url(json.dumps(part, separators=(",", ":"))) for part in (header, payload)
    )
    signer = crypt.RSASigner.from_string(credential.private_key, credential.private_key_id)
    signature = signer.sign(signing_input.encode("ascii"))
    return f"{signing_input}.{base64url(signature)}"


def is_transient_http(error: BaseException) -> bool:
    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        return True
    return bool(getattr(error, "retryable", False))


class CredentialedAPIClient:
    """Base for clients that call Google APIs with a service-account token.

    Subclasses set ``scope`` and ``error_class``.
    """

    scope = ""
    error_class = UpstreamRequestFailed

    def __init__(
        self,
        credentials=None,
        session: Optional[requests.Session] = None,
        timeout: float = HTTP_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        clock=time.time,
        sleep=time.sleep,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy(retry_if=is_transient_http, sleep=sleep)
        self.clock = clock
        self.sleep = sleep
        self._credential: Optional[ServiceCredential] = None
        self._token: Optional[AccessToken] = None
        # Token refresh is single-flight: concurrent callers wait for one exchange
        self._token_lock = threading.Lock()
        if credentials is not None:
            self.set_credentials(credentials)

    # ── Credentials ───────────────────────────────────────────────────────

    def set_credentials(self, credentials) -> None:
        """Accept a ServiceCredential, a parsed key dict or raw key JSON."""
        if not isinstance(credentials, ServiceCredential):
            credentials = ServiceCredential.from_info(credentials)
        with self._token_lock:
            self._credential = credentials.with_scope(self.scope)
            self._token = None

    def load_from_env(self, env_var: str = "GOOGLE_APPLICATION_CREDENTIALS_JSON") -> None:
        credential = load_credential_from_env(env_var)
        if credential is None:
            raise CredentialsMissing(f"Environment variable {env_var} not set and no key file found")
        self.set_credentials(credential)

    @property
    def has_credentials(self) -> bool:
        return self._credential is not None

    def require_credentials(self) -> None:
        if self._credential is None:
            raise CredentialsMissing("Google credentials not configured")

    # ── Token lifecycle ───────────────────────────────────────────────────

    def get_token(self) -> str:
        """Return a bearer token, minting a new one when the cached one is stale."""
        with self._token_lock:
            now = self.clock()
            if self._token is not None and self._token.is_valid(now):
                return self._token.token
            if self._credential is None:
                raise CredentialsMissing("Google credentials not configured")
            self._token = self._exchange_assertion(now)
            return self._token.token

    def _exchange_assertion(self, now: float) -> AccessToken:
        credential = self._credential
        assertion = build_assertion(credential, int(now))
        resp = self.session.post(
            credential.token_uri,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            timeout=self.timeout,
        )
        if not resp.ok:
            raise TokenExchangeFailed(resp.status_code, resp.text)

        try:
            data = resp.json()
            token = data["access_token"]
            expires_in = float(data.get("expires_in", ASSERTION_LIFETIME))
        except (ValueError, KeyError, TypeError, AttributeError):
            raise TokenExchangeFailed(resp.status_code, resp.text) from None
        logger.info("Minted access token for %s (expires in %ds)", self.scope, expires_in)
        return AccessToken.issued(token, now, expires_in)

    # ── HTTP ──────────────────────────────────────────────────────────────

    def _request(self, method: str, url: str, **kwargs) -> dict:
        """Authenticated JSON request; raises ``error_class`` on non-2xx.

        Transient failures (connection errors, 429, 5xx) are retried by the
        retry policy; the last error is re-raised once it gives up.
        """

        def send():
            token = self.get_token()
            resp = self.session.request(
                method,
                url,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
                **kwargs,
            )
            if not resp.ok:
                raise self.error_class(resp.status_code, resp.text)
            return resp.json() if resp.content else {}

        try:
            return self.retry_policy.call(send, description=f"{method} {url}")
        except RetryError as e:
            raise e.last_error from None
