"""
Bearer token resolution for the Planka API.

Two modes are supported:

- StaticTokenAuth: a token configured up front (PLANKA_TOKEN).
- CredentialsAuth: email/password login against /api/access-tokens; the
  resulting token is stored in a TokenCache shared with the client and
  reused until it is invalidated or the process exits.
"""

import logging
import threading
from typing import Optional
from urllib.parse import urljoin

import requests

from planka_errors import PlankaConfigError, PlankaHTTPError, PlankaJSONError, PlankaStatusError

LOGIN_PATH = '/api/access-tokens'

logger = logging.getLogger('auth_manager')


class TokenCache:
    """A single lock-guarded slot holding the most recent access token."""

    def __init__(self, token: Optional[str] = None):
        self._token = token
        self._lock = threading.Lock()

    def get(self) -> Optional[str]:
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token

    def clear(self) -> None:
        with self._lock:
            self._token = None


class StaticTokenAuth:
    """Always hands out the configured token."""

    def __init__(self, token: str):
        self.token = token

    def resolve(self) -> str:
        return self.token

    def invalidate(self) -> None:
        # Nothing to refresh: the configured token is all there is.
        logger.debug("Ignoring invalidation of static token")


class CredentialsAuth:
    """Logs in with email/password on first use and caches the token."""

    def __init__(self, base_url: str, email: str, password: str, cache: Optional[TokenCache] = None):
        self.base_url = base_url
        self.email = email
        self.password = password
        self.cache = cache if cache is not None else TokenCache()
        # Serializes logins; cache reads stay on the fast path
        self._login_lock = threading.Lock()

    def resolve(self) -> str:
        """Return the cached token, logging in first if there is none.

        Raises:
            PlankaStatusError: the login endpoint answered with a non-2xx status
            PlankaConfigError: the login response carried no token
            PlankaHTTPError: the login request could not be sent
            PlankaJSONError: the login response was not JSON
        """
        token = self.cache.get()
        if token is not None:
            logger.debug("Using cached authentication token")
            return token

        with self._login_lock:
            # Another caller may have logged in while we waited
            token = self.cache.get()
            if token is not None:
                return token
            token = self._login()
            self.cache.set(token)
        logger.info("Authentication successful, token cached")
        return token

    def invalidate(self) -> None:
        """Drop the cached token so the next resolve() logs in again."""
        logger.warning("Discarding cached authentication token")
        self.cache.clear()

    def _login(self) -> str:
        url = urljoin(self.base_url, LOGIN_PATH)
        logger.info(f"Authenticating with Planka API as {self.email}")

        try:
            response = requests.post(url, json={
                "emailOrUsername": self.email,
                "password": self.password,
            })
        except requests.RequestException as e:
            logger.error(f"Failed to send authentication request to {url}: {e}")
            raise PlankaHTTPError(str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Authentication failed: {response.status_code} - {response.text}")
            raise PlankaStatusError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Failed to parse authentication response: {e}")
            raise PlankaJSONError(str(e)) from e

        token = data.get("item") if isinstance(data, dict) else None
        if not isinstance(token, str):
            logger.error("No token in authentication response")
            raise PlankaConfigError("No token in login response")
        return token
