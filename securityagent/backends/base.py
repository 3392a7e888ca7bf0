"""
Base classes for generative text backends.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from securityagent.exceptions import BackendError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY = 1.0
RETRY_MAX_DELAY = 30.0

# Statuses worth another attempt; everything else non-2xx fails fast
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class GenerativeBackend(ABC):
    """
    A provider that turns a prompt into a completion.

    ``submit`` returns the completion text, or None when the provider
    answered but produced no result. Transport and protocol failures
    raise BackendError.
    """

    name = "backend"

    @abstractmethod
    def submit(self, prompt: str) -> Optional[str]:
        """Send a prompt and return the completion text or None."""
        pass

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HTTPBackend(GenerativeBackend):
    """
    A backend reached through a single blocking JSON POST per prompt.

    Every request carries an explicit timeout. Transport errors and
    retryable statuses are retried with exponential backoff, up to
    ``max_retries`` extra attempts.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        client: Optional[httpx.Client] = None,
    ):
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON response.

        Raises:
            BackendError: on transport failure, non-2xx status after
                retries, or a body that is not a JSON object.
        """
        attempts = self.max_retries + 1
        last_error: Optional[BackendError] = None

        for attempt in range(1, attempts + 1):
            try:
                response = self._client.post(url, json=payload, params=params, timeout=self.timeout)
            except httpx.TransportError as e:
                last_error = BackendError(
                    f"{self.name} request failed: {type(e).__name__}: {e}",
                    provider=self.name,
                )
            else:
                if response.status_code in RETRYABLE_STATUS_CODES:
                    last_error = BackendError(
                        f"{self.name} returned HTTP {response.status_code}",
                        provider=self.name,
                        status_code=response.status_code,
                    )
                elif response.is_error:
                    raise BackendError(
                        f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}",
                        provider=self.name,
                        status_code=response.status_code,
                    )
                else:
                    return self._decode(response)

            if attempt < attempts:
                delay = min(self.retry_delay * (2 ** (attempt - 1)), RETRY_MAX_DELAY)
                logger.warning(
                    "%s (attempt %d/%d); retrying in %.1fs",
                    last_error, attempt, attempts, delay,
                )
                if delay > 0:
                    time.sleep(delay)

        raise last_error

    def _decode(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise BackendError(
                f"{self.name} returned a non-JSON body: {e}",
                provider=self.name,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise BackendError(
                f"{self.name} returned unexpected JSON ({type(data).__name__})",
                provider=self.name,
                status_code=response.status_code,
            )
        return data
