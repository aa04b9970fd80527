"""Retrying HTTP client for the restore endpoints.

Wraps ``httpx.Client`` with ``RetryContext`` + ``ExponentialBackoff``.
Transport failures (connection refused, timeouts) and 5xx responses are
raised as retryable ``NetworkError``; 4xx responses are raised as
``SourceError`` and not retried, since repeating a rejected request does
not change the answer.

Example:
    >>> with RetryingHttpClient(HttpSettings(max_retries=2)) as client:
    ...     script = client.get_text("http://127.0.0.1:5200/api/v1/public/database/dbRestore.js")
"""

from __future__ import annotations

from typing import Any, Callable

import httpx

from bluejay.core.errors import NetworkError, SourceError
from bluejay.core.logging import get_logger
from bluejay.deploy.config import HttpSettings
from bluejay.execution.retry import ExponentialBackoff, RetryContext

logger = get_logger(__name__)


class RetryingHttpClient:
    """Blocking HTTP client that retries transient failures.

    Parameters
    ----------
    settings
        Retry and timeout policy.
    transport
        Optional httpx transport (``httpx.MockTransport`` in tests).
    sleep
        Delay function between attempts; ``time.sleep`` by default.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.settings = settings or HttpSettings()
        self._client = httpx.Client(timeout=self.settings.timeout_seconds, transport=transport)
        self._sleep = sleep

    def __enter__(self) -> RetryingHttpClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_text(self, url: str) -> str:
        """GET ``url`` and return the response body as text."""
        response = self._request("GET", url)
        return response.text

    def post_json(self, url: str, payload: Any) -> str:
        """POST ``payload`` as JSON and return the response body as text."""
        response = self._request("POST", url, json=payload)
        return response.text

    # ------------------------------------------------------------------

    def _strategy(self) -> ExponentialBackoff:
        return ExponentialBackoff(
            max_retries=self.settings.max_retries,
            base_delay=self.settings.base_delay,
            max_delay=self.settings.max_delay,
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        ctx_kwargs: dict[str, Any] = {"strategy": self._strategy(), "on_retry": self._log_retry}
        if self._sleep is not None:
            ctx_kwargs["sleep"] = self._sleep
        ctx = RetryContext(**ctx_kwargs)
        response = ctx.run(self._send, method, url, **kwargs)
        logger.debug("http.ok", method=method, url=url, status=response.status_code, attempts=ctx.attempts)
        return response

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {url} failed: {exc}", cause=exc).with_context(url=url) from exc

        if response.status_code >= 500:
            raise NetworkError(
                f"{method} {url} returned {response.status_code}"
            ).with_context(url=url, http_status=response.status_code)
        if response.status_code >= 400:
            raise SourceError(
                f"{method} {url} returned {response.status_code}: {response.text[:200]}"
            ).with_context(url=url, http_status=response.status_code)
        return response

    @staticmethod
    def _log_retry(attempt: int, error: Exception, delay: float) -> None:
        logger.warning("http.retry", attempt=attempt, error=str(error), delay=round(delay, 2))
