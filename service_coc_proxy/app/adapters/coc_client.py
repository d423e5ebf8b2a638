"""
Clash of Clans API client for the proxy.
"""

import time
from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from shared.config import COC_API_BASE
from shared.errors import TransportError, UpstreamError, classify_status
from shared.logging import get_logger

from ..credentials import CredentialRotator
from ..domain.envelope import Failure, ResultEnvelope, Success

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TIMEOUT = 10.0


class CocApiClient:
    """Performs single, non-retried GET requests against the upstream API."""

    def __init__(
        self,
        rotator: CredentialRotator,
        base_url: str = COC_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        metrics: Optional["MetricsCollector"] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rotator = rotator
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.metrics = metrics
        self._transport = transport
        self.logger = get_logger("coc-proxy.coc_client")

    async def call(self, path: str, params: Optional[Dict[str, Any]] = None) -> ResultEnvelope:
        """Fetch ``path`` and wrap the outcome in a result envelope."""

        async def _request() -> bytes:
            url = f"{self.base_url}{path}"
            headers = {
                "Authorization": f"Bearer {self.rotator.next()}",
                "Accept": "application/json",
            }
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers, params=params)

            self._record(response.status_code, start)
            if response.is_success:
                self.logger.info("Upstream call succeeded", path=path, status_code=response.status_code)
                return response.content

            raise classify_status(response.status_code, self._extract_message(response))

        start = time.perf_counter()
        self.logger.info("Calling upstream", path=path, params=params)
        try:
            return Success(payload=await _request())
        except UpstreamError as exc:
            self.logger.error(
                "Upstream API error",
                path=path,
                status_code=exc.status_code,
                details=exc.details,
            )
            return Failure.from_exception(exc)
        except httpx.HTTPError as exc:
            self._record(0, start)
            self.logger.error("Upstream transport error", path=path, error=str(exc))
            return Failure.from_exception(TransportError(str(exc) or exc.__class__.__name__))

    @staticmethod
    def _extract_message(response: httpx.Response) -> str:
        """Pull the human readable reason out of an upstream error body."""
        try:
            body = response.json()
        except ValueError:
            return "Unknown error"
        if isinstance(body, dict):
            return body.get("message") or body.get("reason") or "Unknown error"
        return "Unknown error"

    def _record(self, status: int, start: float) -> None:
        if self.metrics:
            self.metrics.record_upstream_call(status, time.perf_counter() - start)
