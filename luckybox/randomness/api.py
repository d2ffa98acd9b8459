import os
import logging
from urllib.parse import urljoin
from typing import Any, Optional

from dotenv import load_dotenv

from .adapter import RequestId
from .utils import open_session
from ..errors import RandomnessNotReady

logger = logging.getLogger(__name__)


class OracleClient:
    """Randomness adapter backed by an HTTP verifiable-randomness service.

    The service exposes ``POST /api/v1/randomness/requests`` returning a
    ``request_id`` and ``GET /api/v1/randomness/requests/<id>`` returning the
    request ``status`` and, once ``"fulfilled"``, its integer ``result``.
    """

    name = "http-oracle"

    def __init__(self, base_fqdn: Optional[str] = None, timeout: int = 45):
        load_dotenv()
        fqdn = base_fqdn or os.getenv("RANDOMNESS_BASE_FQDN")
        if not fqdn:
            raise ValueError("Environment variable 'RANDOMNESS_BASE_FQDN' is not set")

        self.base_url = f"https://{fqdn}".rstrip("/")
        self.session = open_session()
        self.timeout = timeout
        self._results: dict[RequestId, int] = {}

    # -------- core request --------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        r = self.session.request(
            method=method.upper(),
            url=url,
            params=params,
            json=json,
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json() if r.content else None

    # -------- adapter interface --------
    def request(self) -> RequestId:
        payload = self._request("POST", "/api/v1/randomness/requests", json={})
        if not isinstance(payload, dict) or not payload.get("request_id"):
            raise RuntimeError(f"Unexpected randomness request response: {payload!r}")
        request_id = str(payload["request_id"])
        logger.info(f"Requested randomness from oracle: {request_id}")
        return request_id

    def _poll(self, request_id: RequestId) -> Optional[int]:
        if request_id in self._results:
            return self._results[request_id]
        payload = self._request("GET", f"/api/v1/randomness/requests/{request_id}")
        if not isinstance(payload, dict):
            raise RuntimeError(f"Unexpected randomness status response: {payload!r}")
        if payload.get("status") != "fulfilled":
            return None
        result = payload.get("result")
        if result is None:
            raise RuntimeError(f"Fulfilled randomness request {request_id} has no result")
        # Results may exceed 64 bits, so the service sends them as strings.
        self._results[request_id] = int(result)
        return self._results[request_id]

    def is_fulfilled(self, request_id: RequestId) -> bool:
        return self._poll(request_id) is not None

    def result(self, request_id: RequestId) -> int:
        value = self._poll(request_id)
        if value is None:
            raise RandomnessNotReady()
        return value
