import logging
from typing import Any, Dict
import requests

logger = logging.getLogger(__name__)


class PricingBackendError(Exception):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PricingClient:
    """Thin client for the pricing backend. Rate/coms math happens over there."""

    def __init__(self, base_url: str, timeout: float = 10, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.post(url, json=payload, headers={"Content-Type": "application/json"}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Pricing backend unreachable at %s: %s", url, e)
            raise PricingBackendError("Pricing backend unavailable")

        if not r.ok:
            try:
                detail = r.json().get("detail")
            except (ValueError, AttributeError):
                detail = None
            message = detail or f"API error: {r.reason}"
            logger.warning("Pricing backend rejected %s: %s %s", path, r.status_code, message)
            raise PricingBackendError(str(message), status_code=r.status_code)

        try:
            return r.json()
        except ValueError:
            raise PricingBackendError("Pricing backend returned invalid JSON")

    def send_rate_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/api/v1/rate-request", payload)

    def send_coms_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/api/v1/coms-request", payload)

    def health_check(self) -> Dict[str, Any]:
        try:
            r = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as e:
            raise PricingBackendError(f"Pricing backend health check failed: {e}")
