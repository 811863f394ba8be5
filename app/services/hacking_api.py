import logging
import time
from typing import Optional

import httpx

from app.core.config import get_settings
from app.core.errors import External

logger = logging.getLogger(__name__)


class HackingApiClient:
    """Reports mission and signal changes to the external hacking game. Disabled without a URL."""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None, timeout: Optional[int] = None):
        settings = get_settings()
        self.base_url = (base_url if base_url is not None else settings.hacking_api_url or "").rstrip("/")
        self.api_key = api_key if api_key is not None else settings.hacking_api_key
        self.timeout = timeout or settings.hacking_api_timeout_seconds

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def _post(self, path: str, payload: dict) -> Optional[dict]:
        if not self.enabled:
            return None
        url = f"{self.base_url}{path}"
        start = time.time()
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, json={**payload, "key": self.api_key})
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as exc:
            logger.warning("Hacking API %s unreachable: %s", path, exc)
            raise External("Unable to reach the hacking API") from exc
        duration_ms = round((time.time() - start) * 1000, 2)
        logger.info("Hacking API POST %s status=%s duration=%sms", path, response.status_code, duration_ms)
        if response.status_code >= 400:
            raise External(f"Hacking API error {response.status_code}", extra={"path": path})
        try:
            return response.json()
        except ValueError:
            return {}

    def set_mission(self, *, station_id: int, code: str, owner: str) -> Optional[dict]:
        return self._post("/reports/set_mission", {"mission": {"stationId": station_id, "owner": owner, "code": code}})

    def set_boost(self, *, station_id: int, boost: int) -> Optional[dict]:
        return self._post("/reports/set_boost", {"station": station_id, "boost": boost})


def get_hacking_client() -> HackingApiClient:
    return HackingApiClient()
