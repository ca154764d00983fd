"""HTTP client for the external QASS / WebAVALIA scoring engine."""

from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from gpa_api.config import Settings

logger = logging.getLogger(__name__)

QASS_PATH = "/api/simulation/qass"
WEBAVALIA_PATH = "/api/simulation/webavalia"


class ScoringServiceError(RuntimeError):
    """评分引擎不可用或返回了无法解析的结果时抛出。"""


class ScoringClient:
    """Posts validated simulation payloads and unwraps the ``data`` envelope."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.base_url = settings.scoring_api_url.rstrip("/")
        self.timeout = settings.scoring_api_timeout
        self._session = session or requests.Session()

    def calculate_qass(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(QASS_PATH, payload)

    def calculate_webavalia(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(WEBAVALIA_PATH, payload)

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.info("Requesting scores from %s", url)
        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            logger.error("Scoring engine request failed: %s", exc)
            raise ScoringServiceError("Scoring engine request failed") from exc
        except ValueError as exc:
            raise ScoringServiceError("Scoring engine returned invalid JSON") from exc

        if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
            raise ScoringServiceError("Scoring engine response is missing data")
        return body["data"]
