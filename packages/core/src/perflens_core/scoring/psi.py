from __future__ import annotations

import json
import logging

import requests

from perflens_core.scoring.base import BaseScoringClient

logger = logging.getLogger(__name__)

PSI_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
CATEGORIES = ("performance", "accessibility", "best-practices", "pwa", "seo")


class PsiError(RuntimeError):
    """PageSpeed Insights answered, but without a usable Lighthouse report."""


class PsiClient(BaseScoringClient):
    """Fetches Lighthouse reports from the PageSpeed Insights v5 API."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = PSI_ENDPOINT,
        strategy: str = "mobile",
        locale: str = "en-US",
        max_attempts: int | None = None,
        timeout: int = 60,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise ValueError("A PageSpeed Insights API key is required. Set PSI_API_KEY.")
        self._api_key = api_key
        self._endpoint = endpoint
        self._strategy = strategy
        self._locale = locale
        self._timeout = timeout
        self._session = session or requests.Session()
        if max_attempts is not None:
            self.MAX_ATTEMPTS = max_attempts

    def _params(self, url: str) -> list[tuple[str, str]]:
        params = [
            ("url", url),
            ("key", self._api_key),
            ("strategy", self._strategy),
            ("locale", self._locale),
        ]
        params.extend(("category", category) for category in CATEGORIES)
        return params

    def _call_api(self, url: str) -> str:
        logger.debug("Requesting PSI report for %s", url)
        resp = self._session.get(self._endpoint, params=self._params(url), timeout=self._timeout)

        try:
            body = resp.json()
        except ValueError:
            body = None

        # PSI reports failures (bad URL, quota, unreachable page) as a JSON
        # error body, usually alongside a 4xx/5xx status.
        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            raise PsiError(f"PSI error: {message}")
        resp.raise_for_status()

        if not isinstance(body, dict) or "lighthouseResult" not in body:
            raise PsiError(f"PSI response for {url} did not include a lighthouseResult")
        return json.dumps(body["lighthouseResult"])
