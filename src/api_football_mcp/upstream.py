"""Thin requests-based client for the API-Football v3 REST API."""

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger("api_football_mcp")


class UpstreamError(Exception):
    """Raised for any failure talking to API-Football."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _format_errors(errors: Any) -> str:
    # API-Football returns either {"token": "..."} or a list of messages
    if isinstance(errors, dict):
        return "; ".join(f"{key}: {value}" for key, value in errors.items())
    if isinstance(errors, list):
        return "; ".join(str(item) for item in errors)
    return str(errors)


class ApiFootballClient:
    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: Optional[float] = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        # 0 or None leaves requests' default (no timeout)
        self.timeout = timeout or None
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings) -> "ApiFootballClient":
        return cls(settings.api_key, settings.base_url, settings.upstream_timeout)

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Issue one GET against the upstream API and return the decoded body.

        Query parameters whose value is None are dropped. The upstream reports
        most request problems (bad key, quota, invalid parameter) as HTTP 200
        with a non-empty ``errors`` field, so that is treated as a failure too.
        """
        url = f"{self.base_url}{endpoint}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        logger.info(f"Upstream GET {endpoint} params={query}")

        try:
            response = self.session.get(
                url,
                headers={"x-apisports-key": self.api_key},
                params=query,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"Upstream {endpoint} returned HTTP {status}")
            raise UpstreamError(f"API request failed: HTTP {status}", status_code=status) from e
        except requests.RequestException as e:
            logger.error(f"Upstream {endpoint} request error: {str(e)}")
            raise UpstreamError(f"API request failed: {str(e)}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("API request failed: response was not valid JSON") from e

        if not isinstance(data, dict):
            raise UpstreamError("API request failed: unexpected response shape")

        errors = data.get("errors")
        if errors:
            message = _format_errors(errors)
            logger.error(f"Upstream {endpoint} reported errors: {message}")
            raise UpstreamError(f"API error: {message}", status_code=response.status_code)

        return data
