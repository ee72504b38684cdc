"""Minimal Heroku Platform API client for review apps.

Only the four calls the reconciler needs are implemented. There is no retry
and no pagination: one request per call, bounded by the configured timeout.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from reviewapps_core.models import ReviewApp

logger = logging.getLogger(__name__)

HEROKU_API_BASE = "https://api.heroku.com"
_ACCEPT = "application/vnd.heroku+json; version=3"


class HerokuError(RuntimeError):
    """Raised for any failed Heroku Platform API call, including transport errors."""

    def __init__(
        self,
        message: str,
        method: str = "",
        path: str = "",
        status_code: int | None = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> dict:
        return {
            "message": str(self),
            "method": self.method,
            "path": self.path,
            "status_code": self.status_code,
            "body": self.body,
        }


class HerokuClient:
    def __init__(
        self,
        token: str,
        base_url: str = HEROKU_API_BASE,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        if not token:
            raise ValueError("A Heroku API token is required.")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": _ACCEPT,
                "Content-Type": "application/json",
            }
        )

    def list_review_apps(self, pipeline_id: str) -> list[ReviewApp]:
        """Return every review app in the pipeline, in the order the API lists them."""
        path = f"/pipelines/{pipeline_id}/review-apps"
        payload = self._request("GET", path)
        if not isinstance(payload, list):
            raise HerokuError("Unexpected review-apps listing response", method="GET", path=path, body=payload)
        try:
            return [ReviewApp.from_api(item) for item in payload]
        except (TypeError, ValueError, AttributeError) as e:
            raise HerokuError(
                f"Unexpected review-apps listing item: {e}", method="GET", path=path, body=payload
            ) from e

    def create_review_app(
        self,
        branch: str,
        pipeline_id: str,
        source_blob: dict,
        pr_number: int,
    ) -> dict:
        body = {
            "branch": branch,
            "pipeline": pipeline_id,
            "source_blob": source_blob,
            "pr_number": pr_number,
        }
        return self._request("POST", "/review-apps", json=body)

    def create_build(self, app_id: str, source_blob: dict) -> dict:
        return self._request("POST", f"/apps/{app_id}/builds", json={"source_blob": source_blob})

    def delete_review_app(self, review_app_id: str) -> None:
        self._request("DELETE", f"/review-apps/{review_app_id}")

    def _request(self, method: str, path: str, json: dict | None = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("Heroku %s %s", method, path)
        try:
            response = self.session.request(method=method, url=url, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise HerokuError(
                f"Heroku request failed ({type(e).__name__}): {e}",
                method=method,
                path=path,
            ) from e

        if response.status_code >= 400:
            body = _parse_body(response)
            message = body.get("message") if isinstance(body, dict) else None
            raise HerokuError(
                f"Heroku API {method} {path} returned {response.status_code}: {message or response.text}",
                method=method,
                path=path,
                status_code=response.status_code,
                body=body,
            )

        if not response.content:
            return {}
        return _parse_body(response)


def _parse_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
