"""
app/services/job_forwarder.py

Forwards manual admin triggers to the job endpoints over HTTP.
"""

from __future__ import annotations

from typing import Any

import httpx
from fastapi import Depends

from app.config import JobAuthSettings, get_job_auth_settings

JOB_ENDPOINTS = {
    "sync-inventory": "/api/cron/sync-inventory",
    "ai-scraper": "/api/cron/ai-scraper",
    "ai-self-review": "/api/cron/ai-self-review",
}
MANUAL_TRIGGER_MARKER = "admin_manual"


class JobForwarder:
    """
    Calls a job endpoint with the shared secret, exactly as the scheduler
    platform would, and relays the response.
    """

    def __init__(
        self,
        *,
        base_url: str,
        secret: str | None,
        timeout_seconds: float = 300.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._secret = secret
        self._timeout_seconds = timeout_seconds
        self._client = client

    def url_for(self, job: str) -> str:
        path = JOB_ENDPOINTS.get(job)
        if path is None:
            raise ValueError(f"Unknown job '{job}'. Allowed jobs: {', '.join(sorted(JOB_ENDPOINTS))}.")
        return f"{self._base_url}{path}"

    async def forward(self, job: str) -> tuple[int, Any]:
        """
        Returns the job endpoint's status code and JSON body. Transport
        failures raise `httpx.HTTPError`.
        """

        url = self.url_for(job)
        headers = {
            "Authorization": f"Bearer {self._secret or ''}",
            "x-triggered-by": MANUAL_TRIGGER_MARKER,
        }
        if self._client is not None:
            response = await self._client.get(url, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url, headers=headers)

        try:
            body = response.json()
        except ValueError:
            body = {"error": "Non-JSON response from job endpoint", "details": response.text[:500]}
        return response.status_code, body


def get_job_forwarder(settings: JobAuthSettings = Depends(get_job_auth_settings)) -> JobForwarder:
    return JobForwarder(
        base_url=settings.site_url,
        secret=settings.cron_secret,
        timeout_seconds=settings.forward_timeout_seconds,
    )
