"""
app/api/dependencies.py

Shared FastAPI dependencies for job and admin endpoint authorization.
"""

from __future__ import annotations

import hmac

from fastapi import Depends, Header, HTTPException, status

from app.config import JobAuthSettings, get_job_auth_settings

DEFAULT_TRIGGERED_BY = "cron"
_MAX_TRIGGERED_BY_CHARS = 50


def is_secret_authorized(provided: str | None, settings: JobAuthSettings) -> bool:
    """
    A configured secret must match exactly. Without one, access is open
    outside production and refused in production.
    """

    if settings.cron_secret:
        return provided is not None and hmac.compare_digest(provided, settings.cron_secret)
    return not settings.production


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def require_cron_auth(
    authorization: str | None = Header(default=None),
    settings: JobAuthSettings = Depends(get_job_auth_settings),
) -> None:
    """
    Validate the `Authorization: Bearer <CRON_SECRET>` header of job endpoints.
    """

    if not is_secret_authorized(_bearer_token(authorization), settings):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


def require_admin_secret(
    x_admin_secret: str | None = Header(default=None),
    settings: JobAuthSettings = Depends(get_job_auth_settings),
) -> None:
    """
    Validate the `x-admin-secret` header of admin read endpoints.
    """

    if not is_secret_authorized(x_admin_secret, settings):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


def get_triggered_by(x_triggered_by: str | None = Header(default=None)) -> str:
    value = (x_triggered_by or "").strip()
    return value[:_MAX_TRIGGERED_BY_CHARS] if value else DEFAULT_TRIGGERED_BY
