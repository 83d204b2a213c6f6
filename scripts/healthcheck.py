"""
Container health check for the inventory API.
"""

from __future__ import annotations

import os

import httpx


def main() -> int:
    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    url = f"http://127.0.0.1:{port}{path}"

    try:
        response = httpx.get(url, timeout=2.0)
    except httpx.HTTPError:
        return 1
    if not response.is_success:
        return 1
    try:
        return 0 if response.json().get("status") == "ok" else 1
    except ValueError:
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
