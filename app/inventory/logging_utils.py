"""
Structured logging helpers for inventory pipeline workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_MAX_FIELD_CHARS = 500


def _bounded(value: Any) -> Any:
    if isinstance(value, str) and len(value) > _MAX_FIELD_CHARS:
        return value[:_MAX_FIELD_CHARS] + "..."
    return value


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Long string fields (page errors, model reasoning) are cut so one bad page
    cannot flood the log.
    """

    payload = {"event": event, **{key: _bounded(value) for key, value in fields.items()}}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
