"""Per-request diagnostic log.

Each research request owns one :class:`DebugLog`; stages append entries to it
and the entries travel back with the result. Nothing here is module-global,
so concurrent requests never see each other's entries.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from foundation_scout.models import DebugLogEntry

log = logging.getLogger(__name__)


class DebugLog:
    def __init__(self) -> None:
        self._entries: list[DebugLogEntry] = []

    def log(self, stage: str, message: str, data: dict[str, Any] | None = None) -> None:
        self._entries.append(DebugLogEntry(
            timestamp=datetime.now(UTC), stage=stage, message=message, data=data,
        ))
        if data:
            log.debug("[%s] %s %s", stage, message, data)
        else:
            log.debug("[%s] %s", stage, message)

    @property
    def entries(self) -> list[DebugLogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
