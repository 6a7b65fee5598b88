"""Single-slot storage for the most recent repository report."""

from __future__ import annotations

import json
import os
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, Optional

from ..logging import get_logger
from ..models import CachedReport

_STORE_VERSION = 1
DEFAULT_TTL_SECONDS = 3600.0

logger = get_logger("stores")


class ReportStore(ABC):
    """Contract for report caches keyed by ``owner/name``.

    The store holds one report at a time; ``put`` replaces it wholesale.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @abstractmethod
    def get(self, key: str) -> Optional[CachedReport]:
        """Return the stored report for ``key`` when it is present and fresh."""

    @abstractmethod
    def put(self, key: str, report: CachedReport) -> None:
        """Replace the stored report."""

    @abstractmethod
    def clear(self) -> None:
        """Drop whatever is stored."""

    def is_expired(self, report: CachedReport, now: float | None = None) -> bool:
        current = self._clock() if now is None else now
        return current - report.timestamp >= self.ttl_seconds


class MemoryReportStore(ReportStore):
    """Process-local store, used by tests."""

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        self._key: Optional[str] = None
        self._report: Optional[CachedReport] = None

    def get(self, key: str) -> Optional[CachedReport]:
        if self._report is None:
            return None
        if self.is_expired(self._report):
            self.clear()
            return None
        if self._key != key:
            return None
        return self._report

    def put(self, key: str, report: CachedReport) -> None:
        self._key = key
        self._report = report

    def clear(self) -> None:
        self._key = None
        self._report = None


class JsonReportStore(ReportStore):
    """Persists the report slot as a JSON document on disk."""

    def __init__(
        self,
        path: Path,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        self.path = path.expanduser()

    def get(self, key: str) -> Optional[CachedReport]:
        payload = self._load()
        if payload is None:
            return None
        try:
            report = CachedReport.from_dict(payload["report"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.info("Discarding unreadable report cache %s: %s", self.path, exc)
            self.clear()
            return None
        if self.is_expired(report):
            logger.debug("Cached report for %s expired", payload.get("key"))
            self.clear()
            return None
        if payload.get("key") != key:
            return None
        return report

    def put(self, key: str, report: CachedReport) -> None:
        payload = {"version": _STORE_VERSION, "key": key, "report": report.to_dict()}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Unable to write report cache %s: %s", self.path, exc)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning("Unable to remove report cache %s: %s", self.path, exc)

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self) -> Optional[Dict[str, object]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            logger.info("Discarding corrupt report cache %s: %s", self.path, exc)
            self.clear()
            return None
        if (
            not isinstance(data, dict)
            or data.get("version") != _STORE_VERSION
            or not isinstance(data.get("report"), dict)
        ):
            self.clear()
            return None
        return data


__all__ = ["DEFAULT_TTL_SECONDS", "JsonReportStore", "MemoryReportStore", "ReportStore"]
