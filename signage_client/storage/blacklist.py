from __future__ import annotations

import re
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from signage_client.monitoring.blacklist_reporter import (
    BlacklistReporter,
    BlacklistScope,
    ReportRequest,
    ReportResult,
)
from signage_client.monitoring.structured_logger import log_info, log_warning, log_error

DEFAULT_REASON = "No reason provided"

# Entries are stored as "[id]," with no separator between them
_ENTRY_RE = re.compile(r"\[([^\[\]]*)\],")
# ASCII digits with an optional sign; int() alone also accepts "1_000" and non-ASCII digits
_NUMERIC_RE = re.compile(r"[+-]?[0-9]+")

MediaId = Union[int, str]


def format_entry(media_id: MediaId) -> str:
    return f"[{media_id}],"


def _normalise(media_id: Any) -> str:
    return "" if media_id is None else str(media_id).strip()


def _record_id(record: Any) -> Optional[str]:
    """Pull the id out of a mapping, an XML element or any object with an `id` attribute"""
    if isinstance(record, dict):
        value = record.get("id")
    elif hasattr(record, "attrib"):
        value = record.attrib.get("id")
    else:
        value = getattr(record, "id", None)
    value = _normalise(value)
    return value or None


class BlacklistStore:
    """
    Media ids this display must not show, kept in <library>/<blacklist file>.

    All failures are logged and suppressed: a broken blacklist must never stop playback.
    """

    def __init__(self, path: Union[str, Path], reporter: Optional[BlacklistReporter] = None):
        self._path = Path(path)
        self._reporter = reporter
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings, reporter: Optional[BlacklistReporter] = None) -> "BlacklistStore":
        return cls(settings.blacklist_path, reporter=reporter)

    @property
    def path(self) -> Path:
        return self._path

    def add(self, media_id: MediaId, scope: BlacklistScope = BlacklistScope.SINGLE,
            reason: str = "") -> Optional["Future[ReportResult]"]:
        """
        Blacklist a media item locally and report it to the CMS.

        Returns the pending report (None when nothing was sent). Never raises.
        """
        reason = reason or DEFAULT_REASON
        raw_id = _normalise(media_id)

        numeric_id: Optional[int] = None
        if _NUMERIC_RE.fullmatch(raw_id):
            numeric_id = int(raw_id)
        else:
            log_warning(
                "blacklist.add.non_numeric",
                f"Currently can only append Integer media types. Id {raw_id}",
                context={"media_id": raw_id},
            )

        future = None
        if self._reporter is not None and numeric_id is not None:
            try:
                future = self._reporter.submit(ReportRequest(numeric_id, scope, reason))
            except Exception as e:
                log_error("blacklist.report.submit_failed", f"Cannot queue blacklist report: {e}",
                          context={"media_id": numeric_id})

        self._add_local(raw_id)
        return future

    def add_bulk(self, items: Iterable[Any]) -> int:
        """Add every record's id locally (no report). Records without an id are skipped."""
        log_info("blacklist.add_bulk", "Adding item list to Blacklist")
        added = 0
        for record in items or []:
            media_id = _record_id(record)
            if media_id is None:
                log_warning("blacklist.add_bulk.skipped", "Blacklist record has no id", context={"record": repr(record)})
                continue
            if self._add_local(media_id):
                added += 1
        return added

    def _add_local(self, media_id: str) -> bool:
        if not media_id:
            log_warning("blacklist.add.empty", "Refusing to blacklist an empty id")
            return False
        if "[" in media_id or "]" in media_id:
            log_warning("blacklist.add.invalid", f"Refusing to blacklist {media_id}: ids cannot contain brackets",
                        context={"media_id": media_id})
            return False
        try:
            with self._lock:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with open(self._path, "a", encoding="utf-8") as f:
                    f.write(format_entry(media_id))
            return True
        except OSError as e:
            log_error("blacklist.add.failed", f"Cant add {media_id} to the blacklist",
                      context={"media_id": media_id, "error": str(e), "path": str(self._path)})
            return False

    def entries(self) -> List[str]:
        """Ids in file order, duplicates included"""
        try:
            content = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            log_error("blacklist.read.failed", "Cannot read the BlackList",
                      context={"error": str(e), "path": str(self._path)})
            return []
        return _ENTRY_RE.findall(content)

    def is_blacklisted(self, media_id: MediaId) -> bool:
        needle = _normalise(media_id)
        if not needle:
            return False
        return needle in set(self.entries())

    def truncate(self):
        """Delete the local blacklist"""
        try:
            self._path.unlink()
            log_info("blacklist.truncate", "BlackList truncated", context={"path": str(self._path)})
        except FileNotFoundError:
            pass
        except OSError as e:
            log_error("blacklist.truncate.failed", "Cannot truncate the BlackList",
                      context={"error": str(e), "path": str(self._path)})

    def __contains__(self, media_id: MediaId) -> bool:
        return self.is_blacklisted(media_id)
