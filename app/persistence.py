"""
Local storage for the CV record.

The storage file behaves like a browser's localStorage: a JSON object of
string keys to string values. The record lives under one key as its own
JSON text, so other keys in the same file are left alone.
"""
from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping

from schema_cv import normalise_record

log = logging.getLogger(__name__)


class PersistenceGateway:
    def __init__(self, path: str | Path, key: str = "cvData"):
        self.path = Path(path)
        self.key = key

    def save(self, record: Mapping) -> bool:
        """Overwrite the slot with `record`. Failures are logged, never raised."""
        try:
            payload = json.dumps(_plain(record), ensure_ascii=False)
            slots = self._read_slots()
            slots[self.key] = payload
            self._write_slots(slots)
        except (OSError, TypeError, ValueError) as e:
            log.warning("Could not save CV data to %s: %s", self.path, e)
            return False
        return True

    def load(self) -> Dict | None:
        """The saved record, or None when nothing usable has been saved."""
        raw = self._read_slots().get(self.key)
        if raw is None:
            return None
        try:
            record = normalise_record(json.loads(raw))
        except (TypeError, ValueError) as e:
            log.warning("Stored CV data under %r is not valid JSON: %s", self.key, e)
            return None
        if record is None:
            log.warning("Stored CV data under %r does not look like a CV; starting fresh", self.key)
        return record

    def clear(self) -> None:
        slots = self._read_slots()
        if slots.pop(self.key, None) is not None:
            self._write_slots(slots)

    # ── file handling ───────────────────────────────────────
    def _read_slots(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            log.warning("Storage file %s is unreadable: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Storage file %s is not a key/value object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_slots(self, slots: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(slots, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def _plain(value):
    """Turn read-only mapping views back into plain JSON-able containers."""
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
