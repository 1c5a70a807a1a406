"""
Owner of the canonical CV record.

Every component that reads or writes the record holds a reference to one
RecordStore; nothing touches the underlying dict directly. Mutations that
land mark the store dirty until the composer has saved.
"""
from __future__ import annotations
import copy
import logging
from types import MappingProxyType
from typing import Dict, Mapping

from exceptions import UnknownSectionError
from schema_cv import (
    SCALAR_KEYS,
    blank_entry,
    field_names,
    new_record,
    normalise_record,
    resolve_section,
)

log = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, record: Dict | None = None):
        self._record = normalise_record(record) if record is not None else None
        if self._record is None:
            self._record = new_record()
        self.dirty = False

    # ── reading ─────────────────────────────────────────────
    def get(self) -> Mapping:
        """Read-only view of the current record (nested values are copies)."""
        return MappingProxyType(copy.deepcopy(self._record))

    def snapshot(self) -> Dict:
        """Deep copy suitable for serialisation or comparison."""
        return copy.deepcopy(self._record)

    def length(self, section: str) -> int:
        return len(self._record[self._section(section)])

    def get_scalar(self, key: str) -> str:
        path = SCALAR_KEYS.get(key)
        if path is None:
            return ""
        if len(path) == 1:
            return self._record[path[0]]
        return self._record[path[0]][path[1]]

    def get_entry_field(self, section: str, ordinal: int, field: str) -> str:
        entries = self._record[self._section(section)]
        if not 0 <= ordinal < len(entries):
            return ""
        return entries[ordinal].get(field, "")

    # ── dirty tracking ──────────────────────────────────────
    def _changed(self) -> None:
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

    # ── mutations ───────────────────────────────────────────
    def set_scalar(self, key: str, value: str) -> bool:
        """Set a personalDetails field or the professional summary."""
        path = SCALAR_KEYS.get(key)
        if path is None:
            log.debug("Ignoring edit of unknown scalar %r", key)
            return False
        if len(path) == 1:
            self._record[path[0]] = value
        else:
            self._record[path[0]][path[1]] = value
        self._changed()
        return True

    def set_entry_field(self, section: str, ordinal: int, field: str, value: str) -> bool:
        """
        Set one field of one entry.

        A stale address (unknown section, ordinal out of range, field outside
        the section's shape) is ignored and reported by returning False.
        """
        key = resolve_section(section)
        if key is None or field not in field_names(key):
            log.debug("Ignoring edit of %s-%s-%s: not in the record shape", section, ordinal, field)
            return False
        entries = self._record[key]
        if not isinstance(ordinal, int) or not 0 <= ordinal < len(entries):
            log.debug("Ignoring edit of %s-%s-%s: ordinal out of range", key, ordinal, field)
            return False
        entries[ordinal][field] = value
        self._changed()
        return True

    def append_entry(self, section: str, entry: Dict[str, str] | None = None) -> int:
        """Append a blank entry (or `entry`, coerced to the shape) and return its ordinal."""
        key = self._section(section)
        new = blank_entry(key)
        if entry:
            new.update({k: v for k, v in entry.items() if k in new})
        self._record[key].append(new)
        self._changed()
        return len(self._record[key]) - 1

    def remove_entry(self, section: str, ordinal: int) -> bool:
        key = self._section(section)
        entries = self._record[key]
        if not 0 <= ordinal < len(entries):
            log.debug("Ignoring removal of %s-%s: ordinal out of range", key, ordinal)
            return False
        del entries[ordinal]
        self._changed()
        return True

    def replace(self, record: Dict | None) -> None:
        """Swap in a whole new record (reload). Bad data yields an empty record."""
        self._record = normalise_record(record) if record is not None else None
        if self._record is None:
            self._record = new_record()
        self._changed()

    @staticmethod
    def _section(section: str) -> str:
        key = resolve_section(section)
        if key is None:
            raise UnknownSectionError(section)
        return key
