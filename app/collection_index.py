"""
Address bookkeeping for the repeatable sections.

A field address is (section, ordinal, field). Ordinals are positions, so
they move whenever an entry is removed. The manager keeps the current
address table for every section and answers, for each structural change,
which addresses go away and which must be built.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from exceptions import UnknownSectionError
from schema_cv import SCALAR_KEYS, SECTIONS, field_names, resolve_section

_WIRE = re.compile(r"^(?P<section>[A-Za-z]+)-(?P<ordinal>\d+)-(?P<field>[A-Za-z]+)$")


@dataclass(frozen=True)
class FieldAddress:
    """Location of one editable scalar. `section`/`ordinal` are None for top-level keys."""

    field: str
    section: Optional[str] = None
    ordinal: Optional[int] = None

    @property
    def is_scalar(self) -> bool:
        return self.section is None

    @property
    def wire(self) -> str:
        if self.is_scalar:
            return self.field
        return f"{self.section}-{self.ordinal}-{self.field}"

    @classmethod
    def parse(cls, key: str) -> Optional["FieldAddress"]:
        """`workExperience-0-title` or a bare scalar key → address; None if malformed."""
        if key in SCALAR_KEYS:
            return cls(field=key)
        m = _WIRE.match(key or "")
        if not m:
            return None
        section = resolve_section(m.group("section"))
        if section is None or m.group("field") not in field_names(section):
            return None
        return cls(field=m.group("field"), section=section, ordinal=int(m.group("ordinal")))

    def __str__(self) -> str:
        return self.wire


Group = Tuple[FieldAddress, ...]


@dataclass(frozen=True)
class IndexPlan:
    """
    Effect of one structural change on a section.

    `remap` maps every old ordinal to its new ordinal (None for the removed
    one). With `full_rebuild` set, every descriptor of the section must be
    thrown away and rebuilt from `build`.
    """

    section: str
    length: int
    teardown: Tuple[FieldAddress, ...] = ()
    build: Tuple[FieldAddress, ...] = ()
    full_rebuild: bool = False
    remap: Dict[int, Optional[int]] = field(default_factory=dict)


def group_addresses(section: str, ordinal: int) -> Group:
    return tuple(FieldAddress(field=name, section=section, ordinal=ordinal)
                 for name in field_names(section))


class CollectionIndexManager:
    def __init__(self):
        self._groups: Dict[str, List[Group]] = {s: [] for s in SECTIONS}

    # ── queries ─────────────────────────────────────────────
    def length(self, section: str) -> int:
        return len(self._groups[self._section(section)])

    def groups(self, section: str) -> List[Group]:
        return list(self._groups[self._section(section)])

    def contains(self, address: FieldAddress) -> bool:
        if address.is_scalar:
            return address.field in SCALAR_KEYS
        groups = self._groups.get(address.section)
        if groups is None or not 0 <= address.ordinal < len(groups):
            return False
        return address in groups[address.ordinal]

    # ── planning ────────────────────────────────────────────
    def plan_sync(self, section: str, length: int) -> IndexPlan:
        """Rebuild the whole section for `length` entries (startup, reload)."""
        key = self._section(section)
        return IndexPlan(
            section=key,
            length=length,
            teardown=_flatten(self._groups[key]),
            build=_flatten(group_addresses(key, i) for i in range(length)),
            full_rebuild=True,
            remap={},
        )

    def plan_append(self, section: str) -> IndexPlan:
        key = self._section(section)
        ordinal = len(self._groups[key])
        return IndexPlan(
            section=key,
            length=ordinal + 1,
            build=group_addresses(key, ordinal),
            remap={i: i for i in range(ordinal)},
        )

    def plan_remove(self, section: str, ordinal: int) -> Optional[IndexPlan]:
        """Plan removing `ordinal`; None when it is not a live ordinal."""
        key = self._section(section)
        old = len(self._groups[key])
        if not 0 <= ordinal < old:
            return None
        remap = {i: (i if i < ordinal else i - 1) for i in range(old)}
        remap[ordinal] = None
        return IndexPlan(
            section=key,
            length=old - 1,
            teardown=_flatten(self._groups[key]),
            build=_flatten(group_addresses(key, i) for i in range(old - 1)),
            full_rebuild=True,
            remap=remap,
        )

    def commit(self, plan: IndexPlan) -> None:
        """Make `plan` the current address table for its section."""
        self._groups[plan.section] = [group_addresses(plan.section, i) for i in range(plan.length)]

    @staticmethod
    def _section(section: str) -> str:
        key = resolve_section(section)
        if key is None:
            raise UnknownSectionError(section)
        return key


def _flatten(groups) -> Tuple[FieldAddress, ...]:
    return tuple(a for g in groups for a in g)
