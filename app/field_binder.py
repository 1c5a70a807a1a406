"""
Form field descriptors bound to record addresses.

The binder turns record entries into descriptors the surface can draw and
routes edits coming back from those descriptors into the RecordStore.
Structural changes go through the CollectionIndexManager first; a removal
rebuilds every descriptor of the section and bumps the section's epoch so
that any descriptor handed out before the removal becomes inert.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from collection_index import CollectionIndexManager, FieldAddress, IndexPlan
from record_store import RecordStore
from schema_cv import (
    PERSONAL_FIELDS,
    SECTION_FIELDS,
    SECTIONS,
    SUMMARY_FIELD,
    SUMMARY_KEY,
    FieldSpec,
    resolve_section,
)

log = logging.getLogger(__name__)

SINGLE_LINE = "text"
MULTI_LINE = "textarea"

# called after every mutation the binder performs; the flag says whether the record changed
MutationHook = Callable[[bool], None]


@dataclass(frozen=True, eq=False)
class FieldDescriptor:
    address: FieldAddress
    value: str
    placeholder: str
    widget: str
    epoch: int
    on_change: Callable[[str], bool]
    revision: int = 0

    @property
    def key(self) -> str:
        """Widget key: changes on every rebuild and every write that did not come from the widget."""
        return f"{self.address.wire}@{self.epoch}.{self.revision}"

    def same_as(self, other: "FieldDescriptor") -> bool:
        """Behavioural equality: same address, value and presentation."""
        return (self.address, self.value, self.placeholder, self.widget) == (
            other.address, other.value, other.placeholder, other.widget)


@dataclass(frozen=True, eq=False)
class EntryGroup:
    section: str
    ordinal: int
    fields: Tuple[FieldDescriptor, ...]
    on_remove: Callable[[], bool]

    @property
    def key(self) -> str:
        return f"{self.section}-{self.ordinal}@{self.fields[0].epoch if self.fields else 0}"


class FieldBinder:
    def __init__(self, store: RecordStore, index: CollectionIndexManager,
                 on_mutation: Optional[MutationHook] = None):
        self.store = store
        self.index = index
        self.on_mutation = on_mutation or (lambda changed: None)
        self._groups: Dict[str, Tuple[EntryGroup, ...]] = {s: () for s in SECTIONS}
        self._epochs: Dict[str, int] = {s: 0 for s in SECTIONS}
        self._scalar_epoch = 0
        self._revisions: Dict[str, int] = {}
        self.render_all()

    # ── building ────────────────────────────────────────────
    def render(self, section: str) -> Tuple[EntryGroup, ...]:
        """Rebuild every descriptor of `section` from the record."""
        key = resolve_section(section) or section
        plan = self.index.plan_sync(key, self.store.length(key))
        return self._apply_rebuild(plan)

    def render_all(self) -> None:
        """Rebuild every section and retire every scalar descriptor handed out so far."""
        self._scalar_epoch += 1
        self._revisions.clear()
        for section in SECTIONS:
            self.render(section)

    def groups(self, section: str) -> Tuple[EntryGroup, ...]:
        return self._groups[resolve_section(section) or section]

    def epoch(self, section: str) -> int:
        return self._epochs[resolve_section(section) or section]

    def scalar_descriptors(self) -> List[FieldDescriptor]:
        specs = PERSONAL_FIELDS + [SUMMARY_FIELD]
        return [self._scalar_descriptor(spec) for spec in specs]

    def descriptor(self, address: FieldAddress) -> Optional[FieldDescriptor]:
        """Live descriptor at `address`, or None when the address is stale."""
        if address.is_scalar:
            if address.field == SUMMARY_KEY:
                return self._scalar_descriptor(SUMMARY_FIELD)
            spec = next((s for s in PERSONAL_FIELDS + [SUMMARY_FIELD] if s.name == address.field), None)
            # profilePicture has no text control but is still addressable
            return self._scalar_descriptor(spec or FieldSpec(address.field, ""))
        if not self.index.contains(address):
            return None
        group = self._groups[address.section][address.ordinal]
        return next(d for d in group.fields if d.address == address)

    def _scalar_descriptor(self, spec: FieldSpec) -> FieldDescriptor:
        address = FieldAddress(field=spec.name)
        return FieldDescriptor(
            address=address,
            value=self.store.get_scalar(spec.name),
            placeholder=spec.placeholder,
            widget=MULTI_LINE if spec.multiline else SINGLE_LINE,
            epoch=self._scalar_epoch,
            on_change=lambda value, k=spec.name, e=self._scalar_epoch: self._set_scalar(k, e, value),
            revision=self._revisions.get(address.wire, 0),
        )

    def _build_group(self, section: str, ordinal: int, epoch: int) -> EntryGroup:
        fields = tuple(
            FieldDescriptor(
                address=FieldAddress(field=spec.name, section=section, ordinal=ordinal),
                value=self.store.get_entry_field(section, ordinal, spec.name),
                placeholder=spec.placeholder,
                widget=MULTI_LINE if spec.multiline else SINGLE_LINE,
                epoch=epoch,
                on_change=lambda value, f=spec.name: self._set_entry_field(section, ordinal, f, epoch, value),
                revision=self._revisions.get(f"{section}-{ordinal}-{spec.name}", 0),
            )
            for spec in SECTION_FIELDS[section]
        )
        return EntryGroup(
            section=section,
            ordinal=ordinal,
            fields=fields,
            on_remove=lambda: self._remove(section, ordinal, epoch),
        )

    def _apply_rebuild(self, plan: IndexPlan) -> Tuple[EntryGroup, ...]:
        epoch = self._epochs[plan.section] + 1
        groups = tuple(self._build_group(plan.section, i, epoch) for i in range(plan.length))
        # swap everything in one step so no half-built section is ever visible
        self.index.commit(plan)
        self._groups[plan.section] = groups
        self._epochs[plan.section] = epoch
        return groups

    # ── edits ───────────────────────────────────────────────
    def handle_input(self, key: str, value: str) -> bool:
        """Route an edit addressed by wire key (e.g. `skills-2-skill`)."""
        address = FieldAddress.parse(key)
        descriptor = self.descriptor(address) if address else None
        if descriptor is None:
            log.debug("Dropping edit for stale address %r", key)
            self.on_mutation(False)
            return False
        return descriptor.on_change(value)

    def write_external(self, key: str, value: str) -> bool:
        """
        Write a value that did not come from the field's own widget (an accepted
        suggestion, an uploaded picture). The field's descriptor is reissued
        with a new key so the widget picks up the new value.
        """
        address = FieldAddress.parse(key)
        descriptor = self.descriptor(address) if address else None
        if descriptor is None:
            log.debug("Dropping write for stale address %r", key)
            self.on_mutation(False)
            return False
        changed = descriptor.on_change(value)
        if changed:
            wire = descriptor.address.wire
            self._revisions[wire] = self._revisions.get(wire, 0) + 1
            if not address.is_scalar:
                self._refresh_group(address.section, address.ordinal)
        return changed

    def _refresh_group(self, section: str, ordinal: int) -> None:
        groups = list(self._groups[section])
        groups[ordinal] = self._build_group(section, ordinal, self._epochs[section])
        self._groups[section] = tuple(groups)

    def _set_scalar(self, key: str, epoch: int, value: str) -> bool:
        if epoch != self._scalar_epoch:
            log.debug("Dropping edit from retired descriptor %s", key)
            self.on_mutation(False)
            return False
        changed = self.store.set_scalar(key, value)
        self.on_mutation(changed)
        return changed

    def _set_entry_field(self, section: str, ordinal: int, field: str, epoch: int, value: str) -> bool:
        if epoch != self._epochs[section]:
            log.debug("Dropping edit from retired descriptor %s-%s-%s", section, ordinal, field)
            self.on_mutation(False)
            return False
        changed = self.store.set_entry_field(section, ordinal, field, value)
        self.on_mutation(changed)
        return changed

    # ── structure ───────────────────────────────────────────
    def add_entry(self, section: str) -> EntryGroup:
        """Append a blank entry and build exactly one new group for it."""
        plan = self.index.plan_append(section)
        ordinal = self.store.append_entry(plan.section)
        epoch = self._epochs[plan.section]
        group = self._build_group(plan.section, ordinal, epoch)
        self.index.commit(plan)
        self._groups[plan.section] = self._groups[plan.section] + (group,)
        self.on_mutation(True)
        return group

    def remove_entry(self, section: str, ordinal: int) -> bool:
        key = resolve_section(section) or section
        return self._remove(key, ordinal, self._epochs.get(key))

    def _remove(self, section: str, ordinal: int, epoch: Optional[int]) -> bool:
        if epoch != self._epochs.get(section):
            log.debug("Dropping removal from retired control %s-%s", section, ordinal)
            return False
        plan = self.index.plan_remove(section, ordinal)
        if plan is None:
            log.debug("Dropping removal of %s-%s: no such entry", section, ordinal)
            return False
        self.store.remove_entry(section, ordinal)
        self._apply_rebuild(plan)
        self.on_mutation(True)
        return True
