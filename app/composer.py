"""
Single mutation pipeline for the CV form.

Every user action is a command. `Composer.dispatch` applies it and then,
in this order, re-renders the preview and saves the record, before it
returns. Components share the one RecordStore owned here.
"""
from __future__ import annotations
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

import config
from collection_index import CollectionIndexManager, FieldAddress
from field_binder import FieldBinder
from persistence import PersistenceGateway
from preview_renderer import STYLES, render
from record_store import RecordStore
from schema_cv import resolve_section
from suggestions import SuggestionCoordinator

log = logging.getLogger(__name__)


# ── commands ────────────────────────────────────────────────
@dataclass(frozen=True)
class EditField:
    key: str            # wire address, e.g. "workExperience-0-title" or "email"
    value: str


@dataclass(frozen=True)
class AddEntry:
    section: str


@dataclass(frozen=True)
class RemoveEntry:
    section: str
    ordinal: int


@dataclass(frozen=True)
class SetStyle:
    style_id: str


@dataclass(frozen=True)
class SetProfilePicture:
    data_url: str


@dataclass(frozen=True)
class AcceptSuggestion:
    control: str


Command = Union[EditField, AddEntry, RemoveEntry, SetStyle, SetProfilePicture, AcceptSuggestion]


class Composer:
    def __init__(self,
                 gateway: PersistenceGateway | None = None,
                 style_id: str | None = None,
                 improve: Callable[[str], str] | None = None,
                 executor=None):
        self.gateway = gateway or PersistenceGateway(config.STORAGE_PATH, config.STORAGE_KEY)
        self.style_id = style_id or config.DEFAULT_STYLE
        self.store = RecordStore(self.gateway.load())
        self.index = CollectionIndexManager()
        self.binder = FieldBinder(self.store, self.index, on_mutation=self._after_mutation)
        self.suggestions = SuggestionCoordinator(
            apply_edit=self.binder.write_external,
            token_of=self._token,
            improve=improve,
            executor=executor,
        )
        self.generation = 0
        self.save_count = 0
        self.preview = render(self.store.get(), self.style_id)

    # ── pipeline ────────────────────────────────────────────
    def dispatch(self, command: Command) -> str:
        """Apply one command; the preview and storage are current when this returns."""
        if isinstance(command, EditField):
            self.binder.handle_input(command.key, command.value)
        elif isinstance(command, AddEntry):
            self.binder.add_entry(command.section)
        elif isinstance(command, RemoveEntry):
            if self.binder.remove_entry(command.section, command.ordinal):
                self.suggestions.discard_section(resolve_section(command.section))
            else:
                self._after_mutation(False)
        elif isinstance(command, SetStyle):
            self.style_id = command.style_id if command.style_id in STYLES else "modern"
            self._after_mutation(True)
        elif isinstance(command, SetProfilePicture):
            self.binder.write_external("profilePicture", command.data_url)
        elif isinstance(command, AcceptSuggestion):
            if not self.suggestions.accept(command.control):
                self._after_mutation(False)
        else:
            raise TypeError(f"Unknown command: {command!r}")
        return self.preview

    def _after_mutation(self, changed: bool) -> None:
        self.preview = render(self.store.get(), self.style_id)
        if changed:
            self.persist()

    def persist(self) -> None:
        if self.gateway.save(self.store.get()):
            self.save_count += 1
        self.store.mark_clean()

    # ── session ─────────────────────────────────────────────
    def reset(self, record: Optional[Dict] = None) -> str:
        """Replace the record wholesale (reload) and rebuild every section."""
        self.store.replace(record)
        self.generation += 1
        log.info("Record replaced; rebuilding the form (session %d)", self.generation)
        self.suggestions.reset()
        self.binder.render_all()
        self._after_mutation(True)
        return self.preview

    def reload(self) -> str:
        return self.reset(self.gateway.load())

    def record(self):
        return self.store.get()

    def fingerprint(self) -> str:
        """Hash of the record and style; equal fingerprints render identical documents."""
        payload = json.dumps([self.store.snapshot(), self.style_id], sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def request_suggestion(self, control: str):
        """Ask for an improved version of the text currently stored at `control`."""
        address = FieldAddress.parse(control)
        if address is None:
            return None
        if address.is_scalar:
            text = self.store.get_scalar(address.field)
        else:
            text = self.store.get_entry_field(address.section, address.ordinal, address.field)
        return self.suggestions.request_improvement(control, text)

    def _token(self, control: str):
        """Epoch of the descriptor currently at `control`, or None if there is none."""
        address = FieldAddress.parse(control)
        descriptor = self.binder.descriptor(address) if address else None
        return descriptor.epoch if descriptor else None
