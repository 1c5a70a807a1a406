"""
"Help Me Improve" suggestions for long text fields.

A request runs on a worker thread so the form stays usable. Nothing the
worker produces touches the record: `poll()` runs on the UI thread, turns
finished requests into candidates, and only `accept()` writes a candidate
back, through the same edit path a keystroke takes.
"""
from __future__ import annotations
import logging
import time
from concurrent.futures import CancelledError, Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Optional

import config
from exceptions import SuggestionBusyError, SuggestionFailure

log = logging.getLogger(__name__)

IDLE_LABEL = "Help Me Improve"
BUSY_LABEL = "Thinking..."

BUSY = "busy"
READY = "ready"
FAILED = "failed"


@dataclass
class Suggestion:
    control: str
    original: str
    generation: int
    token: Hashable = None
    future: Optional[Future] = None
    started: float = 0.0
    status: str = BUSY
    candidate: str = ""
    error: Optional[SuggestionFailure] = None


class SuggestionCoordinator:
    def __init__(self,
                 apply_edit: Callable[[str, str], bool],
                 token_of: Callable[[str], Optional[Hashable]],
                 improve: Callable[[str], str] | None = None,
                 executor: Executor | None = None,
                 timeout: float | None = None,
                 clock: Callable[[], float] = time.monotonic):
        if improve is None:
            from llm_client import improve_text as improve
        self.apply_edit = apply_edit
        self.token_of = token_of
        self.improve = improve
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="suggest")
        self.timeout = config.SUGGESTION_TIMEOUT if timeout is None else timeout
        self.clock = clock
        self.generation = 0
        self._pending: Dict[str, Suggestion] = {}

    # ── state ───────────────────────────────────────────────
    def get(self, control: str) -> Optional[Suggestion]:
        return self._pending.get(control)

    def is_busy(self, control: str) -> bool:
        s = self._pending.get(control)
        return s is not None and s.status == BUSY

    def has_pending(self) -> bool:
        return any(s.status == BUSY for s in self._pending.values())

    def label(self, control: str) -> str:
        return BUSY_LABEL if self.is_busy(control) else IDLE_LABEL

    def candidate(self, control: str) -> Optional[str]:
        s = self._pending.get(control)
        return s.candidate if s is not None and s.status == READY else None

    def error(self, control: str) -> Optional[SuggestionFailure]:
        s = self._pending.get(control)
        return s.error if s is not None and s.status == FAILED else None

    # ── requests ────────────────────────────────────────────
    def request_improvement(self, control: str, current_text: str) -> Optional[Suggestion]:
        """
        Start a request for `control`; a control can have one request in flight.

        The control's current token is kept with the request. If the token has
        changed by the time the answer arrives (the entry was removed or
        shifted, the form was reset), the answer is dropped.
        """
        if self.is_busy(control):
            raise SuggestionBusyError(control)
        token = self.token_of(control)
        if token is None:
            log.debug("Not requesting suggestion for %s: no such control", control)
            return None
        s = Suggestion(control=control, original=current_text, generation=self.generation,
                       token=token, started=self.clock())
        self._pending[control] = s
        log.info("Requesting suggestion for %s", control)
        s.future = self.executor.submit(self.improve, current_text)
        return s

    def poll(self) -> List[str]:
        """Resolve finished or timed-out requests. Returns the controls that changed."""
        changed = []
        for control, s in list(self._pending.items()):
            if s.status != BUSY:
                continue
            if not self._is_current(s):
                log.debug("Dropping suggestion for %s: control is gone", control)
                s.future.cancel()
                del self._pending[control]
                continue
            if s.future.done():
                self._resolve(s)
                changed.append(control)
            elif self.clock() - s.started > self.timeout:
                s.future.cancel()
                self._fail(s, TimeoutError(f"no answer after {self.timeout:g}s"))
                changed.append(control)
        return changed

    def wait(self, control: str, timeout: float | None = None) -> Optional[Suggestion]:
        """Block until `control`'s request finishes, then resolve it."""
        s = self._pending.get(control)
        if s is None or s.status != BUSY:
            return s
        try:
            s.future.exception(timeout=self.timeout if timeout is None else timeout)
        except FutureTimeout:
            s.started = float("-inf")
        except CancelledError:
            log.debug("Suggestion for %s was cancelled", control)
        self.poll()
        return self._pending.get(control)

    def _is_current(self, s: Suggestion) -> bool:
        return s.generation == self.generation and self.token_of(s.control) == s.token

    def _resolve(self, s: Suggestion) -> None:
        try:
            text = s.future.result()
        except Exception as e:
            self._fail(s, e)
            return
        if not text:
            self._fail(s, ValueError("empty suggestion"))
            return
        s.candidate = text
        s.status = READY

    def _fail(self, s: Suggestion, cause: BaseException) -> None:
        log.warning("Suggestion for %s failed: %s", s.control, cause)
        s.error = SuggestionFailure(s.control, cause)
        s.status = FAILED

    # ── resolution ──────────────────────────────────────────
    def accept(self, control: str) -> bool:
        """Write the candidate into its control. False if there is nothing to apply."""
        s = self._pending.get(control)
        if s is None or s.status != READY:
            return False
        del self._pending[control]
        if not self._is_current(s):
            log.debug("Not applying suggestion for %s: control is gone", control)
            return False
        return self.apply_edit(control, s.candidate)

    def dismiss(self, control: str) -> None:
        s = self._pending.pop(control, None)
        if s is not None and s.status == BUSY:
            s.future.cancel()

    def copy(self, control: str, writer: Callable[[str], None]) -> bool:
        """Hand the candidate to `writer` (the clipboard). The record is not touched."""
        text = self.candidate(control)
        if text is None:
            return False
        writer(text)
        return True

    def reset(self) -> None:
        """Forget every request; late completions from before the reset are dropped."""
        for s in self._pending.values():
            if s.future is not None:
                s.future.cancel()
        self._pending.clear()
        self.generation += 1

    def discard_section(self, section: str) -> None:
        """Forget every request on entries of `section` (after a structural change)."""
        prefix = f"{section}-"
        for control in [c for c in self._pending if c.startswith(prefix)]:
            self.dismiss(control)
