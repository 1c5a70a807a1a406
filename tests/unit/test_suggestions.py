"""Unit tests for SuggestionCoordinator on its own."""

import pytest

from conftest import ManualExecutor, SyncExecutor
from exceptions import SuggestionBusyError, SuggestionFailure
from suggestions import BUSY_LABEL, IDLE_LABEL, SuggestionCoordinator


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def applied():
    return []


def _coordinator(applied, executor, improve=str.upper, tokens=None, **kwargs):
    tokens = {} if tokens is None else tokens
    return SuggestionCoordinator(
        apply_edit=lambda control, text: applied.append((control, text)) or True,
        token_of=lambda control: tokens.get(control, 1),
        improve=improve,
        executor=executor,
        timeout=kwargs.pop("timeout", 30),
        **kwargs,
    )


@pytest.mark.unit
def test_busy_until_polled(applied):
    executor = ManualExecutor()
    c = _coordinator(applied, executor)

    c.request_improvement("summary", "draft")
    assert c.is_busy("summary")
    assert c.label("summary") == BUSY_LABEL
    assert c.poll() == []

    executor.finish_all()
    assert c.poll() == ["summary"]
    assert not c.is_busy("summary")
    assert c.label("summary") == IDLE_LABEL
    assert c.candidate("summary") == "DRAFT"
    assert applied == []


@pytest.mark.unit
def test_one_request_per_control(applied):
    c = _coordinator(applied, ManualExecutor())
    c.request_improvement("summary", "draft")
    with pytest.raises(SuggestionBusyError):
        c.request_improvement("summary", "draft again")
    c.request_improvement("projects-0-description", "other control")
    assert c.is_busy("projects-0-description")


@pytest.mark.unit
def test_accept_applies_once(applied):
    c = _coordinator(applied, SyncExecutor())
    c.request_improvement("summary", "draft")
    c.poll()

    assert c.accept("summary")
    assert applied == [("summary", "DRAFT")]
    assert c.accept("summary") is False
    assert applied == [("summary", "DRAFT")]


@pytest.mark.unit
def test_dismiss_and_copy_never_apply(applied):
    c = _coordinator(applied, SyncExecutor())
    c.request_improvement("summary", "draft")
    c.poll()

    clipboard = []
    assert c.copy("summary", clipboard.append)
    assert clipboard == ["DRAFT"]
    c.dismiss("summary")
    assert c.candidate("summary") is None
    assert c.copy("summary", clipboard.append) is False
    assert applied == []


@pytest.mark.unit
def test_failure_is_reported_and_retry_allowed(applied):
    def broken(text):
        raise ConnectionError("service down")

    c = _coordinator(applied, SyncExecutor(), improve=broken)
    c.request_improvement("summary", "draft")
    c.poll()

    error = c.error("summary")
    assert isinstance(error, SuggestionFailure)
    assert isinstance(error.cause, ConnectionError)
    assert not c.is_busy("summary")
    assert c.accept("summary") is False

    c.improve = str.title
    c.request_improvement("summary", "draft")
    c.poll()
    assert c.candidate("summary") == "Draft"


@pytest.mark.unit
def test_empty_answer_is_a_failure(applied):
    c = _coordinator(applied, SyncExecutor(), improve=lambda text: "")
    c.request_improvement("summary", "draft")
    c.poll()
    assert c.error("summary") is not None


@pytest.mark.unit
def test_timeout(applied):
    clock = Clock()
    c = _coordinator(applied, ManualExecutor(), timeout=10, clock=clock)
    c.request_improvement("summary", "draft")

    clock.now = 11
    assert c.poll() == ["summary"]
    assert isinstance(c.error("summary").cause, TimeoutError)


@pytest.mark.unit
def test_completion_for_dead_control_is_dropped(applied):
    executor = ManualExecutor()
    tokens = {}
    c = _coordinator(applied, executor, tokens=tokens)
    c.request_improvement("workExperience-3-description", "draft")
    tokens["workExperience-3-description"] = None
    executor.finish_all()

    assert c.poll() == []
    assert c.get("workExperience-3-description") is None


@pytest.mark.unit
def test_reset_drops_late_completions(applied):
    executor = ManualExecutor()
    c = _coordinator(applied, executor)
    c.request_improvement("summary", "draft")
    c.reset()
    executor.finish_all()

    assert c.poll() == []
    assert c.candidate("summary") is None
    assert not c.has_pending()


@pytest.mark.unit
def test_answer_for_a_reissued_control_is_not_applied(applied):
    tokens = {"projects-1-description": 4}
    c = _coordinator(applied, SyncExecutor(), tokens=tokens)
    c.request_improvement("projects-1-description", "desc B")

    # another entry now sits at the same ordinal
    tokens["projects-1-description"] = 5
    assert c.poll() == []
    assert c.accept("projects-1-description") is False
    assert applied == []


@pytest.mark.unit
def test_ready_candidate_is_not_applied_after_reissue(applied):
    tokens = {"summary": 1}
    c = _coordinator(applied, SyncExecutor(), tokens=tokens)
    c.request_improvement("summary", "draft")
    c.poll()

    tokens["summary"] = 2
    assert c.accept("summary") is False
    assert applied == []


@pytest.mark.unit
def test_no_request_for_a_missing_control(applied):
    c = _coordinator(applied, SyncExecutor(), tokens={"skills-9-skill": None})
    assert c.request_improvement("skills-9-skill", "x") is None
    assert c.get("skills-9-skill") is None


@pytest.mark.unit
def test_discard_section(applied):
    c = _coordinator(applied, ManualExecutor())
    c.request_improvement("projects-0-description", "a")
    c.request_improvement("workExperience-0-description", "b")

    c.discard_section("projects")

    assert c.get("projects-0-description") is None
    assert c.is_busy("workExperience-0-description")
