# tests/test_pipeline_state.py
import pytest

from webcivil_scraper.models_api.scrape import ScrapeResult, DocumentTypeEnum
from webcivil_scraper.services.pipeline_state import (
    PipelineState,
    PipelineTracker,
    InvalidTransitionError,
    apply_terminal_state,
    exit_code_for,
)

HAPPY_PATH = [
    PipelineState.SEARCHING,
    PipelineState.CASE_FOUND,
    PipelineState.EXTRACTING_INFO,
    PipelineState.LOCATING_DOCS,
    PipelineState.DOCS_FOUND,
    PipelineState.DOWNLOADING,
    PipelineState.DONE,
]


def _result():
    return ScrapeResult(index_number="606529/2023", county="Suffolk", case_dir="/tmp/trex-pdfs/606529-2023")


def test_happy_path_is_legal():
    tracker = PipelineTracker("[test]")
    for state in HAPPY_PATH:
        tracker.advance(state)
    assert tracker.is_terminal
    assert tracker.history == [PipelineState.CONNECTING] + HAPPY_PATH


def test_skipping_a_state_is_rejected():
    tracker = PipelineTracker()
    tracker.advance(PipelineState.SEARCHING)
    with pytest.raises(InvalidTransitionError):
        tracker.advance(PipelineState.LOCATING_DOCS)
    assert tracker.state is PipelineState.SEARCHING


def test_nothing_follows_a_terminal_state():
    tracker = PipelineTracker()
    tracker.advance(PipelineState.SEARCHING)
    tracker.advance(PipelineState.CHALLENGE)
    with pytest.raises(InvalidTransitionError):
        tracker.advance(PipelineState.CASE_FOUND)
    with pytest.raises(InvalidTransitionError):
        tracker.advance(PipelineState.FAILED)


@pytest.mark.parametrize("steps", [[], HAPPY_PATH[:1], HAPPY_PATH[:4], HAPPY_PATH[:6]])
def test_failed_reachable_from_any_running_state(steps):
    tracker = PipelineTracker()
    for state in steps:
        tracker.advance(state)
    tracker.advance(PipelineState.FAILED)
    assert tracker.is_terminal


@pytest.mark.parametrize("state,error", [
    (PipelineState.CHALLENGE, "hCaptcha detected"),
    (PipelineState.NOT_FOUND, "No case found"),
    (PipelineState.NO_DOCS_BUTTON, "No eFiled docs button"),
    (PipelineState.NO_TARGET_DOCS, "No target documents found"),
])
def test_terminal_failure_errors(state, error):
    result = apply_terminal_state(_result(), state)
    assert result.success is False
    assert result.error == error
    assert exit_code_for(result) == 1


def test_done_success_depends_on_downloads():
    empty = apply_terminal_state(_result(), PipelineState.DONE)
    assert empty.success is False
    assert empty.error is None

    result = _result()
    result.pdfs[DocumentTypeEnum.NOTICE] = "/tmp/trex-pdfs/606529-2023/notice.pdf"
    apply_terminal_state(result, PipelineState.DONE)
    assert result.success is True
    assert exit_code_for(result) == 0
