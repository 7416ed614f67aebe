# webcivil_scraper/services/pipeline_state.py
import enum
import logging
from typing import Dict, List, Set

from webcivil_scraper.models_api.scrape import ScrapeResult

logger = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    CONNECTING = "connecting"
    SEARCHING = "searching"
    CHALLENGE = "challenge"
    NOT_FOUND = "not_found"
    CASE_FOUND = "case_found"
    EXTRACTING_INFO = "extracting_info"
    LOCATING_DOCS = "locating_docs"
    NO_DOCS_BUTTON = "no_docs_button"
    NO_TARGET_DOCS = "no_target_docs"
    DOCS_FOUND = "docs_found"
    DOWNLOADING = "downloading"
    DONE = "done"
    FAILED = "failed"  # unhandled exception at any state


ALLOWED_TRANSITIONS: Dict[PipelineState, Set[PipelineState]] = {
    PipelineState.CONNECTING: {PipelineState.SEARCHING},
    PipelineState.SEARCHING: {PipelineState.CHALLENGE, PipelineState.NOT_FOUND, PipelineState.CASE_FOUND},
    PipelineState.CASE_FOUND: {PipelineState.EXTRACTING_INFO},
    PipelineState.EXTRACTING_INFO: {PipelineState.LOCATING_DOCS},
    PipelineState.LOCATING_DOCS: {PipelineState.NO_DOCS_BUTTON, PipelineState.NO_TARGET_DOCS, PipelineState.DOCS_FOUND},
    PipelineState.DOCS_FOUND: {PipelineState.DOWNLOADING},
    PipelineState.DOWNLOADING: {PipelineState.DONE},
}

TERMINAL_STATES: Set[PipelineState] = {
    PipelineState.CHALLENGE,
    PipelineState.NOT_FOUND,
    PipelineState.NO_DOCS_BUTTON,
    PipelineState.NO_TARGET_DOCS,
    PipelineState.DONE,
    PipelineState.FAILED,
}

# error value recorded on the result for each terminal failure state
TERMINAL_ERRORS: Dict[PipelineState, str] = {
    PipelineState.CHALLENGE: "hCaptcha detected",
    PipelineState.NOT_FOUND: "No case found",
    PipelineState.NO_DOCS_BUTTON: "No eFiled docs button",
    PipelineState.NO_TARGET_DOCS: "No target documents found",
}

# step text shown on the progress dashboard for each terminal failure state
TERMINAL_STATUS_STEPS: Dict[PipelineState, str] = {
    PipelineState.CHALLENGE: "hCaptcha detected - needs solving",
    PipelineState.NOT_FOUND: "No case found",
    PipelineState.NO_DOCS_BUTTON: "No eFiled documents found",
    PipelineState.NO_TARGET_DOCS: "No Judgment/Notice found",
}


class InvalidTransitionError(RuntimeError):
    pass


class PipelineTracker:
    def __init__(self, log_prefix: str = ""):
        self.state = PipelineState.CONNECTING
        self.history: List[PipelineState] = [self.state]
        self.log_prefix = log_prefix

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, new_state: PipelineState) -> PipelineState:
        # FAILED is reachable from every non-terminal state
        allowed = ALLOWED_TRANSITIONS.get(self.state, set())
        if new_state is not PipelineState.FAILED and new_state not in allowed:
            raise InvalidTransitionError(f"Illegal pipeline transition {self.state.value} -> {new_state.value}")
        if new_state is PipelineState.FAILED and self.is_terminal:
            raise InvalidTransitionError(f"Pipeline already finished in state {self.state.value}")
        logger.debug(f"{self.log_prefix} Pipeline {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)
        return new_state


def apply_terminal_state(result: ScrapeResult, state: PipelineState) -> ScrapeResult:
    """Fills success/error on the result for the state the run ended in."""
    if state is PipelineState.DONE:
        result.success = len(result.pdfs) > 0
    elif state in TERMINAL_ERRORS:
        result.success = False
        result.error = TERMINAL_ERRORS[state]
    else:
        result.success = False
    return result


def exit_code_for(result: ScrapeResult) -> int:
    return 0 if result.success else 1
