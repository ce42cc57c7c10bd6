"""Progress and token-usage reporting for the generation pipeline.

The pipeline publishes two kinds of events:

- stage status transitions (``update_progress(stage, status)``)
- token usage of every LLM call (``on_token_usage(cost)``)

Hosts subscribe by passing one or more PipelineObserver instances. Events for
different stages may interleave because the style branches run concurrently;
within a single stage the legal sequence is
``pending -> in-progress -> complete | error``.

Example:
    tracker = ProgressTracker()
    reporter = ProgressReporter(tracker, CallbackObserver(update_progress=print))
    article = await ArticlePipeline(reporter=reporter).generate(request)
    print(tracker.summary().total_cost)
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from .models import ProgressStatus, TokenCost, TokenUsageSummary
from .pricing import summarize_token_usage

logger = logging.getLogger(__name__)


class Stage:
    """Well-known progress stage keys."""

    WEB_SEARCH = "web-search"
    GENERATION_ACADEMIC = "generation-academic"
    GENERATION_CREATIVE = "generation-creative"
    GENERATION_TECHNICAL = "generation-technical"
    ACADEMIC_VERIFICATION = "academic-verification"
    CREATIVE_VERIFICATION = "creative-verification"
    TECHNICAL_VERIFICATION = "technical-verification"
    GENERATION_COMPLETE = "generation-complete"
    VERIFICATION_COMPLETE = "verification-complete"
    FINAL_GENERATION = "final-generation"


# Statuses each status may be followed by, within one stage
_ALLOWED_TRANSITIONS: Dict[Optional[ProgressStatus], set] = {
    None: {ProgressStatus.PENDING, ProgressStatus.IN_PROGRESS, ProgressStatus.COMPLETE},
    ProgressStatus.PENDING: {ProgressStatus.PENDING, ProgressStatus.IN_PROGRESS},
    ProgressStatus.IN_PROGRESS: {ProgressStatus.COMPLETE, ProgressStatus.ERROR},
    ProgressStatus.COMPLETE: {ProgressStatus.COMPLETE},
    ProgressStatus.ERROR: set(),
}


class PipelineObserver:
    """Receives pipeline events. Subclasses override what they need."""

    def update_progress(self, stage: str, status: ProgressStatus) -> None:
        pass

    def on_token_usage(self, cost: TokenCost) -> None:
        pass


class CallbackObserver(PipelineObserver):
    """Adapts two plain callables to the observer interface."""

    def __init__(
        self,
        update_progress: Optional[Callable[[str, ProgressStatus], None]] = None,
        on_token_usage: Optional[Callable[[TokenCost], None]] = None,
    ):
        self._update_progress = update_progress
        self._on_token_usage = on_token_usage

    def update_progress(self, stage: str, status: ProgressStatus) -> None:
        if self._update_progress:
            self._update_progress(stage, status)

    def on_token_usage(self, cost: TokenCost) -> None:
        if self._on_token_usage:
            self._on_token_usage(cost)


class ProgressTracker(PipelineObserver):
    """Records stage histories and token usage.

    Safe to update from overlapping completions.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._history: Dict[str, List[ProgressStatus]] = {}
        self._token_usages: List[TokenCost] = []

    def update_progress(self, stage: str, status: ProgressStatus) -> None:
        status = ProgressStatus(status)
        with self._lock:
            history = self._history.setdefault(stage, [])
            previous = history[-1] if history else None
            if status not in _ALLOWED_TRANSITIONS[previous]:
                prev_label = previous.value if previous else "start"
                logger.warning(f"Unexpected progress transition for {stage}: {prev_label} -> {status.value}")
            history.append(status)

    def on_token_usage(self, cost: TokenCost) -> None:
        with self._lock:
            self._token_usages.append(cost)

    def history(self, stage: str) -> List[ProgressStatus]:
        """Get every status a stage has gone through, in order."""
        with self._lock:
            return list(self._history.get(stage, []))

    def status(self, stage: str) -> Optional[ProgressStatus]:
        """Get the current status of a stage, or None if never reported."""
        with self._lock:
            history = self._history.get(stage)
            return history[-1] if history else None

    def snapshot(self) -> Dict[str, List[ProgressStatus]]:
        """Get a copy of all stage histories."""
        with self._lock:
            return {stage: list(history) for stage, history in self._history.items()}

    @property
    def token_usages(self) -> List[TokenCost]:
        with self._lock:
            return list(self._token_usages)

    def summary(self) -> TokenUsageSummary:
        """Summarize the token usage recorded so far."""
        return summarize_token_usage(self.token_usages)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
            self._token_usages.clear()


class ProgressReporter(PipelineObserver):
    """Publishes each event to every subscribed observer."""

    def __init__(self, *observers: PipelineObserver):
        self.observers: List[PipelineObserver] = list(observers)

    def subscribe(self, observer: PipelineObserver) -> None:
        self.observers.append(observer)

    def update_progress(self, stage: str, status: ProgressStatus) -> None:
        logger.debug(f"Stage {stage}: {ProgressStatus(status).value}")
        for observer in self.observers:
            observer.update_progress(stage, status)

    def on_token_usage(self, cost: TokenCost) -> None:
        for observer in self.observers:
            observer.on_token_usage(cost)
