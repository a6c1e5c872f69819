"""Weave cycle state and its pure reducer.

Every screen the weaver can show is one ``Phase``. ``reduce`` is the only way
to move between them: it takes the current ``WeaveCycle`` and an event and
returns the next ``WeaveCycle`` without touching either input.

Events produced by an in-flight cycle carry that cycle's id. Once a newer
cycle has started, they no longer match ``WeaveCycle.cycle_id`` and are
dropped, so late responses can never overwrite a newer cycle.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, Union
from shared.models import DreamAnalysis, DreamSubmission, GeneratedImage, KeywordImage, UserContext

DEFAULT_ERROR = "The dream slipped away... Please try again."


class Phase(str, Enum):
    IDLE = "idle"
    REFINING = "refining"
    GATHERING = "gathering"
    ANALYZING = "analyzing"
    PAINTING = "painting"
    COMPLETE = "complete"


IN_FLIGHT = (Phase.GATHERING, Phase.ANALYZING, Phase.PAINTING)

STEP_LABELS = ("Sleep", "Interpret", "Visualize", "Awaken")

_STEP_INDEX = {
    Phase.IDLE: 0,
    Phase.REFINING: 0,
    Phase.GATHERING: 1,
    Phase.ANALYZING: 1,
    Phase.PAINTING: 2,
    Phase.COMPLETE: 3,
}

_LOADING_MESSAGES = {
    Phase.GATHERING: "Gathering dream fragments...",
    Phase.ANALYZING: "Consulting the Oracle...",
    Phase.PAINTING: "Manifesting the Vision...",
}

RESULT_VIEWS = ("visual", "analysis")


def step_index(phase: Phase) -> int:
    return _STEP_INDEX[phase]


def step_label(phase: Phase) -> str:
    return STEP_LABELS[step_index(phase)]


def loading_message(phase: Phase) -> Optional[str]:
    return _LOADING_MESSAGES.get(phase)


class InvalidTransition(Exception):
    def __init__(self, phase: Phase, event: object):
        super().__init__(f"{type(event).__name__} is not allowed while {phase.value}")
        self.phase = phase
        self.event = event


@dataclass(frozen=True)
class WeaveCycle:
    phase: Phase = Phase.IDLE
    cycle_id: int = 0
    submission: Optional[DreamSubmission] = None
    user_context: UserContext = field(default_factory=UserContext)
    keyword_images: Tuple[KeywordImage, ...] = ()
    analysis: Optional[DreamAnalysis] = None
    image: Optional[GeneratedImage] = None
    error: Optional[str] = None
    result_view: str = "visual"

    @property
    def busy(self) -> bool:
        return self.phase in IN_FLIGHT


# --- events -----------------------------------------------------------------

@dataclass(frozen=True)
class OpenRefinement:
    pass


@dataclass(frozen=True)
class CancelRefinement:
    pass


@dataclass(frozen=True)
class UpdateContext:
    user_context: UserContext


@dataclass(frozen=True)
class StartWeave:
    cycle_id: int
    submission: DreamSubmission


@dataclass(frozen=True)
class KeywordImagesGathered:
    cycle_id: int
    images: Tuple[KeywordImage, ...]


@dataclass(frozen=True)
class AnalysisReady:
    cycle_id: int
    analysis: DreamAnalysis


@dataclass(frozen=True)
class ImagePainted:
    cycle_id: int
    image: GeneratedImage


@dataclass(frozen=True)
class WeaveFailed:
    cycle_id: int
    message: str = DEFAULT_ERROR


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class ShowResult:
    view: str


Event = Union[
    OpenRefinement, CancelRefinement, UpdateContext, StartWeave, KeywordImagesGathered,
    AnalysisReady, ImagePainted, WeaveFailed, Reset, ShowResult,
]

_CYCLE_EVENTS = (KeywordImagesGathered, AnalysisReady, ImagePainted, WeaveFailed)


def _clear_results(state: WeaveCycle) -> WeaveCycle:
    return replace(state, keyword_images=(), analysis=None, image=None, error=None, result_view="visual")


def reduce(state: WeaveCycle, event: Event) -> WeaveCycle:
    if isinstance(event, _CYCLE_EVENTS) and event.cycle_id != state.cycle_id:
        return state

    phase = state.phase

    if isinstance(event, OpenRefinement):
        if phase not in (Phase.IDLE, Phase.COMPLETE):
            raise InvalidTransition(phase, event)
        return replace(state, phase=Phase.REFINING)

    if isinstance(event, CancelRefinement):
        if phase is not Phase.REFINING:
            raise InvalidTransition(phase, event)
        return replace(state, phase=Phase.IDLE)

    if isinstance(event, UpdateContext):
        if state.busy:
            raise InvalidTransition(phase, event)
        return replace(state, user_context=event.user_context)

    if isinstance(event, StartWeave):
        if event.cycle_id <= state.cycle_id:
            raise InvalidTransition(phase, event)
        # a new submission supersedes whatever cycle was running
        return replace(_clear_results(state), phase=Phase.GATHERING, cycle_id=event.cycle_id,
                       submission=event.submission)

    if isinstance(event, KeywordImagesGathered):
        if phase is not Phase.GATHERING:
            raise InvalidTransition(phase, event)
        return replace(state, phase=Phase.ANALYZING, keyword_images=tuple(event.images))

    if isinstance(event, AnalysisReady):
        if phase is not Phase.ANALYZING:
            raise InvalidTransition(phase, event)
        return replace(state, phase=Phase.PAINTING, analysis=event.analysis)

    if isinstance(event, ImagePainted):
        if phase is not Phase.PAINTING or state.analysis is None:
            raise InvalidTransition(phase, event)
        return replace(state, phase=Phase.COMPLETE, image=event.image, result_view="visual")

    if isinstance(event, WeaveFailed):
        if phase not in IN_FLIGHT:
            raise InvalidTransition(phase, event)
        return replace(_clear_results(state), phase=Phase.IDLE, error=event.message or DEFAULT_ERROR)

    if isinstance(event, Reset):
        # bumping the id orphans anything still in flight; the next dream starts with a blank context
        return replace(_clear_results(state), phase=Phase.IDLE, cycle_id=state.cycle_id + 1,
                       user_context=UserContext())

    if isinstance(event, ShowResult):
        if phase is not Phase.COMPLETE or event.view not in RESULT_VIEWS:
            raise InvalidTransition(phase, event)
        return replace(state, result_view=event.view)

    raise TypeError(f"Unknown event {event!r}")
