"""Tests for the weave cycle reducer."""

import pytest

from shared.models import (
    AnalysisSection,
    DreamAnalysis,
    DreamSubmission,
    GeneratedImage,
    KeywordImage,
    PlacementStyle,
    UserContext,
)
from weaver.state import (
    DEFAULT_ERROR,
    AnalysisReady,
    CancelRefinement,
    ImagePainted,
    InvalidTransition,
    KeywordImagesGathered,
    OpenRefinement,
    Phase,
    Reset,
    ShowResult,
    StartWeave,
    UpdateContext,
    WeaveCycle,
    WeaveFailed,
    loading_message,
    reduce,
    step_index,
    step_label,
)

SUBMISSION = DreamSubmission(text="flying over a golden city")
ANALYSIS = DreamAnalysis(
    visual_prompt="golden city at dusk",
    title="Gilded Flight",
    emotional_tone="Awe",
    suggestion="Rise.",
    analysis_sections=tuple(AnalysisSection(f"Section {i}", "...") for i in range(1, 6)),
)
IMAGE = GeneratedImage.from_base64("aGVsbG8=")
KEYWORD_IMAGES = (KeywordImage("https://img/1.jpg", PlacementStyle(0.0, 110.0, 5.0, 0.1)),)


def run(state, *events):
    for event in events:
        state = reduce(state, event)
    return state


@pytest.fixture
def painting():
    return run(
        WeaveCycle(),
        StartWeave(1, SUBMISSION),
        KeywordImagesGathered(1, KEYWORD_IMAGES),
        AnalysisReady(1, ANALYSIS),
    )


class TestForwardPath:

    def test_initial_state(self):
        state = WeaveCycle()
        assert state.phase is Phase.IDLE
        assert state.analysis is None
        assert not state.busy

    def test_full_cycle(self, painting):
        assert painting.phase is Phase.PAINTING
        assert painting.analysis == ANALYSIS
        assert painting.keyword_images == KEYWORD_IMAGES

        done = reduce(painting, ImagePainted(1, IMAGE))
        assert done.phase is Phase.COMPLETE
        assert done.image == IMAGE
        assert done.result_view == "visual"

    def test_reducer_does_not_touch_its_input(self, painting):
        reduce(painting, ImagePainted(1, IMAGE))
        assert painting.phase is Phase.PAINTING
        assert painting.image is None

    def test_refinement_round_trip(self):
        state = run(WeaveCycle(), OpenRefinement(), UpdateContext(UserContext("Female", "red cloak")))
        assert state.phase is Phase.REFINING
        assert state.user_context.identity == "Female"

        assert reduce(state, CancelRefinement()).phase is Phase.IDLE
        assert reduce(state, StartWeave(1, SUBMISSION)).phase is Phase.GATHERING

    def test_new_submission_discards_previous_results(self, painting):
        done = reduce(painting, ImagePainted(1, IMAGE))
        again = reduce(done, StartWeave(2, DreamSubmission(text="falling through clouds")))
        assert again.phase is Phase.GATHERING
        assert again.analysis is None
        assert again.image is None
        assert again.keyword_images == ()

    def test_result_view_toggle(self, painting):
        done = reduce(painting, ImagePainted(1, IMAGE))
        assert reduce(done, ShowResult("analysis")).result_view == "analysis"


class TestFailures:

    @pytest.mark.parametrize("prefix", [1, 2, 3])
    def test_failure_returns_to_idle_and_clears_results(self, prefix):
        events = [StartWeave(1, SUBMISSION), KeywordImagesGathered(1, KEYWORD_IMAGES), AnalysisReady(1, ANALYSIS)]
        state = run(WeaveCycle(), *events[:prefix])
        failed = reduce(state, WeaveFailed(1, "Gemini API Error: 500"))
        assert failed.phase is Phase.IDLE
        assert failed.error == "Gemini API Error: 500"
        assert failed.analysis is None
        assert failed.keyword_images == ()

    def test_blank_message_falls_back(self):
        state = reduce(WeaveCycle(), StartWeave(1, SUBMISSION))
        assert reduce(state, WeaveFailed(1, "")).error == DEFAULT_ERROR

    def test_next_cycle_clears_error(self):
        state = run(WeaveCycle(), StartWeave(1, SUBMISSION), WeaveFailed(1, "boom"))
        assert reduce(state, StartWeave(2, SUBMISSION)).error is None


class TestStaleEvents:

    def test_events_from_superseded_cycle_are_dropped(self):
        state = run(WeaveCycle(), StartWeave(1, SUBMISSION), StartWeave(2, SUBMISSION))
        for stale in (
            KeywordImagesGathered(1, KEYWORD_IMAGES),
            AnalysisReady(1, ANALYSIS),
            ImagePainted(1, IMAGE),
            WeaveFailed(1, "late"),
        ):
            assert reduce(state, stale) is state

    def test_reset_orphans_in_flight_cycle(self):
        state = run(WeaveCycle(), StartWeave(1, SUBMISSION), Reset())
        assert state.phase is Phase.IDLE
        assert reduce(state, KeywordImagesGathered(1, KEYWORD_IMAGES)) is state

    def test_reset_forgets_the_dreamer_context(self):
        context = UserContext(identity="Female", details="wearing a red cloak")
        state = reduce(WeaveCycle(), UpdateContext(context))
        state = run(state, StartWeave(1, SUBMISSION), WeaveFailed(1, "boom"))
        assert state.user_context == context

        state = run(state, StartWeave(2, SUBMISSION), KeywordImagesGathered(2, KEYWORD_IMAGES),
                    AnalysisReady(2, ANALYSIS), ImagePainted(2, IMAGE), Reset())
        assert state.user_context == UserContext()

    def test_start_needs_a_fresh_cycle_id(self):
        state = reduce(WeaveCycle(), StartWeave(1, SUBMISSION))
        with pytest.raises(InvalidTransition):
            reduce(state, StartWeave(1, SUBMISSION))


class TestInvalidTransitions:

    def test_no_skipping_phases(self):
        state = reduce(WeaveCycle(), StartWeave(1, SUBMISSION))
        with pytest.raises(InvalidTransition):
            reduce(state, AnalysisReady(1, ANALYSIS))
        with pytest.raises(InvalidTransition):
            reduce(state, ImagePainted(1, IMAGE))

    def test_no_refinement_while_busy(self):
        state = reduce(WeaveCycle(), StartWeave(1, SUBMISSION))
        with pytest.raises(InvalidTransition):
            reduce(state, OpenRefinement())
        with pytest.raises(InvalidTransition):
            reduce(state, UpdateContext(UserContext("Male")))

    def test_failure_outside_a_cycle(self):
        with pytest.raises(InvalidTransition):
            reduce(WeaveCycle(), WeaveFailed(0, "nope"))

    def test_result_view_only_when_complete(self, painting):
        with pytest.raises(InvalidTransition):
            reduce(painting, ShowResult("analysis"))


class TestPresentationHelpers:

    @pytest.mark.parametrize("phase,expected", [
        (Phase.IDLE, 0),
        (Phase.REFINING, 0),
        (Phase.GATHERING, 1),
        (Phase.ANALYZING, 1),
        (Phase.PAINTING, 2),
        (Phase.COMPLETE, 3),
    ])
    def test_step_index(self, phase, expected):
        assert step_index(phase) == expected

    def test_step_labels(self):
        assert step_label(Phase.REFINING) == "Sleep"
        assert step_label(Phase.ANALYZING) == "Interpret"
        assert step_label(Phase.PAINTING) == "Visualize"
        assert step_label(Phase.COMPLETE) == "Awaken"

    def test_loading_messages(self):
        assert loading_message(Phase.GATHERING) == "Gathering dream fragments..."
        assert loading_message(Phase.ANALYZING) == "Consulting the Oracle..."
        assert loading_message(Phase.PAINTING) == "Manifesting the Vision..."
        assert loading_message(Phase.IDLE) is None
