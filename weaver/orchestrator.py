from __future__ import annotations
import asyncio
import random
from typing import Callable, List, Optional
from loguru import logger
from shared.config import settings
from shared.errors import DreamscapeError
from shared.models import DreamAnalysis, DreamSubmission, GeneratedImage, KeywordImage, UserContext
from .analysis import decode_artifact, parse_analysis, placeholder_image
from .keywords import extract_keywords
from .placement import place_images
from .prompts import build_analysis_prompt, build_paint_prompt
from .proxy_client import ProxyClient
from .state import (
    DEFAULT_ERROR, AnalysisReady, CancelRefinement, Event, ImagePainted, KeywordImagesGathered,
    OpenRefinement, Reset, ShowResult, StartWeave, UpdateContext, WeaveCycle, WeaveFailed, reduce,
)

SYNTHESIS_POLICIES = ("placeholder", "fatal")

Listener = Callable[[WeaveCycle], None]


class WeaveCancelled(Exception):
    pass


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise WeaveCancelled()


class DreamWeaver:
    """Drives one weave cycle at a time through the proxy layer.

    ``state`` is replaced, never mutated, on every applied event; listeners
    registered with ``subscribe`` see each new value.

    Synthesis failures follow ``synthesis_failure``: ``"placeholder"`` still
    completes the cycle with a placeholder image, ``"fatal"`` aborts it.
    """

    def __init__(
        self,
        proxy: ProxyClient,
        *,
        synthesis_failure: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        policy = (synthesis_failure or settings.synthesis_failure).lower()
        if policy not in SYNTHESIS_POLICIES:
            raise ValueError(f"synthesis_failure must be one of {SYNTHESIS_POLICIES}, got '{policy}'")
        self.proxy = proxy
        self.synthesis_failure = policy
        self.rng = rng
        self._state = WeaveCycle()
        self._token: Optional[CancellationToken] = None
        self._listeners: List[Listener] = []

    @property
    def state(self) -> WeaveCycle:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def dispatch(self, event: Event) -> WeaveCycle:
        new = reduce(self._state, event)
        if new is not self._state:
            self._state = new
            for listener in list(self._listeners):
                listener(new)
        return new

    # --- user actions --------------------------------------------------------

    @staticmethod
    def can_weave(text: Optional[str]) -> bool:
        return bool(text and text.strip())

    def open_refinement(self) -> WeaveCycle:
        return self.dispatch(OpenRefinement())

    def cancel_refinement(self) -> WeaveCycle:
        return self.dispatch(CancelRefinement())

    def update_context(self, identity: str = "", details: str = "") -> WeaveCycle:
        return self.dispatch(UpdateContext(UserContext(identity=identity, details=details)))

    def show(self, view: str) -> WeaveCycle:
        return self.dispatch(ShowResult(view))

    def reset(self) -> WeaveCycle:
        self._cancel_in_flight()
        return self.dispatch(Reset())

    def _cancel_in_flight(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None

    async def weave(self, text: str, user_context: Optional[UserContext] = None) -> WeaveCycle:
        """Run gather, analyze and paint for ``text``; returns the resulting state.

        Blank text is a no-op. Starting a weave while another is in flight
        supersedes it: the older cycle's results are discarded.
        """
        if not self.can_weave(text):
            return self._state

        ctx = user_context if user_context is not None else self._state.user_context
        submission = DreamSubmission(text=text.strip(), user_context=None if ctx.is_empty else ctx)

        self._cancel_in_flight()
        token = self._token = CancellationToken()
        cycle_id = self._state.cycle_id + 1
        self.dispatch(StartWeave(cycle_id, submission))
        logger.info("Weave cycle {} started", cycle_id)

        try:
            images = await self._gather(submission.text)
            token.raise_if_cancelled()
            self.dispatch(KeywordImagesGathered(cycle_id, tuple(images)))

            analysis = await self._analyze(submission)
            token.raise_if_cancelled()
            self.dispatch(AnalysisReady(cycle_id, analysis))

            image = await self._paint(analysis)
            token.raise_if_cancelled()
            self.dispatch(ImagePainted(cycle_id, image))
            logger.info("Weave cycle {} complete: '{}'", cycle_id, analysis.title)
        except WeaveCancelled:
            logger.info("Weave cycle {} superseded, discarding its results", cycle_id)
        except DreamscapeError as e:
            logger.error("Weave cycle {} failed: {}", cycle_id, e)
            if not token.cancelled:
                self.dispatch(WeaveFailed(cycle_id, str(e) or DEFAULT_ERROR))
        except (Exception, asyncio.CancelledError):
            logger.exception("Weave cycle {} aborted", cycle_id)
            if not token.cancelled:
                self.dispatch(WeaveFailed(cycle_id, DEFAULT_ERROR))
            raise
        finally:
            if self._token is token:
                self._token = None
        return self._state

    # --- stages ----------------------------------------------------------------

    async def _gather(self, text: str) -> List[KeywordImage]:
        keywords = extract_keywords(text)
        if not keywords:
            return []
        try:
            urls = await self.proxy.search_images(keywords)
        except Exception as e:
            # keyword images are decoration; losing them never fails the cycle
            logger.warning("Keyword images unavailable: {}", e)
            return []
        return place_images(urls, self.rng)

    async def _analyze(self, submission: DreamSubmission) -> DreamAnalysis:
        body = await self.proxy.analyze(build_analysis_prompt(submission))
        return parse_analysis(body)

    async def _paint(self, analysis: DreamAnalysis) -> GeneratedImage:
        prompt = build_paint_prompt(analysis.visual_prompt)
        try:
            return decode_artifact(await self.proxy.synthesize_image(prompt))
        except DreamscapeError as e:
            if self.synthesis_failure == "fatal":
                raise
            logger.warning("Painting failed, using a placeholder: {}", e)
            return placeholder_image(analysis.title, analysis.emotional_tone, str(e))
