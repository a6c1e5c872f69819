"""Shared fixtures: settings overrides, canned provider bodies and a fake proxy."""

import json
from dataclasses import replace

import pytest

from shared.config import settings

SETTINGS_MODULES = (
    "agents.dream_analyze",
    "agents.stock_images",
    "agents.dream_paint",
    "shared.http",
    "api.main",
)

SECTION_TITLES = [
    "1. Dreams Often Reflect Your Current Emotional State",
    "2. Golden City = Aspiration",
    "3. Flying = Freedom",
    "4. Why this scene appeared last night",
    "5. What the dream actually indicates about you",
]


def analysis_payload(title="The Gilded Ascent", visual_prompt="a woman in a red cloak soaring over a golden city"):
    return {
        "visual_prompt": visual_prompt,
        "title": title,
        "emotional_tone": "Elation",
        "suggestion": "Give yourself room to rise this week.",
        "analysis_sections": [{"title": t, "content": f"Explanation {i}"} for i, t in enumerate(SECTION_TITLES, 1)],
    }


def gemini_body(payload):
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def artifact_body(b64="aGVsbG8="):
    return {"artifacts": [{"base64": b64, "seed": 42, "finishReason": "SUCCESS"}]}


@pytest.fixture
def configure(monkeypatch):
    """Swap the process settings seen by the proxy modules."""

    def _configure(**overrides):
        patched = replace(settings, **overrides)
        for module in SETTINGS_MODULES:
            monkeypatch.setattr(f"{module}.settings", patched)
        return patched

    return _configure


class FakeProxy:
    """Stands in for ProxyClient; each answer may be a value or an exception to raise."""

    def __init__(self, images=None, analysis=None, artifact=None):
        self.images = [] if images is None else images
        self.analysis = gemini_body(analysis_payload()) if analysis is None else analysis
        self.artifact = artifact_body() if artifact is None else artifact
        self.calls = []

    @staticmethod
    def _answer(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def search_images(self, keywords):
        self.calls.append(("search_images", list(keywords)))
        return self._answer(self.images)

    async def analyze(self, prompt):
        self.calls.append(("analyze", prompt))
        return self._answer(self.analysis)

    async def synthesize_image(self, prompt):
        self.calls.append(("synthesize_image", prompt))
        return self._answer(self.artifact)

    def called(self, name):
        return [args for call, args in self.calls if call == name]


@pytest.fixture
def fake_proxy():
    return FakeProxy()
