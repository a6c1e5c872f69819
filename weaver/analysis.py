from __future__ import annotations
import json
import re
from typing import Any, Dict, List
from xml.sax.saxutils import escape
from pydantic import BaseModel, Field, StrictStr, ValidationError
from shared.errors import AnalysisParseError, SynthesisError
from shared.models import AnalysisSection, DreamAnalysis, GeneratedImage

SECTION_COUNT = 5

_FENCE = re.compile(r"```json|```")


class SectionPayload(BaseModel):
    title: StrictStr
    content: StrictStr


class AnalysisPayload(BaseModel):
    """Shape the text model is asked to return."""

    visual_prompt: StrictStr = Field(min_length=1)
    title: StrictStr
    emotional_tone: StrictStr
    suggestion: StrictStr
    analysis_sections: List[SectionPayload] = Field(min_length=SECTION_COUNT, max_length=SECTION_COUNT)

    def to_analysis(self) -> DreamAnalysis:
        return DreamAnalysis(
            visual_prompt=self.visual_prompt,
            title=self.title,
            emotional_tone=self.emotional_tone,
            suggestion=self.suggestion,
            analysis_sections=tuple(AnalysisSection(s.title, s.content) for s in self.analysis_sections),
        )


def generated_text(body: Any) -> str:
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise AnalysisParseError("The oracle's answer was empty or malformed.") from e
    if not isinstance(text, str):
        raise AnalysisParseError("The oracle's answer was empty or malformed.")
    return text


def strip_fences(raw: str) -> str:
    return _FENCE.sub("", raw).strip()


def parse_analysis(body: Dict[str, Any]) -> DreamAnalysis:
    """Turn the relayed model response into a validated ``DreamAnalysis``.

    Raises:
        AnalysisParseError: missing text, invalid JSON or a schema violation.
    """
    text = strip_fences(generated_text(body))
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisParseError(f"The oracle's answer was not valid JSON: {e.msg}") from e
    try:
        return AnalysisPayload.model_validate(data).to_analysis()
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "root" for err in e.errors())
        raise AnalysisParseError(f"The oracle's answer did not match the expected shape ({fields}).") from e


def decode_artifact(body: Any) -> GeneratedImage:
    try:
        b64 = body["artifacts"][0]["base64"]
    except (KeyError, IndexError, TypeError) as e:
        raise SynthesisError("The dream could not be painted: no image was returned.") from e
    if not isinstance(b64, str) or not b64:
        raise SynthesisError("The dream could not be painted: no image was returned.")
    return GeneratedImage.from_base64(b64)


def placeholder_image(title: str, subtitle: str = "", error: str = "") -> GeneratedImage:
    t = escape(title or "Dreamscape Weaver")
    s = escape(subtitle[:80])
    svg = f"""<?xml version="1.0"?>
<svg xmlns="http://www.w3.org/2000/svg" width="1024" height="1024">
  <defs>
    <linearGradient id="g" x1="0" y1="0" x2="1" y2="1">
      <stop offset="0%" stop-color="#1e1b4b"/>
      <stop offset="100%" stop-color="#7c3aed"/>
    </linearGradient>
  </defs>
  <rect width="100%" height="100%" fill="url(#g)"/>
  <g fill="white" font-family="Georgia, serif" text-anchor="middle">
    <text x="512" y="480" font-size="56" font-style="italic">{t}</text>
    <text x="512" y="540" font-size="26" opacity="0.8">{s}</text>
  </g>
</svg>"""
    return GeneratedImage.from_bytes(svg.encode("utf-8"), "image/svg+xml", placeholder=True, error=error or None)
