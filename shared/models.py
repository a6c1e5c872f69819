from __future__ import annotations
import base64
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

@dataclass(frozen=True)
class UserContext:
    identity: str = ""
    details: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.identity.strip() or self.details.strip())

@dataclass(frozen=True)
class DreamSubmission:
    text: str
    user_context: Optional[UserContext] = None

@dataclass(frozen=True)
class PlacementStyle:
    rotation: float
    translate_x: float
    animation_duration: float
    animation_delay: float

@dataclass(frozen=True)
class KeywordImage:
    url: str
    placement: PlacementStyle

@dataclass(frozen=True)
class AnalysisSection:
    title: str
    content: str

@dataclass(frozen=True)
class DreamAnalysis:
    visual_prompt: str
    title: str
    emotional_tone: str
    suggestion: str
    analysis_sections: Tuple[AnalysisSection, ...] = field(default_factory=tuple)

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)

@dataclass(frozen=True)
class GeneratedImage:
    data_uri: str
    placeholder: bool = False
    error: Optional[str] = None

    @classmethod
    def from_base64(cls, b64: str, mime: str = "image/png") -> "GeneratedImage":
        return cls(data_uri=f"data:{mime};base64,{b64}")

    @classmethod
    def from_bytes(cls, raw: bytes, mime: str, **kwargs) -> "GeneratedImage":
        return cls(data_uri=f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}", **kwargs)

    @property
    def mime_type(self) -> str:
        m = _DATA_URI.match(self.data_uri)
        return m.group("mime") if m else "application/octet-stream"

    def to_bytes(self) -> bytes:
        m = _DATA_URI.match(self.data_uri)
        if not m:
            raise ValueError("Not a base64 data URI")
        return base64.b64decode(m.group("data"))

    def download_filename(self, title: Optional[str] = None) -> str:
        slug = re.sub(r"\s+", "-", (title or "").strip()).lower() or "image"
        ext = ".svg" if self.mime_type == "image/svg+xml" else ".png"
        return f"dreamscape-weaver-{slug}{ext}"
