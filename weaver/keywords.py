from __future__ import annotations
import re
from typing import List

MAX_KEYWORDS = 5
MIN_LENGTH = 4

_STRIP = re.compile(r"[.,]")

def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """Lowercased words of 4+ characters from the dream, first occurrence wins, at most ``limit``."""
    words = _STRIP.sub("", (text or "").lower()).split()
    out: List[str] = []
    for w in words:
        if len(w) < MIN_LENGTH or w in out:
            continue
        out.append(w)
        if len(out) == limit:
            break
    return out
