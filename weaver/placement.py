from __future__ import annotations
import random
from typing import List, Optional
from shared.models import KeywordImage, PlacementStyle

FULL_CIRCLE = 360.0
BASE_DISTANCE = 100.0
DISTANCE_JITTER = 40.0
MIN_DURATION = 4.0
DURATION_JITTER = 4.0
MAX_DELAY = 0.5

def segment_width(total: int) -> float:
    return FULL_CIRCLE / total

def base_angle(index: int, total: int) -> float:
    return index * segment_width(total)

def variance_for(total: int) -> float:
    # few images spread wide, so keep them close to their segment centre
    return 0.2 if total <= 3 else 0.4

def placement_style(index: int, total: int, rng: Optional[random.Random] = None) -> PlacementStyle:
    """Place image ``index`` of ``total`` inside its own slice of the circle.

    The rotation stays within ``segment_width * variance / 2`` of the slice's
    base angle, so neighbouring images never trade places.
    """
    rng = rng or random
    width = segment_width(total)
    offset = (rng.random() - 0.5) * (width * variance_for(total))
    return PlacementStyle(
        rotation=base_angle(index, total) + offset,
        translate_x=BASE_DISTANCE + rng.random() * DISTANCE_JITTER,
        animation_duration=MIN_DURATION + rng.random() * DURATION_JITTER,
        animation_delay=rng.random() * MAX_DELAY,
    )

def place_images(urls: List[str], rng: Optional[random.Random] = None) -> List[KeywordImage]:
    total = len(urls)
    return [KeywordImage(url=u, placement=placement_style(i, total, rng)) for i, u in enumerate(urls)]
