"""
Generation and validation of on-disk photo filenames.
"""

import random
import re

_FILENAME_PATTERN = re.compile(r"^photo-\d{1,20}-\d{1,10}\.jpg$")
_SUFFIX_CEILING = 10**9


def generate_filename(timestamp_ms: int, rng: random.Random | None = None) -> str:
    suffix = (rng or random).randint(0, _SUFFIX_CEILING)
    return f"photo-{timestamp_ms}-{suffix}.jpg"


def is_generated_filename(filename: str) -> bool:
    """
    True only for names of the form photo-<timestamp>-<suffix>.jpg.
    Anything else, including names carrying path segments, is rejected.
    """
    return _FILENAME_PATTERN.fullmatch(filename) is not None
