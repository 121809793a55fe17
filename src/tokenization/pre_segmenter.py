"""
Pre-segmentation of raw text into the units BPE merges operate on.

Merge ranks and token ids of GPT-2/GPT-3 vocabularies are defined relative to
these exact boundaries, so the pattern must not be changed.
"""

import regex as re
from typing import Iterator, List


# Contractions, letter runs, digit runs, symbol runs (each with an optional
# leading space), trailing whitespace, then any other whitespace run.
SEGMENT_PATTERN = re.compile(
    r"""'s|'t|'re|'ve|'m|'ll|'d| ?\p{L}+| ?\p{N}+| ?[^\s\p{L}\p{N}]+|\s+(?!\S)|\s+"""
)


def segment(text: str) -> Iterator[str]:
    """
    Lazily split text into pre-segments.

    The segments cover the input exactly once, in order. Calling again
    restarts from the beginning.

    Example:
        >>> list(segment("I'll go  now"))
        ['I', "'ll", ' go', ' ', ' now']
    """
    for match in SEGMENT_PATTERN.finditer(text):
        yield match.group(0)


def segment_list(text: str) -> List[str]:
    """Split text into a list of pre-segments."""
    return SEGMENT_PATTERN.findall(text)
