"""
Pytest configuration file.

This file is automatically loaded by pytest and configures the test environment.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to Python path so we can import src modules
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from src.tokenization.bpe_tokenizer import GPTTokenizer  # noqa: E402
from src.tokenization.vocabulary import Vocabulary, bytes_to_unicode  # noqa: E402


# Small merge table in rank order. Merged tokens get id 256 + rank, the 256
# byte tokens keep their GPT-2 ids (e.g. "Ġ" = 220).
TEST_MERGES = [
    ("Ġ", "t"),
    ("h", "e"),
    ("i", "n"),
    ("Ġt", "he"),
    ("Ġ", "w"),
    ("o", "r"),
    ("l", "d"),
    ("Ġw", "or"),
    ("Ġwor", "ld"),
    ("l", "l"),
    ("he", "ll"),
    ("hell", "o"),
    ("a", "a"),
    ("Ġ", "Ġ"),
]


def build_test_encoder():
    encoder = {char: idx for idx, char in enumerate(bytes_to_unicode().values())}
    for rank, (first, second) in enumerate(TEST_MERGES):
        encoder[first + second] = 256 + rank
    return encoder


@pytest.fixture
def test_merges():
    return list(TEST_MERGES)


@pytest.fixture
def test_vocabulary():
    """GPT-2-ordered byte vocabulary with a handful of merges."""
    return Vocabulary.from_merges(TEST_MERGES, build_test_encoder())


@pytest.fixture
def tokenizer(test_vocabulary):
    return GPTTokenizer(test_vocabulary)


@pytest.fixture
def vocab_dir(tmp_path):
    """Directory holding the test vocabulary as asset files."""
    import json

    byte_table = bytes_to_unicode()
    (tmp_path / "characters.json").write_text(
        json.dumps({str(b): c for b, c in byte_table.items()}, ensure_ascii=False),
        encoding="utf-8",
    )
    (tmp_path / "encoder.json").write_text(
        json.dumps(build_test_encoder(), ensure_ascii=False), encoding="utf-8"
    )
    lines = ["#version: 0.2"] + [f"{first} {second}" for first, second in TEST_MERGES]
    (tmp_path / "vocab.bpe").write_text("\n".join(lines) + "\n", encoding="utf-8")

    return tmp_path
