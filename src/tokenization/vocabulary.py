"""
GPT-2/GPT-3 vocabulary assets.

A vocabulary is made of three static assets:
- characters.json: byte (0-255) -> printable character
- encoder.json: token string -> integer id
- vocab.bpe: ordered merge rules, one whitespace-separated pair per line

The merge rule order defines the merge rank and must never be re-sorted.
"""

import json
import logging
import regex as re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

CHARACTERS_FILE = "characters.json"
ENCODER_FILE = "encoder.json"
MERGES_FILE = "vocab.bpe"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_WHITESPACE = re.compile(r"\s+")


class VocabularyLoadError(RuntimeError):
    """Raised when a vocabulary asset is missing, unreadable or malformed."""


class VocabularyInconsistencyError(LookupError):
    """Raised when a merged subword has no entry in the token-id table."""

    def __init__(self, piece: str):
        self.piece = piece
        super().__init__(
            f"Subword {piece!r} not found in vocabulary. "
            "The merge rules and the token-id table do not belong together."
        )


@lru_cache()
def bytes_to_unicode() -> Dict[int, str]:
    """
    Standard GPT-2 mapping from bytes to printable Unicode characters.

    Printable Latin-1 bytes map to themselves; the remaining bytes (control
    characters and whitespace) are shifted to code points from 256 upwards.
    The insertion order matches the id order of the 256 base tokens in the
    GPT-2 encoder.

    Returns:
        Dict[int, str]: Mapping from byte (0-255) to Unicode character
    """
    bs = (
        list(range(ord("!"), ord("~") + 1))
        + list(range(ord("¡"), ord("¬") + 1))
        + list(range(ord("®"), ord("ÿ") + 1))
    )
    cs = bs[:]
    n = 0

    for b in range(2**8):
        if b not in bs:
            bs.append(b)
            cs.append(2**8 + n)
            n += 1

    return dict(zip(bs, [chr(c) for c in cs]))


def _as_text(raw: Union[str, bytes], name: str) -> str:
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise VocabularyLoadError(f"{name} is not valid UTF-8: {e}") from e
    return raw


def parse_byte_table(raw: Union[str, bytes]) -> Dict[int, str]:
    """
    Parse the byte -> character table.

    Accepts a JSON object keyed by the decimal byte value or a JSON list of
    256 characters.
    """
    try:
        data = json.loads(_as_text(raw, CHARACTERS_FILE))
    except json.JSONDecodeError as e:
        raise VocabularyLoadError(f"{CHARACTERS_FILE} is not valid JSON: {e}") from e

    if isinstance(data, list):
        items = list(enumerate(data))
    elif isinstance(data, dict):
        try:
            items = [(int(k), v) for k, v in data.items()]
        except ValueError as e:
            raise VocabularyLoadError(f"{CHARACTERS_FILE} has a non-numeric key: {e}") from e
    else:
        raise VocabularyLoadError(f"{CHARACTERS_FILE} must be a JSON object or list")

    table = {}
    for byte, char in items:
        if not 0 <= byte <= 255 or not isinstance(char, str) or len(char) != 1:
            raise VocabularyLoadError(f"Invalid byte table entry: {byte!r} -> {char!r}")
        table[byte] = char

    if len(table) != 256:
        raise VocabularyLoadError(f"Byte table must cover all 256 bytes, got {len(table)}")
    if len(set(table.values())) != 256:
        raise VocabularyLoadError("Byte table must map bytes to distinct characters")

    return table


def parse_encoder(raw: Union[str, bytes]) -> Dict[str, int]:
    """Parse the token string -> id table."""
    try:
        data = json.loads(_as_text(raw, ENCODER_FILE))
    except json.JSONDecodeError as e:
        raise VocabularyLoadError(f"{ENCODER_FILE} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise VocabularyLoadError(f"{ENCODER_FILE} must be a JSON object")

    for token, token_id in data.items():
        if not isinstance(token_id, int) or isinstance(token_id, bool):
            raise VocabularyLoadError(f"Token {token!r} has a non-integer id: {token_id!r}")

    return data


def parse_merges(raw: Union[str, bytes]) -> List[Tuple[str, str]]:
    """
    Parse the ordered merge rules.

    The first line is a header and is skipped. Lines with fewer than two
    items (blank lines included) are ignored and do not take a rank.
    """
    lines = _LINE_BREAK.split(_as_text(raw, MERGES_FILE))

    merges = []
    for line in lines[1:]:
        parts = [p for p in _WHITESPACE.split(line) if p]
        if len(parts) >= 2:
            merges.append((parts[0], parts[1]))

    return merges


@dataclass(frozen=True, eq=False)
class Vocabulary:
    """
    Immutable byte-level BPE vocabulary.

    Attributes:
        byte_to_char: byte value -> alphabet character
        char_to_byte: alphabet character -> byte value
        merge_ranks: (symbol, symbol) -> rank, lower merges earlier
        encoder: token string -> id
        decoder: id -> token string
    """

    byte_to_char: Mapping[int, str]
    merge_ranks: Mapping[Tuple[str, str], int]
    encoder: Mapping[str, int]
    char_to_byte: Mapping[str, int] = field(init=False)
    decoder: Mapping[int, str] = field(init=False)

    def __post_init__(self):
        # frozen dataclass: assign through object.__setattr__
        object.__setattr__(self, "byte_to_char", MappingProxyType(dict(self.byte_to_char)))
        object.__setattr__(self, "merge_ranks", MappingProxyType(dict(self.merge_ranks)))
        object.__setattr__(self, "encoder", MappingProxyType(dict(self.encoder)))
        object.__setattr__(
            self, "char_to_byte", MappingProxyType({v: k for k, v in self.byte_to_char.items()})
        )
        object.__setattr__(
            self, "decoder", MappingProxyType({v: k for k, v in self.encoder.items()})
        )

    @classmethod
    def from_merges(
        cls,
        merges: Iterable[Tuple[str, str]],
        encoder: Mapping[str, int],
        byte_to_char: Optional[Mapping[int, str]] = None,
    ) -> "Vocabulary":
        """Build a vocabulary, ranking merges in the given order."""
        # A repeated pair keeps the rank of its last occurrence
        ranks = {tuple(pair): rank for rank, pair in enumerate(merges)}

        return cls(
            byte_to_char=byte_to_char if byte_to_char is not None else bytes_to_unicode(),
            merge_ranks=ranks,
            encoder=encoder,
        )

    @classmethod
    def from_assets(
        cls,
        encoder: Union[str, bytes],
        merges: Union[str, bytes],
        characters: Optional[Union[str, bytes]] = None,
    ) -> "Vocabulary":
        """
        Build a vocabulary from the decoded contents of the three assets.

        Args:
            encoder: Contents of encoder.json
            merges: Contents of vocab.bpe
            characters: Contents of characters.json (default: GPT-2 byte table)
        """
        byte_to_char = parse_byte_table(characters) if characters is not None else None
        return cls.from_merges(parse_merges(merges), parse_encoder(encoder), byte_to_char)

    @classmethod
    def from_directory(cls, path: Union[str, Path]) -> "Vocabulary":
        """
        Load a vocabulary from a directory holding the asset files.

        characters.json is optional; encoder.json and vocab.bpe are required.
        """
        path = Path(path)

        if not path.is_dir():
            raise VocabularyLoadError(f"Vocabulary directory not found: {path}")

        def read(name: str, required: bool = True) -> Optional[bytes]:
            file_path = path / name
            if not file_path.exists():
                if required:
                    raise VocabularyLoadError(f"Missing vocabulary asset: {file_path}")
                return None
            try:
                return file_path.read_bytes()
            except OSError as e:
                raise VocabularyLoadError(f"Cannot read {file_path}: {e}") from e

        vocabulary = cls.from_assets(
            encoder=read(ENCODER_FILE),
            merges=read(MERGES_FILE),
            characters=read(CHARACTERS_FILE, required=False),
        )

        logger.info(
            "Loaded vocabulary from %s: %d tokens, %d merges",
            path,
            len(vocabulary.encoder),
            len(vocabulary.merge_ranks),
        )
        return vocabulary

    def rank(self, first: str, second: str) -> Optional[int]:
        """Merge rank of a symbol pair, or None when the pair never merges."""
        return self.merge_ranks.get((first, second))

    def __len__(self) -> int:
        return len(self.encoder)


@lru_cache(maxsize=None)
def _load_cached(path: str) -> Vocabulary:
    return Vocabulary.from_directory(path)


def get_vocabulary(path: Union[str, Path]) -> Vocabulary:
    """Load a vocabulary once per directory and share it process-wide."""
    return _load_cached(str(Path(path).resolve()))
