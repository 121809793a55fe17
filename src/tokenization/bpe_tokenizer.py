"""
Byte-Level BPE Tokenizer for GPT-2/GPT-3 vocabularies.

Turns text, or a framed sequence of chat messages, into the exact token
sequence a GPT-2/GPT-3 style model sees:
- Pre-segmentation with the reference regex pattern
- Byte-level transcoding (no unknown characters)
- Rank-guided BPE merging with an LRU cache
- Lookup of every subword in the token-id table

Technical References:
    - Sennrich et al., 2016. "Neural Machine Translation of Rare Words with
      Subword Units" ACL 2016 (BPE foundation)
    - Radford et al., 2019. "Language Models are Unsupervised Multitask Learners"
      (Byte-level BPE approach)
"""

from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, NamedTuple, Union

from .bpe_merger import BPEMerger
from .byte_transcoder import transcode
from .pre_segmenter import segment
from .vocabulary import Vocabulary, VocabularyInconsistencyError, get_vocabulary

if TYPE_CHECKING:
    from ..chat.messages import ChatMessage


MESSAGE_START = "<|im_start|>"
MESSAGE_END = "<|im_end|>"


class Token(NamedTuple):
    """One subword and its id."""

    subword: str
    id: int


class TokenSequence(list):
    """
    Ordered sequence of tokens.

    Order follows the original text and duplicates are kept, so
    ``len(sequence)`` is the token count.
    """

    @property
    def ids(self) -> List[int]:
        return [token.id for token in self]

    @property
    def subwords(self) -> List[str]:
        return [token.subword for token in self]


def frame_message(message: "ChatMessage") -> str:
    """
    Render one chat message in the framing used for token counting.

    System messages start with ``<|im_start|>system``; other roles with
    ``<|im_start|>{role} name={name}``.
    """
    if message.role == "system":
        header = "system"
    else:
        header = f"{message.role} name={message.name or ''}"

    return "\n".join([f"{MESSAGE_START}{header}", message.content, MESSAGE_END])


class GPTTokenizer:
    """
    Byte-level BPE tokenizer over a fixed, pre-built vocabulary.

    Args:
        vocabulary: Loaded vocabulary (shared, never mutated)
        cache_maxsize: Maximum number of memoized pre-segments (default: 50000)

    Example:
        >>> tokenizer = GPTTokenizer.from_directory("storage/openai_tokenizer")
        >>> tokenizer.tokenize(" ")
        [Token(subword='Ġ', id=220)]
    """

    def __init__(self, vocabulary: Vocabulary, cache_maxsize: int = 50000):
        self.vocabulary = vocabulary
        self.merger = BPEMerger(vocabulary.merge_ranks, cache_maxsize=cache_maxsize)

    @classmethod
    def from_directory(cls, path: Union[str, Path], **kwargs) -> "GPTTokenizer":
        """
        Create a tokenizer from a directory of vocabulary assets.

        The vocabulary is loaded once per directory and shared.
        """
        return cls(get_vocabulary(path), **kwargs)

    def _merge_segment(self, segment_text: str) -> str:
        merged = self.merger.cached(segment_text)
        if merged is None:
            symbols = transcode(segment_text, self.vocabulary.byte_to_char)
            merged = self.merger.merge(symbols, key=segment_text)
        return merged

    def tokenize(self, text: str) -> TokenSequence:
        """
        Tokenize text into an ordered sequence of (subword, id) pairs.

        Args:
            text: Text to tokenize

        Returns:
            TokenSequence, empty for empty text

        Raises:
            VocabularyInconsistencyError: a merged subword is not in the vocabulary
        """
        tokens = TokenSequence()
        if not text:
            return tokens

        encoder = self.vocabulary.encoder
        for segment_text in segment(text):
            for piece in self._merge_segment(segment_text).split(" "):
                if piece not in encoder:
                    raise VocabularyInconsistencyError(piece)
                tokens.append(Token(piece, encoder[piece]))

        return tokens

    def tokenize_messages(self, messages: Iterable["ChatMessage"]) -> TokenSequence:
        """
        Tokenize chat messages in their framed form.

        Messages are framed one by one (see ``frame_message``), joined with
        newlines and tokenized as one text.
        """
        return self.tokenize("\n".join(frame_message(message) for message in messages))

    def encode(self, text: str) -> List[int]:
        """Encode text to token ids."""
        return self.tokenize(text).ids

    def decode(self, token_ids: Iterable[int]) -> str:
        """
        Decode token ids back to text.

        Unknown ids are skipped; invalid UTF-8 is replaced.
        """
        decoder = self.vocabulary.decoder
        char_to_byte = self.vocabulary.char_to_byte

        text = "".join(decoder[token_id] for token_id in token_ids if token_id in decoder)
        byte_array = bytearray(char_to_byte[c] for c in text if c in char_to_byte)
        return byte_array.decode("utf-8", errors="replace")

    def count(self, text: str) -> int:
        """Number of tokens in text."""
        return len(self.tokenize(text))

    def count_messages(self, messages: Iterable["ChatMessage"]) -> int:
        """Number of tokens in framed chat messages."""
        return len(self.tokenize_messages(messages))

    def __len__(self) -> int:
        """Return vocabulary size."""
        return len(self.vocabulary)

    def __repr__(self) -> str:
        return (
            f"GPTTokenizer(vocab_size={len(self.vocabulary)}, "
            f"merges={len(self.vocabulary.merge_ranks)})"
        )
