"""
Tokenization module.

Provides the byte-level BPE pipeline for GPT-2/GPT-3 vocabularies:
- Vocabulary loading and parsing
- Byte transcoding and pre-segmentation
- Rank-guided BPE merging
- Text and chat-message tokenization
"""

from .vocabulary import (
    Vocabulary,
    VocabularyLoadError,
    VocabularyInconsistencyError,
    bytes_to_unicode,
    get_vocabulary,
)

from .byte_transcoder import encode_bytes, decode_scalar, transcode
from .pre_segmenter import segment, segment_list
from .bpe_merger import BPEMerger

from .bpe_tokenizer import (
    GPTTokenizer,
    Token,
    TokenSequence,
    frame_message,
)

__all__ = [
    'Vocabulary',
    'VocabularyLoadError',
    'VocabularyInconsistencyError',
    'bytes_to_unicode',
    'get_vocabulary',
    'encode_bytes',
    'decode_scalar',
    'transcode',
    'segment',
    'segment_list',
    'BPEMerger',
    'GPTTokenizer',
    'Token',
    'TokenSequence',
    'frame_message',
]
