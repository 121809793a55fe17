"""
Rank-guided BPE merging of a single pre-segment.

The merger repeatedly picks the adjacent symbol pair with the lowest merge
rank and merges every non-overlapping occurrence of it, until no ranked pair
remains. Results are memoized in a bounded LRU cache that lives as long as
the merger; the value for a key never changes, so concurrent writers are
harmless.
"""

import threading
from collections import OrderedDict
from typing import List, Mapping, Optional, Sequence, Tuple


def get_pairs(symbols: Sequence[str]) -> List[Tuple[str, str]]:
    """Ordered list of adjacent symbol pairs."""
    return [(symbols[i], symbols[i + 1]) for i in range(len(symbols) - 1)]


def merge_pair(symbols: Sequence[str], pair: Tuple[str, str]) -> List[str]:
    """
    Merge every non-overlapping occurrence of ``pair`` in one left-to-right pass.

    Example:
        >>> merge_pair(["a", "a", "a"], ("a", "a"))
        ['aa', 'a']
    """
    first, second = pair
    merged = first + second

    new_symbols = []
    i = 0
    while i < len(symbols):
        if i < len(symbols) - 1 and symbols[i] == first and symbols[i + 1] == second:
            new_symbols.append(merged)
            i += 2
        else:
            new_symbols.append(symbols[i])
            i += 1

    return new_symbols


class BPEMerger:
    """
    Applies merge rules to pre-segments already transcoded to the byte alphabet.

    Args:
        merge_ranks: (symbol, symbol) -> rank, lower merges earlier
        cache_maxsize: Maximum number of memoized segments (default: 50000)

    Example:
        >>> merger = BPEMerger({("h", "i"): 0})
        >>> merger.merge("hih")
        'hi h'
    """

    def __init__(self, merge_ranks: Mapping[Tuple[str, str], int], cache_maxsize: int = 50000):
        self.merge_ranks = merge_ranks
        self.cache_maxsize = cache_maxsize
        self.cache: "OrderedDict[str, str]" = OrderedDict()
        self._lock = threading.Lock()

    def rank(self, pair: Tuple[str, str]) -> Optional[int]:
        """Rank of a pair, or None if the pair is never merged."""
        return self.merge_ranks.get(pair)

    def _best_pair(self, pairs: Sequence[Tuple[str, str]]) -> Optional[Tuple[str, str]]:
        best = None
        best_rank = None
        for pair in pairs:
            rank = self.rank(pair)
            if rank is not None and (best_rank is None or rank < best_rank):
                best, best_rank = pair, rank
        return best

    def cached(self, key: str) -> Optional[str]:
        """Return the memoized merge result for ``key``, if any."""
        with self._lock:
            if key in self.cache:
                self.cache.move_to_end(key)
                return self.cache[key]
        return None

    def _store(self, key: str, value: str):
        with self._lock:
            self.cache[key] = value
            self.cache.move_to_end(key)
            while len(self.cache) > self.cache_maxsize:
                self.cache.popitem(last=False)

    def clear_cache(self):
        """Drop all memoized results."""
        with self._lock:
            self.cache.clear()

    def merge(self, symbols: str, key: Optional[str] = None) -> str:
        """
        Merge a transcoded pre-segment into its final subwords.

        Args:
            symbols: Pre-segment in the byte alphabet, one character per byte
            key: Cache key (default: ``symbols``); the tokenizer passes the
                raw pre-segment so repeated segments skip transcoding

        Returns:
            The final subwords joined by single spaces
        """
        key = symbols if key is None else key

        result = self.cached(key)
        if result is not None:
            return result

        word = list(symbols)
        if len(word) <= 1:
            return symbols

        while True:
            pair = self._best_pair(get_pairs(word))
            if pair is None:
                break

            new_word = merge_pair(word, pair)
            if new_word == word:
                break

            word = new_word
            if len(word) == 1:
                break

        result = " ".join(word)
        self._store(key, result)
        return result

    def __repr__(self) -> str:
        return f"BPEMerger(merges={len(self.merge_ranks)}, cached={len(self.cache)})"
