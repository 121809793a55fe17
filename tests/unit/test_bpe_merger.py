"""
Unit tests for rank-guided BPE merging.

Tests cover:
- Pair extraction and single-pass merging
- Rank priority
- Termination on unranked pairs
- Idempotence
- LRU cache behavior
"""

from collections import OrderedDict

from src.tokenization.bpe_merger import BPEMerger, get_pairs, merge_pair


class TestHelpers:
    """Test suite for pair helpers."""

    def test_get_pairs(self):
        """Test adjacent pairs are listed in order, repeats included."""
        assert get_pairs(["a", "b", "a", "b"]) == [("a", "b"), ("b", "a"), ("a", "b")]

    def test_get_pairs_single_symbol(self):
        """Test a single symbol has no pairs."""
        assert get_pairs(["a"]) == []

    def test_merge_pair_all_occurrences(self):
        """Test every non-overlapping occurrence merges in one pass."""
        assert merge_pair(["a", "b", "c", "a", "b"], ("a", "b")) == ["ab", "c", "ab"]

    def test_merge_pair_non_overlapping(self):
        """Test overlapping occurrences merge left to right."""
        assert merge_pair(["a", "a", "a", "a", "a"], ("a", "a")) == ["aa", "aa", "a"]


class TestBPEMerger:
    """Test suite for BPEMerger."""

    def test_initialization(self):
        """Test default parameters."""
        merger = BPEMerger({})

        assert merger.cache_maxsize == 50000
        assert isinstance(merger.cache, OrderedDict)
        assert len(merger.cache) == 0

    def test_single_symbol_unchanged(self):
        """Test a one-symbol segment is returned as is."""
        assert BPEMerger({("a", "b"): 0}).merge("a") == "a"

    def test_no_ranked_pairs(self):
        """Test unranked symbols are joined by spaces."""
        assert BPEMerger({("x", "y"): 0}).merge("abc") == "a b c"

    def test_lowest_rank_wins(self):
        """Test the lowest-ranked pair merges first, wherever it is."""
        assert BPEMerger({("b", "c"): 0, ("a", "b"): 1}).merge("abc") == "a bc"
        assert BPEMerger({("a", "b"): 0, ("b", "c"): 1}).merge("abc") == "ab c"

    def test_chained_merges(self):
        """Test merged symbols take part in later merges."""
        ranks = {
            ("h", "e"): 0,
            ("l", "l"): 1,
            ("he", "ll"): 2,
            ("hell", "o"): 3,
        }

        assert BPEMerger(ranks).merge("hello") == "hello"

    def test_stops_when_no_rule_applies(self):
        """Test merging stops once the remaining pairs are unranked."""
        ranks = {("h", "e"): 0, ("l", "o"): 1}

        assert BPEMerger(ranks).merge("helo") == "he lo"

    def test_idempotent_on_merged_output(self):
        """Test merging a fully merged symbol returns it unchanged."""
        merger = BPEMerger({("a", "b"): 0, ("ab", "c"): 1})
        merged = merger.merge("abc")

        assert merged == "abc"
        assert merger.merge(merged) == merged

    def test_rank_lookup(self):
        """Test unknown pairs have no rank."""
        merger = BPEMerger({("a", "b"): 7})

        assert merger.rank(("a", "b")) == 7
        assert merger.rank(("b", "a")) is None


class TestMergeCache:
    """Test suite for the merge cache."""

    def test_result_cached_under_key(self):
        """Test results are stored under the given key."""
        merger = BPEMerger({("Ġ", "a"): 0})

        assert merger.merge("Ġab", key=" ab") == "Ġa b"
        assert merger.cached(" ab") == "Ġa b"
        assert merger.cached("Ġab") is None

    def test_cached_result_reused(self):
        """Test a cached key skips recomputation."""
        merger = BPEMerger({("a", "b"): 0})
        merger.cache["ab"] = "sentinel"

        assert merger.merge("ab") == "sentinel"

    def test_lru_eviction(self):
        """Test the least recently used entry is evicted first."""
        merger = BPEMerger({("a", "b"): 0}, cache_maxsize=3)

        for word in ["ab1", "ab2", "ab3"]:
            merger.merge(word)
        assert list(merger.cache.keys()) == ["ab1", "ab2", "ab3"]

        # Access first word (should move to end)
        merger.cached("ab1")
        assert list(merger.cache.keys()) == ["ab2", "ab3", "ab1"]

        # Add new word (should evict ab2)
        merger.merge("ab4")
        assert len(merger.cache) == 3
        assert "ab2" not in merger.cache
        assert "ab1" in merger.cache
        assert "ab4" in merger.cache

    def test_clear_cache(self):
        """Test the cache can be emptied."""
        merger = BPEMerger({("a", "b"): 0})
        merger.merge("ab")
        merger.clear_cache()

        assert len(merger.cache) == 0
