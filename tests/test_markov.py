"""
Tests for the Markov chain model.
"""
import random
from collections import Counter

import pytest

from chatter.services.errors import CorruptModel, EmptyModel, OrderMismatch
from chatter.services.markov import END, START, MarkovModel, ModelStats


def padded_windows(tokens, order):
    padded = [START] * order + list(tokens) + [END]
    return [
        (tuple(padded[i : i + order]), padded[i + order])
        for i in range(len(padded) - order)
    ]


class TestMarkovTraining:
    """Test suite for MarkovModel.train."""

    def test_initialization(self):
        """Test model starts empty."""
        model = MarkovModel()

        assert model.order == 1
        assert model.transitions == {}
        assert model.is_empty()

    def test_invalid_order(self):
        """Test order below 1 is rejected."""
        with pytest.raises(ValueError):
            MarkovModel(order=0)

    def test_scenario_table(self, seeded_model):
        """Test the order-1 table for two short lines."""
        seeded_model.train(["the", "cat", "sat"])
        seeded_model.train(["the", "dog", "ran"])

        assert seeded_model.transitions == {
            (START,): {"the": 2},
            ("the",): {"cat": 1, "dog": 1},
            ("cat",): {"sat": 1},
            ("sat",): {END: 1},
            ("dog",): {"ran": 1},
            ("ran",): {END: 1},
        }

    @pytest.mark.parametrize("order", [1, 2, 3])
    def test_training_increments_each_window_once(self, order):
        """Test every padded window count goes up by exactly one."""
        model = MarkovModel(order=order)
        model.train("a b c a b d".split())
        tokens = "a b x a b".split()
        before = {w: model.count(*w) for w in padded_windows(tokens, order)}

        model.train(tokens)

        expected = Counter(padded_windows(tokens, order))
        for window, times in expected.items():
            assert model.count(*window) == before[window] + times

    def test_training_not_idempotent(self, seeded_model):
        """Test retraining the same line doubles its counts."""
        seeded_model.train(["hi", "there"])
        seeded_model.train(["hi", "there"])

        assert seeded_model.count((START,), "hi") == 2
        assert seeded_model.count(("there",), END) == 2

    def test_empty_sequence_is_noop(self, seeded_model):
        """Test training on no tokens inserts nothing."""
        seeded_model.train([])

        assert seeded_model.transitions == {}

    def test_order_two_contexts(self):
        """Test order-2 contexts are pairs padded with START."""
        model = MarkovModel(order=2)
        model.train(["a", "b"])

        assert model.count((START, START), "a") == 1
        assert model.count((START, "a"), "b") == 1
        assert model.count(("a", "b"), END) == 1


class TestMarkovGeneration:
    """Test suite for MarkovModel.generate."""

    def test_empty_model_raises(self):
        """Test generating from an untrained model fails."""
        with pytest.raises(EmptyModel):
            MarkovModel().generate()

    def test_empty_model_raises_with_seed(self):
        """Test a seed does not hide an empty model."""
        with pytest.raises(EmptyModel):
            MarkovModel(order=2).generate("hello", max_length=10)

    def test_scenario_outputs(self, seeded_model):
        """Test only trained paths are ever produced."""
        seeded_model.train(["the", "cat", "sat"])
        seeded_model.train(["the", "dog", "ran"])

        outputs = {tuple(seeded_model.generate(max_length=10)) for _ in range(200)}

        assert outputs == {("the", "cat", "sat"), ("the", "dog", "ran")}

    def test_sentinels_never_emitted(self, seeded_model, sample_corpus):
        """Test START and END never appear in output."""
        for line in sample_corpus:
            seeded_model.train(line.split())

        for _ in range(50):
            tokens = seeded_model.generate(max_length=30)
            assert START not in tokens
            assert END not in tokens

    @pytest.mark.parametrize("max_length", [0, 1, 5, 25])
    def test_cycle_terminates(self, max_length):
        """Test a chain that can loop forever is cut at max_length."""
        model = MarkovModel(order=1, rng=random.Random(7))
        model.transitions = {(START,): {"the": 1}, ("the",): {"the": 1}}

        tokens = model.generate(max_length=max_length)

        assert tokens == ["the"] * max_length

    def test_negative_max_length(self, seeded_model):
        """Test a negative limit yields nothing."""
        seeded_model.train(["a", "b"])

        assert seeded_model.generate(max_length=-3) == []

    def test_dead_end_returns_partial(self):
        """Test an unknown context ends the walk gracefully."""
        model = MarkovModel(order=1, rng=random.Random(0))
        model.transitions = {(START,): {"a": 1}, ("a",): {"b": 1}}

        assert model.generate(max_length=10) == ["a", "b"]

    def test_seed_anchors_walk(self, seeded_model):
        """Test a known seed starts the walk after that token."""
        seeded_model.train(["the", "cat", "sat"])
        seeded_model.train(["the", "dog", "ran"])

        for _ in range(20):
            assert seeded_model.generate("dog", max_length=10) == ["ran"]

    def test_unknown_seed_is_ignored(self, seeded_model):
        """Test an unknown seed falls back to an unseeded walk."""
        seeded_model.train(["the", "cat", "sat"])

        assert seeded_model.generate("zebra", max_length=10) == ["the", "cat", "sat"]

    def test_order_two_seed_without_start_context(self):
        """Test an order-2 anchor that never began a line yields nothing."""
        model = MarkovModel(order=2, rng=random.Random(3))
        model.train(["a", "b", "c"])

        assert model.is_anchor("b")
        assert model.generate("b", max_length=10) == []

    def test_order_two_seed_at_line_start(self):
        """Test an order-2 anchor that began a line continues it."""
        model = MarkovModel(order=2, rng=random.Random(3))
        model.train(["a", "b", "c"])

        assert model.generate("a", max_length=10) == ["b", "c"]

    def test_reproducible_with_same_seed(self, sample_corpus):
        """Test equal rng seeds give equal walks regardless of insert order."""
        forward = MarkovModel(order=1, rng=random.Random(99))
        backward = MarkovModel(order=1, rng=random.Random(99))
        for line in sample_corpus:
            forward.train(line.split())
        for line in reversed(sample_corpus):
            backward.train(line.split())

        for _ in range(20):
            assert forward.generate(max_length=20) == backward.generate(max_length=20)

    def test_sampling_follows_counts(self):
        """Test heavier transitions are sampled more often."""
        model = MarkovModel(order=1, rng=random.Random(5))
        model.transitions = {(START,): {"common": 9, "rare": 1}}

        counts = Counter(model.generate(max_length=1)[0] for _ in range(2000))

        assert counts["common"] > counts["rare"] * 4


class TestMarkovStatsAndMerge:
    """Test statistics, merging and dict conversion."""

    def test_stats(self, seeded_model):
        """Test stats count contexts, edges and observations."""
        seeded_model.train(["the", "cat", "sat"])
        seeded_model.train(["the", "dog", "ran"])

        stats = seeded_model.stats()

        assert isinstance(stats, ModelStats)
        assert stats.order == 1
        assert stats.contexts == 6
        assert stats.transitions == 7
        assert stats.observations == 8
        assert stats.vocabulary == 5

    def test_merge(self):
        """Test merging adds counts."""
        a = MarkovModel(order=1)
        b = MarkovModel(order=1)
        a.train(["x", "y"])
        b.train(["x", "z"])

        a.merge(b)

        assert a.next_tokens(("x",)) == {"y": 1, "z": 1}
        assert a.count((START,), "x") == 2

    def test_merge_order_mismatch(self):
        """Test merging models of different order fails."""
        with pytest.raises(OrderMismatch):
            MarkovModel(order=1).merge(MarkovModel(order=2))

    def test_dict_roundtrip(self, sample_corpus):
        """Test to_dict/from_dict keep every count."""
        model = MarkovModel(order=2)
        for line in sample_corpus:
            model.train(line.split())

        restored = MarkovModel.from_dict(model.to_dict())

        assert restored.order == 2
        assert restored.transitions == model.transitions

    @pytest.mark.parametrize("raw", [
        {},
        {"order": "1", "transitions": []},
        {"order": 0, "transitions": []},
        {"order": 1, "transitions": {}},
        {"order": 1, "transitions": [[["a", "b"], {"c": 1}]]},
        {"order": 1, "transitions": [[["a"], {"c": 0}]]},
        {"order": 1, "transitions": [[["a"], {}]]},
        {"order": 1, "transitions": [["a"]]},
    ])
    def test_from_dict_rejects_bad_data(self, raw):
        """Test malformed snapshots raise CorruptModel."""
        with pytest.raises(CorruptModel):
            MarkovModel.from_dict(raw)
