"""Tests for the context model: training, backoff and sampling."""

from collections import Counter

import pytest
import torch

from chatgpt_at_home.config import ModelConfig
from chatgpt_at_home.model import ContextModel, sample_weighted


CORPUS = (
    "It was a bright cold day in April, and the clocks were striking thirteen. "
    "Winston Smith, his chin nuzzled into his breast in an effort to escape "
    "the vile wind, slipped quickly through the glass doors of Victory Mansions."
)


def trained(text, seed=0, **kwargs):
    model = ContextModel(ModelConfig(seed=seed, **kwargs))
    model.train(text)
    return model


def test_untrained_model_returns_prompt():
    model = ContextModel(ModelConfig(seed=0))
    assert not model.is_trained
    assert model.generate("hello world", 256) == "hello world"
    assert model.generate("", 256) == ""


def test_frequency_table_for_small_corpus():
    model = trained("ab ab ab")

    assert model.frequencies == {
        ("ab",): Counter({" ": 2}),
        (" ",): Counter({"ab": 2}),
        ("ab", " "): Counter({"ab": 2}),
        (" ", "ab"): Counter({" ": 1}),
        ("ab", " ", "ab"): Counter({" ": 1}),
        (" ", "ab", " "): Counter({"ab": 1}),
        ("ab", " ", "ab", " "): Counter({"ab": 1}),
    }
    assert model.num_contexts == 7


def test_context_lengths_are_bounded():
    model = trained(CORPUS)
    assert model.is_trained
    assert all(1 <= len(context) <= 5 for context in model.frequencies)
    assert any(len(context) == 5 for context in model.frequencies)


def test_custom_max_context_size():
    model = trained(CORPUS, max_context_size=2)
    assert all(1 <= len(context) <= 2 for context in model.frequencies)


def test_training_is_deterministic():
    assert trained(CORPUS, seed=1).frequencies == trained(CORPUS, seed=2).frequencies


def test_training_replaces_previous_state():
    model = trained("completely different words here")
    model.train(CORPUS)
    assert model.frequencies == trained(CORPUS).frequencies


def test_training_on_empty_text_clears_model():
    model = trained(CORPUS)
    model.train("")
    assert model.frequencies == {}
    assert model.generate("It was", 256) == "It was"


@pytest.mark.parametrize("seed", range(10))
def test_single_candidate_continuation_is_deterministic(seed):
    model = trained("ab ab ab", seed=seed)
    assert model.generate("ab", 4) == "ab ab "


def test_no_tokens_generated_when_prompt_fills_length():
    model = trained(CORPUS)
    assert model.generate("Hello, World!", 5) == "Hello, World!"
    assert model.generate("Hello, World!", 3) == "Hello, World!"
    assert model.generate("It was", 0) == "It was"


@pytest.mark.parametrize("length", [1, 2, 10, 50, 256])
def test_generation_is_bounded(length):
    model = trained(CORPUS)
    tokens = list(model.generate_stream("It", length))
    assert len(tokens) <= length


def test_generation_reaches_length_when_contexts_never_run_out():
    model = trained("x y " * 10)
    tokens = list(model.generate_stream("x", 50))
    assert len(tokens) == 50
    assert "".join(tokens) == ("x y " * 13)[:50]


def test_generation_stops_at_unknown_context():
    model = trained("red fish")
    # "fish" only ends the corpus, so nothing ever follows it
    assert model.generate("red", 10) == "red fish"
    assert model.generate("blue", 10) == "blue"


def test_backoff_prefers_longest_context():
    # After "b" alone the corpus says "x" or "y"; after "a b" it always says "x"
    model = trained("a b x . c b y . c b y . c b y . a b x")
    for _ in range(20):
        assert model.generate("a b", 5) == "a b x"


def test_stream_starts_with_prompt_tokens():
    model = trained(CORPUS)
    tokens = list(model.generate_stream("It was a", 20))
    assert tokens[:5] == ["It", " ", "was", " ", "a"]
    assert 5 < len(tokens) <= 20


def test_seeded_generation_is_reproducible():
    first = trained(CORPUS, seed=1234).generate("the", 100)
    second = trained(CORPUS, seed=1234).generate("the", 100)
    assert first == second


def test_weighted_sampling_through_model():
    model = trained("+a+a+a+b", seed=0)
    assert model.frequencies[("+",)] == Counter({"a": 3, "b": 1})

    trials = 2000
    hits = sum(model.generate("+", 2) == "+a" for _ in range(trials))
    assert 0.70 < hits / trials < 0.80


def test_sample_weighted_frequencies():
    generator = torch.Generator().manual_seed(0)
    draws = Counter(sample_weighted({"a": 3, "b": 1}, generator) for _ in range(4000))
    assert set(draws) == {"a", "b"}
    assert 0.70 < draws["a"] / 4000 < 0.80


def test_sample_weighted_single_candidate():
    generator = torch.Generator().manual_seed(0)
    assert all(sample_weighted({"only": 7}, generator) == "only" for _ in range(50))


def test_sample_weighted_ties_reach_every_candidate():
    generator = torch.Generator().manual_seed(0)
    draws = Counter(sample_weighted({"a": 2, "b": 2, "c": 2}, generator) for _ in range(3000))
    for token in "abc":
        assert 0.28 < draws[token] / 3000 < 0.39


def test_verbose_training_prints_summary(capsys):
    model = ContextModel(ModelConfig(seed=0))
    model.train("ab ab ab", verbose=True)
    out = capsys.readouterr().out
    assert "[Model] Trained on 5 tokens, 7 contexts" in out


def test_repr():
    assert repr(trained("ab ab ab")) == "ContextModel(max_context_size=5, contexts=7)"
