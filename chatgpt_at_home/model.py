"""
Context Model Implementation
============================
A variable-order frequency language model over string tokens.

Training:
- Tokenize the corpus and slide a window of the last N tokens over it
- For every token, count it as the successor of each suffix of the
  window (lengths 1..N), so unigram- up to N-gram-successor statistics
  are collected in one pass
- Training always starts from an empty table

Generation:
- Start from the tokenized prompt
- Look up the longest suffix of the output (N down to 1) that was seen
  during training (backoff)
- Sample the next token with probability proportional to its count
- Stop at the target length or when no suffix matches

Usage:
    from chatgpt_at_home.model import ContextModel
    from chatgpt_at_home.config import ModelConfig

    model = ContextModel(ModelConfig(seed=42))
    model.train(open("sources/1984.txt").read())
    print(model.generate("It was a", length=256))
"""

from collections import Counter, deque
from typing import Dict, Iterator, Mapping, Optional, Tuple

import torch
from tqdm import tqdm

from .config import ModelConfig
from .tokenizer import tokenize, detokenize


Context = Tuple[str, ...]
FrequencyTable = Dict[Context, Counter]


def sample_weighted(
    candidates: Mapping[str, int],
    generator: Optional[torch.Generator] = None
) -> str:
    """
    Draw one item with probability proportional to its weight.

    Args:
        candidates: Mapping item -> positive weight
        generator: Random source (global torch RNG if None)

    Returns:
        The sampled item
    """
    items = list(candidates)
    weights = torch.tensor([candidates[item] for item in items], dtype=torch.float64)
    idx = torch.multinomial(weights, num_samples=1, generator=generator)
    return items[idx.item()]


class ContextModel:
    """
    Frequency model with context-length backoff.

    The frequency table maps a context (tuple of 1..max_context_size
    tokens) to a Counter of next token -> occurrence count. It is the
    entire learned state.
    """

    def __init__(self, config: Optional[ModelConfig] = None):
        self.config = config or ModelConfig()
        self.frequencies: FrequencyTable = {}

        self.generator = torch.Generator()
        if self.config.seed is not None:
            self.generator.manual_seed(self.config.seed)
        else:
            self.generator.seed()

    @property
    def max_context_size(self) -> int:
        return self.config.max_context_size

    @property
    def num_contexts(self) -> int:
        """Number of distinct contexts in the table."""
        return len(self.frequencies)

    @property
    def is_trained(self) -> bool:
        return bool(self.frequencies)

    # ========================================
    # Training
    # ========================================

    def train(self, text: str, verbose: bool = False) -> None:
        """
        Rebuild the frequency table from text.

        Any previously learned state is discarded first.

        Args:
            text: Training corpus
            verbose: Show progress and a summary
        """
        self.frequencies = {}
        window: deque = deque(maxlen=self.max_context_size)
        num_tokens = 0

        for token in tqdm(tokenize(text), desc="[Model] Training", unit="tok", disable=not verbose):
            history = tuple(window)
            for cs in range(1, len(history) + 1):
                context = history[len(history) - cs:]
                self.frequencies.setdefault(context, Counter())[token] += 1

            window.append(token)
            num_tokens += 1

        if verbose:
            print(f"[Model] Trained on {num_tokens:,} tokens, {self.num_contexts:,} contexts")

    # ========================================
    # Generation
    # ========================================

    def next_candidates(self, tokens) -> Optional[Counter]:
        """
        Find the successor counts for the longest known suffix of tokens.

        Args:
            tokens: Sequence of tokens generated so far

        Returns:
            Counter of next token -> count, or None if no suffix matches
        """
        for cs in range(self.max_context_size, 0, -1):
            if cs > len(tokens):
                continue

            context = tuple(tokens[len(tokens) - cs:])
            candidates = self.frequencies.get(context)
            if candidates:
                return candidates

        return None

    def generate_stream(self, prompt: str, length: int) -> Iterator[str]:
        """
        Generate tokens one at a time (streaming).

        Yields the prompt's tokens first, then each sampled token until
        the output holds `length` tokens or no context matches.

        Args:
            prompt: Text to continue
            length: Target total length in tokens, prompt included

        Yields:
            Individual tokens as strings
        """
        out = list(tokenize(prompt))
        yield from out

        while len(out) < length:
            candidates = self.next_candidates(out)
            if candidates is None:
                break

            next_token = sample_weighted(candidates, self.generator)
            out.append(next_token)
            yield next_token

    def generate(self, prompt: str, length: int = 256) -> str:
        """
        Continue a prompt.

        Args:
            prompt: Text to continue
            length: Target total length in tokens, prompt included

        Returns:
            Prompt plus generated continuation; may be shorter than
            `length` tokens when the model runs out of known contexts
        """
        return detokenize(self.generate_stream(prompt, length))

    def __repr__(self) -> str:
        return (f"ContextModel(max_context_size={self.max_context_size}, "
                f"contexts={self.num_contexts})")
