"""
Alphanumeric-Run Tokenizer
==========================
Splits text into atomic string tokens.

Rules:
- A maximal run of alphanumeric characters is one token
- Every other character (whitespace, punctuation, symbols) is its own token

Tokens are plain strings and nothing is dropped, so concatenating the
tokens in order always gives back the input.

Usage:
    from chatgpt_at_home.tokenizer import tokenize, detokenize
    tokens = list(tokenize("Hello, World!"))  # ["Hello", ",", " ", "World", "!"]
    text = detokenize(tokens)
"""

import regex
from typing import Iterable, Iterator


# Alphabetic covers combining vowel signs and harakat that str.isalnum() misses
WORD_CLASS = r"[\p{Alphabetic}\p{N}]"
TOKEN_PATTERN = regex.compile(WORD_CLASS + r"+|.", regex.DOTALL)
WORD_PATTERN = regex.compile(WORD_CLASS + r"+")


def tokenize(text: str) -> Iterator[str]:
    """
    Lazily split text into tokens.

    Args:
        text: Input text (any string, including empty)

    Yields:
        Tokens in input order
    """
    for match in TOKEN_PATTERN.finditer(text):
        yield match.group()


def detokenize(tokens: Iterable[str]) -> str:
    """Render tokens back to text by direct concatenation."""
    return "".join(tokens)


def is_word(token: str) -> bool:
    """True for alphanumeric-run tokens."""
    return WORD_PATTERN.fullmatch(token) is not None
