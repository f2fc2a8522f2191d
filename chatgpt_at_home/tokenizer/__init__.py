# chatgpt-at-home Tokenizer Module
"""
Alphanumeric-run tokenizer.

Functions:
    tokenize: Lazily split text into tokens.
    detokenize: Concatenate tokens back into text.

Usage:
    from chatgpt_at_home.tokenizer import tokenize
    tokens = list(tokenize("Hello, world!"))
"""

from .alnum import tokenize, detokenize, is_word

__all__ = ["tokenize", "detokenize", "is_word"]
