"""chatgpt-at-home: a variable-order context model text generator."""

from .config import ModelConfig, GenerationConfig
from .model import ContextModel, sample_weighted
from .tokenizer import tokenize, detokenize

__version__ = "0.1.0"

__all__ = [
    "ModelConfig",
    "GenerationConfig",
    "ContextModel",
    "sample_weighted",
    "tokenize",
    "detokenize",
]
