"""
Configuration Module
====================
Handles model and generation configuration.

A run configuration file holds a "model" and a "generation" section,
each mapping field names to values.

Usage:
    from chatgpt_at_home.config import load_run_config
    model_cfg, gen_cfg = load_run_config("configs/run.json")
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any
import json
import os


@dataclass
class ModelConfig:
    """
    Context Model Configuration.

    Attributes:
        max_context_size: Longest context (in tokens) recorded and matched
        seed: Seed for the sampling generator (None for a random seed)
    """
    max_context_size: int = 5
    seed: Optional[int] = None

    def __post_init__(self):
        assert self.max_context_size > 0, "max_context_size must be positive"


@dataclass
class GenerationConfig:
    """
    Generation Configuration.

    Attributes:
        length: Target response length in tokens, prompt included
        stream: Print tokens as they are sampled
    """
    length: int = 256
    stream: bool = False

    def __post_init__(self):
        assert self.length >= 0, f"length must be non-negative, got {self.length}"


def load_run_config(path: str) -> tuple:
    """
    Load model and generation configuration from a single file.

    Missing sections fall back to defaults; unknown keys raise TypeError.
    """
    with open(path, "r") as f:
        config = json.load(f)
    model_cfg = ModelConfig(**config.get("model", {}))
    gen_cfg = GenerationConfig(**config.get("generation", {}))
    return model_cfg, gen_cfg


def run_config_dict(
    model_config: ModelConfig,
    generation_config: GenerationConfig
) -> Dict[str, Any]:
    return {
        "model": asdict(model_config),
        "generation": asdict(generation_config),
    }


def save_run_config(
    model_config: ModelConfig,
    generation_config: GenerationConfig,
    output_path: str
) -> None:
    """Write the effective run configuration so it can be passed back via --config."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(run_config_dict(model_config, generation_config), f, indent=2)
    print(f"[Config] Saved run config to {output_path}")
