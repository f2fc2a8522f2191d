#!/usr/bin/env python3
"""
Text Generation / Sampling Script
==================================
Train a context model on a text file and continue prompts with it.

Usage:
    # Interactive mode (use `:train file.txt` inside the session)
    python -m chatgpt_at_home.sample --interactive

    # Single generation
    python -m chatgpt_at_home.sample --corpus sources/1984.txt --prompt "It was a"

    # From file
    python -m chatgpt_at_home.sample --corpus sources/shakespeare.txt --prompt_file prompts.txt
"""

import os
import sys
import argparse
from typing import Iterator, Optional

from chatgpt_at_home.config import ModelConfig, GenerationConfig, load_run_config, save_run_config
from chatgpt_at_home.model import ContextModel


BANNER = """\
# chatgpt-at-home

Use `:train file.txt` to train the algorithm on given file; write
anything else for the algorithm to respond; Ctrl-C to quit.

A few examples:

> :train sources/shakespeare.txt
> ACT III

> :train sources/1984.txt
> It was a

----
"""

PROMPT_SIGN_HINT = (
    "Error: You don't have to write `> `, that's just the prompt sign used\n"
    "       to distinguish between commands and algorithm's output."
)

HELP_TEXT = """\
Commands:
  :train <file>  - Train on a text file (replaces the current model)
  /length <n>    - Set response length in tokens
  /help          - Show this help
  /quit          - Exit"""


def load_corpus(path: str, verbose: bool = True) -> str:
    """
    Read a training corpus.

    Raises:
        OSError: File cannot be opened or read
        UnicodeDecodeError: File is not valid UTF-8
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    if verbose:
        print(f"[Corpus] Read {len(text):,} characters from {path}")
    return text


class TextGenerator:
    """
    Text generation wrapper around the active context model.

    Owns the model for the session and replaces it wholesale
    whenever a new corpus is trained.
    """

    def __init__(
        self,
        model_config: Optional[ModelConfig] = None,
        generation_config: Optional[GenerationConfig] = None,
        verbose: bool = True
    ):
        self.model_config = model_config or ModelConfig()
        self.generation_config = generation_config or GenerationConfig()
        self.verbose = verbose
        self.model = ContextModel(self.model_config)

    def train_text(self, text: str) -> None:
        """Train a fresh model on text and make it the active one."""
        model = ContextModel(self.model_config)
        model.train(text, verbose=self.verbose)
        self.model = model

    def train_from_file(self, path: str) -> None:
        """
        Train a fresh model on a corpus file.

        The active model is only replaced once the file has been read;
        a failed read leaves it untouched.
        """
        text = load_corpus(path, verbose=self.verbose)
        self.train_text(text)

    def generate(self, prompt: str, length: Optional[int] = None) -> str:
        """
        Continue a prompt with the active model.

        Args:
            prompt: Input text prompt
            length: Target length in tokens (generation config if None)

        Returns:
            Generated text (including prompt)
        """
        if length is None:
            length = self.generation_config.length
        return self.model.generate(prompt, length)

    def generate_stream(self, prompt: str, length: Optional[int] = None) -> Iterator[str]:
        """Yield the prompt tokens, then each generated token."""
        if length is None:
            length = self.generation_config.length
        return self.model.generate_stream(prompt, length)


SLASH_COMMANDS = ("/help", "/length", "/quit", "/exit")


def is_train_command(line: str) -> bool:
    return line == ":train" or line.startswith(":train ")


def slash_command(line: str) -> Optional[str]:
    """Return the known /command a line starts with, else None."""
    parts = line.split()
    if parts and parts[0].lower() in SLASH_COMMANDS:
        return parts[0].lower()
    return None


def is_command(line: str) -> bool:
    return (is_train_command(line) or slash_command(line) is not None
            or line.startswith("> :train"))


def handle_line(generator: TextGenerator, line: str) -> Optional[str]:
    """
    Handle one line of interactive input.

    Anything that is not a known command is a prompt, including lines
    starting with "/".

    Returns:
        Text to print, or None when there is nothing to show
    """
    if line.startswith("> :train"):
        return PROMPT_SIGN_HINT

    if is_train_command(line):
        path = line[len(":train"):].strip()
        if not path:
            return "Error: Usage: :train <file>"
        try:
            generator.train_from_file(path)
        except (OSError, UnicodeDecodeError) as e:
            return f"Error: {e}"
        return None

    cmd = slash_command(line)
    if cmd == "/help":
        return HELP_TEXT
    elif cmd == "/length":
        parts = line.split()
        if len(parts) != 2:
            return "Error: Usage: /length <n>"
        try:
            generator.generation_config = GenerationConfig(
                length=int(parts[1]),
                stream=generator.generation_config.stream
            )
        except (ValueError, AssertionError):
            return f"Error: Invalid length: {parts[1]}"
        return f"Length set to {generator.generation_config.length}"

    if not line.strip():
        return None

    return generator.generate(line)


def interactive_mode(generator: TextGenerator):
    """Run interactive generation loop."""
    print(BANNER)

    while True:
        try:
            line = input("> ")
        except (KeyboardInterrupt, EOFError):
            print()
            break

        if slash_command(line) in ("/quit", "/exit"):
            print("Goodbye!")
            break

        if generator.generation_config.stream and line.strip() and not is_command(line):
            for token in generator.generate_stream(line):
                print(token, end="", flush=True)
            print("\n")
            continue

        output = handle_line(generator, line)
        if output is not None:
            print(output)
        print()


def main():
    parser = argparse.ArgumentParser(
        description="Generate text with a context model trained on a corpus",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Training data
    parser.add_argument(
        "--corpus", "-c",
        type=str,
        default=None,
        help="Text file to train on before generating"
    )

    # Input
    parser.add_argument(
        "--prompt", "-p",
        type=str,
        default=None,
        help="Text prompt for generation"
    )
    parser.add_argument(
        "--prompt_file",
        type=str,
        default=None,
        help="File containing prompts (one per line)"
    )
    parser.add_argument(
        "--interactive", "-i",
        action="store_true",
        help="Interactive mode"
    )

    # Generation params
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON file with 'model' and 'generation' sections"
    )
    parser.add_argument(
        "--max_tokens", "-n",
        type=int,
        default=None,
        help="Response length in tokens, prompt included (config default: 256)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for sampling"
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Stream output token by token"
    )
    parser.add_argument(
        "--save_config",
        type=str,
        default=None,
        help="Write the effective configuration to this JSON file"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress progress output"
    )

    args = parser.parse_args()

    # Validate
    if args.corpus and not os.path.exists(args.corpus):
        print(f"Error: Corpus not found: {args.corpus}")
        sys.exit(1)
    if args.prompt_file and not os.path.exists(args.prompt_file):
        print(f"Error: Prompt file not found: {args.prompt_file}")
        sys.exit(1)

    # Build configs
    try:
        if args.config:
            model_config, generation_config = load_run_config(args.config)
        else:
            model_config, generation_config = ModelConfig(), GenerationConfig()

        model_config = ModelConfig(
            max_context_size=model_config.max_context_size,
            seed=args.seed if args.seed is not None else model_config.seed
        )
        generation_config = GenerationConfig(
            length=args.max_tokens if args.max_tokens is not None else generation_config.length,
            stream=args.stream or generation_config.stream
        )
    except (OSError, ValueError, TypeError, AssertionError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.save_config:
        save_run_config(model_config, generation_config, args.save_config)
        if not (args.interactive or args.prompt_file or args.prompt is not None):
            return

    generator = TextGenerator(model_config, generation_config, verbose=not args.quiet)

    if args.corpus:
        try:
            generator.train_from_file(args.corpus)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: {e}")
            sys.exit(1)

    # Run
    if args.interactive:
        interactive_mode(generator)

    elif args.prompt_file:
        # Generate from file
        with open(args.prompt_file, "r", encoding="utf-8") as f:
            prompts = [line.rstrip("\n") for line in f if line.strip()]

        for i, prompt in enumerate(prompts):
            print(f"\n=== Prompt {i+1}/{len(prompts)} ===")
            print(f"Input: {prompt}")
            print(f"Output:")
            print(generator.generate(prompt))

    elif args.prompt is not None:
        # Single generation
        if generation_config.stream:
            for token in generator.generate_stream(args.prompt):
                print(token, end="", flush=True)
            print()
        else:
            print(generator.generate(args.prompt))

    else:
        print("Error: Provide --prompt, --prompt_file, or --interactive")
        sys.exit(1)


if __name__ == "__main__":
    main()
