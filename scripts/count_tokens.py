"""
Script to count GPT tokens and fit conversations into a model's context.

Usage:
    python scripts/count_tokens.py --vocab_dir storage/openai_tokenizer --text "Hello world"
    python scripts/count_tokens.py --vocab_dir storage/openai_tokenizer --files docs/*.md --model gpt-4
    python scripts/count_tokens.py --vocab_dir storage/openai_tokenizer --messages chat.json \
        --model gpt-3.5-turbo --retain_first
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from tqdm import tqdm

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from src.chat import (
    ChatMessage,
    MAX_TOKENS_MAP,
    MessagePruner,
    TokenBudget,
    load_model_limits,
)
from src.tokenization import GPTTokenizer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count GPT tokens")

    # Vocabulary
    parser.add_argument("--vocab_dir", type=str, required=True,
                       help="Directory with encoder.json, vocab.bpe and characters.json")

    # Input (one of)
    parser.add_argument("--text", type=str,
                       help="Text to tokenize")
    parser.add_argument("--files", type=str, nargs='+',
                       help="Text file(s) to tokenize")
    parser.add_argument("--messages", type=str,
                       help="JSON file with a list of chat messages to fit into --model")

    # Budget
    parser.add_argument("--model", type=str,
                       help="Model whose token limit to check against")
    parser.add_argument("--limits", type=str,
                       help="YAML file with model token limits")
    parser.add_argument("--retain_first", action="store_true",
                       help="Keep the first message pinned while pruning")
    parser.add_argument("--max_iterations", type=int, default=200,
                       help="Maximum pruning passes (default: 200)")

    # Output
    parser.add_argument("--show_tokens", action="store_true",
                       help="Print every (subword, id) pair")
    parser.add_argument("--verbose", action="store_true",
                       help="Log pruning steps")

    return parser


def report_limit(count: int, model: str, budget: TokenBudget):
    max_tokens = budget.max_tokens(model)
    if max_tokens is None:
        print(f"  {model}: no token limit")
    elif count < max_tokens:
        print(f"  {model}: fits ({count} < {max_tokens})")
    else:
        print(f"  {model}: exceeds limit by {count - max_tokens} ({count} >= {max_tokens})")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if sum(x is not None for x in (args.text, args.files, args.messages)) != 1:
        parser.error("exactly one of --text, --files or --messages is required")
    if args.messages and not args.model:
        parser.error("--messages requires --model")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    tokenizer = GPTTokenizer.from_directory(args.vocab_dir)
    limits = load_model_limits(args.limits) if args.limits else MAX_TOKENS_MAP
    budget = TokenBudget(tokenizer, limits)

    if args.messages:
        with open(args.messages, "r", encoding="utf-8") as f:
            messages = [ChatMessage.from_dict(m) for m in json.load(f)]

        pruner = MessagePruner(budget, max_iterations=args.max_iterations)
        fitted = pruner.prune(messages, args.model, retain_first=args.retain_first)

        print(json.dumps([m.to_dict() for m in fitted], ensure_ascii=False, indent=2))
        print(
            f"Kept {len(fitted)} of {len(messages)} messages "
            f"({tokenizer.count_messages(fitted)} tokens)",
            file=sys.stderr,
        )
        return

    if args.text is not None:
        sources = [("<text>", args.text)]
    else:
        sources = []
        for file_path in tqdm(args.files, desc="Reading files"):
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                sources.append((file_path, f.read()))

    total = 0
    for name, text in sources:
        tokens = tokenizer.tokenize(text)
        total += len(tokens)

        print(f"{name}: {len(tokens)} tokens")
        if args.show_tokens:
            for token in tokens:
                print(f"  {token.subword!r} -> {token.id}")
        if args.model:
            report_limit(len(tokens), args.model, budget)

    if len(sources) > 1:
        print(f"Total: {total} tokens")


if __name__ == "__main__":
    main()
