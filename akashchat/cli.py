#!/usr/bin/env python3
"""CLI entry point for the Akash behavioral analysis chat."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from akashchat.config import AppSettings, ModelRegistry, load_model_registry
from akashchat.interfaces import CompletionOptions, Failure
from akashchat.prompts import analyze_behavior
from akashchat.provider_akash import create_client
from akashchat.session import ChatSession

QUIT_COMMANDS = ("/quit", "/exit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Chat with Akash-hosted models and request behavioral analyses",
    )
    parser.add_argument("--models-file", help="Path to a YAML model registry override")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("models", help="List the known models and the default")

    chat = subparsers.add_parser("chat", help="Start an interactive chat session")
    chat.add_argument("--model", help="Model to start with (overrides env)")
    chat.add_argument(
        "--temperature",
        type=float,
        help="Sampling temperature for replies (default 0.7)",
    )

    analyze = subparsers.add_parser("analyze", help="Run a functional behavior analysis")
    analyze.add_argument("--behavior", required=True, help="Behavior you want to analyze")
    analyze.add_argument(
        "--antecedent",
        required=True,
        help="Context or environment in which the behavior occurs",
    )
    analyze.add_argument(
        "--consequence",
        required=True,
        help="What happens right after the behavior",
    )
    analyze.add_argument("--previous-attempts", help="Previous attempts to change it")
    analyze.add_argument("--emotions", help="Emotional or cognitive context")
    analyze.add_argument("--model", help="Model to use (overrides env)")
    return parser


def list_models(registry: ModelRegistry) -> int:
    for model in registry.models:
        marker = " (default)" if model == registry.default else ""
        print(f"{model}{marker}")
    return 0


def run_chat(
    session: ChatSession,
    read: Callable[[str], str] = input,
) -> int:
    print(f"[info] Chatting with {session.model}. Type /model NAME to switch, /quit to exit.")
    print(session.transcript[-1].content if session.transcript else "")
    while True:
        try:
            line = read("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        text = line.strip()
        if text in QUIT_COMMANDS:
            return 0
        if text == "/model" or text.startswith("/model "):
            name = text[len("/model") :].strip()
            if name:
                print(f"[info] Using {session.select_model(name)}")
            else:
                print(f"[info] Current model: {session.model}")
            continue

        outcome = session.send(line)
        if outcome is None:
            continue
        if session.error:
            print(f"[warn] {session.error}")
        if outcome.switched and isinstance(outcome.result, Failure):
            print(outcome.result.reply)
        else:
            print(session.transcript[-1].content)


def run_analysis(args: argparse.Namespace, settings: AppSettings) -> int:
    client = create_client(settings.akash, settings.registry)
    fields = {
        "behavior": args.behavior,
        "antecedent": args.antecedent,
        "consequence": args.consequence,
        "previous_attempts": args.previous_attempts,
        "emotions_thoughts": args.emotions,
    }
    result = analyze_behavior(client, fields, model=args.model)
    if isinstance(result, Failure):
        print(f"[error] {result.message}")
        if result.suggested_model:
            print(f"[info] Try again with --model {result.suggested_model}")
        return 2
    print(result.content)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    models_file = Path(args.models_file) if args.models_file else None
    if args.command == "models":
        try:
            return list_models(load_model_registry(models_file))
        except RuntimeError as exc:
            print(f"[error] {exc}")
            return 1

    try:
        settings = AppSettings.load()
        if models_file is not None:
            settings = AppSettings(settings.akash, load_model_registry(models_file))
    except (RuntimeError, ValueError) as exc:
        print(f"[error] {exc}")
        return 1

    if args.command == "analyze":
        return run_analysis(args, settings)

    client = create_client(settings.akash, settings.registry)
    options = None
    if args.temperature is not None:
        options = CompletionOptions(temperature=args.temperature)
    session = ChatSession(
        client,
        settings.registry,
        model=args.model,
        api_key_present=bool(settings.akash.api_key),
        options=options,
    )
    return run_chat(session)


if __name__ == "__main__":
    raise SystemExit(main())
