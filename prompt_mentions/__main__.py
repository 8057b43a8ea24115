"""CLI entrypoint for prompt-mentions."""

from __future__ import annotations

import argparse
from importlib import metadata
import json
from pathlib import Path
import sys
from typing import Sequence

from .app import MentionPromptApp
from .config import enabled_triggers, ensure_config_dir, load_config
from .coordinator import MentionCoordinator
from .exceptions import CatalogError
from .providers import CatalogProvider


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prompt-mentions", description="Mention-aware prompt input"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.toml (defaults to ~/.config/prompt-mentions/config.toml)",
    )
    subcommands = parser.add_subparsers(dest="command")
    extract = subcommands.add_parser(
        "extract", help="Strip mentions from TEXT and print the resolved entities as JSON"
    )
    extract.add_argument("text", help="Finalized prompt text")
    extract.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Entity catalog TOML (overrides [catalog].path)",
    )
    return parser


def _run_extract(args: argparse.Namespace, config: dict) -> int:
    catalog_path = args.catalog or Path(str(config["catalog"]["path"]))
    provider = CatalogProvider(catalog_path)
    try:
        provider.reload()
    except CatalogError as exc:
        print(f"prompt-mentions: {exc}", file=sys.stderr)
        return 1
    coordinator = MentionCoordinator(
        provider,
        enabled_triggers(config),
        lang=str(config["mentions"]["language"]),
    )
    submission = coordinator.prepare_submission(args.text)
    print(
        json.dumps(
            {"text": submission.text, "entities": submission.entity_ids()},
            ensure_ascii=False,
        )
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Ensure configuration exists, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("prompt-mentions")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"prompt-mentions {version}")
        return 0

    ensure_config_dir()
    config = load_config(args.config)
    if args.command == "extract":
        return _run_extract(args, config)

    app = MentionPromptApp(config=config)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
