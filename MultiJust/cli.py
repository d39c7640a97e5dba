"""
multi-just: pick a justfile target for the current project and run it.

Usage:
    multi-just                 # numbered menu, then run the choice
    multi-just --list          # print labels only
    multi-just --target build  # run without prompting
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO

from .cache.store import CacheWriteError, PersistentProjectCache, ProjectCache
from .core.project import NO_PROJECT
from .core.utils import setup_logging
from .just import ExecutionError, JustTargetProvider, LabeledAction, MultiJustConfig, TargetSnapshot, load_config
from .just.provider import DEFAULT_PROJECT_TYPE

EXIT_USAGE = 2
EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multi-just",
        description="List the targets of the project's justfile and run one.",
    )
    parser.add_argument("--justfile", type=str, default=None, help="Explicit justfile path (skips candidate search).")
    parser.add_argument("--project-type", type=str, default=DEFAULT_PROJECT_TYPE, help="Label prefix for targets.")
    parser.add_argument("--cache-targets", choices=["auto", "true", "false"], default=None)
    parser.add_argument("--config", type=str, default=None, help="JSON configuration file.")
    parser.add_argument("--cache-dir", type=str, default=None, help="Keep cached targets on disk under this directory.")
    parser.add_argument("--directory", "-C", type=str, default=None, help="Run as if started in this directory.")
    parser.add_argument("--list", action="store_true", default=False, help="Print target labels and exit.")
    parser.add_argument("--target", type=str, default=None, help="Run this target (name or label) without prompting.")
    parser.add_argument("--log-dir", type=str, default=None)
    parser.add_argument("--verbose", "-v", action="store_true", default=False)
    return parser


def resolve_config(args: argparse.Namespace) -> MultiJustConfig:
    config = load_config(args.config) if args.config else MultiJustConfig()
    return config.with_overrides(cache_targets=args.cache_targets, cache_dir=args.cache_dir)


def make_cache(config: MultiJustConfig) -> ProjectCache:
    if config.cache_dir:
        return PersistentProjectCache(
            config.cache_dir,
            encode=lambda snapshot: snapshot.to_json_dict(),
            decode=TargetSnapshot.from_json_dict,
        )
    return ProjectCache()


def choose_action(
    actions: Sequence[LabeledAction],
    *,
    input_fn: Callable[[str], str] = input,
    out: Optional[TextIO] = None,
) -> Optional[LabeledAction]:
    """Print a numbered menu and return the chosen action.

    Returns None when there is nothing to choose or the user enters nothing.
    Raises ValueError on a choice that is neither a number in range nor a label.
    """
    if not actions:
        return None

    if out is None:
        out = sys.stdout
    for i, action in enumerate(actions, start=1):
        print(f"{i:3d}) {action.label}", file=out)

    try:
        answer = input_fn("Target: ").strip()
    except EOFError:
        return None
    if not answer:
        return None

    if answer.isdigit():
        index = int(answer)
        if 1 <= index <= len(actions):
            return actions[index - 1]
        raise ValueError(f"Choice out of range: {answer}")
    return find_action(actions, answer)


def find_action(actions: Sequence[LabeledAction], name: str) -> LabeledAction:
    for action in actions:
        if name in (action.target, action.label):
            return action
    raise ValueError(f"Unknown target: {name}")


def _attach_package_logging(logger: logging.Logger) -> None:
    package_logger = logging.getLogger("MultiJust")
    package_logger.setLevel(logger.level)
    for handler in logger.handlers:
        if handler not in package_logger.handlers:
            package_logger.addHandler(handler)


def main(argv: Optional[List[str]] = None, *, input_fn: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args)
    except (OSError, ValueError) as exc:
        print(f"multi-just: {exc}", file=sys.stderr)
        return EXIT_USAGE

    provider = JustTargetProvider(config, cache=make_cache(config), directory=args.directory)
    project_id = provider.project_id()
    label = Path(project_id).name if project_id != NO_PROJECT else "none"

    logger = setup_logging(
        "multi_just",
        label,
        log_dir=args.log_dir,
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )
    if args.verbose:
        _attach_package_logging(logger)

    try:
        actions = provider.get_targets(args.project_type, args.justfile)
    except CacheWriteError as exc:
        print(f"multi-just: cannot write target cache: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"multi-just: cannot read justfile: {exc}", file=sys.stderr)
        return 1
    logger.info("Found %d targets in project %s", len(actions), project_id)

    if not actions:
        print("No just targets found.")
        return 0

    if args.list:
        for action in actions:
            print(action.label)
        return 0

    try:
        if args.target:
            chosen = find_action(actions, args.target)
        else:
            chosen = choose_action(actions, input_fn=input_fn)
    except ValueError as exc:
        print(f"multi-just: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if chosen is None:
        return 0

    logger.info("Running %s", chosen.label)
    try:
        result = chosen.run(timeout_seconds=config.timeout_seconds, capture_output=False)
    except ExecutionError as exc:
        print(f"multi-just: {exc}", file=sys.stderr)
        return EXIT_NOT_FOUND

    if result.timed_out:
        print(f"multi-just: {chosen.label} timed out after {config.timeout_seconds}s", file=sys.stderr)
        return EXIT_TIMEOUT
    if not result.ok:
        logger.warning("%s exited with code %s", chosen.label, result.exit_code)
    return int(result.exit_code or 0)


if __name__ == "__main__":
    sys.exit(main())
