"""
Command-line entry point.

Usage:
    advancement-toolkit tree camping-2024.json --progress scout.json
    advancement-toolkit validate camping-2024.json --strict --report issues.json
    advancement-toolkit reconcile camping-2022.json camping-2024.json --completed 1,2a,3
    advancement-toolkit import-history history.csv --json

Exit codes: 0 success, 1 problems found, 2 unreadable or invalid input.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from advancement_toolkit import __version__
from advancement_toolkit.common.settings import EngineSettings, load_settings
from advancement_toolkit.core.models import RequirementNode
from advancement_toolkit.core.schemas import ValidationError
from advancement_toolkit.core.utils import (
    SerializationError,
    forest_to_dict,
    load_progress,
    load_requirement_set,
    mappings_to_json,
)
from advancement_toolkit.diagnostics import DiagnosticsCollector
from advancement_toolkit.history import parse_history, summarize_history, validate_history
from advancement_toolkit.reconcile import ReconcileConfig, reconcile_requirements, summarize_mappings
from advancement_toolkit.structuring import (
    build_requirement_tree,
    default_collapsed,
    forest_stats,
    stats_by_node,
    validate_requirements,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_BAD_INPUT = 2


def _configure_logging(verbose: bool, settings: EngineSettings) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def _tree_command(args: argparse.Namespace, settings: EngineSettings) -> int:
    requirement_set = load_requirement_set(args.requirements, strict=args.strict)
    progress = load_progress(args.progress) if args.progress else []

    forest = build_requirement_tree(requirement_set.input_shape(), progress)
    stats = stats_by_node(forest)
    collapsed = default_collapsed(forest, args.collapse_completed or settings.collapse_completed)

    if args.json:
        print(json.dumps({
            "name": requirement_set.name,
            "version": requirement_set.version,
            "stats": forest_stats(forest).to_dict(),
            "forest": forest_to_dict(forest, stats, collapsed),
        }, indent=2, ensure_ascii=False))
        return EXIT_OK

    print(f"{requirement_set.name} ({requirement_set.version}): {forest_stats(forest)} complete")
    for root in forest:
        _print_node(root, stats, collapsed, depth=0)
    return EXIT_OK


def _print_node(node: RequirementNode, stats, collapsed, depth: int) -> None:
    mark = "x" if node.is_complete else " "
    counts = f" ({stats[node.id]})" if node.children else ""
    fold = " [+]" if node.id in collapsed else ""
    print(f"{'  ' * depth}[{mark}] {node.requirement.requirement_number} "
          f"{node.requirement.description}{counts}{fold}")
    if node.id in collapsed:
        return
    for child in node.children:
        _print_node(child, stats, collapsed, depth + 1)


def _validate_command(args: argparse.Namespace, settings: EngineSettings) -> int:
    requirement_set = load_requirement_set(args.requirements, strict=args.strict)
    collector = DiagnosticsCollector(source=str(args.requirements))
    issues = validate_requirements(requirement_set.requirements, collector)
    report = collector.generate_report()
    if args.report:
        report.save(args.report)

    if args.json:
        print(report.to_json())
    elif not issues:
        print(f"{requirement_set.name} ({requirement_set.version}): no issues")
    else:
        for issue in issues:
            print(f"{issue.issue_type}: {issue.requirement_number} {issue.message}")
        print(f"{len(issues)} issue(s)")
    return EXIT_PROBLEMS if issues else EXIT_OK


def _reconcile_command(args: argparse.Namespace, settings: EngineSettings) -> int:
    source = load_requirement_set(args.source, strict=args.strict)
    target = load_requirement_set(args.target, strict=args.strict)

    if args.completed is not None:
        completed = {n.strip() for n in args.completed.split(",") if n.strip()}
    else:
        done_ids = {r.requirement_id for r in load_progress(args.progress) if r.is_complete}
        completed = {r.requirement_number for r in source.requirements if r.id in done_ids}

    config = ReconcileConfig(
        likely_similarity=settings.likely_similarity,
        match_external_numbers=settings.match_external_numbers,
    )
    mappings = reconcile_requirements(source.requirements, target.requirements, completed, config)

    if args.json:
        print(mappings_to_json(mappings))
        return EXIT_OK

    for m in mappings:
        target_text = m.target_number if m.has_target else "-"
        flag = "  (review)" if m.needs_review else ""
        print(f"{m.source_number:>8} -> {target_text:<8} {m.confidence}{flag}")
    summary = summarize_mappings(mappings)
    print(f"{summary.total} mapped: {summary.exact} exact, {summary.likely} likely, "
          f"{summary.none} unmatched")
    return EXIT_OK


def _import_history_command(args: argparse.Namespace, settings: EngineSettings) -> int:
    try:
        document = Path(args.file).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise SerializationError(f"Cannot read {args.file}: {e}", path=str(args.file)) from e

    history = parse_history(document)
    problems = validate_history(history)

    if args.json:
        print(json.dumps(history.to_dict(), indent=2, ensure_ascii=False))
    else:
        summary = summarize_history(history)
        print(f"Scout: {summary.scout_name or '?'} ({summary.current_rank or 'no rank'})")
        print(f"Ranks: {summary.completed_ranks} completed, {summary.in_progress_ranks} in progress")
        print(f"Merit badges: {summary.completed_badges} completed, "
              f"{summary.in_progress_badges} in progress")
        print(f"Leadership positions: {summary.leadership_positions}")
        print(f"Camping nights: {summary.camping_nights:g}, service hours: "
              f"{summary.service_hours:g}, hiking miles: {summary.hiking_miles:g}")
        for problem in problems:
            print(f"warning: {problem}")

    # Parse errors are warnings; missing name or data blocks the import
    return EXIT_PROBLEMS if len(problems) > len(history.errors) else EXIT_OK


# ─────────────────────────────────────────────────────────────────────────────
# Parser
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="advancement-toolkit",
        description="Requirement trees, version reconciliation and history import.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--settings", type=Path, help="Path to a settings JSON file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    tree = subparsers.add_parser("tree", help="Show a requirement tree with completion counts.")
    tree.add_argument("requirements", type=Path, help="Requirement set JSON")
    tree.add_argument("--progress", type=Path, help="Progress JSON")
    tree.add_argument("--collapse-completed", action="store_true",
                      help="Collapse fully complete requirements that have children")
    tree.set_defaults(func=_tree_command)

    validate = subparsers.add_parser("validate", help="Check a requirement set for hierarchy problems.")
    validate.add_argument("requirements", type=Path, help="Requirement set JSON")
    validate.add_argument("--report", type=Path, help="Also write the diagnostics report to this JSON file")
    validate.set_defaults(func=_validate_command)

    reconcile = subparsers.add_parser("reconcile", help="Map completed requirements to another version.")
    reconcile.add_argument("source", type=Path, help="Requirement set the scout worked under")
    reconcile.add_argument("target", type=Path, help="Requirement set to switch to")
    completed = reconcile.add_mutually_exclusive_group(required=True)
    completed.add_argument("--completed", help="Comma-separated completed requirement numbers")
    completed.add_argument("--progress", type=Path, help="Progress JSON for the source version")
    reconcile.set_defaults(func=_reconcile_command)

    history = subparsers.add_parser("import-history", help="Parse a ScoutBook history export.")
    history.add_argument("file", type=Path, help="History export (CSV text)")
    history.set_defaults(func=_import_history_command)

    for sub in (tree, validate, reconcile, history):
        sub.add_argument("--json", action="store_true", help="Emit JSON")
    for sub in (tree, validate, reconcile):
        sub.add_argument("--strict", action="store_true", help="Full JSON schema validation")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    _configure_logging(args.verbose, settings)

    try:
        return int(args.func(args, settings))
    except (FileNotFoundError, SerializationError, ValidationError) as e:
        logger.debug(f"{type(e).__name__} at {getattr(e, 'path', '')!r}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    raise SystemExit(main())
