"""
Congreso ingestion pipeline registry.

Run one task or the whole chain from a single entry point.

Usage:
    python src/ingestion/pipeline.py                 # all: diputados, votaciones, iniciativas, normalizar
    python src/ingestion/pipeline.py votaciones      # one task
    python src/ingestion/pipeline.py all --dry-run   # no Supabase writes, snapshots only
    python src/ingestion/pipeline.py --list          # show available tasks

Configuration comes from the environment (or a .env file); see
config.IngestConfig.from_env for the variables.

Failure policy:
  The first fatal error (fetch, parse, persist, config) stops the run: the
  remaining stages of a multi-stage task are not attempted, the message is
  printed and the process exits with status 1. Snapshots and Supabase rows
  written before the failure stay in place; re-running is safe.

Adding a new task:
    1. Create a module with an extract_all(config) function (see
       extract_iniciativas.py for the simplest example).
    2. Add one entry to _build_registry() below (and to TASK_GROUPS["all"] if it
       belongs in the default chain).
"""

import argparse
import sys
from dataclasses import replace
from typing import Callable

from config import IngestConfig
from errors import IngestError
from utils import configure_utf8

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
# Each entry describes one task:
#
#   "fn"   : the extract_all(config) callable
#   "desc" : human-readable description (shown in --list)
# ---------------------------------------------------------------------------

USAGE = "Uso: python src/ingestion/pipeline.py [diputados|votaciones|iniciativas|normalizar|quesevota|all]"


def _build_registry() -> dict[str, dict]:
    # Lazy imports so individual stages can still be run standalone
    import extract_diputados
    import extract_iniciativas
    import extract_quesevota
    import extract_votaciones
    import normalize

    return {
        "diputados": {
            "fn":   extract_diputados.extract_all,
            "desc": "Deputies export of all legislatures -> deputies_raw",
        },
        "votaciones": {
            "fn":   extract_votaciones.extract_all,
            "desc": "Roll-call vote files from the official portal -> votes_raw",
        },
        "iniciativas": {
            "fn":   extract_iniciativas.extract_all,
            "desc": "Initiative JSON links (snapshot only)",
        },
        "normalizar": {
            "fn":   normalize.extract_all,
            "desc": "Canonical deputies/parties/memberships/votes/vote_results",
        },
        "quesevota": {
            "fn":   extract_quesevota.extract_all,
            "desc": "Official vote URLs via the quesevota.es mirror (QV_INGEST=1 to load)",
        },
    }


TASK_GROUPS: dict[str, list[str]] = {
    "all": ["diputados", "votaciones", "iniciativas", "normalizar"],
}


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def resolve_task(task: str, registry: dict[str, dict]) -> list[str] | None:
    """Stage names for ``task``, or ``None`` if it is not recognized."""
    if task in TASK_GROUPS:
        return TASK_GROUPS[task]
    if task in registry:
        return [task]
    return None


def run_stages(names: list[str], registry: dict[str, dict], config: IngestConfig) -> None:
    """Run stages in order; the first IngestError propagates and stops the run."""
    for name in names:
        fn: Callable = registry[name]["fn"]
        print(f"\n{'=' * 60}")
        print(f"TASK: {name}")
        print(f"{'=' * 60}")
        fn(config)


def main(argv: list[str] | None = None) -> int:
    configure_utf8()
    registry = _build_registry()

    parser = argparse.ArgumentParser(
        description="Ingest Congreso de los Diputados open data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available tasks: {', '.join([*registry, *TASK_GROUPS])}",
    )
    parser.add_argument(
        "task",
        nargs="?",
        default="all",
        help="Task to run (default: all).",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available tasks and exit.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and snapshot everything but skip Supabase writes (same as DRY_RUN=1).",
    )
    args = parser.parse_args(argv)

    if args.list:
        print("Available tasks:\n")
        for name, entry in registry.items():
            print(f"  {name:<14} {entry['desc']}")
        for name, stages in TASK_GROUPS.items():
            print(f"  {name:<14} {' -> '.join(stages)}")
        return 0

    names = resolve_task(args.task, registry)
    if names is None:
        print(USAGE)
        return 0

    try:
        config = IngestConfig.from_env()
        if args.dry_run:
            config = replace(config, dry_run=True)
        run_stages(names, registry, config)
    except (IngestError, OSError) as exc:
        print(f"Error en ingesta: {exc}", file=sys.stderr)
        return 1

    print("\nIngesta completada.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
