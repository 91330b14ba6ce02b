#!/usr/bin/env python3
"""Render namespace trees or run a bounded query over a crsearch database.

Loads a ``crsearch.json`` payload, builds every namespace, and writes JSON to
stdout with summary messages to stderr.

Usage:
    python3 scripts/crsearch_tree.py --db crsearch.json --namespace reference
    python3 scripts/crsearch_tree.py --db crsearch.json --query "vector push" \
      --max-count 20
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from crsearch.classifier import DefaultKindClassifier, load_categories
from crsearch.database import Database
from crsearch.io_utils import dumps_json
from crsearch.query import Query

log = logging.getLogger("crsearch_tree")


def dump_json(obj: object) -> None:
    sys.stdout.buffer.write(dumps_json(obj))
    sys.stdout.buffer.write(b"\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render namespace trees or query a crsearch database."
    )
    parser.add_argument(
        "--db", required=True, type=Path, help="Path to crsearch.json"
    )
    parser.add_argument(
        "--namespace",
        default=None,
        help="Only render this namespace, segments joined by '/' (e.g. reference)",
    )
    parser.add_argument(
        "--query",
        default=None,
        help="Run a query instead of rendering trees",
    )
    parser.add_argument(
        "--max-count",
        type=int,
        default=100,
        help="Maximum number of query results (default: 100)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Override the database base URL used for result paths",
    )
    parser.add_argument(
        "--categories",
        type=Path,
        default=None,
        help="JSON file mapping first namespace segments to categories",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose logging",
    )
    return parser


def run_query(db: Database, text: str, q: Query, max_count: int) -> dict[str, Any]:
    result = db.query(q, max_count)
    print(
        f"Found {result.found_count} matches"
        + (f" (showing first {max_count})" if result.truncated else ""),
        file=sys.stderr,
    )
    return {
        "query": text,
        "found_count": result.found_count,
        "truncated": result.truncated,
        "targets": [
            {"path": t.path, "index": t.index.summary()} for t in result.targets
        ],
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.db.exists():
        print(f"Error: database not found: {args.db}", file=sys.stderr)
        return 1

    db = Database.load(args.db, base_url=args.base_url)

    if args.query is not None:
        try:
            q = Query.parse(args.query)
        except ValueError as exc:
            print(f"Error: invalid query: {exc}", file=sys.stderr)
            return 1
        dump_json(run_query(db, args.query, q, args.max_count))
        return 0

    categories = None
    if args.categories is not None:
        if not args.categories.exists():
            print(f"Error: categories file not found: {args.categories}", file=sys.stderr)
            return 1
        categories = load_categories(args.categories)
    kc = DefaultKindClassifier(categories)

    if args.namespace is not None:
        ns = db.find_namespace([s for s in args.namespace.split("/") if s])
        if ns is None:
            print(f"Error: unknown namespace: {args.namespace}", file=sys.stderr)
            return 1
        trees = [ns.make_tree(kc)]
    else:
        trees = db.make_trees(kc)

    log.info("rendered %d namespace tree(s)", len(trees))
    dump_json([tree.to_dict() for tree in trees])
    return 0


if __name__ == "__main__":
    sys.exit(main())
