"""Terminal client that reuses the in-process menu search."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable

from restodesk.menu_service import search_menu
from restodesk.search import ALL_CATEGORIES

MAX_RESULTS = 50
GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def perform_query(query: str, category: str = ALL_CATEGORIES) -> dict:
    return search_menu(query, category)


def interactive_shell(category: str) -> None:
    print("Interactive menu search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        pretty_print_response(query, perform_query(query, category))


def pretty_print_response(query: str, payload: dict) -> None:
    results = payload.get("results", [])
    color = GREEN if results else RED
    took = float(payload.get("took_ms", 0))
    print(f"Query: {query} | category: {payload.get('category')} | {color}results: {len(results)}{RESET} | {took:.2f} ms")
    for idx, item in enumerate(results[:MAX_RESULTS], start=1):
        print(
            f"  {idx:02d}. score={item.get('relevanceScore', 0):>4} | {item.get('name')} | "
            f"₹{item.get('price', 0):g} | {', '.join(item.get('categories', []))}"
        )


def batch_mode(file_path: Path, category: str) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            pretty_print_response(query, perform_query(query, category))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the menu search")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--category", default=ALL_CATEGORIES, help="Restrict results to one category")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.batch:
        batch_mode(args.batch, args.category)
        return 0
    if args.query:
        pretty_print_response(args.query, perform_query(args.query, args.category))
        return 0
    interactive_shell(args.category)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
