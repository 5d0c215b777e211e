from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Recipe finder (Ollama + Qdrant hybrid search)")
    sub = ap.add_subparsers(dest="cmd", required=True)

    # Manage collection
    ec = sub.add_parser("ensure-collection")
    ec.add_argument("--name", required=False, help="Collection name; defaults to $RECIPE_COLLECTION_NAME")
    ec.add_argument("--dim", type=int, default=None)
    ec.add_argument("--distance", default="Cosine", choices=["Cosine"], help="Only Cosine; similarity scores assume it")
    ec.add_argument("--recreate", action="store_true")

    # Embed and store recipes from a JSON/JSONL file
    ix = sub.add_parser("ingest")
    ix.add_argument("--name", required=False, help="Collection name; defaults to $RECIPE_COLLECTION_NAME")
    ix.add_argument("--file", required=True, help="Path to .json or .jsonl recipe file")
    ix.add_argument("--max-items", type=int, default=None)

    sr = sub.add_parser("search")
    sr.add_argument("--name", required=False, help="Collection name; defaults to $RECIPE_COLLECTION_NAME")
    sr.add_argument("--q", required=True, help="Free-text query")
    sr.add_argument("--limit", type=int, default=5)
    sr.add_argument("--top-k", type=int, default=None, help="Candidate pool size; defaults to $RF_TOP_K or 20")
    sr.add_argument("--threshold", type=float, default=None, help="Minimum similarity in [0, 1]")
    sr.add_argument("--timeout", type=float, default=None, help="Retrieval budget in seconds")
    add_filter_arguments(sr)
    add_preference_arguments(sr)

    sh = sub.add_parser("show")
    sh.add_argument("--name", required=False, help="Collection name; defaults to $RECIPE_COLLECTION_NAME")
    sh.add_argument("--id", required=True, help="Recipe identifier")

    return ap


def add_filter_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Hard filters: every supplied flag must hold for a recipe to be returned."""
    g = parser.add_argument_group("filters")
    g.add_argument("--cuisine")
    g.add_argument("--max-prep-time", type=int, default=None)
    g.add_argument("--difficulty")
    g.add_argument("--dietary", action="append", default=[], help="Required dietary label; can repeat")
    g.add_argument("--require", action="append", default=[], help="Required ingredient; can repeat")
    g.add_argument("--exclude", action="append", default=[], help="Excluded ingredient; can repeat")
    g.add_argument("--min-servings", type=int, default=None)
    g.add_argument("--max-servings", type=int, default=None)
    g.add_argument("--min-rating", type=float, default=None)
    return parser


def add_preference_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Soft preferences: adjust ranking, never exclude."""
    g = parser.add_argument_group("preferences")
    g.add_argument("--favorite-cuisine", action="append", default=[], help="Boosted cuisine; can repeat")
    g.add_argument("--dislike", action="append", default=[], help="Penalised ingredient; can repeat")
    g.add_argument("--skill-level")
    g.add_argument("--prefer-quick", action="store_true")
    return parser
