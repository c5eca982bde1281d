"""CLI entry point for the grocery module."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..types import Recipe
from .commit import CommitSession, CommitStateError, UnresolvedDecisionsError
from .config import GroceryConfig, load_config
from .consolidation import ConsolidationEngine
from .db import GroceryListDB
from .duplicates import find_duplicates, resolve_duplicates
from .ingredients import parse_ingredient_line
from .models import AnalysisResult, MatchDecision, RecipeSelection
from .quantity import QuantityError


class CLIError(Exception):
    """A user-facing error; printed to stderr before exiting with status 1."""


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="recipebook-grocery",
        description="Consolidate recipe ingredients into a grocery list",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to a TOML config file",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # parse
    parse_parser = sub.add_parser("parse", help="Parse free-text ingredient lines")
    parse_parser.add_argument("lines", nargs="+", metavar="LINE")
    parse_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # lists
    sub.add_parser("lists", help="Show grocery lists")

    # create-list
    create_parser = sub.add_parser("create-list", help="Create a grocery list")
    create_parser.add_argument("name")
    create_parser.add_argument("--description", default=None)

    # items
    items_parser = sub.add_parser("items", help="Show the items of a list")
    items_parser.add_argument("list_id")

    # analyze / commit share their recipe arguments
    recipe_args = argparse.ArgumentParser(add_help=False)
    recipe_args.add_argument("list_id")
    recipe_args.add_argument(
        "--recipes", required=True, metavar="FILE",
        help="JSON file with a list of recipes",
    )
    recipe_args.add_argument(
        "--select", action="append", required=True, metavar="ID[:MULT[:VARIANT]]",
        help="Recipe to add, optionally with a multiplier and variant id",
    )

    analyze_parser = sub.add_parser(
        "analyze", parents=[recipe_args], help="Show how recipes would merge into a list"
    )
    analyze_parser.add_argument("--json", action="store_true", help="Output as JSON")

    commit_parser = sub.add_parser(
        "commit", parents=[recipe_args], help="Add recipes to a list"
    )
    commit_parser.add_argument(
        "--decide", action="append", default=[], metavar="MATCH_ID=DECISION",
        help="Decision for a partial match: merge, separate or skip",
    )

    # duplicates
    dup_parser = sub.add_parser("duplicates", help="Find near-duplicate items in a list")
    dup_parser.add_argument("list_id")
    dup_parser.add_argument(
        "--merge-all", action="store_true", help="Merge every duplicate group"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.config)

        match args.command:
            case "parse":
                _cmd_parse(args)
            case "lists":
                _cmd_lists(config)
            case "create-list":
                _cmd_create_list(config, args)
            case "items":
                _cmd_items(config, args)
            case "analyze":
                _cmd_analyze(config, args)
            case "commit":
                _cmd_commit(config, args)
            case "duplicates":
                _cmd_duplicates(config, args)
    except (
        CLIError,
        UnresolvedDecisionsError,
        CommitStateError,
        QuantityError,
        ImportError,
    ) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _cmd_parse(args) -> None:
    parsed = [parse_ingredient_line(line) for line in args.lines]

    if args.json:
        data = [
            {
                "original_text": p.original_text,
                "ingredient_name": p.ingredient_name,
                "quantity": p.quantity_text,
                "unit": p.unit,
                "notes": p.notes,
            }
            for p in parsed
        ]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    for p in parsed:
        amount = " ".join(x for x in (p.quantity_text, p.unit) if x)
        notes = f" ({p.notes})" if p.notes else ""
        print(f"  {p.ingredient_name:<24} {amount}{notes}")


def _cmd_lists(config: GroceryConfig) -> None:
    db = GroceryListDB(config.database.path)
    try:
        lists = db.get_lists()
    finally:
        db.close()

    if not lists:
        print("No grocery lists yet.")
        return
    for row in lists:
        print(f"  {row['id']}  {row['name']}")


def _cmd_create_list(config: GroceryConfig, args) -> None:
    db = GroceryListDB(config.database.path)
    try:
        list_id = db.create_list(args.name, args.description)
    finally:
        db.close()
    print(list_id)


def _cmd_items(config: GroceryConfig, args) -> None:
    db = GroceryListDB(config.database.path)
    try:
        _require_list(db, args.list_id)
        items = db.get_items(args.list_id)
    finally:
        db.close()

    if not items:
        print("The list is empty.")
        return
    for item in items:
        mark = "x" if item.is_completed else " "
        amount = " ".join(x for x in (item.quantity, item.unit) if x)
        notes = f" ({item.notes})" if item.notes else ""
        print(f"  [{mark}] {item.name:<24} {amount}{notes}")


def _cmd_analyze(config: GroceryConfig, args) -> None:
    selections = _load_selections(args.recipes, args.select)
    db = GroceryListDB(config.database.path)
    try:
        _require_list(db, args.list_id)
        existing = db.get_items(args.list_id)
    finally:
        db.close()

    analysis = _engine(config).analyze(selections, existing)

    if args.json:
        data = {
            "summary": analysis.summary_dict(),
            "partial_matches": [m.to_dict() for m in analysis.partial_matches],
            "exact_matches": [m.to_dict() for m in analysis.exact_matches],
            "new_items": [
                {
                    "ingredient": s.ingredient.ingredient_name,
                    "quantity": s.ingredient.quantity_text,
                    "unit": s.ingredient.unit,
                }
                for s in analysis.new_items
            ],
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    _print_analysis(analysis)


def _cmd_commit(config: GroceryConfig, args) -> None:
    selections = _load_selections(args.recipes, args.select)
    decisions = _parse_decisions(args.decide)

    db = GroceryListDB(config.database.path)
    try:
        _require_list(db, args.list_id)
        existing = db.get_items(args.list_id)
        analysis = _engine(config).analyze(selections, existing)

        session = CommitSession(analysis, existing)
        for match_id, decision in decisions.items():
            try:
                session.decide(match_id, decision)
            except KeyError:
                raise CLIError(f"unknown match id: {match_id}") from None
        result = session.commit()
        db.apply_commit(args.list_id, result, selections)
    finally:
        db.close()

    print(f"Added {len(result.created)} items, updated {len(result.updated)} items.")


def _cmd_duplicates(config: GroceryConfig, args) -> None:
    db = GroceryListDB(config.database.path)
    try:
        _require_list(db, args.list_id)
        items = db.get_items(args.list_id)
        groups = find_duplicates(
            items,
            threshold=config.matching.threshold,
            synonyms=config.matching.synonym_table(),
        )

        if not groups:
            print("No duplicates found.")
            return

        for group in groups:
            names = ", ".join(d.name for d in group.duplicate_items)
            print(
                f"  {group.primary_item.name} <- {names}"
                f" ({group.confidence:.0%})"
            )

        if args.merge_all:
            resolution = resolve_duplicates(
                groups, {g.group_id: MatchDecision.MERGE for g in groups}
            )
            db.apply_duplicate_resolution(args.list_id, resolution)
            print(
                f"Merged {resolution.merged_groups} groups,"
                f" removed {len(resolution.deleted_ids)} items."
            )
    finally:
        db.close()


def _engine(config: GroceryConfig) -> ConsolidationEngine:
    return ConsolidationEngine(
        threshold=config.matching.threshold,
        synonyms=config.matching.synonym_table(),
        auto_merge_uniform_clusters=config.matching.auto_merge_uniform_clusters,
    )


def _require_list(db: GroceryListDB, list_id: str) -> None:
    if not db.list_exists(list_id):
        raise CLIError(f"grocery list not found: {list_id}")


def _load_selections(path: str, selects: list[str]) -> list[RecipeSelection]:
    """Read recipes from a JSON file and resolve ``ID[:MULT[:VARIANT]]`` picks."""
    p = Path(path)
    if not p.exists():
        raise CLIError(f"recipe file not found: {path}")
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CLIError(f"invalid recipe file {path}: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("recipes", [])
    recipes = {r.id: r for r in (Recipe.from_dict(d) for d in raw)}

    selections: list[RecipeSelection] = []
    for pick in selects:
        recipe_id, _, rest = pick.partition(":")
        mult_text, _, variant_id = rest.partition(":")
        recipe = recipes.get(recipe_id)
        if recipe is None:
            raise CLIError(f"recipe not found: {recipe_id}")
        try:
            multiplier = float(mult_text) if mult_text else 1.0
        except ValueError:
            raise CLIError(f"invalid multiplier in {pick!r}") from None
        if multiplier <= 0:
            raise CLIError(f"multiplier must be positive in {pick!r}")
        if variant_id and recipe.get_variant(variant_id) is None:
            raise CLIError(f"variant {variant_id} not found in recipe {recipe_id}")
        selections.append(
            RecipeSelection(recipe, multiplier, variant_id or None)
        )
    return selections


def _parse_decisions(pairs: list[str]) -> dict[str, MatchDecision]:
    decisions: dict[str, MatchDecision] = {}
    for pair in pairs:
        match_id, sep, value = pair.partition("=")
        if not sep:
            raise CLIError(f"expected MATCH_ID=DECISION, got {pair!r}")
        try:
            decisions[match_id.strip()] = MatchDecision(value.strip().lower())
        except ValueError:
            raise CLIError(
                f"invalid decision {value!r} (use merge, separate or skip)"
            ) from None
    return decisions


def _print_analysis(analysis: AnalysisResult) -> None:
    summary = analysis.summary_dict()
    print(
        f"{summary['total_recipes']} recipes: "
        f"{summary['exact_match_count']} exact, "
        f"{summary['partial_match_count']} need a decision, "
        f"{summary['new_item_count']} new"
    )

    if analysis.partial_matches:
        print("\nNeeds a decision:")
        for match in analysis.partial_matches:
            target = (
                f" ~ {match.existing_item.name}" if match.existing_item else ""
            )
            print(
                f"  {match.match_id}  {match.ingredient.ingredient_name}{target}"
                f" ({match.confidence:.0%}, {match.match_type.value})"
            )
            for recipe in match.contributing_recipes:
                print(f"      {recipe.title}: {recipe.ingredient_line}")

    if analysis.exact_matches:
        print("\nMerging into existing items:")
        for match in analysis.exact_matches:
            amount = " ".join(
                x for x in (match.ingredient.quantity_text, match.ingredient.unit) if x
            )
            print(f"  {match.existing_item.name} += {amount or '1'}")

    if analysis.new_items:
        print("\nNew items:")
        for item in analysis.new_items:
            p = item.ingredient
            amount = " ".join(x for x in (p.quantity_text, p.unit) if x)
            print(f"  {p.ingredient_name:<24} {amount}")


if __name__ == "__main__":
    main()
