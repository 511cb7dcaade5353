"""
Command-line interface for inspecting alignments and editing patches.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from alignment_inspector import __version__
from alignment_inspector.config import InspectorConfig, load_config
from alignment_inspector.exceptions import (
    ConfigError,
    EntityNotFoundError,
    StorageError,
)
from alignment_inspector.models import (
    EDITABLE_FIELDS,
    DocumentKind,
    EntityKind,
    GlossaryEntry,
    Morpheme,
    MorphemeType,
    Rule,
)
from alignment_inspector.state import InspectorState
from alignment_inspector.status import short_gloss
from alignment_inspector.storage import PatchDB, export_patches, import_patches
from alignment_inspector.views import GLOSSARY_VIEW_LIMIT


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the alignment-inspector CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        config = _build_config(args)
    except ConfigError as e:
        print(f"\n  [CONFIG ERROR] {e}")
        if e.line:
            print(f"                Line: {e.line}")
        return 1
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    level = logging.DEBUG if args.verbose else config.log_level_number
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    state = InspectorState.open(PatchDB(config.patches))
    for kind, path in config.documents.items():
        if not state.set_document(kind, path):
            print(f"\n  [ERROR] Could not load {kind.value} from {path}")
            return 1

    try:
        return args.func(args, state)
    except EntityNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="alignment-inspector",
        description="Inspect morpheme alignments and keep local corrections",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--alignments", type=Path, help="Alignments JSON file")
    parser.add_argument("--glossary", type=Path, help="Glossary JSON file")
    parser.add_argument("--rules", type=Path, help="Rules JSON file")
    parser.add_argument("--patches", type=Path, help="Patch database file")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # lines command
    lines_parser = subparsers.add_parser(
        "lines",
        help="List alignment lines",
    )
    lines_parser.add_argument(
        "--query", "-q",
        default="",
        help="Only show lines whose source or target text contains this",
    )
    lines_parser.set_defaults(func=cmd_lines)

    # word command
    word_parser = subparsers.add_parser(
        "word",
        help="Show the morpheme breakdown of one word",
    )
    word_parser.add_argument("line", type=int, help="Line number (from 1)")
    word_parser.add_argument("index", type=int, help="Word position (from 1)")
    word_parser.set_defaults(func=cmd_word)

    # glossary / rules commands
    for name, func, help_text in (
        ("glossary", cmd_glossary, "Browse glossary entries"),
        ("rules", cmd_rules, "Browse rules"),
    ):
        view_parser = subparsers.add_parser(name, help=help_text)
        view_parser.add_argument(
            "--search", "-s",
            default="",
            help="Filter by form or gloss (patched values included)",
        )
        view_parser.add_argument(
            "--word",
            type=int,
            nargs=2,
            metavar=("LINE", "INDEX"),
            help="Only show records used by this word",
        )
        view_parser.set_defaults(func=func)

    # edit command
    edit_parser = subparsers.add_parser(
        "edit",
        help="Patch a glossary entry, rule or unknown morpheme",
    )
    edit_parser.add_argument(
        "kind",
        choices=[k.value for k in EntityKind],
        help="Kind of record to patch",
    )
    edit_parser.add_argument(
        "identifier",
        help="Entry or rule id; surface form for unknown morphemes",
    )
    edit_parser.add_argument(
        "fields",
        nargs="+",
        metavar="FIELD=VALUE",
        help="Fields to change",
    )
    edit_parser.set_defaults(func=cmd_edit)

    # patches command
    patches_parser = subparsers.add_parser(
        "patches",
        help="List, export or import patches",
    )
    patches_sub = patches_parser.add_subparsers(title="actions", dest="action")
    list_parser = patches_sub.add_parser("list", help="List stored patches")
    list_parser.set_defaults(func=cmd_patches_list)
    export_parser = patches_sub.add_parser("export", help="Write patches to JSON")
    export_parser.add_argument("file", type=Path)
    export_parser.set_defaults(func=cmd_patches_export)
    import_parser = patches_sub.add_parser("import", help="Merge patches from JSON")
    import_parser.add_argument("file", type=Path)
    import_parser.set_defaults(func=cmd_patches_import)

    return parser


def _build_config(args: argparse.Namespace) -> InspectorConfig:
    config = load_config(args.config) if args.config else InspectorConfig()
    for kind in DocumentKind:
        path = getattr(args, kind.value, None)
        if path is not None:
            config.documents[kind] = path
    if args.patches is not None:
        config.patches = args.patches
    return config


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_lines(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle lines command."""
    if state.alignments is None:
        print("\n  [ERROR] No alignments loaded (use --alignments or --config)")
        return 1

    doc = state.alignments
    title = doc.project or "Alignments"
    print(f"\n{title}: {doc.source_language or '?'} -> {doc.target_language or '?'}")
    stats = state.stats()
    print(
        f"  {stats['lines']} lines, {stats['glossary_entries']} glossary entries, "
        f"{stats['rules']} rules"
    )

    state.search_query = args.query
    lines = state.alignment_view()
    if not lines:
        print("\nNo matching alignments")
        return 0

    for item in lines:
        print(f"\nLine {item.index + 1}")
        print(f"  {item.line.source_line}")
        print(f"  {item.line.target_line}")
        words = [
            f"{w.word} [{state.word_status(w).value}] {short_gloss(state.word_gloss(w))}"
            for w in item.line.words
        ]
        if words:
            print("  " + " | ".join(words))
    return 0


def cmd_word(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle word command."""
    word = state.word_at(args.line, args.index)

    print(f"\n{word.word}  [{state.word_status(word).value}]")
    print(f"  Gloss: {state.word_gloss(word)}")
    print("  Morphemes: " + " ".join(
        f"{m.form} ({m.gloss or ''})" for m in word.morphemes
    ))

    entries = state.morpheme_entries(word)
    print(f"\nMorpheme Entries ({len(entries)})")
    for item in entries:
        if item.kind is EntityKind.GLOSSARY:
            _print_glossary_entry(state, item.original)
        elif item.kind is EntityKind.RULE:
            _print_rule(state, item.original)
        else:
            _print_unknown(state, item.morpheme)
    return 0


def cmd_glossary(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle glossary command."""
    _apply_view_args(args, state)
    entries = state.glossary_view()
    more = "+" if len(entries) >= GLOSSARY_VIEW_LIMIT else ""
    print(f"\nGlossary ({len(entries)}{more})")
    if not entries:
        print("  No matching entries")
    for entry in entries:
        _print_glossary_entry(state, entry)
    return 0


def cmd_rules(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle rules command."""
    _apply_view_args(args, state)
    rules = state.rule_view()
    print(f"\nRules ({len(rules)})")
    if not rules:
        print("  No matching rules")
    for rule in rules:
        _print_rule(state, rule)
    return 0


def cmd_edit(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle edit command."""
    kind = EntityKind(args.kind)
    try:
        edits = _parse_fields(args.fields, kind)
    except ValueError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    record = state.find_record(kind, args.identifier)
    if record is None:
        if kind is not EntityKind.UNKNOWN:
            raise EntityNotFoundError(f"No {kind.value} record {args.identifier!r}")
        record = Morpheme(form=args.identifier, gloss=None, type=MorphemeType.UNKNOWN.value)

    if state.apply_edit(kind, record, edits):
        print(f"Saved patch for {kind.value}:{args.identifier}")
    else:
        print("No changes.")
    return 0


def cmd_patches_list(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle patches list command."""
    patches = state.patches.to_mapping()
    if not patches:
        print("No patches stored.")
        return 0
    print(f"\n{len(patches)} patch(es):\n")
    for key in sorted(patches):
        fields = ", ".join(f"{k}={v!r}" for k, v in sorted(patches[key].items()))
        print(f"  {key:<30} {fields}")
    return 0


def cmd_patches_export(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle patches export command."""
    try:
        export_patches(state.patches.to_mapping(), args.file)
    except StorageError as e:
        print(f"\n  [ERROR] {e}")
        return 1
    print(f"Exported {len(state.patches)} patch(es) to {args.file}")
    return 0


def cmd_patches_import(args: argparse.Namespace, state: InspectorState) -> int:
    """Handle patches import command."""
    if not args.file.exists():
        print(f"\n  [ERROR] File not found: {args.file}")
        return 1
    changed = state.import_patches(import_patches(args.file))
    print(f"Imported {changed} patch(es) from {args.file}")
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _apply_view_args(args: argparse.Namespace, state: InspectorState) -> None:
    state.sidebar_search = args.search
    if args.word:
        state.select_word(state.word_at(*args.word))


def _parse_fields(items: List[str], kind: EntityKind) -> dict:
    allowed = EDITABLE_FIELDS[kind]
    edits = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Expected FIELD=VALUE, got {item!r}")
        if name not in allowed:
            raise ValueError(
                f"Field {name!r} can't be edited on {kind.value}; "
                f"expected one of {', '.join(allowed)}"
            )
        edits[name] = value
    return edits


def _edited_mark(edited: bool) -> str:
    return "*" if edited else " "


def _print_glossary_entry(state: InspectorState, entry: GlossaryEntry) -> None:
    patched = state.effective(EntityKind.GLOSSARY, entry)
    mark = _edited_mark(state.is_edited(EntityKind.GLOSSARY, entry))
    print(f" {mark} {patched.form:<16} {patched.gloss or '':<24} {patched.pos or ''}"
          f"  {patched.notes or ''}".rstrip())


def _print_rule(state: InspectorState, rule: Rule) -> None:
    patched = state.effective(EntityKind.RULE, rule)
    mark = _edited_mark(state.is_edited(EntityKind.RULE, rule))
    print(f" {mark} {patched.form:<16} {patched.gloss or '':<24} {patched.type or ''}"
          f"  {patched.description or ''}".rstrip())


def _print_unknown(state: InspectorState, morpheme: Morpheme) -> None:
    patched = state.effective(EntityKind.UNKNOWN, morpheme)
    edited = state.is_edited(EntityKind.UNKNOWN, morpheme)
    gloss = patched.gloss if edited else "Unknown morpheme"
    notes = (patched.notes or "") if edited else "No entry found in glossary or rules"
    print(f" {_edited_mark(edited)} {patched.form:<16} {gloss or '':<24} "
          f"{patched.pos or 'unknown'}  {notes}".rstrip())


if __name__ == "__main__":
    sys.exit(main())
