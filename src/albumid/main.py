#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from albumid.app import (
    audit_manual_albums,
    mark_albums_distinct,
    merge_albums,
    merge_manual_album,
    resolve_country,
    scan_duplicates,
)
from albumid.common.logging import configure_logging
from albumid.domain.errors import InvalidInputError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from albumid.domain.identity import (
        ManualAuditReport,
        MergeResult,
        ScanReport,
        SimilarMatch,
    )
    from albumid.domain.model import CanonicalRecord


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find and reconcile duplicate albums")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="List likely duplicate album pairs")
    scan.add_argument(
        "--threshold",
        type=float,
        help="Similarity threshold in [0, 1]; lower is stricter (default: configured)",
    )
    scan.add_argument("--limit", type=int, help="Maximum number of pairs to print")
    scan.add_argument("--all", action="store_true", help="Print every candidate pair")

    audit = commands.add_parser("audit-manual", help="Match manual albums to the catalog")
    audit.add_argument("--threshold", type=float, help="Similarity threshold in [0, 1]")

    merge = commands.add_parser("merge", help="Merge one album into another")
    merge.add_argument("survivor_id", help="Album that is kept")
    merge.add_argument("loser_id", help="Album that is folded in and deleted")

    merge_manual = commands.add_parser(
        "merge-manual", help="Replace a manual album with a canonical one"
    )
    merge_manual.add_argument("manual_id")
    merge_manual.add_argument("canonical_id")

    distinct = commands.add_parser("mark-distinct", help="Record that two albums differ")
    distinct.add_argument("album_id_a")
    distinct.add_argument("album_id_b")

    country = commands.add_parser("country", help="Resolve a country code to its name")
    country.add_argument("code")
    country.add_argument(
        "--offline", action="store_true", help="Use the built-in table only"
    )

    return parser.parse_args(list(argv))


def _record_json(record: CanonicalRecord) -> dict[str, object]:
    return {
        "id": record.id,
        "artist": record.artist,
        "title": record.title,
        "release_date": record.release_date,
        "country": record.country,
    }


def _match_json(match: SimilarMatch) -> dict[str, object]:
    return {
        **_record_json(match.record),
        "confidence": match.score.percent,
        "band": match.score.band.value,
    }


def _scan_json(report: ScanReport) -> dict[str, object]:
    return {
        "total_records": report.total_records,
        "total_candidates": report.total_candidates,
        "excluded_pairs": report.excluded_pairs,
        "suppressed_pairs": report.suppressed_pairs,
        "pairs": [
            {
                "album_a": _record_json(pair.record_a),
                "album_b": _record_json(pair.record_b),
                "artist_score": round(pair.score.artist_score, 4),
                "title_score": round(pair.score.title_score, 4),
                "confidence": pair.score.percent,
                "band": pair.score.band.value,
            }
            for pair in report.pairs
        ],
    }


def _audit_json(report: ManualAuditReport) -> dict[str, object]:
    return {
        "total_manual": report.total_manual,
        "total_with_matches": report.total_with_matches,
        "manual_albums": [
            {
                "manual_album": _record_json(item.record),
                "matches": [_match_json(match) for match in item.matches],
                "used_in": [
                    {
                        "list_id": usage.list_id,
                        "list_name": usage.list_name,
                        "year": usage.year,
                        "owner": usage.owner,
                    }
                    for usage in item.used_in
                ],
            }
            for item in report.manual_albums
        ],
        "integrity_issues": [
            {
                "type": issue.kind.value,
                "severity": issue.severity.value,
                "message": issue.message,
                "album_ids": list(issue.album_ids),
                "list_id": issue.list_id,
                "references": issue.references,
                "fix_action": issue.fix_action.value,
            }
            for issue in report.integrity_issues
        ],
    }


def _merge_json(result: MergeResult) -> dict[str, object]:
    return {
        "survivor_id": result.survivor_id,
        "loser_id": result.loser_id,
        "references_moved": result.references_moved,
        "exclusions_removed": result.exclusions_removed,
        "filled_fields": list(result.filled_fields),
    }


def _run_command(args: argparse.Namespace) -> dict[str, object]:
    match args.command:
        case "scan":
            return _scan_json(
                scan_duplicates(threshold=args.threshold, limit=args.limit, unbounded=args.all)
            )
        case "audit-manual":
            return _audit_json(audit_manual_albums(threshold=args.threshold))
        case "merge":
            return _merge_json(merge_albums(args.survivor_id, args.loser_id))
        case "merge-manual":
            return _merge_json(merge_manual_album(args.manual_id, args.canonical_id))
        case "mark-distinct":
            inserted = mark_albums_distinct(args.album_id_a, args.album_id_b)
            return {"album_id_a": args.album_id_a, "album_id_b": args.album_id_b, "new": inserted}
        case "country":
            name = resolve_country(args.code, online=not args.offline)
            return {"code": args.code.strip().upper(), "name": name}
        case _:
            raise InvalidInputError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        output = _run_command(parsed_args)
    except InvalidInputError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(output, indent=2, ensure_ascii=False))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
