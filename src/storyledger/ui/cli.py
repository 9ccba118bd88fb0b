# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from storyledger.app import (
    audit_visibility,
    delete_storyteller,
    resolve_owners,
    run_reconciliation,
    stored_links,
    update_privacy,
    visible_profile,
)
from storyledger.config import ConfigurationError, configure_logging
from storyledger.domain.privacy import ALL_PROFILE_FIELDS, ProfileField, parse_profile_fields
from storyledger.domain.reconciliation import Classification, RunMode

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from storyledger.domain.reconciliation import ReconciliationResult

log = logging.getLogger(__name__)


class UsageError(Exception):
    """Command line arguments that parse but cannot be acted on."""


_PRIVACY_FLAGS: tuple[tuple[str, str, str], ...] = (
    ("--consent", "consent_given", "Record or withdraw consent"),
    ("--public", "public_display", "Allow or block public display"),
    ("--photo", "show_photo", "Show or hide the profile photo"),
    ("--location", "show_location", "Show or hide the location"),
    ("--organisation", "show_organisation", "Show or hide the organisation"),
)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid UUID: {value}") from exc


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Not an integer: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Must be positive: {value}")
    return parsed


def _profile_fields(value: str) -> frozenset[ProfileField]:
    try:
        return parse_profile_fields(value)
    except ValueError as exc:
        choices = ", ".join(field.value for field in ProfileField)
        message = f"Unknown field in {value!r} (choose from {choices})"
        raise argparse.ArgumentTypeError(message) from exc


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Storyteller link reconciliation and privacy tools",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Reconcile stored content links")
    reconcile.add_argument(
        "--mode",
        choices=[mode.value for mode in RunMode],
        default=RunMode.DRY_RUN.value,
        help="dry-run only reports; apply writes corrected links (default: %(default)s)",
    )
    reconcile.add_argument(
        "--page-size",
        type=_positive_int,
        default=None,
        help="Content items per page (defaults to config)",
    )
    reconcile.add_argument(
        "--sample",
        type=int,
        default=None,
        help="Number of ambiguous/orphaned items to list (defaults to config)",
    )

    resolve = subparsers.add_parser("resolve", help="Show candidate owners of a content item")
    resolve.add_argument("content_id", type=_parse_uuid)

    profile = subparsers.add_parser("profile", help="Show the public view of a storyteller")
    profile.add_argument("storyteller_id", type=_parse_uuid)
    profile.add_argument(
        "--fields",
        type=_profile_fields,
        default=ALL_PROFILE_FIELDS,
        help="Comma separated fields to request (default: all)",
    )

    privacy = subparsers.add_parser("privacy", help="Update consent and privacy flags")
    privacy.add_argument("storyteller_id", type=_parse_uuid)
    for flag, dest, help_text in _PRIVACY_FLAGS:
        privacy.add_argument(
            flag,
            dest=dest,
            action=argparse.BooleanOptionalAction,
            default=None,
            help=help_text,
        )

    subparsers.add_parser("audit-visibility", help="Count storytellers by visibility")

    delete = subparsers.add_parser(
        "delete-storyteller",
        help="Remove a storyteller and its stored links",
    )
    delete.add_argument("storyteller_id", type=_parse_uuid)

    return parser.parse_args(list(argv))


def _print_reconciliation(result: ReconciliationResult) -> None:
    print(f"mode: {result.mode}")
    for key, value in result.summary().items():
        print(f"{key}: {value}")
    for classification in (Classification.AMBIGUOUS, Classification.ORPHANED):
        entries = result.samples.get(classification, [])
        if not entries:
            continue
        print(f"{classification} (sample):")
        for entry in entries:
            print(f"  {entry.content_type} {entry.content_id} [{entry.reason}] {entry.label}")
    for outcome in result.failed_pages:
        print(f"failed page {outcome.index} (offset {outcome.offset}): {outcome.error}")


def _run_command(args: argparse.Namespace) -> int:
    if args.command == "reconcile":
        mode = RunMode(args.mode)
        result = run_reconciliation(
            page_size=args.page_size,
            mode=mode,
            sample_limit=args.sample,
        )
        _print_reconciliation(result)
        if result.errors and mode is RunMode.APPLY:
            log.error(f"{result.errors} page(s) failed; re-run to retry them")
            return 1
        return 0

    if args.command == "resolve":
        edges = resolve_owners(args.content_id)
        if not edges:
            print("no candidates")
        for edge in edges:
            review = " (review)" if edge.requires_review else ""
            print(f"{edge.storyteller_id} {edge.method} {edge.confidence}{review}")
        stored = stored_links(args.content_id)
        if not stored:
            print("stored: none")
        for link in stored:
            print(f"stored: {link.storyteller_id} {link.method} {link.confidence}")
        return 0

    if args.command == "profile":
        profile = visible_profile(args.storyteller_id, args.fields)
        print(f"label: {profile.label}")
        if profile.is_placeholder:
            print("placeholder: yes")
        for field, value in sorted(profile.fields.items()):
            print(f"{field}: {value if value is not None else '-'}")
        return 0

    if args.command == "privacy":
        flags = {dest: getattr(args, dest) for _, dest, _ in _PRIVACY_FLAGS}
        if all(value is None for value in flags.values()):
            raise UsageError("No privacy flag given")
        storyteller = update_privacy(args.storyteller_id, **flags)
        print(f"privacy: {storyteller.privacy}")
        return 0

    if args.command == "audit-visibility":
        audit = audit_visibility()
        for key, value in audit.as_dict().items():
            print(f"{key}: {value}")
        return 0

    if args.command == "delete-storyteller":
        removed = delete_storyteller(args.storyteller_id)
        print(f"deleted storyteller {args.storyteller_id}; removed {removed} stored link(s)")
        return 0

    raise UsageError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        exit_code = _run_command(parsed_args)
    except (UsageError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()
