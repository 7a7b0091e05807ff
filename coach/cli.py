#!/usr/bin/env python3
"""
Coach Digital Command Line Interface

Main entry point for the `coach` command.

Usage:
    coach extract --message "Quiero correr un maratón" --response "Te sugiero..."
    coach process --user alice --message "Tengo que llamar al banco mañana"
    coach notes --user alice [--category goals]
    coach dashboard          # Start the API server
    coach --version          # Show version
"""

import argparse
import json
import sys


def cmd_extract(args):
    """Print the extractions for a turn without storing anything."""
    from coach.memory.extraction.extractor import extract, load_settings
    from coach.memory.extraction.models import ConversationTurn

    turn = ConversationTurn(user_message=args.message, coach_response=args.response or "")
    extractions = extract(turn, load_settings())

    print(json.dumps([e.to_dict() for e in extractions], indent=2, ensure_ascii=False))
    return 0


def cmd_process(args):
    """Extract and store notes for a turn."""
    from coach.memory.extraction.extractor import load_settings
    from coach.memory.processor import ingest_turn, process_conversation

    if args.log:
        result = ingest_turn(args.user, args.message, coach_response=args.response or "")
    else:
        result = process_conversation(
            args.user,
            args.message,
            coach_response=args.response or "",
            force_process=args.force,
            settings=load_settings(),
        )

    print(json.dumps(result, indent=2, default=str, ensure_ascii=False))
    return 0 if result.get("success") else 1


def cmd_notes(args):
    """List a user's notes."""
    from coach.memory.notes import list_notes

    result = list_notes(args.user, category=args.category, status=args.status, limit=args.limit)
    print(json.dumps(result, indent=2, default=str, ensure_ascii=False))
    return 0 if result.get("success") else 1


def cmd_dashboard(args):
    """Start the API server."""
    import uvicorn

    print(f"Starting Coach Digital API at http://{args.host}:{args.port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "coach.dashboard.backend.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
    return 0


def cmd_version(args):
    """Show version information."""
    from coach import __version__

    print(f"Coach Digital version {__version__}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    from coach.logging_config import setup_logging

    parser = argparse.ArgumentParser(
        prog="coach",
        description="Coach Digital - memory notes for WhatsApp coaching",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--log-level", default=None, help="Log level (default: COACH_LOG_LEVEL or INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser("extract", help="Show memory extractions for a turn")
    extract_parser.add_argument("--message", required=True, help="User message")
    extract_parser.add_argument("--response", help="Coach response")
    extract_parser.set_defaults(func=cmd_extract)

    process_parser = subparsers.add_parser("process", help="Extract and store notes for a turn")
    process_parser.add_argument("--user", required=True, help="User ID")
    process_parser.add_argument("--message", required=True, help="User message")
    process_parser.add_argument("--response", help="Coach response")
    process_parser.add_argument("--force", action="store_true", help="Store every extraction")
    process_parser.add_argument(
        "--log", action="store_true", help="Also log the turn in the conversation history"
    )
    process_parser.set_defaults(func=cmd_process)

    notes_parser = subparsers.add_parser("notes", help="List memory notes")
    notes_parser.add_argument("--user", required=True, help="User ID")
    notes_parser.add_argument("--category", help="Category filter")
    notes_parser.add_argument("--status", default="active", help="Status filter")
    notes_parser.add_argument("--limit", type=int, default=50, help="Max results")
    notes_parser.set_defaults(func=cmd_notes)

    dashboard_parser = subparsers.add_parser("dashboard", help="Start the API server")
    dashboard_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    dashboard_parser.add_argument(
        "--port", type=int, default=8080, help="Port to bind to (default: 8080)"
    )
    dashboard_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )
    dashboard_parser.set_defaults(func=cmd_dashboard)

    args = parser.parse_args(argv)

    if args.version:
        return cmd_version(args)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
