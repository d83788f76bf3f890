"""
CLI entry point for the Favro timesheet reporter. Stands in for the chat front end:
link / unlink a caller, build today's timesheet and retract the last posted report.
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone

from config import load_settings
from errors import UserFacingError
from logging_config import setup_logging
from report.renderer import render
from resolve.tokens import split_tokens
from service import build_service
from storage.links import Database

logger = logging.getLogger(__name__)


def write_output(fmt: str, rendered: str, out_file: str):
    """Write output to a file when out_file is given, otherwise print it."""
    if not out_file:
        print(rendered)
        return
    out_dir = os.path.dirname(out_file)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    # newline='' is safe for CSV on Windows and harmless for other formats
    with open(out_file, 'w', encoding='utf-8', newline='') as fh:
        fh.write(rendered)
    print(f"Wrote {fmt} report to {out_file}")


def _cmd_link(service, args):
    user = service.link_identity(args.caller, args.email)
    print(f"Linked. Caller {args.caller} is now connected to Favro user {user.display_name}.")


def _cmd_unlink(service, args):
    print("Unlinked." if service.unlink_identity(args.caller) else "You were not linked.")


def _cmd_timesheet(service, args):
    body = service.build_timesheet_report(args.caller, split_tokens(args.cards))
    fmt = (args.output or 'text').lower()
    rendered = render(body, fmt=fmt, generated_at=datetime.now(timezone.utc).isoformat())
    write_output(fmt, rendered, args.out_file)
    if args.channel and args.message_id:
        service.record_report(args.caller, args.channel, args.message_id)


def _cmd_retract(service, args):
    message_id = service.delete_last_report(args.caller, args.channel)
    print(message_id)


COMMANDS = {
    'link': _cmd_link,
    'unlink': _cmd_unlink,
    'timesheet': _cmd_timesheet,
    'retract': _cmd_retract,
}

# commands that talk to Favro and so need credentials
REMOTE_COMMANDS = {'link', 'timesheet'}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Favro timesheet reporter")
    parser.add_argument("--config", type=str, default="", help="Path to a YAML config file (overrides environment values)")
    parser.add_argument("--db", type=str, default="", help="Path to the SQLite link database (overrides TIMESHEET_DB)")
    parser.add_argument("--log-level", type=str, default="", help="Logging level (overrides LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_link = sub.add_parser("link", help="Link a caller to a Favro account by email")
    p_link.add_argument("--caller", required=True)
    p_link.add_argument("--email", required=True, help="Favro login email")

    p_unlink = sub.add_parser("unlink", help="Remove a caller's Favro link")
    p_unlink.add_argument("--caller", required=True)

    p_ts = sub.add_parser("timesheet", help="Show today's Favro timesheet entries for the given cards")
    p_ts.add_argument("--caller", required=True)
    p_ts.add_argument("--cards", required=True, help="Card keys, ids or URLs separated by spaces or commas")
    p_ts.add_argument("--output", type=str, default="text", help="Output format (text, md, html, csv, json)")
    p_ts.add_argument("--out-file", type=str, default="", help="Write the report to this file instead of stdout")
    p_ts.add_argument("--channel", type=str, default="", help="Channel the report was posted to")
    p_ts.add_argument("--message-id", type=str, default="", help="Id of the posted message, recorded for retract")

    p_rm = sub.add_parser("retract", help="Forget the last report posted in a channel and print its message id")
    p_rm.add_argument("--caller", required=True)
    p_rm.add_argument("--channel", required=True)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config or None)
    except UserFacingError as ex:
        print(str(ex), file=sys.stderr)
        return 1
    if args.db:
        settings.db_path = args.db
    setup_logging(args.log_level or settings.log_level, tz=settings.timezone)

    db = Database(settings.db_path)
    try:
        service = build_service(settings, db=db, remote=args.command in REMOTE_COMMANDS)
        COMMANDS[args.command](service, args)
    except UserFacingError as ex:
        print(str(ex), file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
