"""Command-line entry point — check for updates or manage followed sources."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta

from sitch.config import load_config
from sitch.engine import run_check
from sitch.errors import ConfigError
from sitch.report import NOTIFY, QUIET, VERBOSE, make_console, source_text
from sitch.sources import PLATFORM_CLASSES, get_platform_class
from sitch.sources.store import Sources
from sitch.sources.youtube import YouTubePlatform

logger = logging.getLogger("sitch")

_LAST_CHECKED_FORMAT = "%H:%M:%S %m/%d/%y"
_DATE_FORMATS = ("%m/%d/%Y",)
_DATETIME_FORMATS = ("%I:%M %p %m/%d/%Y",)


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)


def parse_since_time(value: str, *, today: datetime | None = None) -> datetime:
    """Parse the --since-time argument into a local, aware datetime.

    Accepts "today", "yesterday", "MM/DD/YYYY" and "HH:MM AM|PM MM/DD/YYYY".
    """
    midnight = (today or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
    if value == "today":
        return midnight.astimezone()
    if value == "yesterday":
        return (midnight - timedelta(days=1)).astimezone()
    for fmt in _DATE_FORMATS + _DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt).astimezone()
        except ValueError:
            continue
    raise argparse.ArgumentTypeError(
        "Could not parse the provided time. Make sure it is one of the allowed formats."
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitch",
        description=(
            "A tool for keeping you updated. Run it with no arguments to see "
            "what you've missed; it remembers when it last found something."
        ),
    )
    parser.add_argument(
        "-c", "--config",
        help="Location of your sources file (default: $XDG_CONFIG_HOME/sitch/config.json)",
    )
    parser.add_argument(
        "-t", "--since-time", type=parse_since_time,
        help='Check for updates since this time instead of the last run: '
             '"today", "yesterday", "MM/DD/YYYY" or "HH:MM AM|PM MM/DD/YYYY"',
    )
    parser.add_argument(
        "--notify", action="store_true",
        help="Send updates and errors as clickable desktop notifications instead of printing",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Simplify the output")
    parser.add_argument(
        "-L", "--last-checked", action="store_true",
        help='Only print when sitch last found updates ("HH:MM:SS MM/DD/YY")',
    )

    platforms = parser.add_subparsers(dest="platform", metavar="PLATFORM")
    for platform_cls in PLATFORM_CLASSES:
        name = platform_cls.platform_name()
        sub = platforms.add_parser(platform_cls.key, help=f"Manage your {name} sources")
        actions = sub.add_subparsers(dest="action", metavar="ACTION", required=True)

        add = actions.add_parser("add", help=f"Follow a new {name} source")
        for field_name in platform_cls.item_class.identity_fields():
            add.add_argument(f"--{field_name.replace('_', '-')}", dest=field_name, required=True)
        actions.add_parser("list", help=f"List your {name} sources")
        remove = actions.add_parser("remove", help=f"Stop following a {name} source")
        remove.add_argument("name")

        if platform_cls is YouTubePlatform:
            api_key = actions.add_parser("api-key", help="Manage the YouTube Data API key")
            key_actions = api_key.add_subparsers(dest="key_action", metavar="KEY_ACTION", required=True)
            key_set = key_actions.add_parser("set", help="Set or replace the API key")
            key_set.add_argument("new_key")
            key_actions.add_parser("clear", help="Forget the API key")
            key_actions.add_parser("show", help="Print the API key")

    return parser


def _run_command(sources: Sources, args: argparse.Namespace) -> int:
    """Apply a source-management subcommand. Returns an exit status."""
    platform_cls = get_platform_class(args.platform)
    platform = sources.platform(args.platform)
    fields = platform_cls.item_class.identity_fields()

    if args.action == "add":
        platform.items.append(
            platform_cls.item_class(**{name: getattr(args, name) for name in fields})
        )
        print(f"Added a new {platform_cls.platform_name()} source.")
    elif args.action == "list":
        console = make_console(sys.stdout)
        for item in platform.items:
            identity = item.identity()
            details = ", ".join(str(identity[name]) for name in fields[1:])
            console.print(source_text(item.name, details))
    elif args.action == "remove":
        kept = [item for item in platform.items if item.name != args.name]
        removed = len(platform.items) - len(kept)
        if not removed:
            print(f"No {platform_cls.platform_name()} source named {args.name!r}.", file=sys.stderr)
            return 1
        platform.items[:] = kept
        print(f"Removed {removed} {platform_cls.platform_name()} source(s).")
    elif args.action == "api-key":
        if args.key_action == "set":
            platform.api_key = args.new_key
        elif args.key_action == "clear":
            platform.api_key = None
        elif platform.api_key:
            print(platform.api_key)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load sources, run the check or command and save."""
    args = _build_parser().parse_args(argv)
    try:
        config = load_config()
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    _setup_logging(config.log_level, config.log_format)

    sources_path = args.config or config.sources_path
    try:
        sources = Sources.load(sources_path)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    if args.last_checked:
        if sources.last_checked is None:
            print("sitch has not successfully run yet.", file=sys.stderr)
            return 1
        print(sources.last_checked.astimezone().strftime(_LAST_CHECKED_FORMAT))
        return 0

    if args.since_time is not None:
        sources.last_checked = args.since_time

    if args.platform is None:
        for platform in sources.platforms():
            platform.configure(config)
        mode = NOTIFY if args.notify else QUIET if args.quiet else VERBOSE
        logger.info("Checking for updates (mode=%s, sources=%s)", mode, sources_path)
        run_check(sources, mode, max_workers=config.max_workers)
        status = 0
    else:
        status = _run_command(sources, args)

    try:
        sources.save(sources_path)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1
    return status


if __name__ == "__main__":
    sys.exit(main())
