"""Result aggregation and the reports printed after a check.

Reports are written through ``rich`` consoles: on a terminal, source names are
green (red for errors), links bright blue and timings magenta. Piped output
is plain text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TextIO

from rich.console import Console
from rich.text import Text

from sitch.sources.platform import CheckResult, Update

VERBOSE = "verbose"
QUIET = "quiet"
NOTIFY = "notify"

_NAME_STYLE = "green"
_ERROR_STYLE = "red"
_LINK_STYLE = "bright_blue"
_ELAPSED_STYLE = "magenta"


@dataclass(frozen=True)
class RunReport:
    """Results of one run split into updated items and failed items."""

    updated: list[CheckResult] = field(default_factory=list)
    errors: list[CheckResult] = field(default_factory=list)

    @property
    def any_update_found(self) -> bool:
        return bool(self.updated)


def aggregate(results: list[CheckResult]) -> RunReport:
    """Partition results into items with updates and items that failed.

    Items that were checked fine but had nothing new appear in neither list.
    Arrival order doesn't matter.
    """
    updated: list[CheckResult] = []
    errors: list[CheckResult] = []
    for result in results:
        if result.error is not None:
            errors.append(result)
        elif result.has_updates:
            updated.append(result)
    return RunReport(updated=updated, errors=errors)


def _human_time(value: datetime, *, pad_day: bool = False) -> str:
    """Local time as "March 1, 2024 at 3:05 PM"."""
    local = value.astimezone()
    day = f"{local.day:02d}" if pad_day else str(local.day)
    hour = local.hour % 12 or 12
    return f"{local:%B} {day}, {local.year} at {hour}:{local:%M %p}"


def _summary_text(updates: list[Update]) -> Text:
    if not updates:
        raise ValueError("summary_message needs at least one update")
    count = len(updates)
    update = updates[0]
    if count == 1:
        lead = "There has been 1 update, it was"
    else:
        lead = f"There have been {count} updates, the earliest was"
    return Text.assemble(
        f'{lead} "{update.title}" released on {_human_time(update.published_at)}, found here: ',
        (update.link, _LINK_STYLE),
    )


def summary_message(updates: list[Update]) -> str:
    """Describe a non-empty, ascending list of updates by its earliest entry.

    "There has been 1 update, it was ..." for a single update and
    "There have been N updates, the earliest was ..." otherwise.
    """
    return _summary_text(updates).plain


def _seconds(elapsed: float) -> str:
    secs = int(elapsed)
    return f"[{secs} second{'' if secs == 1 else 's'}]"


def update_text(result: CheckResult, mode: str = VERBOSE) -> Text:
    if mode == QUIET:
        update = result.updates[0]
        return Text.assemble(
            (result.item_name, _NAME_STYLE),
            f': "{update.title}" ',
            (update.link, _LINK_STYLE),
        )
    return Text.assemble(
        (f"{result.platform} - {result.item_name}", _NAME_STYLE),
        ": ",
        _summary_text(result.updates),
        " ",
        (_seconds(result.elapsed), _ELAPSED_STYLE),
    )


def error_text(result: CheckResult) -> Text:
    return Text.assemble(
        (f"{result.platform} - {result.item_name}", _ERROR_STYLE),
        f": {result.error} ",
        (_seconds(result.elapsed), _ELAPSED_STYLE),
    )


def source_text(name: str, detail: str) -> Text:
    """A followed source as "name: detail", for listings."""
    return Text.assemble((name, _NAME_STYLE), ": ", (detail, _LINK_STYLE))


def format_update_line(result: CheckResult, mode: str = VERBOSE) -> str:
    return update_text(result, mode).plain


def format_error_line(result: CheckResult) -> str:
    return error_text(result).plain


def make_console(stream: TextIO) -> Console:
    """A console that styles output only when ``stream`` is a terminal."""
    return Console(file=stream, highlight=False, soft_wrap=True, emoji=False, markup=False)


def print_report(
    report: RunReport,
    global_checkpoint: datetime | None,
    mode: str,
    out: TextIO,
    err: TextIO,
) -> None:
    """Write a report to the given streams.

    Verbose mode prints a preamble, one summary per updated item, a
    "no updates" note and then every error. Quiet mode prints only one line
    per updated item. Notify mode prints nothing.
    """
    if mode == NOTIFY:
        return
    out_console = make_console(out)
    err_console = make_console(err)

    if mode == VERBOSE and report.updated:
        if global_checkpoint is not None:
            since = _human_time(global_checkpoint, pad_day=True)
            out_console.print(f"The following sources have updated since {since}:")
        else:
            out_console.print("The following sources have updates:")

    for result in report.updated:
        out_console.print(update_text(result, mode))

    if mode != VERBOSE:
        return

    if not report.any_update_found:
        err_console.print("No updates at this time.")

    if report.errors:
        err_console.print("\nThe following errors occurred:")
        for result in report.errors:
            err_console.print(error_text(result))
