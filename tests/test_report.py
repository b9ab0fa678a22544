"""Tests for sitch.report — aggregation and report formatting."""

from __future__ import annotations

import io
from datetime import datetime, timezone

import pytest

from sitch.errors import MalformedResponse, NetworkUnavailable
from sitch.report import (
    NOTIFY,
    QUIET,
    VERBOSE,
    _human_time,
    aggregate,
    format_error_line,
    format_update_line,
    print_report,
    summary_message,
)
from sitch.sources.platform import CheckResult, Update


def _update(day: int) -> Update:
    # noon UTC keeps the calendar day stable in any local timezone
    return Update(
        title=f"Post {day}",
        link=f"https://example.com/{day}",
        published_at=datetime(2024, 3, day, 12, tzinfo=timezone.utc),
    )


def _ok(name, updates, platform="RSS", elapsed=0.0):
    return CheckResult(platform, name, updates=updates, elapsed=elapsed)


def _err(name, error, platform="RSS", elapsed=0.0):
    return CheckResult(platform, name, error=error, elapsed=elapsed)


@pytest.fixture(autouse=True)
def _plain_env(monkeypatch):
    for key in ("FORCE_COLOR", "NO_COLOR", "TTY_COMPATIBLE"):
        monkeypatch.delenv(key, raising=False)


class _Terminal(io.StringIO):
    def isatty(self):
        return True


def _print(report, mode, global_checkpoint=None):
    out, err = io.StringIO(), io.StringIO()
    print_report(report, global_checkpoint, mode, out, err)
    return out.getvalue(), err.getvalue()


class TestAggregate:
    def test_partitions_results(self):
        results = [
            _ok("empty", []),
            _err("broken", NetworkUnavailable("down")),
            _ok("busy", [_update(1)]),
        ]
        report = aggregate(results)
        assert [r.item_name for r in report.updated] == ["busy"]
        assert [r.item_name for r in report.errors] == ["broken"]
        assert report.any_update_found

    def test_no_updates(self):
        report = aggregate([_ok("a", []), _err("b", MalformedResponse("bad"))])
        assert not report.any_update_found

    def test_empty(self):
        report = aggregate([])
        assert report.updated == []
        assert report.errors == []
        assert not report.any_update_found

    def test_order_independent(self):
        results = [_ok("a", [_update(1)]), _ok("b", []), _err("c", NetworkUnavailable("x"))]
        forward = aggregate(results)
        backward = aggregate(list(reversed(results)))
        assert forward.any_update_found == backward.any_update_found
        assert {r.item_name for r in forward.errors} == {r.item_name for r in backward.errors}


class TestSummaryMessage:
    def test_single_update(self):
        message = summary_message([_update(1)])
        assert message.startswith('There has been 1 update, it was "Post 1" released on March 1, 2024')
        assert message.endswith("found here: https://example.com/1")

    def test_multiple_updates_reference_earliest(self):
        message = summary_message([_update(1), _update(2), _update(3)])
        assert message.startswith('There have been 3 updates, the earliest was "Post 1"')
        assert "https://example.com/1" in message

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            summary_message([])


class TestLines:
    def test_verbose_line(self):
        line = format_update_line(_ok("blog", [_update(1)], elapsed=2.4))
        assert line.startswith("RSS - blog: There has been 1 update")
        assert line.endswith("[2 seconds]")

    def test_one_second_is_singular(self):
        assert format_update_line(_ok("blog", [_update(1)], elapsed=1.2)).endswith("[1 second]")

    def test_quiet_line(self):
        line = format_update_line(_ok("blog", [_update(1), _update(2)]), QUIET)
        assert line == 'blog: "Post 1" https://example.com/1'

    def test_error_line(self):
        line = format_error_line(_err("blog", NetworkUnavailable("down"), platform="YouTube"))
        assert line == "YouTube - blog: down [0 seconds]"


class TestPrintReport:
    def test_verbose_with_checkpoint(self):
        report = aggregate([_ok("blog", [_update(1)])])
        since = datetime(2024, 2, 10, 12, tzinfo=timezone.utc)
        out, err = _print(report, VERBOSE, since)
        lines = out.splitlines()
        assert lines[0].startswith("The following sources have updated since February 10, 2024")
        assert lines[1].startswith("RSS - blog:")
        assert err == ""

    def test_verbose_without_checkpoint(self):
        out, _ = _print(aggregate([_ok("blog", [_update(1)])]), VERBOSE)
        assert out.splitlines()[0] == "The following sources have updates:"

    def test_verbose_no_updates(self):
        out, err = _print(aggregate([_ok("blog", [])]), VERBOSE)
        assert out == ""
        assert err == "No updates at this time.\n"

    def test_verbose_errors_after_updates(self):
        report = aggregate([_err("down", NetworkUnavailable("unreachable")), _ok("up", [_update(1)])])
        out, err = _print(report, VERBOSE)
        assert "RSS - up:" in out
        assert err.startswith("\nThe following errors occurred:\n")
        assert "RSS - down: unreachable" in err

    def test_quiet_hides_errors_and_fallback(self):
        report = aggregate([_err("down", NetworkUnavailable("unreachable")), _ok("none", [])])
        assert _print(report, QUIET) == ("", "")

    def test_notify_prints_nothing(self):
        report = aggregate([_ok("up", [_update(1)]), _err("down", NetworkUnavailable("x"))])
        assert _print(report, NOTIFY) == ("", "")


class TestHumanTime:
    def test_unpadded_day_and_twelve_hour_clock(self):
        value = datetime(2024, 3, 1, 15, 5).astimezone()
        assert _human_time(value) == "March 1, 2024 at 3:05 PM"

    def test_padded_day_and_midnight(self):
        value = datetime(2024, 3, 1, 0, 30).astimezone()
        assert _human_time(value, pad_day=True) == "March 01, 2024 at 12:30 AM"


class TestColor:
    def test_terminal_output_is_styled(self, monkeypatch):
        monkeypatch.setenv("TERM", "xterm-256color")
        out, err = _Terminal(), _Terminal()
        report = aggregate([_ok("blog", [_update(1)]), _err("down", NetworkUnavailable("unreachable"))])
        print_report(report, None, VERBOSE, out, err)

        assert "\x1b[32mRSS - blog\x1b[0m" in out.getvalue()
        assert "\x1b[94mhttps://example.com/1\x1b[0m" in out.getvalue()
        assert "\x1b[31mRSS - down\x1b[0m" in err.getvalue()

    def test_piped_output_is_plain(self):
        out, _ = _print(aggregate([_ok("blog", [_update(1)])]), QUIET)
        assert "\x1b[" not in out
        assert out == 'blog: "Post 1" https://example.com/1\n'

    def test_brackets_in_titles_are_kept(self):
        update = Update(title="[Live] Show", link="https://example.com/live",
                        published_at=datetime(2024, 3, 1, 12, tzinfo=timezone.utc))
        out, _ = _print(aggregate([_ok("blog", [update])]), QUIET)
        assert out == 'blog: "[Live] Show" https://example.com/live\n'
