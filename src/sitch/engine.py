"""The check run — fan out over every platform and item, report, advance checkpoints."""

from __future__ import annotations

import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import TextIO

from sitch.checkpoint import now
from sitch.config import DEFAULT_MAX_WORKERS
from sitch.notify import NotificationDispatcher
from sitch.report import NOTIFY, RunReport, aggregate, print_report
from sitch.sources.platform import CheckResult, PlatformChecker
from sitch.sources.store import Sources

logger = logging.getLogger(__name__)


def check_platforms(
    platforms: list[PlatformChecker],
    global_checkpoint: datetime | None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[CheckResult]:
    """Check all platforms concurrently and all items within each concurrently.

    Each platform gets its own thread; item checks from every platform share
    one bounded I/O pool. Item pool workers never wait on other tasks, so the
    platform threads blocking on them can't deadlock. Results are returned
    in completion order.
    """
    if not platforms:
        return []

    results: list[CheckResult] = []
    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="sitch-item"
    ) as item_pool, ThreadPoolExecutor(
        max_workers=len(platforms), thread_name_prefix="sitch-platform"
    ) as platform_pool:
        futures = {
            platform_pool.submit(platform.check_all, global_checkpoint, item_pool): platform
            for platform in platforms
        }
        for future in as_completed(futures):
            platform = futures[future]
            try:
                platform_results = future.result()
            except Exception:
                # item failures are already results; this is a bug in check_all
                logger.exception("Checking %s failed", platform.platform_name())
                continue
            logger.info(
                "%s: %d item(s) checked", platform.platform_name(), len(platform_results)
            )
            results.extend(platform_results)
    return results


def run_check(
    sources: Sources,
    mode: str,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    dispatcher: NotificationDispatcher | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> RunReport:
    """Run one check over every followed item.

    Prints (or notifies) what's new, waits for actionable notifications to be
    closed, then advances the global checkpoint if anything was found. Item
    checkpoints are advanced by the platforms as part of checking.
    """
    out = out or sys.stdout
    err = err or sys.stderr
    global_checkpoint = sources.last_checked

    results = check_platforms(sources.platforms(), global_checkpoint, max_workers)
    report = aggregate(results)
    logger.info(
        "Check complete: %d updated, %d failed, %d checked",
        len(report.updated), len(report.errors), len(results),
    )

    if mode == NOTIFY:
        dispatcher = dispatcher or NotificationDispatcher()
        for result in report.updated:
            dispatcher.notify_update(result.item_name, result.updates[0])
        for result in report.errors:
            dispatcher.notify_error(result.item_name, result.error)
        dispatcher.wait()
    else:
        print_report(report, global_checkpoint, mode, out, err)

    if report.any_update_found:
        sources.last_checked = now()
    return report
