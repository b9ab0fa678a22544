"""Platform checker interface and the values it produces."""

from __future__ import annotations

import dataclasses
import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar

from sitch.checkpoint import (
    effective_checkpoint,
    format_timestamp,
    now,
    parse_timestamp,
    reconcile_checkpoint,
)
from sitch.errors import ConfigError, SourceError

if TYPE_CHECKING:
    from sitch.config import Config

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Update:
    """One newly published piece of content found by an adapter."""

    title: str
    link: str
    published_at: datetime


def sort_updates(updates: list[Update]) -> list[Update]:
    """Sort updates ascending by publish time; index 0 is the earliest."""
    return sorted(updates, key=lambda update: update.published_at)


@dataclass
class Item:
    """One followed entity within a platform.

    Subclasses add the platform-specific identity fields. ``checkpoint`` is
    written only by the task that checks this item.
    """

    name: str
    checkpoint: datetime | None = field(default=None, kw_only=True)

    @classmethod
    def identity_fields(cls) -> list[str]:
        """Names of the identity fields, ``name`` first, excluding the checkpoint."""
        return [f.name for f in dataclasses.fields(cls) if f.name != "checkpoint"]

    def identity(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in self.identity_fields()}


@dataclass(frozen=True)
class CheckResult:
    """Outcome of checking one item: either its updates or an error, never both."""

    platform: str
    item_name: str
    updates: list[Update] | None = None
    error: SourceError | None = None
    elapsed: float = 0.0

    def __post_init__(self):
        if (self.updates is None) == (self.error is None):
            raise ValueError("CheckResult needs exactly one of updates or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)


class PlatformChecker(ABC):
    """Base class for the platforms sitch can check.

    A platform owns an ordered list of items and knows how to check one of
    them. ``check_all`` fans the item checks out over a worker pool, turns
    adapter errors into error results and reconciles each item's checkpoint.
    """

    key: ClassVar[str]
    item_class: ClassVar[type[Item]]
    credential_required: ClassVar[bool] = False

    def __init__(self, items: list[Item] | None = None) -> None:
        self.items: list[Item] = list(items or [])
        self._timeout = DEFAULT_TIMEOUT

    @classmethod
    @abstractmethod
    def platform_name(cls) -> str:
        """Human-readable platform name, e.g. "YouTube"."""

    @abstractmethod
    def check_item(self, item: Item, since: datetime | None) -> list[Update]:
        """Return the updates for one item published after ``since``.

        ``since`` of None means every update the source offers. Raises
        SourceError when the item cannot be checked.
        """

    def configure(self, config: Config) -> None:
        """Accept the application-level settings adapters care about."""
        self._timeout = float(config.request_timeout_seconds)

    def has_credential(self) -> bool:
        return True

    def check_all(
        self,
        global_checkpoint: datetime | None,
        pool: Executor | None = None,
    ) -> list[CheckResult]:
        """Check every item in parallel and return one result per item.

        A platform whose required credential is missing is skipped and
        returns no results. Results come back in completion order.
        """
        if self.credential_required and not self.has_credential():
            logger.info("Skipping %s: no credential configured", self.platform_name())
            return []
        if not self.items:
            return []
        if pool is None:
            with ThreadPoolExecutor(max_workers=len(self.items)) as own_pool:
                return self._check_items(global_checkpoint, own_pool)
        return self._check_items(global_checkpoint, pool)

    def _check_items(
        self,
        global_checkpoint: datetime | None,
        pool: Executor,
    ) -> list[CheckResult]:
        futures = [
            pool.submit(self._check_one, item, global_checkpoint) for item in self.items
        ]
        return [future.result() for future in as_completed(futures)]

    def _check_one(self, item: Item, global_checkpoint: datetime | None) -> CheckResult:
        since = effective_checkpoint(global_checkpoint, item.checkpoint)
        started = time.monotonic()
        try:
            updates = sort_updates(self.check_item(item, since))
            result = CheckResult(
                self.platform_name(), item.name, updates=updates,
                elapsed=time.monotonic() - started,
            )
        except SourceError as exc:
            logger.warning("%s check failed for %s: %s", self.platform_name(), item.name, exc)
            result = CheckResult(
                self.platform_name(), item.name, error=exc,
                elapsed=time.monotonic() - started,
            )
        except Exception as exc:
            logger.exception("Unexpected error checking %s %s", self.platform_name(), item.name)
            result = CheckResult(
                self.platform_name(), item.name, error=SourceError(str(exc)),
                elapsed=time.monotonic() - started,
            )

        item.checkpoint = reconcile_checkpoint(
            item.checkpoint,
            global_checkpoint,
            found_updates=result.has_updates,
            checked_at=now(),
        )
        return result

    # --- sources file ---

    @classmethod
    def from_config(cls, section) -> PlatformChecker:
        """Build the platform from its section of the sources file.

        The default layout is a list of ``[identity, checkpoint]`` pairs.
        """
        return cls(cls.items_from_config(section))

    def to_config(self):
        return self.items_to_config()

    @classmethod
    def items_from_config(cls, entries) -> list[Item]:
        if entries is None:
            return []
        if not isinstance(entries, list):
            raise ConfigError(f"Expected a list of {cls.key} entries")
        fields = cls.item_class.identity_fields()
        items: list[Item] = []
        for entry in entries:
            try:
                identity, checkpoint = entry
                missing = [name for name in fields if not isinstance(identity.get(name), str)]
                if missing:
                    raise ConfigError(
                        f"{cls.key} entry is missing {', '.join(missing)}: {identity!r}"
                    )
                item = cls.item_class(
                    **{name: identity[name] for name in fields},
                    checkpoint=parse_timestamp(checkpoint),
                )
            except ConfigError:
                raise
            except (TypeError, ValueError, AttributeError) as exc:
                raise ConfigError(f"Malformed {cls.key} entry {entry!r}: {exc}") from exc
            items.append(item)
        return items

    def items_to_config(self) -> list:
        return [[item.identity(), format_timestamp(item.checkpoint)] for item in self.items]
