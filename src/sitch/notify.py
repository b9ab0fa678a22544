"""Desktop notifications for updates and errors.

Update notifications carry an "Open in Browser" action and stay up until the
user dismisses them or clicks the action, so each one runs on its own thread.
The dispatcher keeps every such thread and ``wait()`` joins them all; a run
that returned before that would leave notifications whose action does
nothing. Error notifications have no action; ``notify-send`` returns as soon
as one is posted, so they are shown on the calling thread.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import webbrowser
from typing import Callable, Protocol

from sitch.sources.platform import Update

logger = logging.getLogger(__name__)

OPEN_ACTION = "open"


class NotificationBackend(Protocol):
    def show(self, summary: str, body: str) -> None:
        """Show a plain notification and return immediately."""

    def show_actionable(self, summary: str, body: str, link: str) -> None:
        """Show a notification with an open action; block until it is closed."""


class DesktopNotifier:
    """Notification backend built on libnotify's ``notify-send``."""

    def __init__(
        self,
        command: str = "notify-send",
        open_link: Callable[[str], object] = webbrowser.open,
    ) -> None:
        self._command = command
        self._open_link = open_link

    def show(self, summary: str, body: str) -> None:
        subprocess.run(
            [self._command, "--app-name=sitch", summary, body],
            check=True,
            capture_output=True,
        )

    def show_actionable(self, summary: str, body: str, link: str) -> None:
        # --wait blocks until the notification is closed; the invoked
        # action's name is printed on stdout
        proc = subprocess.run(
            [
                self._command,
                "--app-name=sitch",
                "--wait",
                "--expire-time=0",
                f"--action={OPEN_ACTION}=Open in Browser",
                summary,
                body,
            ],
            check=True,
            capture_output=True,
            text=True,
        )
        if proc.stdout.strip() == OPEN_ACTION:
            logger.info("Opening %s", link)
            self._open_link(link)


class NotificationDispatcher:
    """Starts update notifications on background threads and joins them."""

    def __init__(self, backend: NotificationBackend | None = None) -> None:
        self._backend = backend or DesktopNotifier()
        self._pending: list[threading.Thread] = []
        self._lock = threading.Lock()

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for thread in self._pending if thread.is_alive())

    def notify_update(self, item_name: str, update: Update) -> None:
        """Show an update with an open action. Joined by ``wait()``."""
        thread = threading.Thread(
            target=self._deliver,
            args=(self._backend.show_actionable, f"Sitch - {item_name}", update.title, update.link),
            name=f"sitch-notify-{item_name}",
        )
        with self._lock:
            self._pending.append(thread)
        thread.start()

    def notify_error(self, item_name: str, error: Exception) -> None:
        """Show an error. Returns once the notification has been posted."""
        self._deliver(self._backend.show, f"Sitch Error - {item_name}", str(error))

    def wait(self) -> None:
        """Block until every update notification has been dismissed or acted on."""
        with self._lock:
            threads = list(self._pending)
        for thread in threads:
            thread.join()
            with self._lock:
                if thread in self._pending:
                    self._pending.remove(thread)

    @staticmethod
    def _deliver(show: Callable[..., None], *args: str) -> None:
        try:
            show(*args)
        except (OSError, subprocess.SubprocessError):
            logger.exception("Failed to show notification %r", args[0])
