import threading
from dataclasses import dataclass, replace

from .config import DisplayMode


@dataclass(frozen=True)
class RewriteSettings:
    """
    Immutable per-call planning settings.

    Planning and explain calls take one of these instead of reading shared
    state, so toggling the session mid-flight cannot change a call that
    already holds its snapshot.
    """
    enabled: bool = False
    display_mode: DisplayMode = DisplayMode.PLAIN_TEXT


class IndexingSession:
    """
    🚦 Process-level switch for index-aware planning.

    Holds the mutable toggle behind a lock and hands out
    :class:`RewriteSettings` snapshots.
    """

    def __init__(self, enabled: bool = False,
                 display_mode: DisplayMode = DisplayMode.PLAIN_TEXT):
        self._settings = RewriteSettings(enabled, display_mode)
        self._lock = threading.Lock()

    def enable(self) -> None:
        self._update(enabled=True)

    def disable(self) -> None:
        self._update(enabled=False)

    def is_enabled(self) -> bool:
        return self.snapshot().enabled

    def set_display_mode(self, display_mode: DisplayMode) -> None:
        self._update(display_mode=display_mode)

    def snapshot(self) -> RewriteSettings:
        with self._lock:
            return self._settings

    def _update(self, **changes) -> None:
        with self._lock:
            self._settings = replace(self._settings, **changes)

    def __str__(self) -> str:
        settings = self.snapshot()
        state = "enabled" if settings.enabled else "disabled"
        return f"IndexingSession({state}, display={settings.display_mode.value})"

    def __repr__(self) -> str:
        return self.__str__()
