"""Debounced automatic draft saving.

Each call to ``notify_change`` cancels the pending timer and arms a new
one, so a save only happens after the form has been left alone for
``interval`` seconds.  Failures are logged and dropped so typing is never
interrupted.  Automatic and manual saves are not ordered against each
other; both simply insert new draft records.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from inkwell.drafts.models import Draft
from inkwell.drafts.store import DraftStore
from inkwell.errors import PersistenceError, ValidationError
from inkwell.posts.models import PostForm

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60.0


class Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def _thread_timer(interval: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class DraftAutosaver:
    """Save ``form`` to ``drafts`` once it has been stable for ``interval`` seconds."""

    def __init__(
        self,
        drafts: DraftStore,
        form: PostForm,
        interval: float = DEFAULT_INTERVAL,
        timer_factory: TimerFactory = _thread_timer,
        post_id: str | None = None,
    ) -> None:
        self.drafts = drafts
        self.form = form
        self.interval = interval
        self.post_id = post_id
        self.last_saved: datetime | None = None
        self.last_draft: Draft | None = None
        self._timer_factory = timer_factory
        self._timer: Timer | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def notify_change(self) -> None:
        """Re-arm the save timer after a form edit."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            callback = functools.partial(self._fire, self._generation)
            self._timer = self._timer_factory(self.interval, callback)
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self, generation: int) -> None:
        # Callbacks of superseded timers are ignored.
        with self._lock:
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
        self.save_now()

    def save_now(self) -> Draft | None:
        """Save a snapshot immediately; returns None when skipped or failed."""
        snapshot = self.form.model_copy(deep=True)
        if not snapshot.content.strip():
            return None
        try:
            draft = self.drafts.save(snapshot, post_id=self.post_id)
        except (PersistenceError, ValidationError) as exc:
            logger.warning("Autosave failed: %s", exc)
            return None
        self.last_saved = datetime.now(tz=UTC)
        self.last_draft = draft
        logger.debug("Autosaved draft %s", draft.id)
        return draft
