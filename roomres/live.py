import itertools
import logging
import queue
import threading
from typing import Callable, Dict, Iterable, Optional
from sqlalchemy.exc import SQLAlchemyError
from roomres.db import SessionLocal
from roomres.errors import TransportError

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, topics, query, on_change, on_error):
        self.topics = frozenset(topics)
        self.query = query
        self.on_change = on_change
        self.on_error = on_error


class LiveQueryHub:
    """
    Push-based live queries over the store.

    A subscription is a query function ``query(db) -> list`` registered under
    one or more topics. Repositories call :meth:`notify` with the topics a
    committed change touched; the hub re-runs every matching query in a fresh
    session and hands the full result set to ``on_change``. Store failures go
    to ``on_error`` and leave the subscription in place.

    Deliveries run on the hub's own worker thread, one at a time and in the
    order they were scheduled. ``subscribe`` and ``notify`` only enqueue, so a
    writer never waits on a listener and a listener may write back to the
    store from its callback.
    """

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._pending = queue.Queue()
        self._worker: Optional[threading.Thread] = None

    def subscribe(
        self,
        topics: Iterable[str],
        query: Callable,
        on_change: Callable,
        on_error: Optional[Callable] = None,
    ) -> Callable[[], None]:
        subscription = Subscription(topics, query, on_change, on_error)
        with self._lock:
            key = next(self._ids)
            self._subscriptions[key] = subscription
        logger.debug(f"Live query {key} subscribed to {sorted(subscription.topics)}")

        self._schedule([key])

        def unsubscribe():
            with self._lock:
                removed = self._subscriptions.pop(key, None)
            if removed is not None:
                logger.debug(f"Live query {key} unsubscribed")

        return unsubscribe

    def notify(self, *topics: str):
        changed = set(topics)
        with self._lock:
            keys = [
                key for key, sub in self._subscriptions.items() if sub.topics & changed
            ]
        self._schedule(keys)

    def active_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def wait_idle(self):
        """
        Block until every delivery scheduled so far has run.
        Must not be called from a listener callback.
        """
        self._pending.join()

    def _schedule(self, keys):
        if not keys:
            return
        with self._lock:
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._run, name="live-queries", daemon=True
                )
                self._worker.start()
        for key in keys:
            self._pending.put(key)

    def _run(self):
        while True:
            key = self._pending.get()
            try:
                with self._lock:
                    subscription = self._subscriptions.get(key)
                # Unsubscribed while queued
                if subscription is not None:
                    self._deliver(subscription)
            except Exception:
                logger.exception(f"Live query {key} delivery failed")
            finally:
                self._pending.task_done()

    def _deliver(self, subscription: Subscription):
        db = self.session_factory()
        try:
            snapshot = subscription.query(db)
        except SQLAlchemyError as exc:
            logger.error(f"Live query failed for {sorted(subscription.topics)}: {exc}")
            error = TransportError("Realtime updates unavailable. Pull to refresh.")
            error.__cause__ = exc
            if subscription.on_error is not None:
                subscription.on_error(error)
            return
        finally:
            db.close()
        try:
            subscription.on_change(snapshot)
        except Exception:
            logger.exception(f"Live query listener failed for {sorted(subscription.topics)}")


hub = LiveQueryHub()


def get_hub():
    return hub
