"""Clients for the hosted JSON tree store that holds every user's journal.

Records live under ``users/{user_id}/...``. A store can read, write, push,
delete and subscribe to a path; subscribers always receive the full current
value at their path, never a delta.
"""
from __future__ import annotations

import copy
import logging
import os
import threading
import time
from typing import Any, Callable, Optional

from dashboard.constants import DEFAULT_POLL_SECONDS, USERS_ROOT
from dashboard.data.errors import InvalidPathError, StoreError

logger = logging.getLogger(__name__)

FORBIDDEN_KEY_CHARS = set("/.#$[]")


def split_path(path: str) -> list[str]:
    parts = [part for part in str(path or "").strip("/").split("/")]
    if not parts or any(not part for part in parts):
        raise InvalidPathError(f"Invalid store path: {path!r}")
    for part in parts:
        if FORBIDDEN_KEY_CHARS & set(part):
            raise InvalidPathError(f"Invalid key {part!r} in path {path!r}")
    return parts


def join_path(*parts) -> str:
    stripped = []
    for part in parts:
        text = "" if part is None else str(part).strip("/")
        if not text:
            raise InvalidPathError(f"Empty path segment in {parts!r}")
        stripped.append(text)
    path = "/".join(stripped)
    split_path(path)
    return path


def user_path(user_id: str, *parts) -> str:
    return join_path(USERS_ROOT, user_id, *parts)


def paths_overlap(a: str, b: str) -> bool:
    a_parts = split_path(a)
    b_parts = split_path(b)
    size = min(len(a_parts), len(b_parts))
    return a_parts[:size] == b_parts[:size]


def new_push_key() -> str:
    millis = int(time.time() * 1000)
    return f"{millis:013x}{os.urandom(5).hex()}"


def filter_children(value, order_by: Optional[str], equal_to) -> Any:
    if order_by is None:
        return value
    if not isinstance(value, dict):
        return None
    matched = {
        key: child
        for key, child in value.items()
        if isinstance(child, dict) and child.get(order_by) == equal_to
    }
    return matched or None


class Subscription:
    """Handle for one live subscription.

    ``cancel`` may be called any number of times. Once it has returned the
    callback is never invoked again: it waits for a delivery already running
    on another thread. A callback may cancel its own subscription.
    """

    def __init__(self, path: str, callback: Callable[[Any], None], on_cancel=None):
        self.path = path
        self._callback = callback
        self._on_cancel = on_cancel
        self._lock = threading.RLock()
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def deliver(self, value) -> bool:
        with self._lock:
            if self._cancelled:
                return False
            self._callback(value)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel(self)


class Store:
    def read(self, path: str, order_by: Optional[str] = None, equal_to=None):
        raise NotImplementedError

    def write(self, path: str, record) -> None:
        raise NotImplementedError

    def push(self, path: str, record) -> str:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError

    def subscribe(self, path: str, callback: Callable[[Any], None]) -> Subscription:
        raise NotImplementedError

    def close(self) -> None:
        return None


class MemoryStore(Store):
    """In-process store used for offline mode and tests.

    Subscribers are notified synchronously, after the lock is released, for
    every mutation whose path overlaps theirs. Setting ``fail_with`` to an
    exception makes every subsequent operation raise it.
    """

    def __init__(self, data: Optional[dict] = None):
        self._root: dict = copy.deepcopy(data) if data else {}
        self._lock = threading.RLock()
        self._subscriptions: list[Subscription] = []
        self.fail_with: Optional[BaseException] = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _get(self, parts):
        node = self._root
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _set(self, parts, value):
        node = self._root
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = copy.deepcopy(value)

    def _remove(self, parts):
        trail = [self._root]
        for part in parts[:-1]:
            child = trail[-1].get(part)
            if not isinstance(child, dict):
                return
            trail.append(child)
        trail[-1].pop(parts[-1], None)
        for depth in range(len(parts) - 2, -1, -1):
            if trail[depth + 1]:
                break
            trail[depth].pop(parts[depth], None)

    def read(self, path, order_by=None, equal_to=None):
        self._check()
        parts = split_path(path)
        with self._lock:
            value = copy.deepcopy(self._get(parts))
        return filter_children(value, order_by, equal_to)

    def write(self, path, record):
        self._check()
        parts = split_path(path)
        with self._lock:
            if record is None:
                self._remove(parts)
            else:
                self._set(parts, record)
        self._notify(path)

    def push(self, path, record):
        self._check()
        key = new_push_key()
        self.write(join_path(path, key), record)
        return key

    def delete(self, path):
        self._check()
        parts = split_path(path)
        with self._lock:
            self._remove(parts)
        self._notify(path)

    def subscribe(self, path, callback):
        self._check()
        split_path(path)
        subscription = Subscription(path, callback, on_cancel=self._unsubscribe)
        with self._lock:
            self._subscriptions.append(subscription)
            value = copy.deepcopy(self._get(split_path(path)))
        subscription.deliver(value)
        return subscription

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _unsubscribe(self, subscription):
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _notify(self, changed_path):
        with self._lock:
            pending = [
                (subscription, copy.deepcopy(self._get(split_path(subscription.path))))
                for subscription in self._subscriptions
                if paths_overlap(subscription.path, changed_path)
            ]
        for subscription, value in pending:
            subscription.deliver(value)


class RevisionPoller(threading.Thread):
    """Background loop that turns backend revision changes into snapshots."""

    def __init__(self, store: "ApiStore", subscription: Subscription, interval: float):
        super().__init__(name=f"moodlog-poller:{subscription.path}", daemon=True)
        self.store = store
        self.subscription = subscription
        self.interval = max(0.1, float(interval))
        self._stop_event = threading.Event()
        self._last_revision = None

    def stop(self) -> None:
        self._stop_event.set()

    def poll_once(self) -> bool:
        revision = self.store.revision(self.subscription.path)
        if revision == self._last_revision:
            return False
        value = self.store.read(self.subscription.path)
        self._last_revision = revision
        return self.subscription.deliver(value)

    def run(self) -> None:
        while self.subscription.active and not self._stop_event.is_set():
            try:
                self.poll_once()
            except StoreError as exc:
                logger.warning("Polling %s failed: %s", self.subscription.path, exc)
            except Exception:
                logger.exception("Subscriber for %s raised", self.subscription.path)
            if self._stop_event.wait(self.interval):
                break


class ApiStore(Store):
    """Store backed by the MoodLog backend's ``/v1/store`` routes."""

    def __init__(self, client, poll_interval: float = DEFAULT_POLL_SECONDS, start_pollers: bool = True):
        self.client = client
        self.poll_interval = poll_interval
        self.start_pollers = start_pollers
        self._pollers: dict[int, RevisionPoller] = {}
        self._lock = threading.Lock()

    def read(self, path, order_by=None, equal_to=None):
        split_path(path)
        params = None
        if order_by is not None:
            params = {"order_by": order_by, "equal_to": equal_to}
        payload = self.client.request("GET", self.client.store_url(path), params=params)
        return (payload or {}).get("value")

    def write(self, path, record):
        split_path(path)
        self.client.request("PUT", self.client.store_url(path), json={"value": record})

    def push(self, path, record):
        split_path(path)
        payload = self.client.request("POST", self.client.store_url(path), json={"value": record})
        key = (payload or {}).get("key")
        if not key:
            raise StoreError(f"Backend did not return a key for push to {path}")
        return key

    def delete(self, path):
        split_path(path)
        self.client.request("DELETE", self.client.store_url(path))

    def revision(self, path) -> int:
        split_path(path)
        payload = self.client.request("GET", self.client.store_url(path, prefix="/v1/store/revision"))
        return int((payload or {}).get("revision") or 0)

    def subscribe(self, path, callback):
        split_path(path)
        subscription = Subscription(path, callback, on_cancel=self._stop_poller)
        poller = RevisionPoller(self, subscription, self.poll_interval)
        with self._lock:
            self._pollers[id(subscription)] = poller
        if self.start_pollers:
            poller.start()
        return subscription

    def poller_for(self, subscription) -> Optional[RevisionPoller]:
        with self._lock:
            return self._pollers.get(id(subscription))

    def _stop_poller(self, subscription):
        with self._lock:
            poller = self._pollers.pop(id(subscription), None)
        if poller is not None:
            poller.stop()

    def close(self) -> None:
        with self._lock:
            pollers = list(self._pollers.values())
            self._pollers.clear()
        for poller in pollers:
            poller.stop()
        self.client.close()
