from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from firdesk.core.errors import DocumentNotFoundError
from firdesk.core.issue_filters import matches_filters
from firdesk.core.issue_time import utc_now
from firdesk.core.logs import get_logger
from firdesk.core.subscription import WatchHandle

log = get_logger(__name__)

URL_PREFIX = "memory://"

Snapshot = List[Tuple[str, Dict[str, Any]]]


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass
class _Watcher:
    path: str
    filters: Dict[str, Any]
    on_snapshot: Callable[[Snapshot], None]
    on_error: Callable[[BaseException], None]
    active: bool = True


class MemoryBackend:
    """
    Process-local stand-in for the managed backend.

    Documents, blobs and watchers live in dicts. Watchers get the full
    matching snapshot synchronously after every write to their collection,
    delivered while the store lock is held so snapshots never arrive out of
    write order.
    A watcher whose callback raises is reported through `on_error` and
    stops receiving snapshots.
    """

    def __init__(self, clock: Optional[Callable[[], Any]] = None):
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._order: Dict[str, List[str]] = {}
        self._blobs: Dict[str, Tuple[bytes, str]] = {}
        self._watchers: List[_Watcher] = []

    # ----------------------------
    # Documents
    # ----------------------------
    def server_timestamp(self) -> Any:
        return SERVER_TIMESTAMP

    def _resolve(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = None
        out = {}
        for k, v in data.items():
            if v is SERVER_TIMESTAMP:
                if now is None:
                    now = self._clock()
                v = now
            out[k] = copy.deepcopy(v)
        return out

    def add(self, path: str, data: Dict[str, Any]) -> str:
        doc_id = uuid4().hex[:20]
        with self._lock:
            self._collections.setdefault(path, {})[doc_id] = self._resolve(data)
            self._order.setdefault(path, []).append(doc_id)
            self._notify(path)
        return doc_id

    def update(self, path: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            docs = self._collections.get(path, {})
            if doc_id not in docs:
                raise DocumentNotFoundError(f"No document to update: {path}/{doc_id}")
            docs[doc_id].update(self._resolve(data))
            self._notify(path)

    def get(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._collections.get(path, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def _snapshot(self, path: str, filters: Dict[str, Any]) -> Snapshot:
        with self._lock:
            docs = self._collections.get(path, {})
            return [
                (doc_id, copy.deepcopy(docs[doc_id]))
                for doc_id in self._order.get(path, [])
                if matches_filters(docs[doc_id], filters)
            ]

    # ----------------------------
    # Live queries
    # ----------------------------
    def watch(
        self,
        path: str,
        filters: Optional[Dict[str, Any]],
        on_snapshot: Callable[[Snapshot], None],
        on_error: Callable[[BaseException], None],
    ) -> WatchHandle:
        w = _Watcher(path=path, filters=dict(filters or {}), on_snapshot=on_snapshot, on_error=on_error)
        with self._lock:
            self._watchers.append(w)
            self._deliver(w)

        def _unsubscribe() -> None:
            w.active = False
            with self._lock:
                if w in self._watchers:
                    self._watchers.remove(w)

        return WatchHandle(unsubscribe=_unsubscribe, is_alive=lambda: w.active)

    def _notify(self, path: str) -> None:
        # snapshots go out in write order; a concurrent write waits for this round
        with self._lock:
            for w in [w for w in self._watchers if w.path == path and w.active]:
                self._deliver(w)

    def _deliver(self, w: _Watcher) -> None:
        if not w.active:
            return
        try:
            w.on_snapshot(self._snapshot(w.path, w.filters))
        except Exception as e:
            w.active = False
            with self._lock:
                if w in self._watchers:
                    self._watchers.remove(w)
            w.on_error(e)

    def watcher_count(self, path: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for w in self._watchers if path is None or w.path == path)

    # ----------------------------
    # Blobs
    # ----------------------------
    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        with self._lock:
            self._blobs[path] = (bytes(data), content_type)
        return f"{URL_PREFIX}{path}"

    def fetch(self, url: str) -> bytes:
        path = url[len(URL_PREFIX):] if url.startswith(URL_PREFIX) else url
        with self._lock:
            if path not in self._blobs:
                raise DocumentNotFoundError(f"No stored object at {url}")
            return self._blobs[path][0]

    def blob_paths(self) -> list[str]:
        with self._lock:
            return sorted(self._blobs)
