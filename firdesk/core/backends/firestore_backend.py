from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import firebase_admin
from firebase_admin import credentials, firestore, storage
from google.cloud.firestore_v1.base_query import FieldFilter

from firdesk.core.config import Settings
from firdesk.core.errors import BackendInitError, StorageNotConfiguredError
from firdesk.core.logs import get_logger
from firdesk.core.subscription import WatchHandle

log = get_logger(__name__)

APP_NAME = "firdesk"

Snapshot = List[Tuple[str, Dict[str, Any]]]


class FirestoreBackend:
    """Cloud Firestore documents + Cloud Storage blobs through firebase-admin."""

    def __init__(self, settings: Settings):
        if not settings.project_id:
            raise BackendInitError("FIR_FIREBASE_CONFIG has no projectId")

        options: Dict[str, Any] = {"projectId": settings.project_id}
        if settings.storage_bucket:
            options["storageBucket"] = settings.storage_bucket

        try:
            try:
                self._app = firebase_admin.get_app(APP_NAME)
            except ValueError:
                if settings.credentials_path:
                    cred = credentials.Certificate(settings.credentials_path)
                else:
                    cred = credentials.ApplicationDefault()
                self._app = firebase_admin.initialize_app(cred, options, name=APP_NAME)
            self._db = firestore.client(app=self._app)
            self._bucket = storage.bucket(app=self._app) if settings.storage_bucket else None
        except Exception as e:
            raise BackendInitError(f"Firebase initialization failed: {e}") from e

        log.info("Connected to Firestore project %s", settings.project_id)

    def server_timestamp(self) -> Any:
        return firestore.SERVER_TIMESTAMP

    def add(self, path: str, data: Dict[str, Any]) -> str:
        _, ref = self._db.collection(path).add(data)
        return ref.id

    def update(self, path: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._db.collection(path).document(doc_id).update(data)

    def get(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        snap = self._db.collection(path).document(doc_id).get()
        return snap.to_dict() if snap.exists else None

    def watch(
        self,
        path: str,
        filters: Optional[Dict[str, Any]],
        on_snapshot: Callable[[Snapshot], None],
        on_error: Callable[[BaseException], None],
    ) -> WatchHandle:
        query = self._db.collection(path)
        for k, v in (filters or {}).items():
            query = query.where(filter=FieldFilter(k, "==", v))

        state = {"failed": False}

        def _callback(docs, changes, read_time) -> None:
            if state["failed"]:
                return
            try:
                on_snapshot([(d.id, d.to_dict() or {}) for d in docs])
            except Exception as e:
                state["failed"] = True
                on_error(e)

        watch = query.on_snapshot(_callback)
        # the watch thread can close on its own (permission denied, stream reset)
        # without ever calling _callback; is_active is how that shows up
        return WatchHandle(
            unsubscribe=watch.unsubscribe,
            is_alive=lambda: not state["failed"] and bool(getattr(watch, "is_active", True)),
        )

    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        if self._bucket is None:
            raise StorageNotConfiguredError("FIR_FIREBASE_CONFIG has no storageBucket")
        blob = self._bucket.blob(path)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        return blob.public_url
