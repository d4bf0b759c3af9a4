"""Backend facade.

Both backends expose the same small surface used by `core.issue_store`:

  add(path, data) -> doc_id
  update(path, doc_id, data)
  get(path, doc_id) -> dict | None
  watch(path, filters, on_snapshot, on_error) -> WatchHandle (unsubscribe, is_alive)
  upload(path, data, content_type) -> public url
  server_timestamp() -> sentinel resolved by the backend on write

`on_snapshot` receives the full matching result set as a list of
(doc_id, data) pairs on every change.
"""

from __future__ import annotations

from firdesk.core.config import Settings


def create_backend(settings: Settings):
    if settings.backend == "firestore":
        from firdesk.core.backends.firestore_backend import FirestoreBackend

        return FirestoreBackend(settings)

    from firdesk.core.backends.memory_backend import MemoryBackend

    return MemoryBackend()


__all__ = ["create_backend"]
