"""Path keyed JSON store with change subscriptions.

Whole documents are read and written per path; every successful write is
pushed to the subscribers of that exact path once the row is committed.
"""
import json
import threading
from typing import Any, Callable, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from warrior_cup import db
from warrior_cup.models import Record

Listener = Callable[[Optional[Any]], None]
Disposer = Callable[[], None]


class StoreError(Exception):
    """A write was rejected by the database."""


def tournament_path(tournament_id: str) -> str:
    return f"tournaments/{tournament_id}"


def scores_path(tournament_id: str, match_id: str) -> str:
    return f"scores/{tournament_id}/{match_id}"


class KeyValueStore:

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()

    def get(self, path: str) -> Optional[Any]:
        row = db.session.get(Record, path)
        if row is None:
            return None
        return json.loads(row.value)

    def set(self, path: str, value: Any) -> None:
        """Overwrite the document at ``path`` and notify its subscribers."""
        try:
            row = db.session.get(Record, path)
            if row is None:
                row = Record(path=path, value=json.dumps(value))
            else:
                row.value = json.dumps(value)
            db.session.add(row)
            db.session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            db.session.rollback()
            raise StoreError(f"write to {path} rejected: {exc}") from exc
        self._notify(path, value)

    def subscribe(self, path: str, callback: Listener) -> Disposer:
        """Register ``callback`` for ``path``; it fires now and on every write.

        Returns a disposer. Calling the disposer more than once is a no-op.
        """
        with self._lock:
            self._listeners.setdefault(path, []).append(callback)
        disposed = False

        def dispose() -> None:
            nonlocal disposed
            if disposed:
                return
            disposed = True
            with self._lock:
                listeners = self._listeners.get(path, [])
                if callback in listeners:
                    listeners.remove(callback)
                if not listeners:
                    self._listeners.pop(path, None)

        try:
            callback(self.get(path))
        except Exception:
            dispose()
            raise
        return dispose

    def listener_count(self, path: str) -> int:
        with self._lock:
            return len(self._listeners.get(path, []))

    def _notify(self, path: str, value: Any) -> None:
        with self._lock:
            listeners = list(self._listeners.get(path, []))
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                current_app.logger.exception(f"[store-notify] path={path} listener failed")


kv_store = KeyValueStore()
