"""State store — JSON blobs under fixed string keys, kept in app_state.

Used for: the geocode cache (one blob for the whole cache) and the runtime
app config. Read and write errors are logged and swallowed: a store that
cannot be read behaves like an empty one.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from ..models import AppState

log = logging.getLogger("visita360.cache")


class StateStore:
    """Blob store backed by the app_state table.

    Opens a short-lived session per call from `session_factory`, so it can be
    shared by long-lived objects (the geocode cache) and request handlers alike.
    """

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        try:
            with self._session_factory() as db:
                row = db.query(AppState).filter_by(key=key).first()
                return row.value if row else None
        except SQLAlchemyError as e:
            log.warning("State read error for %s: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as db:
                row = db.query(AppState).filter_by(key=key).first()
                if row:
                    row.value = value
                else:
                    db.add(AppState(key=key, value=value))
                db.commit()
        except SQLAlchemyError as e:
            log.warning("State write error for %s: %s", key, e)

    def delete(self, key: str) -> None:
        try:
            with self._session_factory() as db:
                db.query(AppState).filter_by(key=key).delete()
                db.commit()
        except SQLAlchemyError as e:
            log.warning("State delete error for %s: %s", key, e)
