"""Session class whose ``merge()`` keeps encoded values as stored.

``Session.merge()`` copies the state of the given instance onto the
persistent one with ordinary attribute sets, which would encode values that
are already encoded.  Use ``EncodedSession`` wherever models with encoded
columns are merged::

    SessionLocal = sessionmaker(engine, class_=EncodedSession)
    AsyncSessionLocal = async_sessionmaker(engine, sync_session_class=EncodedSession)
"""

from sqlalchemy.orm import Session

from encoded_columns.db.events import copying_stored_state


class EncodedSessionMixin:
    """Mix into a custom ``Session`` subclass ahead of ``Session``."""

    def merge(self, instance, *, load: bool = True, options=None):
        # Autoflush first so flush hooks assign outside the copying block
        if load and self.autoflush:
            self.flush()
        with copying_stored_state():
            return super().merge(instance, load=load, options=options)


class EncodedSession(EncodedSessionMixin, Session):
    pass
