"""SQLAlchemy attribute listeners that encode values as they are assigned.

Every user-facing assignment to an encoded attribute goes through
``encode_on_set``: ``obj.password = "..."`` and the declarative constructor
``User(password="...")`` alike.  Rows loaded by the ORM populate instance
state without firing ``set`` events, so values coming back from the database
are never encoded a second time.  ``Session.merge()`` copies state with
ordinary attribute sets, so ``EncodedSession`` runs it inside
``copying_stored_state()``, which the listener honours.  ``load_encoded`` is
the explicit equivalent for application code holding an already-encoded value.
"""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType

from sqlalchemy import event
from sqlalchemy.orm.attributes import set_committed_value

from encoded_columns.descriptor import ColumnEncoding
from encoded_columns.errors import ConfigurationError, MissingValueError

logger = logging.getLogger(__name__)

ENCODINGS_ATTR = "__encoded_columns__"

_NO_ENCODINGS: Mapping[str, ColumnEncoding] = MappingProxyType({})

# Set while the ORM copies already-stored state between instances
_copying_stored_state: ContextVar[bool] = ContextVar("encoded_columns_copying_stored_state", default=False)


def encodings_for(cls: type) -> Mapping[str, ColumnEncoding]:
    """Attribute name → ``ColumnEncoding`` for a mapped class."""
    return getattr(cls, ENCODINGS_ATTR, _NO_ENCODINGS)


@contextmanager
def copying_stored_state() -> Iterator[None]:
    """Assignments inside the block carry stored values and are not encoded."""
    token = _copying_stored_state.set(True)
    try:
        yield
    finally:
        _copying_stored_state.reset(token)


def _encoding(obj, key: str) -> ColumnEncoding:
    encoding = encodings_for(type(obj)).get(key)
    if encoding is None:
        raise ConfigurationError(f"{type(obj).__name__}.{key} is not an encoded column")
    return encoding


def encode_on_set(target, value, oldvalue, initiator):
    """``set`` listener (retval=True): return the encoded form of ``value``."""
    if value is None or _copying_stored_state.get():
        return value
    encoding = encodings_for(type(target)).get(initiator.key)
    if encoding is None:
        return value
    return encoding.encode(value)


def attach_listener(attribute) -> None:
    """Listen on an instrumented attribute, at most once."""
    if not event.contains(attribute, "set", encode_on_set):
        event.listen(attribute, "set", encode_on_set, retval=True)


def load_encoded(obj, key: str, value: str | None) -> None:
    """Place an already-encoded value on ``obj`` as if it was loaded from storage.

    The value is written as committed state: it is not encoded and not
    flushed back to the database.
    """
    _encoding(obj, key)
    set_committed_value(obj, key, value)


def check_encoded(obj, key: str, candidate: str | bytes) -> bool:
    """Verify ``candidate`` against the encoded value stored in ``obj.<key>``."""
    encoding = _encoding(obj, key)
    stored = getattr(obj, key)
    if stored is None:
        raise MissingValueError(type(obj).__name__, key)
    return encoding.verify(candidate, stored)
