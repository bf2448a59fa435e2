"""Hook encoded columns into SQLAlchemy declarative class definition.

``EncodedColumnsMixin`` lets SQLAlchemy map the class first and then compiles
each encoded column's options into a ``ColumnEncoding``.  Any configuration
problem is raised from the ``class`` statement itself, so a model with a
broken encoded column cannot be instantiated.

    class Base(EncodedColumnsMixin, DeclarativeBase):
        pass

Bases built with the legacy ``declarative_base()`` map classes in their
metaclass, after ``__init_subclass__`` has run; call
``register_encoded_columns(Model)`` after each such class instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import partialmethod
from types import MappingProxyType

from sqlalchemy import inspect

from encoded_columns.db.columns import read_options
from encoded_columns.db.events import (
    ENCODINGS_ATTR,
    attach_listener,
    check_encoded,
    encodings_for,
)
from encoded_columns.descriptor import ColumnEncoding
from encoded_columns.errors import ConfigurationError
from encoded_columns.registry import BackendRegistry, default_registry

logger = logging.getLogger(__name__)

_MISSING = object()


def _is_installed_check(value) -> bool:
    return isinstance(value, partialmethod) and value.func is check_encoded


def _class_attribute(cls: type, name: str):
    # Look in class dicts directly; getattr would bind partialmethods
    for klass in cls.__mro__:
        if name in klass.__dict__:
            return klass.__dict__[name]
    return _MISSING


def _build_encodings(cls: type, mapper, registry: BackendRegistry) -> dict[str, ColumnEncoding]:
    encodings: dict[str, ColumnEncoding] = {}
    for key, column in mapper.columns.items():
        options = read_options(getattr(column, "info", None) or {}, column=f"{cls.__name__}.{key}")
        if options is None:
            continue
        backend = registry.resolve(options.encode_class, options.encode_args)
        encodings[key] = ColumnEncoding(key, backend, options.check_method)
    return encodings


def _validate_check_methods(cls: type, encodings: Mapping[str, ColumnEncoding]) -> None:
    claimed: dict[str, str] = {}
    for encoding in encodings.values():
        name = encoding.check_method
        if not name:
            continue
        if name in claimed:
            raise ConfigurationError(
                f"{cls.__name__}: check method {name!r} requested by both "
                f"{claimed[name]!r} and {encoding.key!r}"
            )
        claimed[name] = encoding.key
        existing = _class_attribute(cls, name)
        if existing is not _MISSING and not _is_installed_check(existing):
            raise ConfigurationError(
                f"{cls.__name__}: cannot install check method {name!r} for {encoding.key!r}; "
                "the class already defines that attribute"
            )


def register_encoded_columns(
    cls: type,
    registry: BackendRegistry | None = None,
) -> Mapping[str, ColumnEncoding]:
    """Compile and install encoders for every encoded column of a mapped class.

    Must run after SQLAlchemy has mapped ``cls``; unmapped classes (the
    declarative base, ``__abstract__`` classes) are skipped.  Everything is
    validated before the class is touched, and running it again replaces the
    previous registration as a whole.
    """
    mapper = inspect(cls, raiseerr=False)
    if mapper is None or mapper.class_ is not cls:
        return encodings_for(cls)

    registry = registry or default_registry
    encodings = _build_encodings(cls, mapper, registry)
    _validate_check_methods(cls, encodings)

    # Drop check methods from a previous registration that no longer apply
    wanted = {e.check_method for e in encodings.values() if e.check_method}
    for name, value in list(cls.__dict__.items()):
        if _is_installed_check(value) and name not in wanted:
            delattr(cls, name)

    setattr(cls, ENCODINGS_ATTR, MappingProxyType(encodings))

    for encoding in encodings.values():
        if encoding.check_method:
            setattr(cls, encoding.check_method, partialmethod(check_encoded, encoding.key))
        attach_listener(getattr(cls, encoding.key))
        logger.debug(
            "Encoding %s.%s with %r",
            cls.__name__,
            encoding.key,
            encoding.backend,
            extra={"model": cls.__name__, "column": encoding.key, "backend": encoding.backend_name},
        )

    return encodings_for(cls)


def _drop_own_table(cls) -> None:
    """Take the table a rejected class created back out of its MetaData.

    The mapper stays in the declarative registry; SQLAlchemy has no way to
    unmap a single class.
    """
    mapper = inspect(cls, raiseerr=False)
    if mapper is None:
        return
    table = mapper.local_table
    if mapper.inherits is not None and mapper.inherits.local_table is table:
        return
    metadata = getattr(table, "metadata", None)
    if metadata is not None and metadata.tables.get(table.key) is table:
        metadata.remove(table)
        logger.debug("dropped table %s of rejected model %s", table.key, cls.__name__)


class EncodedColumnsMixin:
    """Declarative base mixin that registers encoded columns as classes are mapped.

    Set ``__encoder_registry__`` on the base to resolve backends from a
    registry other than the process-wide default.
    """

    __encoder_registry__ = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        try:
            register_encoded_columns(cls, cls.__encoder_registry__)
        except Exception:
            _drop_own_table(cls)
            raise

    def check_encoded(self, key: str, candidate: str | bytes) -> bool:
        """Verify ``candidate`` against the encoded column ``key``."""
        return check_encoded(self, key, candidate)
