from encoded_columns.db.columns import encoded_column, encoding_info, read_options
from encoded_columns.db.events import check_encoded, encodings_for, load_encoded
from encoded_columns.db.registration import EncodedColumnsMixin, register_encoded_columns
from encoded_columns.db.session import EncodedSession, EncodedSessionMixin

__all__ = [
    "EncodedColumnsMixin",
    "EncodedSession",
    "EncodedSessionMixin",
    "check_encoded",
    "encoded_column",
    "encoding_info",
    "encodings_for",
    "load_encoded",
    "read_options",
    "register_encoded_columns",
]
