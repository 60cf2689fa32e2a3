"""Query matching engine for schema-less documents.

Provides the pieces that turn a query document into a filtered sequence:

- **Clause classification**: each query key/value pair tagged with a strategy
- **Matchers**: equality/regex, comparison operators, disjunction
- **Query engine**: left-to-right sequential narrowing of clauses
- **Result cursor**: detached copies with chainable sort/limit/skip
"""

from .clauses import classify, parse_clause, parse_query
from .codec import decode_documents, encode_documents
from .cursor import ResultCursor
from .engine import QueryEngine
from .exceptions import (
    DocliteError,
    DuplicateKeyError,
    InvalidQueryError,
    InvalidUpdateError,
    SerializationError,
    StorageError,
    UnsupportedClauseError,
)
from .matchers import match_conditional, match_normal, match_or
from .models import Clause, ClauseType, Document, ExistsSemantics, UpdateOptions

__all__ = [
    # Model
    "Clause",
    "ClauseType",
    "Document",
    "ExistsSemantics",
    "UpdateOptions",
    # Classification
    "classify",
    "parse_clause",
    "parse_query",
    # Matching
    "match_normal",
    "match_conditional",
    "match_or",
    "QueryEngine",
    "ResultCursor",
    # Codec
    "encode_documents",
    "decode_documents",
    # Errors
    "DocliteError",
    "InvalidQueryError",
    "UnsupportedClauseError",
    "InvalidUpdateError",
    "DuplicateKeyError",
    "StorageError",
    "SerializationError",
]
