"""JSON encoding of document sequences.

Snapshots and cursor output are plain JSON arrays of documents. Dates are
written as ISO-8601 strings and come back as strings; compiled patterns
only belong in queries and cannot be encoded.
"""

import re
from typing import Any

import msgspec

from .exceptions import SerializationError
from .models import Document, is_document

_decoder = msgspec.json.Decoder()


def _enc_hook(obj: Any) -> Any:
    if isinstance(obj, re.Pattern):
        raise NotImplementedError(f"Cannot store regular expression {obj.pattern!r}")
    raise NotImplementedError(f"Cannot encode objects of type {type(obj)}")


def encode_documents(documents: list[Document], indent: int | None = None) -> bytes:
    """Encode documents as a JSON array."""
    try:
        data = msgspec.json.encode(documents, enc_hook=_enc_hook)
    except (NotImplementedError, TypeError, msgspec.EncodeError) as e:
        raise SerializationError(f"Failed to encode documents: {e}") from e
    if indent:
        data = msgspec.json.format(data, indent=indent)
    return data


def decode_documents(data: bytes | str) -> list[Document] | None:
    """Decode a JSON array of documents.

    Returns None for empty input. Raises SerializationError when the data is
    not JSON or not an array of documents.
    """
    if not data or not data.strip():
        return None
    try:
        decoded = _decoder.decode(data)
    except msgspec.DecodeError as e:
        raise SerializationError(f"Invalid snapshot: {e}") from e

    if not isinstance(decoded, list):
        raise SerializationError(
            f"Snapshot must be a JSON array, got {type(decoded).__name__}"
        )
    for position, item in enumerate(decoded):
        if not is_document(item):
            raise SerializationError(f"Snapshot item {position} is not a document")
    return decoded
