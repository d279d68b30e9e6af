"""Base64 codec for the metrics reporter YAML.

The YAML is opaque here: it is carried as bytes and stored as a single
base64 string property.
"""

from __future__ import annotations

import base64
import binascii
import io
from typing import BinaryIO

from fluo.utils.exceptions import ConfigurationError, ConfigurationIOError

CHUNK_SIZE = 4096


def read_stream(stream: BinaryIO) -> bytes:
    """Drain ``stream`` completely.

    Raises:
        ConfigurationIOError: Reading failed

    """
    buffer = io.BytesIO()
    try:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            buffer.write(chunk)
    except OSError as e:
        msg = f"Failed to read metrics YAML: {e}"
        raise ConfigurationIOError(msg) from e
    return buffer.getvalue()


def encode(data: bytes) -> str:
    """Base64-encode ``data`` as a single line."""
    return base64.b64encode(data).decode("ascii").replace("\n", "")


def decode(value: str) -> bytes:
    """Decode a base64 property value.

    Raises:
        ConfigurationError: ``value`` is not valid base64

    """
    try:
        return base64.b64decode(value.strip().encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        msg = f"Metrics YAML is not valid base64: {e}"
        raise ConfigurationError(msg) from e
