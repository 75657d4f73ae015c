"""Character encodings resolved through the Python codec registry.

``get_codec`` validates a name eagerly so that a bad encoding fails when it is
assigned, not when a file is first saved.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass

from pathwatch.core.errors import EncodingError

DEFAULT_ENCODING = "utf8"


@dataclass(frozen=True, slots=True)
class Codec:
    """A named text encoding."""

    name: str
    info: codecs.CodecInfo

    def decode(self, data: bytes) -> str:
        return self.info.decode(data)[0]

    def encode(self, text: str) -> bytes:
        return self.info.encode(text)[0]

    def incremental_decoder(self) -> codecs.IncrementalDecoder:
        """Decoder for streamed input; multi-byte sequences may span chunks."""
        return self.info.incrementaldecoder()

    def incremental_encoder(self) -> codecs.IncrementalEncoder:
        return self.info.incrementalencoder()

    @property
    def python_name(self) -> str:
        """Canonical name accepted by ``open(..., encoding=...)``."""
        return self.info.name


def get_codec(name: str) -> Codec:
    """Look up a text codec by name.

    Raises:
        EncodingError: If the name is unknown or names a bytes-to-bytes codec
                       (e.g. ``"base64"``), which cannot decode file contents
                       to text.
    """
    try:
        info = codecs.lookup(name)
    except (LookupError, TypeError) as e:
        raise EncodingError.unsupported(str(name)) from e
    if not getattr(info, "_is_text_encoding", True):
        raise EncodingError.unsupported(name)
    return Codec(name=name, info=info)


def is_default(name: str) -> bool:
    return name == DEFAULT_ENCODING
