"""Character sources feeding the reader one code point at a time."""

from __future__ import annotations

import io
from typing import IO
from typing import Any
from typing import Final
from typing import Protocol
from typing import runtime_checkable

END_OF_INPUT: Final = -1


@runtime_checkable
class CharacterSource(Protocol):
    """
    Supplies code points to JsonReader.

    read_code_point returns the next code point as an int, or END_OF_INPUT
    once the input is exhausted. Implementations may raise OSError.
    """

    def read_code_point(self) -> int: ...


class StringSource:
    """Character source over an in-memory string."""

    def __init__(self, text: str) -> None:
        self.text: Final = text
        self.pos = 0
        self.length: Final = len(text)

    def read_code_point(self) -> int:
        if self.pos >= self.length:
            return END_OF_INPUT
        char = self.text[self.pos]
        self.pos += 1
        return ord(char)


class StreamSource:
    """
    Character source over a text file-like object.

    Reads the stream in chunks and hands out one code point per call. The
    stream is never closed here; its lifecycle belongs to the caller.
    """

    def __init__(self, fp: IO[str], chunk_size: int = 8192) -> None:
        if isinstance(fp, io.RawIOBase | io.BufferedIOBase):
            raise TypeError("the JSON stream must be text, not bytes")
        if chunk_size < 1:
            raise ValueError("chunk_size must be a positive integer")

        self.fp: Final = fp
        self.chunk_size: Final = chunk_size
        self._chunk = ""
        self._pos = 0
        self._exhausted = False

    def read_code_point(self) -> int:
        if self._pos >= len(self._chunk):
            if self._exhausted:
                return END_OF_INPUT
            self._fill()
            if self._exhausted:
                return END_OF_INPUT

        char = self._chunk[self._pos]
        self._pos += 1
        return ord(char)

    def _fill(self) -> None:
        """Pulls the next chunk; an empty read marks end of input."""
        chunk = self.fp.read(self.chunk_size)
        if not isinstance(chunk, str):
            raise TypeError(
                f"the JSON stream must be text, not {type(chunk).__name__}"
            )
        self._chunk = chunk
        self._pos = 0
        if not chunk:
            self._exhausted = True


def as_source(obj: Any) -> CharacterSource:
    """
    Coerces supported inputs into a CharacterSource.

    Existing sources pass through, strings are wrapped in StringSource and
    text streams in StreamSource.
    """
    if isinstance(obj, CharacterSource):
        return obj
    if isinstance(obj, str):
        return StringSource(obj)
    if isinstance(obj, bytes | bytearray):
        raise TypeError("the JSON object must be str, not bytes")
    if hasattr(obj, "read"):
        return StreamSource(obj)

    msg = f"cannot read JSON from {type(obj).__name__}"
    raise TypeError(msg)
