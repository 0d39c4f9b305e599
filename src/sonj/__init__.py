"""
Streaming JSON reader that builds trees from pluggable collection types.

Pulls one code point at a time from a character source and decodes the JSON
grammar by recursive descent over a single code point of look-ahead. Objects
and arrays are obtained from a collection factory so callers decide which
mapping and sequence types end up in the tree.
"""

import os
import time
from collections.abc import Callable
from collections.abc import MutableMapping
from collections.abc import MutableSequence
from dataclasses import dataclass
from typing import IO
from typing import Any
from typing import Final
from typing import TypeAlias

from sonj._sources import END_OF_INPUT
from sonj._sources import CharacterSource
from sonj._sources import StreamSource
from sonj._sources import StringSource
from sonj._sources import as_source

__version__ = "0.1.0"

# Type aliases for domain concepts - recursive definition
JsonValue = (
    str
    | int
    | float
    | bool
    | None
    | MutableMapping[str, "JsonValue"]
    | MutableSequence["JsonValue"]
)
CodePoint: TypeAlias = int

# Union type for values that might be transformed by hooks
JsonValueOrTransformed = JsonValue | Any

ParseIntHook = Callable[[str], Any] | None
ParseFloatHook = Callable[[str], Any] | None

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "SONJ_PROFILE" in os.environ

OBJECT_OPEN: Final = ord("{")
OBJECT_CLOSE: Final = ord("}")
ARRAY_OPEN: Final = ord("[")
ARRAY_CLOSE: Final = ord("]")
STRING_DELIMITER: Final = ord('"')
PAIR_SEPARATOR: Final = ord(":")
ITEM_SEPARATOR: Final = ord(",")
ESCAPE_CHARACTER: Final = ord("\\")
UNICODE_CHARACTER: Final = ord("u")
UNICODE_DIGIT_COUNT: Final = 4

# Space, tab, newline and carriage return all sit at or below this
HIGHEST_WHITESPACE: Final = ord(" ")

_UNESCAPE: Final = {
    ord('"'): '"',
    ord("\\"): "\\",
    ord("/"): "/",
    ord("b"): "\b",
    ord("f"): "\f",
    ord("n"): "\n",
    ord("r"): "\r",
    ord("t"): "\t",
}
_HEX_DIGITS: Final = frozenset(map(ord, "0123456789abcdefABCDEF"))
_NUMBER_CHARACTERS: Final = frozenset("0123456789+-.eE")
_PRIMITIVE_TERMINATORS: Final = frozenset(
    {OBJECT_CLOSE, ARRAY_CLOSE, ITEM_SEPARATOR}
)

_HIGH_SURROGATES: Final = range(0xD800, 0xDC00)
_LOW_SURROGATES: Final = range(0xDC00, 0xE000)
_MAX_CODE_POINT: Final = 0x10FFFF


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during parsing."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0

    def record_call(self, duration_ns: int) -> None:
        """Records a function call with its timing."""
        self.call_count += 1
        self.total_time_ns += duration_ns


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str) -> None:
            self.func_name = func_name
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        def __init__(self, func_name: str) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


def _render_code_point(code_point: CodePoint) -> str:
    """Shows a code point as its character when printable, else as a number."""
    if 0 <= code_point <= _MAX_CODE_POINT and chr(code_point).isprintable():
        return chr(code_point)
    return str(code_point)


class JSONSyntaxError(ValueError):
    """
    Raised when the input deviates from the JSON grammar.

    Carries the code points that would have been accepted and the one that
    was found instead. There is no line or column information: the reader
    tracks nothing beyond its look-ahead.
    """

    def __init__(
        self,
        msg: str,
        expected: tuple[CodePoint, ...] = (),
        found: CodePoint | None = None,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")

        self.msg = msg
        self.expected = expected
        self.found = found
        super().__init__(msg)

    @classmethod
    def unexpected(
        cls, expected: tuple[CodePoint, ...], found: CodePoint
    ) -> "JSONSyntaxError":
        """Builds the error for a delimiter mismatch."""
        expected_str = "' or '".join(chr(c) for c in expected)
        return cls(
            f"Expecting '{expected_str}', found "
            f"'{_render_code_point(found)}' instead",
            expected,
            found,
        )


class CollectionFactory:
    """
    Supplies the containers JsonReader fills.

    Objects become plain dicts and arrays plain lists. Subclass and override
    new_map / new_list to plug in other types; anything supporting item
    assignment (maps) or append (lists) works.
    """

    def new_map(self) -> MutableMapping[str, Any]:
        return {}

    def new_list(self) -> MutableSequence[Any]:
        return []


class TypedFactory(CollectionFactory):
    """Builds objects and arrays by calling the given types."""

    def __init__(
        self,
        map_type: Callable[[], MutableMapping[str, Any]] = dict,
        list_type: Callable[[], MutableSequence[Any]] = list,
    ) -> None:
        self.map_type = map_type
        self.list_type = list_type

    def new_map(self) -> MutableMapping[str, Any]:
        return self.map_type()

    def new_list(self) -> MutableSequence[Any]:
        return self.list_type()


DEFAULT_FACTORY: Final = CollectionFactory()


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures JSON parsing behavior with immutable settings.

    The factory decides the container types; the optional hooks receive the
    literal text of floats and integers in place of float() and int().
    """

    factory: CollectionFactory = DEFAULT_FACTORY
    parse_int: ParseIntHook = None
    parse_float: ParseFloatHook = None

    def __post_init__(self) -> None:
        if not (
            callable(getattr(self.factory, "new_map", None))
            and callable(getattr(self.factory, "new_list", None))
        ):
            raise TypeError("factory must provide new_map() and new_list()")
        if self.parse_int is not None and not callable(self.parse_int):
            raise TypeError("parse_int must be callable")
        if self.parse_float is not None and not callable(self.parse_float):
            raise TypeError("parse_float must be callable")


class JsonReader:
    """
    Recursive descent JSON reader over a character source.

    Holds exactly one code point of look-ahead and pulls the next one only
    when the grammar consumes the current one. A reader is bound to its
    source and must not be shared between threads.
    """

    def __init__(
        self,
        source: CharacterSource | str | IO[str],
        config: ParseConfig | None = None,
    ) -> None:
        self.source = as_source(source)
        self.config = config if config is not None else ParseConfig()
        self.factory = self.config.factory
        # Whitespace, so the first skip primes the look-ahead
        self._current: CodePoint = HIGHEST_WHITESPACE

    @property
    def current(self) -> CodePoint:
        """The unconsumed look-ahead code point, END_OF_INPUT once drained."""
        return self._current

    def parse(self) -> JsonValueOrTransformed:
        """Reads a single value of any kind."""
        self._skip_whitespace()
        return self._descend(self._parse_value)

    def parse_as_object(self) -> MutableMapping[str, Any]:
        """Reads a single value that must be an object."""
        if self._skip_whitespace() != OBJECT_OPEN:
            raise JSONSyntaxError.unexpected((OBJECT_OPEN,), self._current)
        return self._descend(self._parse_object)

    def parse_as_array(self) -> MutableSequence[Any]:
        """Reads a single value that must be an array."""
        if self._skip_whitespace() != ARRAY_OPEN:
            raise JSONSyntaxError.unexpected((ARRAY_OPEN,), self._current)
        return self._descend(self._parse_array)

    def _descend(self, rule: Callable[[], Any]) -> Any:
        """Runs a grammar rule, reporting runaway nesting as a syntax error."""
        try:
            return rule()
        except RecursionError as e:
            raise JSONSyntaxError("Document nested too deeply") from e

    def expect_end(self) -> None:
        """Skips trailing whitespace and fails unless the input is drained."""
        c = self._skip_whitespace()
        if c != END_OF_INPUT:
            raise JSONSyntaxError(
                f"Extra data: found '{_render_code_point(c)}' after the value",
                (),
                c,
            )

    def _advance(self) -> CodePoint:
        """Replaces the look-ahead with the next code point from the source."""
        try:
            self._current = self.source.read_code_point()
        except (OSError, UnicodeDecodeError) as e:
            raise JSONSyntaxError(f"Unable to read character: {e}") from e
        return self._current

    def _skip_whitespace(self) -> CodePoint:
        c = self._current
        while 0 <= c <= HIGHEST_WHITESPACE:
            c = self._advance()
        return c

    def _parse_value(self) -> JsonValueOrTransformed:
        c = self._current
        if c == OBJECT_OPEN:
            return self._parse_object()
        elif c == ARRAY_OPEN:
            return self._parse_array()
        elif c == STRING_DELIMITER:
            return self._parse_string()
        else:
            return self._parse_primitive()

    def _parse_object(self) -> MutableMapping[str, Any]:
        with ProfileContext("parse_object"):
            obj = self.factory.new_map()
            self._advance()
            c = self._skip_whitespace()
            if c == OBJECT_CLOSE:
                self._advance()
                return obj

            while True:
                if c != STRING_DELIMITER:
                    raise JSONSyntaxError.unexpected(
                        (STRING_DELIMITER, OBJECT_CLOSE), c
                    )
                key = self._parse_string()

                c = self._skip_whitespace()
                if c != PAIR_SEPARATOR:
                    raise JSONSyntaxError.unexpected((PAIR_SEPARATOR,), c)
                self._advance()
                self._skip_whitespace()
                obj[key] = self._parse_value()

                c = self._skip_whitespace()
                if c == OBJECT_CLOSE:
                    self._advance()
                    return obj
                if c != ITEM_SEPARATOR:
                    raise JSONSyntaxError.unexpected(
                        (ITEM_SEPARATOR, OBJECT_CLOSE), c
                    )
                self._advance()
                c = self._skip_whitespace()

    def _parse_array(self) -> MutableSequence[Any]:
        with ProfileContext("parse_array"):
            array = self.factory.new_list()
            self._advance()
            c = self._skip_whitespace()
            if c == ARRAY_CLOSE:
                self._advance()
                return array

            while True:
                array.append(self._parse_value())

                c = self._skip_whitespace()
                if c == ARRAY_CLOSE:
                    self._advance()
                    return array
                if c != ITEM_SEPARATOR:
                    raise JSONSyntaxError.unexpected(
                        (ITEM_SEPARATOR, ARRAY_CLOSE), c
                    )
                self._advance()
                self._skip_whitespace()

    def _parse_string(self) -> str:
        """Reads a string; the look-ahead must be the opening quote."""
        with ProfileContext("parse_string"):
            chars: list[str] = []
            while True:
                c = self._advance()
                if c == END_OF_INPUT:
                    raise JSONSyntaxError("Unterminated string", (), c)
                if c < HIGHEST_WHITESPACE:
                    raise JSONSyntaxError(f"Character unexpected: {c}", (), c)

                if c == STRING_DELIMITER:
                    self._advance()
                    return "".join(chars)
                elif c == ESCAPE_CHARACTER:
                    _append_escaped(chars, self._parse_escape())
                else:
                    chars.append(chr(c))

    def _parse_escape(self) -> str:
        """Decodes the escape following a backslash."""
        c = self._advance()
        if c == UNICODE_CHARACTER:
            digits = [self._advance() for _ in range(UNICODE_DIGIT_COUNT)]
            if not all(d in _HEX_DIGITS for d in digits):
                shown = "".join(_render_code_point(d) for d in digits)
                raise JSONSyntaxError(f"Invalid unicode escape: \\u{shown}")
            return chr(int("".join(map(chr, digits)), 16))

        replacement = _UNESCAPE.get(c)
        if replacement is None:
            raise JSONSyntaxError(
                f"Unknown escape code point: {_render_code_point(c)}", (), c
            )
        return replacement

    def _parse_primitive(self) -> JsonValueOrTransformed:
        """Reads null, true, false or a number up to its terminator."""
        with ProfileContext("parse_primitive"):
            chars: list[str] = []
            c = self._current
            while c > HIGHEST_WHITESPACE and c not in _PRIMITIVE_TERMINATORS:
                chars.append(chr(c))
                c = self._advance()
            return _parse_primitive_content("".join(chars), self.config)


def _append_escaped(chars: list[str], char: str) -> None:
    """Appends an escaped character, joining escaped surrogate pairs."""
    if (
        ord(char) in _LOW_SURROGATES
        and chars
        and ord(chars[-1]) in _HIGH_SURROGATES
    ):
        high = ord(chars[-1])
        chars[-1] = chr(
            0x10000 + ((high - 0xD800) << 10) + (ord(char) - 0xDC00)
        )
    else:
        chars.append(char)


def _parse_primitive_content(
    content: str, config: ParseConfig
) -> JsonValueOrTransformed:
    """Classifies a bare token as a literal or a number."""
    if content == "null":
        return None
    elif content == "true":
        return True
    elif content == "false":
        return False
    return _parse_number_content(content, config)


def _parse_number_content(
    content: str, config: ParseConfig
) -> JsonValueOrTransformed:
    """
    Parses a numeric literal.

    The shape of the literal decides its type: a '.', 'e' or 'E' makes it a
    float, anything else is read as an integer.
    """
    with ProfileContext("parse_number"):
        if not content or not all(c in _NUMBER_CHARACTERS for c in content):
            raise JSONSyntaxError(
                f"Expecting primitive value instead of: {content}"
            )

        try:
            if "." in content or "e" in content or "E" in content:
                if config.parse_float:
                    return config.parse_float(content)
                return float(content)
            if config.parse_int:
                return config.parse_int(content)
            return int(content)
        except (ValueError, ArithmeticError) as e:
            raise JSONSyntaxError(
                f"Expecting primitive value instead of: {content}"
            ) from e


def loads(s: str, **kwargs: Any) -> JsonValueOrTransformed:
    """
    Parses a JSON document held in a string.

    Keyword arguments build the ParseConfig. Anything but whitespace after
    the value is an error.
    """
    if not isinstance(s, str):
        raise TypeError("the JSON object must be str, not bytes")

    reader = JsonReader(StringSource(s), ParseConfig(**kwargs))
    result = reader.parse()
    reader.expect_end()
    return result


def loads_object(s: str, **kwargs: Any) -> MutableMapping[str, Any]:
    """Parses a string whose document must be a JSON object."""
    if not isinstance(s, str):
        raise TypeError("the JSON object must be str, not bytes")

    reader = JsonReader(StringSource(s), ParseConfig(**kwargs))
    result = reader.parse_as_object()
    reader.expect_end()
    return result


def loads_array(s: str, **kwargs: Any) -> MutableSequence[Any]:
    """Parses a string whose document must be a JSON array."""
    if not isinstance(s, str):
        raise TypeError("the JSON object must be str, not bytes")

    reader = JsonReader(StringSource(s), ParseConfig(**kwargs))
    result = reader.parse_as_array()
    reader.expect_end()
    return result


def load(fp: IO[str], **kwargs: Any) -> JsonValueOrTransformed:
    """
    Parses a JSON document streamed from a text file-like object.

    The stream is read in chunks and is left open.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    reader = JsonReader(StreamSource(fp), ParseConfig(**kwargs))
    result = reader.parse()
    reader.expect_end()
    return result


__all__ = [
    "DEFAULT_FACTORY",
    "END_OF_INPUT",
    "CharacterSource",
    "CollectionFactory",
    "HotPathStats",
    "JSONSyntaxError",
    "JsonReader",
    "ParseConfig",
    "StreamSource",
    "StringSource",
    "TypedFactory",
    "as_source",
    "clear_hot_path_stats",
    "get_hot_path_stats",
    "load",
    "loads",
    "loads_array",
    "loads_object",
]
