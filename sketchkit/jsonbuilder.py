"""Build compact JSON text from a flat list of tagged items.

Items are strings whose prefix says how the following argument is rendered:

* ``"key", "value"``      string member (``"s|key"`` allows a key that looks like a tag)
* ``"value"`` as the last item, or followed by ``None``: value stored under ``"_"``
* ``"i|key", n``          32-bit integer
* ``"fP|key", x``         float printed with ``%.Pg``; ``P`` is ``0-9`` or ``a-h`` (10-17)
* ``"b|key", flag``       boolean
* ``"o|key", raw``        raw JSON text inserted as is (``None`` becomes ``null``)
* ``"{|key"`` ... ``"}|"`` nested object
* ``"+|raw"``             raw fragment inserted as is
* ``"i[key"``, ``"fP[key"``, ``"b[key"``, ``"o[key"``, ``"s[key"`` followed by a
  sequence: arrays; an empty key builds a bare top-level array
* a first item of ``"-{"`` builds a fragment (prefixed with ``"+|"``) instead of an object
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from enum import Enum
from typing import Any

EMPTY_KEY = "_"

_ESCAPES = (
    ("\\", "\\\\"),
    ("\n", "\\n"),
    ('"', '\\"'),
    ("\b", "\\b"),
    ("\f", "\\f"),
    ("\r", "\\r"),
    ("\t", "\\t"),
)


class JsonBuildError(Exception):
    """Base class for errors raised while building JSON."""

    code = 0


class BufferSizeError(JsonBuildError):
    """The output would not fit into the given buffer size."""

    code = -1


class BracesMismatchError(JsonBuildError):
    """Object openings and closings do not balance."""

    code = -2


class _ArrayType(Enum):
    INT = "i"
    DOUBLE = "f"
    BOOL = "b"
    STRING = "s"
    OTHER = "o"


def str_replace(orig: str | None, rep: str | None, with_: str | None) -> str | None:
    """Replace every occurrence of ``rep`` in ``orig`` with ``with_``.

    Returns ``None`` when there is nothing to do: ``orig`` or ``rep`` is missing,
    ``rep`` is empty, or ``rep`` does not occur in ``orig``.
    """
    if orig is None or not rep:
        return None
    if rep not in orig:
        return None
    return orig.replace(rep, with_ or "")


def _escape(value: str) -> str:
    for rep, with_ in _ESCAPES:
        replaced = str_replace(value, rep, with_)
        if replaced is not None:
            value = replaced
    return value


def _ch(text: str, index: int) -> str:
    return text[index] if index < len(text) else "\0"


def _int32(value: Any) -> int:
    return ((int(value) + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def _format_double(value: Any, precision_char: str) -> str:
    code = ord(precision_char)
    if code >= ord("a"):
        digits = code - ord("a") + 10
    else:
        digits = code - ord("0")
    digits = min(digits & 0xFF, 17)
    return "%.*g" % (digits, float(value))


def _format_bool(value: Any) -> str:
    return "true" if value else "false"


def _format_other(value: str | None) -> str:
    return "null" if value is None else value


def _require_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string value, got {type(value).__name__}")
    return value


class _Output:
    """Collects output text and enforces the buffer size limit."""

    def __init__(self, limit: int | None) -> None:
        self._parts: list[str] = []
        self._size = 0
        self._limit = limit

    def add(self, text: str) -> None:
        size = len(text.encode("utf-8"))
        if self._limit is not None and self._size + size + 1 > self._limit:
            raise BufferSizeError(
                f"JSON output does not fit into {self._limit} bytes"
            )
        self._parts.append(text)
        self._size += size

    def key(self, key: str) -> None:
        self.add(key)
        self.add('":')

    def text(self) -> str:
        return "".join(self._parts)


def build_json(*args: Any, buf_size: int | None = None) -> str:
    """Build JSON text from tagged items and their values.

    ``buf_size`` is the size in bytes of the destination buffer, terminator
    included; ``None`` means no limit. Raises :class:`BufferSizeError` when the
    text does not fit and :class:`BracesMismatchError` when objects do not balance.
    """
    if not args:
        raise TypeError("build_json() needs at least one item")

    items: Iterator[Any] = iter(args)
    out = _Output(buf_size)
    item = next(items, None)

    build_fragment = False
    if item is not None and _ch(item, 0) == "-" and _ch(item, 1) == "{":
        build_fragment = True
        out.add("+|")
        item = next(items, None)

    first_item = True
    last_value_needs_quote = False
    no_key_array = False
    brace_diff = 0

    while item is not None:
        c0, c1, c2 = _ch(item, 0), _ch(item, 1), _ch(item, 2)
        is_fragment = c0 == "+" and c1 == "|"
        if is_fragment and c2 == "\0":
            item = next(items, None)
            continue
        is_end_object = c0 == "}" and c1 == "|"
        is_array = (c1 == "[" and c0 in ("i", "b", "o", "s")) or (
            c2 == "[" and c0 == "f"
        )
        array_type = _ArrayType.STRING
        array_key = item[2:]
        if is_array:
            array_type = _ArrayType(c0)
            if array_type is _ArrayType.DOUBLE:
                array_key = item[3:]
            if not array_key:
                no_key_array = True

        if first_item:
            if is_fragment or is_end_object:
                if not build_fragment:
                    out.add("{")
            elif build_fragment:
                out.add('"')
            elif not no_key_array:
                out.add('{"')
            first_item = False
        elif not is_end_object:
            if last_value_needs_quote:
                if is_fragment:
                    if c2 != "\0":
                        out.add('",')
                else:
                    out.add('","')
                last_value_needs_quote = False
            elif is_fragment:
                if c2 != "\0":
                    out.add(",")
            else:
                out.add(',"')

        if c1 == "|" and c0 == "i":
            out.key(item[2:])
            out.add(str(_int32(next(items, None))))
        elif c2 == "|" and c0 == "f":
            out.key(item[3:])
            out.add(_format_double(next(items, None), c1))
        elif c1 == "|" and c0 == "b":
            out.key(item[2:])
            out.add(_format_bool(next(items, None)))
        elif c1 == "|" and c0 == "o":
            out.key(item[2:])
            out.add(_format_other(next(items, None)))
        elif c1 == "|" and c0 == "{":
            out.key(item[2:])
            first_item = True
            brace_diff += 1
        elif is_end_object:
            if brace_diff < 1:
                raise BracesMismatchError("object closed without being opened")
            if last_value_needs_quote:
                out.add('"}')
                last_value_needs_quote = False
            else:
                out.add("}")
            brace_diff -= 1
        elif is_fragment:
            out.add(item[2:])
        elif is_array:
            if not no_key_array:
                out.key(array_key)
            values: Sequence[Any] = next(items, None) or ()
            _add_array(out, array_type, values, c1)
        else:
            value = next(items, None)
            item_is_value = value is None
            if item_is_value:
                value = item
                out.add(EMPTY_KEY + '":"')
            else:
                key = item[2:] if (c1 == "|" and c0 == "s") else item
                out.add(key)
                out.add('":"')
            out.add(_escape(_require_str(value)))
            last_value_needs_quote = True
            if item_is_value:
                break
        item = next(items, None)

    if build_fragment:
        if last_value_needs_quote:
            out.add('"')
    elif not no_key_array:
        out.add('"}' if last_value_needs_quote else "}")

    if brace_diff != 0:
        raise BracesMismatchError("object opened without being closed")
    return out.text()


def _add_array(
    out: _Output, array_type: _ArrayType, values: Sequence[Any], precision_char: str
) -> None:
    quoted = array_type is _ArrayType.STRING and len(values) > 0
    out.add('["' if quoted else "[")
    separator = '","' if quoted else ","
    for position, value in enumerate(values):
        if position:
            out.add(separator)
        if array_type is _ArrayType.INT:
            out.add(str(_int32(value)))
        elif array_type is _ArrayType.DOUBLE:
            out.add(_format_double(value, precision_char))
        elif array_type is _ArrayType.BOOL:
            out.add(_format_bool(value))
        elif array_type is _ArrayType.OTHER:
            out.add(_format_other(value))
        else:
            out.add(_escape(_require_str(value)))
    out.add('"]' if quoted else "]")