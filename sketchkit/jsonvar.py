"""A dynamic JSON value with JavaScript-like access."""

from __future__ import annotations

import math
import re
from typing import Any

INT_MAX = 2147483647
INT_MIN = -2147483648
NESTING_LIMIT = 1000

_NULL, _BOOL, _NUMBER, _STRING, _ARRAY, _OBJECT = (
    "null", "boolean", "number", "string", "array", "object",
)
_NUMBER_CHARS = set("0123456789+-eE.")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_UNSET = object()


class _Node:
    __slots__ = ("kind", "value")

    def __init__(self, kind: str, value: Any = None) -> None:
        self.kind = kind
        self.value = value

    def copy(self) -> _Node:
        if self.kind == _ARRAY:
            return _Node(_ARRAY, [child.copy() for child in self.value])
        if self.kind == _OBJECT:
            return _Node(_OBJECT, {k: v.copy() for k, v in self.value.items()})
        return _Node(self.kind, self.value)


def _node_from(value: Any) -> _Node | None:
    if isinstance(value, JSONVar):
        return None if value._node is None else value._node.copy()
    if value is None:
        return _Node(_NULL)
    if isinstance(value, bool):
        return _Node(_BOOL, value)
    if isinstance(value, (int, float)):
        return _Node(_NUMBER, float(value))
    if isinstance(value, str):
        return _Node(_STRING, value)
    if isinstance(value, (list, tuple)):
        return _Node(_ARRAY, [_node_from(v) or _Node(_NULL) for v in value])
    if isinstance(value, dict):
        return _Node(
            _OBJECT, {str(k): _node_from(v) or _Node(_NULL) for k, v in value.items()}
        )
    raise TypeError(f"cannot store {type(value).__name__} in a JSONVar")


def _equal(a: _Node, b: _Node) -> bool:
    if a.kind != b.kind:
        return False
    if a.kind == _NUMBER:
        biggest = max(abs(a.value), abs(b.value))
        return abs(a.value - b.value) <= biggest * 2.220446049250313e-16
    if a.kind == _ARRAY:
        return len(a.value) == len(b.value) and all(
            _equal(x, y) for x, y in zip(a.value, b.value)
        )
    if a.kind == _OBJECT:
        return a.value.keys() == b.value.keys() and all(
            _equal(v, b.value[k]) for k, v in a.value.items()
        )
    return a.kind == _NULL or a.value == b.value


def _lookup_ci(node: _Node, key: str) -> _Node | None:
    if node.kind != _OBJECT:
        return None
    lowered = key.lower()
    return next((v for k, v in node.value.items() if k.lower() == lowered), None)


class JSONVar:
    """A JSON value; ``undefined`` when it holds nothing.

    Indexing an object with a missing key, or an array past its end, adds
    ``null`` entries; children share storage with their parent, so
    ``var["a"]["b"] = 1`` updates ``var``.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: Any = _UNSET) -> None:
        self._node: _Node | None = None if value is _UNSET else _node_from(value)
        self._parent: _Node | None = None
        self._key: str | None = None

    @classmethod
    def _wrap(cls, node: _Node | None, parent: _Node | None = None,
              key: str | None = None) -> JSONVar:
        var = cls()
        var._node, var._parent, var._key = node, parent, key
        return var

    def _replace(self, node: _Node) -> None:
        if self._node is None:
            self._node = node
        else:
            self._node.kind, self._node.value = node.kind, node.value

    def set(self, value: Any) -> None:
        """Replace the value; assigning :data:`undefined` removes an object member."""
        if value is undefined:
            if self._parent is not None and self._parent.kind == _OBJECT:
                self._parent.value.pop(self._key, None)
                self._node = self._parent = self._key = None
            else:
                self._replace(_Node(_NULL))
            return
        node = _node_from(value)
        if node is None:
            node = _Node(_NULL) if self._node is not None else None
        if node is not None:
            self._replace(node)

    def __getitem__(self, key: Any) -> JSONVar:
        if isinstance(key, JSONVar):
            node = key._node
            if self._node and self._node.kind == _ARRAY and node and node.kind == _NUMBER:
                return self[int(key)]
            if self._node and self._node.kind == _OBJECT and node and node.kind == _STRING:
                return self[node.value]
            return JSONVar()
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            raise TypeError("key must be a str, an int or a JSONVar")
        if isinstance(key, str):
            if self._node is None or self._node.kind != _OBJECT:
                self._replace(_Node(_OBJECT, {}))
            members = self._node.value
            if key not in members:
                members[key] = _Node(_NULL)
            return JSONVar._wrap(members[key], self._node, key)
        if self._node is None or self._node.kind != _ARRAY:
            self._replace(_Node(_ARRAY, []))
        items = self._node.value
        if key < 0:
            return JSONVar()
        while key >= len(items):
            items.append(_Node(_NULL))
        return JSONVar._wrap(items[key], self._node)

    def __setitem__(self, key: Any, value: Any) -> None:
        self[key].set(value)

    def __eq__(self, other: object) -> bool:
        if other is None:
            return self._node is not None and self._node.kind == _NULL
        if not isinstance(other, JSONVar):
            try:
                other = JSONVar(other)
            except TypeError:
                return NotImplemented
        if self._node is None or other._node is None:
            return self._node is None and other._node is None
        return _equal(self._node, other._node)

    def __bool__(self) -> bool:
        return self._node is not None and self._node.kind == _BOOL and self._node.value

    def __int__(self) -> int:
        if self._node is None or self._node.kind != _NUMBER:
            return 0
        number = self._node.value
        if number != number:
            return INT_MIN
        if number >= INT_MAX:
            return INT_MAX
        if number <= INT_MIN:
            return INT_MIN
        return int(number)

    def __float__(self) -> float:
        if self._node is None or self._node.kind != _NUMBER:
            return math.nan
        return self._node.value

    def __str__(self) -> str:
        if self._node is not None and self._node.kind == _STRING:
            return self._node.value
        return ""

    def __repr__(self) -> str:
        return f"JSONVar({stringify(self)})"

    def length(self) -> int:
        """Length of a string or array, ``-1`` for anything else."""
        if self._node is not None and self._node.kind in (_STRING, _ARRAY):
            return len(self._node.value)
        return -1

    def keys(self) -> JSONVar:
        """Array of an object's member names; undefined for other values."""
        if self._node is None or self._node.kind != _OBJECT:
            return JSONVar()
        return JSONVar(list(self._node.value))

    def has_own_property(self, key: str) -> bool:
        return (
            self._node is not None
            and self._node.kind == _OBJECT
            and key in self._node.value
        )

    def has_property_equal(self, key: str, value: Any) -> bool:
        """Whether member ``key`` is a string equal to ``value``."""
        if not self.has_own_property(key):
            return False
        member = self._node.value[key]
        return member.kind == _STRING and member.value == _text(value)

    def filter(self, key: str, value: Any) -> JSONVar:
        """Members (or array items) whose ``key`` equals ``value``.

        Returns this value itself when it matches, the single match, an array
        of matches, or undefined when nothing matches.
        """
        text = _text(value)
        node = self._node
        if node is None:
            return JSONVar()

        def matches(candidate: _Node) -> bool:
            found = _lookup_ci(candidate, key)
            return found is not None and found.kind == _STRING and found.value == text

        if node.kind == _OBJECT and matches(node):
            return JSONVar(self)
        children: list[_Node] = []
        if node.kind == _ARRAY:
            children = node.value
        elif node.kind == _OBJECT:
            children = list(node.value.values())
        found = [child.copy() for child in children if matches(child)]
        if not found:
            return JSONVar()
        if len(found) == 1:
            return JSONVar._wrap(found[0])
        return JSONVar._wrap(_Node(_ARRAY, found))


def _text(value: Any) -> str | None:
    if isinstance(value, JSONVar):
        node = value._node
        return node.value if node is not None and node.kind == _STRING else None
    return value


undefined = JSONVar()


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.depth = 0

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and ord(self.text[self.pos]) <= 32:
            self.pos += 1

    def value(self) -> _Node:
        for word, node in (("null", (_NULL, None)), ("false", (_BOOL, False)),
                           ("true", (_BOOL, True))):
            if self.text.startswith(word, self.pos):
                self.pos += len(word)
                return _Node(*node)
        c = self.peek()
        if c == '"':
            return _Node(_STRING, self.string())
        if c == "-" or c.isdigit() and c.isascii():
            return self.number()
        if c in ("[", "{"):
            if self.depth >= NESTING_LIMIT:
                raise ValueError("nesting too deep")
            self.depth += 1
            node = self.array() if c == "[" else self.object()
            self.depth -= 1
            return node
        raise ValueError(f"unexpected input at {self.pos}")

    def number(self) -> _Node:
        end = self.pos
        while end < len(self.text) and end - self.pos < 63 and self.text[end] in _NUMBER_CHARS:
            end += 1
        match = _NUMBER_RE.match(self.text[self.pos:end])
        if not match:
            raise ValueError("invalid number")
        self.pos += match.end()
        return _Node(_NUMBER, float(match.group()))

    def string(self) -> str:
        start = self.pos + 1
        end = start
        while end < len(self.text) and self.text[end] != '"':
            end += 2 if self.text[end] == "\\" else 1
        if end >= len(self.text):
            raise ValueError("unterminated string")
        out: list[str] = []
        i = start
        simple = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t",
                  '"': '"', "\\": "\\", "/": "/"}
        while i < end:
            c = self.text[i]
            if c != "\\":
                out.append(c)
                i += 1
                continue
            esc = self.text[i + 1]
            if esc in simple:
                out.append(simple[esc])
                i += 2
            elif esc == "u":
                i = self.unicode(i, end, out)
            else:
                raise ValueError("invalid escape")
        self.pos = end + 1
        return "".join(out)

    @staticmethod
    def _hex4(digits: str) -> int:
        try:
            return int(digits, 16) if len(digits) == 4 and digits.isascii() \
                and all(d in "0123456789abcdefABCDEF" for d in digits) else 0
        except ValueError:
            return 0

    def unicode(self, i: int, end: int, out: list[str]) -> int:
        if end - i < 6:
            raise ValueError("truncated unicode escape")
        first = self._hex4(self.text[i + 2:i + 6])
        if 0xDC00 <= first <= 0xDFFF:
            raise ValueError("invalid surrogate")
        if 0xD800 <= first <= 0xDBFF:
            j = i + 6
            if end - j < 6 or self.text[j:j + 2] != "\\u":
                raise ValueError("missing low surrogate")
            second = self._hex4(self.text[j + 2:j + 6])
            if not 0xDC00 <= second <= 0xDFFF:
                raise ValueError("invalid low surrogate")
            out.append(chr(0x10000 + (((first & 0x3FF) << 10) | (second & 0x3FF))))
            return i + 12
        out.append(chr(first))
        return i + 6

    def array(self) -> _Node:
        self.pos += 1
        self.skip_ws()
        items: list[_Node] = []
        if self.peek() == "]":
            self.pos += 1
            return _Node(_ARRAY, items)
        while True:
            self.skip_ws()
            items.append(self.value())
            self.skip_ws()
            if self.peek() != ",":
                break
            self.pos += 1
        if self.peek() != "]":
            raise ValueError("expected ']'")
        self.pos += 1
        return _Node(_ARRAY, items)

    def object(self) -> _Node:
        self.pos += 1
        self.skip_ws()
        members: dict[str, _Node] = {}
        if self.peek() == "}":
            self.pos += 1
            return _Node(_OBJECT, members)
        while True:
            self.skip_ws()
            if self.peek() != '"':
                raise ValueError("expected a member name")
            name = self.string()
            self.skip_ws()
            if self.peek() != ":":
                raise ValueError("expected ':'")
            self.pos += 1
            self.skip_ws()
            node = self.value()
            members.setdefault(name, node)
            self.skip_ws()
            if self.peek() != ",":
                break
            self.pos += 1
        if self.peek() != "}":
            raise ValueError("expected '}'")
        self.pos += 1
        return _Node(_OBJECT, members)


def parse(text: str) -> JSONVar:
    """Parse JSON text; returns an undefined JSONVar when the text is invalid.

    Text after the first complete value is ignored.
    """
    parser = _Parser(text[1:] if text.startswith("\ufeff") else text)
    parser.skip_ws()
    try:
        node = parser.value()
    except (ValueError, IndexError):
        return JSONVar()
    return JSONVar._wrap(node)


def _format_number(number: float) -> str:
    if math.isnan(number) or math.isinf(number):
        return "null"
    text = "%1.15g" % number
    if float(text) != number:
        text = "%1.17g" % number
    return text


def _format_string(value: str) -> str:
    escapes = {'"': '\\"', "\\": "\\\\", "\b": "\\b", "\f": "\\f",
               "\n": "\\n", "\r": "\\r", "\t": "\\t"}
    parts = []
    for c in value:
        if c in escapes:
            parts.append(escapes[c])
        elif ord(c) < 32:
            parts.append("\\u%04x" % ord(c))
        else:
            parts.append(c)
    return '"' + "".join(parts) + '"'


def _render(node: _Node) -> str:
    if node.kind == _NULL:
        return "null"
    if node.kind == _BOOL:
        return "true" if node.value else "false"
    if node.kind == _NUMBER:
        return _format_number(node.value)
    if node.kind == _STRING:
        return _format_string(node.value)
    if node.kind == _ARRAY:
        return "[" + ",".join(_render(child) for child in node.value) + "]"
    return "{" + ",".join(
        _format_string(k) + ":" + _render(v) for k, v in node.value.items()
    ) + "}"


def stringify(value: JSONVar) -> str | None:
    """Compact JSON text of ``value``; ``None`` when it is undefined."""
    if value._node is None:
        return None
    return _render(value._node)


def typeof(value: JSONVar) -> str:
    """One of undefined, boolean, null, number, string, array, object."""
    return "undefined" if value._node is None else value._node.kind