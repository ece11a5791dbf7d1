"""Parser for the ``.msg`` message definition format.

A definition is a sequence of lines, each holding an optional field or
constant declaration and an optional ``#`` comment.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional, Union

from .stringparser import StringParseError, parse_string

U64_MAX = 2**64 - 1
I64_MIN = -(2**63)

_SPACE0 = re.compile(r"[ \t]*")
_IDENTIFIER = re.compile(r"[A-Za-z0-9_]+")
_DIGITS = re.compile(r"[0-9]+")
_DECIMAL = r"[0-9][0-9_]*"
_FLOAT = re.compile(
    rf"\.{_DECIMAL}(?:[eE][+-]?{_DECIMAL})?"
    rf"|{_DECIMAL}(?:\.{_DECIMAL})?[eE][+-]?{_DECIMAL}"
    rf"|{_DECIMAL}\.(?:{_DECIMAL})?"
)
_LINE_ENDING = re.compile(r"\r?\n")
_LINE_BREAK = re.compile(r"[\r\n]")
_PRIMITIVES = (
    "bool", "byte", "char", "float32", "float64",
    "int8", "int16", "int32", "int64",
    "uint8", "uint16", "uint32", "uint64",
    "string", "wstring",
)


class MsgParseError(ValueError):
    """The definition cannot be parsed at all."""


class _NoMatch(Exception):
    """A grammar rule does not match at the current position."""


@dataclass(frozen=True)
class Comment:
    text: str


class ValueKind(enum.Enum):
    BOOL = "bool"
    FLOAT = "float"
    INT = "int"
    UINT = "uint"
    STRING = "string"


@dataclass(frozen=True)
class Value:
    """A constant value; strings are held as UTF-8 bytes."""

    kind: ValueKind
    data: Union[bool, float, int, bytes]


@dataclass(frozen=True)
class Primitive:
    name: str


@dataclass(frozen=True)
class BoundedString:
    bound: int


@dataclass(frozen=True)
class ComplexType:
    package_name: Optional[str]
    type_name: str


@dataclass(frozen=True)
class StaticArray:
    size: int


@dataclass(frozen=True)
class UnboundedArray:
    pass


@dataclass(frozen=True)
class BoundedArray:
    bound: int


BaseTypeName = Union[Primitive, BoundedString, ComplexType]
ArraySpecifier = Union[StaticArray, UnboundedArray, BoundedArray]


@dataclass(frozen=True)
class TypeName:
    base: BaseTypeName
    array_spec: Optional[ArraySpecifier] = None


@dataclass(frozen=True)
class Field:
    type_name: TypeName
    field_name: str
    default_value: Optional[Value] = None


@dataclass(frozen=True)
class Constant:
    type_name: TypeName
    const_name: str
    value: Value


Item = Union[Field, Constant]
Line = tuple[Optional[Item], Optional[Comment]]


def _space0(text: str, pos: int) -> int:
    match = _SPACE0.match(text, pos)
    assert match is not None
    return match.end()


def _identifier(text: str, pos: int) -> tuple[str, int]:
    match = _IDENTIFIER.match(text, pos)
    if match is None:
        raise _NoMatch
    return match.group(), match.end()


def _uint(text: str, pos: int) -> tuple[int, int]:
    match = _DIGITS.match(text, pos)
    if match is None:
        raise _NoMatch
    value = int(match.group())
    if value > U64_MAX:
        raise MsgParseError(f"bad uint {match.group()}")
    return value, match.end()


def _base_type(text: str, pos: int) -> tuple[BaseTypeName, int]:
    prefix = "string<="
    if text.startswith(prefix, pos):
        try:
            bound, end = _uint(text, pos + len(prefix))
            return BoundedString(bound), end
        except _NoMatch:
            pass
    for name in _PRIMITIVES:
        if text.startswith(name, pos):
            return Primitive(name), pos + len(name)
    package = None
    first = _IDENTIFIER.match(text, pos)
    if first is not None and text.startswith("/", first.end()):
        package = first.group()
        pos = first.end() + 1
    type_name, pos = _identifier(text, pos)
    return ComplexType(package, type_name), pos


def _array_spec(text: str, pos: int) -> tuple[Optional[ArraySpecifier], int]:
    if not text.startswith("[", pos):
        return None, pos
    inner = pos + 1
    spec: Optional[ArraySpecifier] = None
    end = inner
    if text.startswith("<=", inner):
        try:
            bound, end = _uint(text, inner + 2)
            spec = BoundedArray(bound)
        except _NoMatch:
            pass
    if spec is None:
        try:
            size, end = _uint(text, inner)
            spec = StaticArray(size)
        except _NoMatch:
            end = _space0(text, inner)
            spec = UnboundedArray()
    if not text.startswith("]", end):
        return None, pos
    return spec, end + 1


def _type_spec(text: str, pos: int) -> tuple[TypeName, int]:
    base, pos = _base_type(text, pos)
    array_spec, pos = _array_spec(text, pos)
    return TypeName(base, array_spec), pos


def _value_spec(text: str, pos: int) -> tuple[Value, int]:
    for word, flag in (("false", False), ("true", True)):
        if text.startswith(word, pos):
            return Value(ValueKind.BOOL, flag), pos + len(word)
    match = _FLOAT.match(text, pos)
    if match is not None:
        literal = match.group()
        if "_" in literal:
            raise MsgParseError(f"Failed to parse floating point value {literal!r}.")
        return Value(ValueKind.FLOAT, float(literal)), match.end()
    if text.startswith("-", pos):
        try:
            magnitude, end = _uint(text, pos + 1)
        except _NoMatch:
            pass
        else:
            wrapped = (magnitude - I64_MIN) % 2**64 + I64_MIN
            if wrapped == I64_MIN:
                raise MsgParseError(f"integer overflow in -{magnitude}")
            return Value(ValueKind.INT, -wrapped), end
    try:
        number, end = _uint(text, pos)
        return Value(ValueKind.UINT, number), end
    except _NoMatch:
        pass
    try:
        rest, decoded = parse_string(text[pos:])
    except StringParseError as exc:
        if exc.incomplete:
            raise MsgParseError(f"unterminated string literal at offset {pos}") from exc
        raise _NoMatch from None
    return Value(ValueKind.STRING, decoded.encode("utf-8")), len(text) - len(rest)


def _constant(text: str, pos: int) -> tuple[Constant, int]:
    type_name, pos = _type_spec(text, pos)
    pos = _space0(text, pos)
    const_name, pos = _identifier(text, pos)
    pos = _space0(text, pos)
    if not text.startswith("=", pos):
        raise _NoMatch
    pos = _space0(text, pos + 1)
    value, pos = _value_spec(text, pos)
    return Constant(type_name, const_name, value), pos


def _field(text: str, pos: int) -> tuple[Field, int]:
    type_name, pos = _type_spec(text, pos)
    pos = _space0(text, pos)
    field_name, pos = _identifier(text, pos)
    return Field(type_name, field_name), pos


def _item(text: str, pos: int) -> tuple[Item, int]:
    pos = _space0(text, pos)
    item: Item
    try:
        item, pos = _constant(text, pos)
    except _NoMatch:
        item, pos = _field(text, pos)
    return item, _space0(text, pos)


def _comment(text: str, pos: int) -> tuple[Comment, int]:
    if not text.startswith("#", pos):
        raise _NoMatch
    brk = _LINE_BREAK.search(text, pos)
    if brk is None:
        end = len(text)
    else:
        end = brk.start()
        if text[end] == "\r" and not text.startswith("\r\n", end):
            raise _NoMatch
    return Comment(text[pos:end]), end


def _line(text: str, pos: int) -> tuple[Line, int]:
    item: Optional[Item]
    try:
        item, pos = _item(text, pos)
    except _NoMatch:
        item, pos = None, _space0(text, pos)
    note: Optional[Comment]
    try:
        note, pos = _comment(text, pos)
    except _NoMatch:
        note = None
    ending = _LINE_ENDING.match(text, pos)
    if ending is None:
        raise _NoMatch
    return (item, note), ending.end()


def msg_spec(text: str) -> tuple[str, list[Line]]:
    """Parse as many complete lines as possible.

    Returns the unparsed remainder and the parsed lines.
    """
    lines: list[Line] = []
    pos = 0
    while True:
        try:
            line, pos = _line(text, pos)
        except _NoMatch:
            break
        lines.append(line)
    return text[pos:], lines


def comment(text: str) -> tuple[str, Comment]:
    """Parse a comment at the start of ``text``; return the rest and the comment."""
    try:
        note, end = _comment(text, 0)
    except _NoMatch:
        raise MsgParseError(f"no comment at start of {text[:20]!r}") from None
    return text[end:], note