"""
Rendering of Thrift constant values as Scala literals.
"""

import math

from ...core.ast import (
    BoolConstant,
    Constant,
    DoubleConstant,
    EnumValueConstant,
    Identifier,
    IntConstant,
    ListConstant,
    MapConstant,
    NullConstant,
    StringConstant,
)
from ...core.generator import InternalError

_SIMPLE_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def quote_c(value: str) -> str:
    """
    Escape a string C-style for use inside a double-quoted literal.

    Characters outside printable ASCII become ``\\uXXXX`` escapes; anything
    beyond the BMP is written as a surrogate pair.
    """
    out = []
    for ch in value:
        code = ord(ch)
        if ch in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[ch])
        elif 0x20 <= code < 0x7F:
            out.append(ch)
        elif code <= 0xFFFF:
            out.append(f"\\u{code:04x}")
        else:
            code -= 0x10000
            out.append(f"\\u{0xD800 + (code >> 10):04x}\\u{0xDC00 + (code & 0x3FF):04x}")
    return "".join(out)


def quote(value: str) -> str:
    return '"' + quote_c(value) + '"'


class ConstantRenderer:
    """
    Renders constants without type information; each variant knows its
    own literal form. Names are emitted as written, so a constant named
    after a Scala keyword is not escaped here.
    """

    def __init__(self, list_literal: str = "List", map_literal: str = "Map"):
        self.list_literal = list_literal
        self.map_literal = map_literal

    def render(self, constant: Constant) -> str:
        if constant is NullConstant:
            return "null"
        elif isinstance(constant, StringConstant):
            return quote(constant.value)
        elif isinstance(constant, BoolConstant):
            return "true" if constant.value else "false"
        elif isinstance(constant, IntConstant):
            return str(constant.value)
        elif isinstance(constant, DoubleConstant):
            return self.double_value(constant)
        elif isinstance(constant, ListConstant):
            return self.list_value(constant)
        elif isinstance(constant, MapConstant):
            return self.map_value(constant)
        elif isinstance(constant, EnumValueConstant):
            return f"{constant.enum_name}.{constant.value_name}"
        elif isinstance(constant, Identifier):
            return constant.name
        raise InternalError("constantValue", constant)

    def list_value(self, constant: ListConstant) -> str:
        elems = ", ".join(self.render(e) for e in constant.elems)
        return f"{self.list_literal}({elems})"

    def map_value(self, constant: MapConstant) -> str:
        pairs = ", ".join(
            f"{self.render(k)} -> {self.render(v)}" for k, v in constant.elems
        )
        return f"{self.map_literal}({pairs})"

    def double_value(self, constant: DoubleConstant) -> str:
        value = float(constant.value)
        if math.isnan(value):
            return "Double.NaN"
        if math.isinf(value):
            return "Double.PositiveInfinity" if value > 0 else "Double.NegativeInfinity"
        return repr(value)
