"""
Per-field Scala declarations shared by struct and service generation.
"""

from typing import Optional, Sequence

from ...core.ast import BaseType, Field
from .constants import ConstantRenderer
from .naming import escape_identifier
from .types import ScalaTypeMapper

ABSENT_VALUE = "None"

_READ_DEFAULTS = {
    BaseType.BOOL: "false",
    BaseType.BYTE: "0",
    BaseType.I16: "0",
    BaseType.I32: "0",
    BaseType.I64: "0",
    BaseType.DOUBLE: "0.0",
}


class FieldDescriptorBuilder:
    """Declared type, default expressions and parameter lists for fields."""

    def __init__(self, type_mapper: ScalaTypeMapper, renderer: ConstantRenderer):
        self.type_mapper = type_mapper
        self.renderer = renderer

    def field_type(self, field: Field) -> str:
        """Declared Scala type; optional fields are wrapped in Option."""
        if field.is_optional:
            return self.type_mapper.option_type(field.type)
        return self.type_mapper.scala_type(field.type)

    def default_field_value(self, field: Field) -> Optional[str]:
        """
        Default expression at the declaration site.

        An explicit default wins (wrapped in ``Some`` for optional fields),
        then ``None`` for optional fields; otherwise the caller must supply a
        value and there is no default.
        """
        if field.default is not None:
            value = self.renderer.render(field.default)
            return f"Some({value})" if field.is_optional else value
        if field.is_optional:
            return ABSENT_VALUE
        return None

    def default_read_value(self, field: Field) -> str:
        """
        Value a field holds during decoding until it is read off the wire.

        Explicit schema defaults are deliberately ignored here.
        """
        if field.is_optional:
            return ABSENT_VALUE
        return _READ_DEFAULTS.get(field.type, "null")

    def is_nullable(self, field: Field) -> bool:
        """True when a non-optional field holds a reference that may be null."""
        if field.is_optional:
            return False
        return field.type not in _READ_DEFAULTS

    def field_param(self, field: Field) -> str:
        param = f"{escape_identifier(field.name)}: {self.field_type(field)}"
        default = self.default_field_value(field)
        if default is not None:
            param += f" = {default}"
        return param

    def field_args(self, fields: Sequence[Field]) -> str:
        """Comma-joined parameter list for a constructor or method."""
        return ", ".join(self.field_param(f) for f in fields)

    def argument_names(self, fields: Sequence[Field], prefix: str = "") -> str:
        return ", ".join(prefix + escape_identifier(f.name) for f in fields)

    def local_name(self, field: Field) -> str:
        """
        Decoder variable holding a field's value.

        The trailing underscore keeps it apart from the decoder's own
        ``_done``, ``_field`` and ``_iprot`` and from the ``_isSet`` and
        ``_item`` names derived from the field.
        """
        return field.name + "_"

    def constructor_args(self, fields: Sequence[Field]) -> str:
        """Decoder locals passed to the case class constructor, in field order."""
        return ", ".join(self.local_name(f) for f in fields)
