"""
Scala-specific type system for code generation.

Maps Thrift schema types to Scala type expressions, to the wire tags used in
field descriptors, and to the TProtocol calls that read and write them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from ...core.ast import (
    BaseType,
    EnumType,
    FieldType,
    ListType,
    MapType,
    ReferenceType,
    SetType,
    StructType,
    is_primitive,
)
from ...core.generator import InternalError


class TType(Enum):
    """Wire-level type tags (``org.apache.thrift.protocol.TType``)."""

    VOID = "VOID"
    BOOL = "BOOL"
    BYTE = "BYTE"
    DOUBLE = "DOUBLE"
    I16 = "I16"
    I32 = "I32"
    I64 = "I64"
    STRING = "STRING"
    STRUCT = "STRUCT"
    MAP = "MAP"
    SET = "SET"
    LIST = "LIST"


_WIRE_TAGS: Dict[BaseType, TType] = {
    BaseType.VOID: TType.VOID,
    BaseType.BOOL: TType.BOOL,
    BaseType.BYTE: TType.BYTE,
    BaseType.DOUBLE: TType.DOUBLE,
    BaseType.I16: TType.I16,
    BaseType.I32: TType.I32,
    BaseType.I64: TType.I64,
    BaseType.STRING: TType.STRING,
    # Thrift's "string" follows old C++ semantics: binary travels as STRING.
    BaseType.BINARY: TType.STRING,
}

_PROTOCOL_SUFFIXES: Dict[BaseType, str] = {
    BaseType.BOOL: "Bool",
    BaseType.BYTE: "Byte",
    BaseType.I16: "I16",
    BaseType.I32: "I32",
    BaseType.I64: "I64",
    BaseType.DOUBLE: "Double",
    BaseType.STRING: "String",
    BaseType.BINARY: "Binary",
}


@dataclass
class ScalaTypeConfig:
    """Configuration for Scala type mapping behavior."""

    list_type: str = "Seq"
    set_type: str = "Set"
    map_type: str = "Map"
    option_type: str = "Option"
    binary_type: str = "ByteBuffer"

    @classmethod
    def from_custom(cls, custom: Dict[str, str]) -> "ScalaTypeConfig":
        """Build from a generator config's ``custom`` section."""
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in custom.items() if k in known})


class ScalaTypeMapper:
    """
    Central engine for mapping schema types to Scala.

    Every method is a pure function of its argument. Read/write method names
    and zero values exist only for primitive scalars; anything else is a
    gap in the case tables and raises ``InternalError``.
    """

    def __init__(self, config: ScalaTypeConfig = None):
        """Initialize with type configuration."""
        self.config = config or ScalaTypeConfig()
        self._primitive_types = self._build_primitive_type_map()
        self._zero_values = self._build_zero_value_map()

    def _build_primitive_type_map(self) -> Dict[BaseType, str]:
        return {
            BaseType.VOID: "Unit",
            BaseType.BOOL: "Boolean",
            BaseType.BYTE: "Byte",
            BaseType.I16: "Short",
            BaseType.I32: "Int",
            BaseType.I64: "Long",
            BaseType.DOUBLE: "Double",
            BaseType.STRING: "String",
            BaseType.BINARY: self.config.binary_type,
        }

    def _build_zero_value_map(self) -> Dict[BaseType, str]:
        return {
            BaseType.BOOL: "false",
            BaseType.BYTE: "0",
            BaseType.I16: "0",
            BaseType.I32: "0",
            BaseType.I64: "0",
            BaseType.DOUBLE: "0.0",
            BaseType.STRING: '""',
            BaseType.BINARY: f"{self.config.binary_type}.allocate(0)",
        }

    def scala_type(self, t: FieldType) -> str:
        """Scala type expression for a schema type."""
        if isinstance(t, BaseType):
            return self._primitive_types[t]
        elif isinstance(t, MapType):
            key = self.scala_type(t.key_type)
            value = self.scala_type(t.value_type)
            return f"{self.config.map_type}[{key}, {value}]"
        elif isinstance(t, SetType):
            return f"{self.config.set_type}[{self.scala_type(t.element_type)}]"
        elif isinstance(t, ListType):
            return f"{self.config.list_type}[{self.scala_type(t.element_type)}]"
        elif isinstance(t, (EnumType, StructType, ReferenceType)):
            return t.name
        raise InternalError("scalaType", t)

    def option_type(self, t: FieldType) -> str:
        return f"{self.config.option_type}[{self.scala_type(t)}]"

    def const_type(self, t: FieldType) -> TType:
        """Wire tag for a schema type."""
        if isinstance(t, BaseType):
            return _WIRE_TAGS[t]
        elif isinstance(t, StructType):
            return TType.STRUCT
        elif isinstance(t, EnumType):
            # enums are converted to ints
            return TType.I32
        elif isinstance(t, MapType):
            return TType.MAP
        elif isinstance(t, SetType):
            return TType.SET
        elif isinstance(t, ListType):
            return TType.LIST
        raise InternalError("constType", t)

    def protocol_read_method(self, t: FieldType) -> str:
        if is_primitive(t):
            return "read" + _PROTOCOL_SUFFIXES[t]
        raise InternalError("protocolReadMethod", t)

    def protocol_write_method(self, t: FieldType) -> str:
        if is_primitive(t):
            return "write" + _PROTOCOL_SUFFIXES[t]
        raise InternalError("protocolWriteMethod", t)

    def zero_value(self, t: FieldType) -> str:
        """Zero literal for a primitive scalar; optionality is not considered."""
        if t in self._zero_values:
            return self._zero_values[t]
        raise InternalError("zeroValue", t)

    # Codec expressions

    def read_value(self, t: FieldType, protocol: str = "_iprot", depth: int = 0) -> str:
        """Scala expression that decodes one value of type ``t``."""
        if isinstance(t, BaseType):
            return f"{protocol}.{self.protocol_read_method(t)}()"
        elif isinstance(t, EnumType):
            return f"{t.name}({protocol}.readI32())"
        elif isinstance(t, StructType):
            return f"{t.name}.decode({protocol})"
        elif isinstance(t, (ListType, SetType)):
            kind, convert = ("List", "toList") if isinstance(t, ListType) else ("Set", "toSet")
            header = f"_{kind.lower()}{depth}"
            element = self.read_value(t.element_type, protocol, depth + 1)
            return (
                f"{{ val {header} = {protocol}.read{kind}Begin(); "
                f"val _rv{depth} = (0 until {header}.size).map {{ _ => {element} }}.{convert}; "
                f"{protocol}.read{kind}End(); _rv{depth} }}"
            )
        elif isinstance(t, MapType):
            header = f"_map{depth}"
            key = self.read_value(t.key_type, protocol, depth + 1)
            value = self.read_value(t.value_type, protocol, depth + 1)
            return (
                f"{{ val {header} = {protocol}.readMapBegin(); "
                f"val _rv{depth} = (0 until {header}.size).map {{ _ => ({key}, {value}) }}.toMap; "
                f"{protocol}.readMapEnd(); _rv{depth} }}"
            )
        raise InternalError("readValue", t)

    def write_value(
        self, t: FieldType, name: str, protocol: str = "_oprot", depth: int = 0
    ) -> str:
        """Scala statements that encode the value held in ``name``."""
        if isinstance(t, BaseType):
            return f"{protocol}.{self.protocol_write_method(t)}({name})"
        elif isinstance(t, EnumType):
            return f"{protocol}.writeI32({name}.value)"
        elif isinstance(t, StructType):
            return f"{name}.write({protocol})"
        elif isinstance(t, (ListType, SetType)):
            kind = "List" if isinstance(t, ListType) else "Set"
            tag = self.const_type(t.element_type).value
            item = f"_e{depth}"
            element = self.write_value(t.element_type, item, protocol, depth + 1)
            return (
                f"{protocol}.write{kind}Begin(new T{kind}(TType.{tag}, {name}.size)); "
                f"{name}.foreach {{ {item} => {element} }}; "
                f"{protocol}.write{kind}End()"
            )
        elif isinstance(t, MapType):
            key_tag = self.const_type(t.key_type).value
            value_tag = self.const_type(t.value_type).value
            key, value = f"_k{depth}", f"_v{depth}"
            key_write = self.write_value(t.key_type, key, protocol, depth + 1)
            value_write = self.write_value(t.value_type, value, protocol, depth + 1)
            return (
                f"{protocol}.writeMapBegin(new TMap(TType.{key_tag}, TType.{value_tag}, {name}.size)); "
                f"{name}.foreach {{ case ({key}, {value}) => {key_write}; {value_write} }}; "
                f"{protocol}.writeMapEnd()"
            )
        raise InternalError("writeValue", t)


def create_type_mapper(custom: Dict[str, str] = None) -> ScalaTypeMapper:
    """Create a type mapper from a generator config's ``custom`` section."""
    return ScalaTypeMapper(ScalaTypeConfig.from_custom(custom or {}))
