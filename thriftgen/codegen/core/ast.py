"""
Core schema representation for code generation.

Immutable view of an already-parsed, already-validated Thrift document.
Generators only read these objects; normalization returns new copies.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union
from enum import Enum

from .naming import NamingCase, convert_case


class BaseType(Enum):
    """Primitive Thrift types."""

    VOID = "void"
    BOOL = "bool"
    BYTE = "byte"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    DOUBLE = "double"
    STRING = "string"
    BINARY = "binary"


@dataclass(frozen=True)
class ListType:
    element_type: "FieldType"


@dataclass(frozen=True)
class SetType:
    element_type: "FieldType"


@dataclass(frozen=True)
class MapType:
    key_type: "FieldType"
    value_type: "FieldType"


@dataclass(frozen=True)
class EnumType:
    """Resolved reference to an enum declared in scope."""

    name: str


@dataclass(frozen=True)
class StructType:
    """Resolved reference to a struct, union or exception declared in scope."""

    name: str


@dataclass(frozen=True)
class ReferenceType:
    """Named reference the parser has not resolved to an enum or struct."""

    name: str


ContainerType = Union[ListType, SetType, MapType]
NamedType = Union[EnumType, StructType, ReferenceType]
FieldType = Union[BaseType, ContainerType, NamedType]

PRIMITIVE_TYPES = frozenset(
    {
        BaseType.BOOL,
        BaseType.BYTE,
        BaseType.I16,
        BaseType.I32,
        BaseType.I64,
        BaseType.DOUBLE,
        BaseType.STRING,
        BaseType.BINARY,
    }
)


def is_primitive(field_type: FieldType) -> bool:
    """True for the scalar types that have protocol read/write methods."""
    return field_type in PRIMITIVE_TYPES


# Constants


class _NullConstant:
    """The ``null`` literal; use the ``NullConstant`` singleton."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NullConstant"


NullConstant = _NullConstant()


@dataclass(frozen=True)
class BoolConstant:
    value: bool


@dataclass(frozen=True)
class IntConstant:
    value: int


@dataclass(frozen=True)
class DoubleConstant:
    value: float


@dataclass(frozen=True)
class StringConstant:
    value: str


@dataclass(frozen=True)
class ListConstant:
    elems: Tuple["Constant", ...] = ()


@dataclass(frozen=True)
class MapConstant:
    elems: Tuple[Tuple["Constant", "Constant"], ...] = ()


@dataclass(frozen=True)
class EnumValueConstant:
    enum_name: str
    value_name: str


@dataclass(frozen=True)
class Identifier:
    name: str


Constant = Union[
    _NullConstant,
    BoolConstant,
    IntConstant,
    DoubleConstant,
    StringConstant,
    ListConstant,
    MapConstant,
    EnumValueConstant,
    Identifier,
]


# Definitions


class Requiredness(Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    DEFAULT = "default"

    @property
    def is_optional(self) -> bool:
        return self is Requiredness.OPTIONAL

    @property
    def is_required(self) -> bool:
        return self is Requiredness.REQUIRED


@dataclass(frozen=True)
class Field:
    """A struct field or function argument."""

    id: int
    name: str
    type: FieldType
    requiredness: Requiredness = Requiredness.DEFAULT
    default: Optional[Constant] = None
    original_name: Optional[str] = None  # IDL spelling, kept across normalize

    @property
    def wire_name(self) -> str:
        """Name written to the wire in field descriptors."""
        return self.original_name or self.name

    @property
    def is_optional(self) -> bool:
        return self.requiredness.is_optional

    def normalize(self, case: NamingCase) -> "Field":
        return replace(
            self, name=convert_case(self.name, case), original_name=self.wire_name
        )


@dataclass(frozen=True)
class Const:
    name: str
    type: FieldType
    value: Constant


@dataclass(frozen=True)
class EnumValue:
    name: str
    value: int


@dataclass(frozen=True)
class EnumDef:
    """A Thrift enum; values keep declaration order."""

    name: str
    values: Tuple[EnumValue, ...] = ()


class StructKind(Enum):
    STRUCT = "struct"
    UNION = "union"
    EXCEPTION = "exception"


@dataclass(frozen=True)
class Struct:
    name: str
    fields: Tuple[Field, ...] = ()
    kind: StructKind = StructKind.STRUCT

    @property
    def is_exception(self) -> bool:
        return self.kind is StructKind.EXCEPTION

    def normalize(self, case: NamingCase) -> "Struct":
        return replace(self, fields=tuple(f.normalize(case) for f in self.fields))


@dataclass(frozen=True)
class Function:
    name: str
    return_type: FieldType
    args: Tuple[Field, ...] = ()
    throws: Tuple[Field, ...] = ()
    oneway: bool = False
    original_name: Optional[str] = None

    @property
    def wire_name(self) -> str:
        return self.original_name or self.name

    def normalize(self, case: NamingCase) -> "Function":
        return replace(
            self,
            name=convert_case(self.name, case),
            original_name=self.wire_name,
            args=tuple(f.normalize(case) for f in self.args),
            throws=tuple(f.normalize(case) for f in self.throws),
        )


@dataclass(frozen=True)
class Service:
    name: str
    functions: Tuple[Function, ...] = ()
    parent: Optional[str] = None

    def normalize(self, case: NamingCase) -> "Service":
        return replace(
            self, functions=tuple(f.normalize(case) for f in self.functions)
        )


# Headers


@dataclass(frozen=True)
class Namespace:
    language: str
    name: str


@dataclass(frozen=True)
class Include:
    path: str
    document: "Document"


Header = Union[Namespace, Include]

DEFAULT_NAMESPACE = "thrift"


@dataclass(frozen=True)
class Document:
    """Root aggregate of a parsed Thrift file."""

    headers: Tuple[Header, ...] = ()
    consts: Tuple[Const, ...] = ()
    enums: Tuple[EnumDef, ...] = ()
    structs: Tuple[Struct, ...] = ()
    services: Tuple[Service, ...] = ()
    default_namespace: str = field(default=DEFAULT_NAMESPACE, compare=False)

    def namespace(self, language: str) -> Optional[str]:
        """Get the namespace declared for a language, if any."""
        for header in self.headers:
            if isinstance(header, Namespace) and header.language == language:
                return header.name
        return None

    @property
    def target_namespace(self) -> str:
        """Scala package for generated code: scala, then java, then default."""
        return (
            self.namespace("scala")
            or self.namespace("java")
            or self.default_namespace
        )

    @property
    def includes(self) -> Tuple[Include, ...]:
        return tuple(h for h in self.headers if isinstance(h, Include))

    def normalize(self, case: NamingCase = NamingCase.CAMEL_CASE) -> "Document":
        """
        Return a copy with field, argument and function names converted.

        Type, enum and constant names are left alone: they are referenced by
        name from other documents and from constant values.
        """
        return replace(
            self,
            structs=tuple(s.normalize(case) for s in self.structs),
            services=tuple(s.normalize(case) for s in self.services),
        )

    def camelize(self) -> "Document":
        return self.normalize(NamingCase.CAMEL_CASE)
