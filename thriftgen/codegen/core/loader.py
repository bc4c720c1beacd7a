"""
Loading of Thrift documents from their JSON description.

The JSON layout mirrors the document model: namespaces, includes, then the
constant, enum, struct and service definitions in declaration order.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from ...logging_config import get_logger
from .ast import (
    DEFAULT_NAMESPACE,
    BaseType,
    BoolConstant,
    Const,
    Constant,
    Document,
    DoubleConstant,
    EnumDef,
    EnumType,
    EnumValue,
    EnumValueConstant,
    Field,
    FieldType,
    Function,
    Identifier,
    Include,
    IntConstant,
    ListConstant,
    ListType,
    MapConstant,
    MapType,
    Namespace,
    NullConstant,
    ReferenceType,
    Requiredness,
    Service,
    SetType,
    StringConstant,
    Struct,
    StructKind,
    StructType,
)

logger = get_logger(__name__)


class DocumentLoadError(Exception):
    """Exception raised when a JSON document description is invalid."""

    pass


_NAMED_TYPES = {"enum": EnumType, "struct": StructType, "ref": ReferenceType}


def _require(node: Dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(node, dict):
        raise DocumentLoadError(f"{where}: expected an object, got {node!r}")
    if key not in node:
        raise DocumentLoadError(f"{where}: missing '{key}'")
    return node[key]


def load_type(node: Any) -> FieldType:
    """Convert a JSON type description to a schema type."""
    if isinstance(node, str):
        try:
            return BaseType(node)
        except ValueError:
            raise DocumentLoadError(f"Unknown base type: {node!r}") from None

    if not isinstance(node, dict) or len(node) != 1:
        raise DocumentLoadError(f"Invalid type description: {node!r}")

    (kind, arg), = node.items()
    if kind == "list":
        return ListType(load_type(arg))
    elif kind == "set":
        return SetType(load_type(arg))
    elif kind == "map":
        if not isinstance(arg, list) or len(arg) != 2:
            raise DocumentLoadError(f"Map type needs [key, value], got {arg!r}")
        return MapType(load_type(arg[0]), load_type(arg[1]))
    elif kind in _NAMED_TYPES:
        if not isinstance(arg, str):
            raise DocumentLoadError(f"Type name must be a string, got {arg!r}")
        return _NAMED_TYPES[kind](arg)
    raise DocumentLoadError(f"Unknown type kind: {kind!r}")


def load_constant(node: Any) -> Constant:
    """Convert a JSON constant description to a constant value."""
    if node is None:
        return NullConstant
    # bool is a subclass of int, so it is checked first
    if isinstance(node, bool):
        return BoolConstant(node)
    if isinstance(node, int):
        return IntConstant(node)
    if isinstance(node, float):
        return DoubleConstant(node)
    if isinstance(node, str):
        return StringConstant(node)
    if isinstance(node, list):
        return ListConstant(tuple(load_constant(e) for e in node))

    if isinstance(node, dict):
        if set(node) == {"map"}:
            pairs = node["map"]
            if not isinstance(pairs, list) or not all(
                isinstance(p, list) and len(p) == 2 for p in pairs
            ):
                raise DocumentLoadError(f"Map constant needs [[key, value], ...], got {pairs!r}")
            return MapConstant(
                tuple((load_constant(k), load_constant(v)) for k, v in pairs)
            )
        if set(node) == {"enum", "value"}:
            return EnumValueConstant(node["enum"], node["value"])
        if set(node) == {"identifier"}:
            return Identifier(node["identifier"])

    raise DocumentLoadError(f"Invalid constant: {node!r}")


def load_field(node: Dict[str, Any], where: str = "field") -> Field:
    name = _require(node, "name", where)
    where = f"{where} '{name}'"
    field_id = _require(node, "id", where)
    if not isinstance(field_id, int) or isinstance(field_id, bool):
        raise DocumentLoadError(f"{where}: id must be an integer, got {field_id!r}")

    try:
        requiredness = Requiredness(node.get("requiredness", "default"))
    except ValueError:
        raise DocumentLoadError(
            f"{where}: invalid requiredness {node['requiredness']!r}"
        ) from None

    return Field(
        id=field_id,
        name=name,
        type=load_type(_require(node, "type", where)),
        requiredness=requiredness,
        default=load_constant(node["default"]) if "default" in node else None,
    )


def _load_fields(nodes: List[Any], where: str) -> tuple:
    fields = tuple(load_field(n, where) for n in nodes)
    seen = set()
    for f in fields:
        if f.id in seen:
            raise DocumentLoadError(f"{where}: duplicate field id {f.id}")
        seen.add(f.id)
    return fields


def load_struct(node: Dict[str, Any]) -> Struct:
    name = _require(node, "name", "struct")
    try:
        kind = StructKind(node.get("kind", "struct"))
    except ValueError:
        raise DocumentLoadError(f"struct '{name}': invalid kind {node['kind']!r}") from None
    return Struct(name, _load_fields(node.get("fields", []), f"struct '{name}'"), kind)


def load_enum(node: Dict[str, Any]) -> EnumDef:
    name = _require(node, "name", "enum")
    values = []
    for value in node.get("values", []):
        value_name = _require(value, "name", f"enum '{name}'")
        number = _require(value, "value", f"enum '{name}'")
        if not isinstance(number, int) or isinstance(number, bool):
            raise DocumentLoadError(
                f"enum '{name}': value of {value_name} must be an integer"
            )
        values.append(EnumValue(value_name, number))
    return EnumDef(name, tuple(values))


def load_function(node: Dict[str, Any], service: str) -> Function:
    name = _require(node, "name", f"service '{service}' function")
    where = f"function '{service}.{name}'"
    return Function(
        name=name,
        return_type=load_type(node.get("return_type", "void")),
        args=_load_fields(node.get("args", []), where),
        throws=_load_fields(node.get("throws", []), where),
        oneway=bool(node.get("oneway", False)),
    )


def load_service(node: Dict[str, Any]) -> Service:
    name = _require(node, "name", "service")
    return Service(
        name=name,
        functions=tuple(load_function(f, name) for f in node.get("functions", [])),
        parent=node.get("parent"),
    )


def load_document(data: Dict[str, Any], default_namespace: str = DEFAULT_NAMESPACE) -> Document:
    """
    Convert a parsed JSON document description into a ``Document``.

    Args:
        data: Parsed JSON object
        default_namespace: Package used when no scala or java namespace is declared

    Returns:
        Document with definitions in declaration order

    Raises:
        DocumentLoadError: If the description is malformed.
    """
    if not isinstance(data, dict):
        raise DocumentLoadError("Document must be a JSON object")

    headers = [
        Namespace(language, name)
        for language, name in data.get("namespaces", {}).items()
    ]
    for include in data.get("includes", []):
        path = _require(include, "path", "include")
        document = load_document(_require(include, "document", f"include '{path}'"), default_namespace)
        headers.append(Include(path, document))

    consts = tuple(
        Const(
            name=_require(c, "name", "const"),
            type=load_type(_require(c, "type", "const")),
            value=load_constant(_require(c, "value", "const")),
        )
        for c in data.get("consts", [])
    )

    document = Document(
        headers=tuple(headers),
        consts=consts,
        enums=tuple(load_enum(e) for e in data.get("enums", [])),
        structs=tuple(load_struct(s) for s in data.get("structs", [])),
        services=tuple(load_service(s) for s in data.get("services", [])),
        default_namespace=default_namespace,
    )
    logger.debug(
        "Loaded document %s: %d consts, %d enums, %d structs, %d services",
        document.target_namespace,
        len(document.consts),
        len(document.enums),
        len(document.structs),
        len(document.services),
    )
    return document


def load_document_file(
    file_path: Union[str, Path], default_namespace: str = DEFAULT_NAMESPACE
) -> Document:
    """
    Load a document description from a JSON file.

    Raises:
        DocumentLoadError: If the file cannot be read or is not a valid description.
    """
    path = Path(file_path)
    logger.debug("Loading document from %s", path)

    if not path.exists():
        raise DocumentLoadError(f"File not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DocumentLoadError(f"Invalid JSON in file {path}: {e}") from e
    except OSError as e:
        raise DocumentLoadError(f"Error reading file {path}: {e}") from e

    return load_document(data, default_namespace)
