"""
Tests for loading documents from their JSON description.
"""

import json

import pytest

from thriftgen.codegen.core.ast import (
    BaseType,
    BoolConstant,
    DoubleConstant,
    EnumType,
    EnumValueConstant,
    Identifier,
    IntConstant,
    ListConstant,
    ListType,
    MapConstant,
    MapType,
    NullConstant,
    ReferenceType,
    Requiredness,
    SetType,
    StringConstant,
    StructKind,
    StructType,
)
from thriftgen.codegen.core.loader import (
    DocumentLoadError,
    load_constant,
    load_document,
    load_document_file,
    load_type,
)

SAMPLE = {
    "namespaces": {"scala": "com.example"},
    "includes": [
        {"path": "shared.thrift", "document": {"namespaces": {"java": "com.shared"}}}
    ],
    "consts": [{"name": "LIMIT", "type": "i32", "value": 10}],
    "enums": [{"name": "Color", "values": [{"name": "RED", "value": 1}]}],
    "structs": [
        {
            "name": "Item",
            "fields": [
                {"id": 1, "name": "item_id", "type": "i64", "requiredness": "required"},
                {"id": 2, "name": "color", "type": {"enum": "Color"}, "default": {"enum": "Color", "value": "RED"}},
            ],
        },
        {"name": "Oops", "kind": "exception", "fields": []},
    ],
    "services": [
        {
            "name": "Store",
            "parent": "Base",
            "functions": [
                {
                    "name": "get_item",
                    "return_type": {"struct": "Item"},
                    "args": [{"id": 1, "name": "item_id", "type": "i64"}],
                    "throws": [{"id": 1, "name": "oops", "type": {"struct": "Oops"}}],
                },
                {"name": "poke", "oneway": True},
            ],
        }
    ],
}


class TestLoadType:
    def test_base_types(self):
        assert load_type("i32") is BaseType.I32
        assert load_type("void") is BaseType.VOID

    def test_containers(self):
        assert load_type({"list": "string"}) == ListType(BaseType.STRING)
        assert load_type({"set": "i16"}) == SetType(BaseType.I16)
        assert load_type({"map": ["string", {"list": "i32"}]}) == MapType(
            BaseType.STRING, ListType(BaseType.I32)
        )

    def test_named_types(self):
        assert load_type({"enum": "Color"}) == EnumType("Color")
        assert load_type({"struct": "Item"}) == StructType("Item")
        assert load_type({"ref": "Other"}) == ReferenceType("Other")

    @pytest.mark.parametrize(
        "node",
        ["int", {"tuple": "i32"}, {"map": ["i32"]}, {"list": "i32", "set": "i32"}, 5],
    )
    def test_invalid_types(self, node):
        with pytest.raises(DocumentLoadError):
            load_type(node)


class TestLoadConstant:
    def test_scalars(self):
        assert load_constant(None) is NullConstant
        assert load_constant(True) == BoolConstant(True)
        assert load_constant(3) == IntConstant(3)
        assert load_constant(2.5) == DoubleConstant(2.5)
        assert load_constant("s") == StringConstant("s")

    def test_collections(self):
        assert load_constant([1, "a"]) == ListConstant((IntConstant(1), StringConstant("a")))
        assert load_constant({"map": [["k", 1]]}) == MapConstant(
            ((StringConstant("k"), IntConstant(1)),)
        )

    def test_references(self):
        assert load_constant({"enum": "Color", "value": "RED"}) == EnumValueConstant("Color", "RED")
        assert load_constant({"identifier": "LIMIT"}) == Identifier("LIMIT")

    def test_invalid_constants(self):
        with pytest.raises(DocumentLoadError):
            load_constant({"map": [["k"]]})
        with pytest.raises(DocumentLoadError):
            load_constant({"unknown": 1})


class TestLoadDocument:
    @pytest.fixture
    def doc(self):
        return load_document(SAMPLE)

    def test_namespaces_and_includes(self, doc):
        assert doc.target_namespace == "com.example"
        assert len(doc.includes) == 1
        assert doc.includes[0].document.target_namespace == "com.shared"

    def test_definitions(self, doc):
        assert doc.consts[0].value == IntConstant(10)
        assert doc.enums[0].values[0].value == 1
        item = doc.structs[0]
        assert item.fields[0].requiredness is Requiredness.REQUIRED
        assert item.fields[1].default == EnumValueConstant("Color", "RED")
        assert doc.structs[1].kind is StructKind.EXCEPTION

    def test_services(self, doc):
        store = doc.services[0]
        assert store.parent == "Base"
        get_item, poke = store.functions
        assert get_item.return_type == StructType("Item")
        assert get_item.throws[0].name == "oops"
        assert poke.return_type is BaseType.VOID
        assert poke.oneway

    def test_default_namespace(self):
        assert load_document({}, "fallback.ns").target_namespace == "fallback.ns"

    def test_missing_field_key(self):
        data = {"structs": [{"name": "S", "fields": [{"id": 1, "name": "x"}]}]}
        with pytest.raises(DocumentLoadError, match="missing 'type'"):
            load_document(data)

    def test_duplicate_field_ids(self):
        fields = [
            {"id": 1, "name": "a", "type": "i32"},
            {"id": 1, "name": "b", "type": "i32"},
        ]
        with pytest.raises(DocumentLoadError, match="duplicate field id 1"):
            load_document({"structs": [{"name": "S", "fields": fields}]})

    def test_invalid_requiredness(self):
        field = {"id": 1, "name": "a", "type": "i32", "requiredness": "maybe"}
        with pytest.raises(DocumentLoadError, match="invalid requiredness"):
            load_document({"structs": [{"name": "S", "fields": [field]}]})

    def test_not_an_object(self):
        with pytest.raises(DocumentLoadError):
            load_document([])


class TestLoadDocumentFile:
    def test_load_file(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps(SAMPLE), encoding="utf-8")
        assert load_document_file(path) == load_document(SAMPLE)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError, match="File not found"):
            load_document_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DocumentLoadError, match="Invalid JSON"):
            load_document_file(path)
