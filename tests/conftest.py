"""Shared fixtures for thriftgen tests."""

import pytest

from thriftgen.codegen.core.ast import (
    BaseType,
    Const,
    Document,
    EnumDef,
    EnumValue,
    Field,
    Function,
    IntConstant,
    ListType,
    Namespace,
    Requiredness,
    Service,
    StringConstant,
    Struct,
    StructKind,
    StructType,
)
from thriftgen.codegen.languages.scala import ScalaGenerator


@pytest.fixture
def generator():
    return ScalaGenerator()


@pytest.fixture
def user_struct():
    return Struct(
        "User",
        (
            Field(1, "user_id", BaseType.I64, Requiredness.REQUIRED),
            Field(2, "user_name", BaseType.STRING),
            Field(3, "tags", ListType(BaseType.STRING), Requiredness.OPTIONAL),
        ),
    )


@pytest.fixture
def document(user_struct):
    not_found = Struct(
        "NotFound", (Field(1, "message", BaseType.STRING),), StructKind.EXCEPTION
    )
    service = Service(
        "UserService",
        (
            Function(
                "get_user",
                StructType("User"),
                (Field(1, "user_id", BaseType.I64),),
                (Field(1, "not_found", StructType("NotFound")),),
            ),
            Function("ping", BaseType.VOID),
        ),
    )
    return Document(
        headers=(Namespace("scala", "com.example.users"),),
        consts=(
            Const("MAX_USERS", BaseType.I32, IntConstant(100)),
            Const("GREETING", BaseType.STRING, StringConstant("hi")),
        ),
        enums=(EnumDef("Status", (EnumValue("ACTIVE", 1), EnumValue("Banned", 2))),),
        structs=(user_struct, not_found),
        services=(service,),
    )
