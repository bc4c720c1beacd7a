"""
Scala code generator.

Assembles a Scala source file for a Thrift document from the fragments in
``templates/``: header, constants, enums, structs, then services.
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional, Sequence

from ....logging_config import get_logger
from ...core.ast import BaseType, Const, Document, EnumDef, Field, Function, Requiredness, Service, Struct
from ...core.generator import CodeGenerator, GeneratorError
from ...core.templates import Dictionary
from .constants import ConstantRenderer, quote_c
from .fields import FieldDescriptorBuilder
from .naming import field_const_name, is_reserved, quote_keyword
from .types import create_type_mapper

logger = get_logger(__name__)


class ServiceOption(Enum):
    """Optional extras generated alongside a service's interfaces."""

    WITH_FINAGLE_CLIENT = "finagle_client"
    WITH_FINAGLE_SERVICE = "finagle_service"
    WITH_OSTRICH_SERVER = "ostrich_server"


@dataclass(frozen=True)
class ScalaService:
    """A service together with the options it is generated with."""

    service: Service
    options: AbstractSet[ServiceOption] = frozenset()


@dataclass(frozen=True)
class ConstList:
    consts: Sequence[Const] = ()


def resolve_service_options(options: Iterable) -> frozenset:
    """
    Convert option names or members to a set of ``ServiceOption``.

    An Ostrich server wraps the Finagle service, so it brings that along.

    Raises:
        GeneratorError: If an option name is unknown
    """
    resolved = set()
    for option in options:
        if isinstance(option, ServiceOption):
            resolved.add(option)
            continue
        try:
            resolved.add(ServiceOption(option))
        except ValueError:
            raise GeneratorError(f"Unknown service option: {option!r}") from None
    if ServiceOption.WITH_OSTRICH_SERVER in resolved:
        resolved.add(ServiceOption.WITH_FINAGLE_SERVICE)
    return frozenset(resolved)


class ScalaGenerator(CodeGenerator):
    """Code generator for Scala case classes and Finagle services."""

    def __init__(self, config=None):
        super().__init__(config)
        self.type_mapper = create_type_mapper(self.config.custom)
        self.renderer = ConstantRenderer()
        self.field_builder = FieldDescriptorBuilder(self.type_mapper, self.renderer)
        self._bind_fragments()

    @property
    def language_name(self) -> str:
        return "scala"

    @property
    def file_extension(self) -> str:
        return ".scala"

    def get_template_directory(self) -> Optional[Path]:
        return Path(__file__).parent / "templates"

    def _bind_fragments(self):
        bind = self.fragments.bind
        self.header_template = bind("header", self._header_dictionary)
        self.consts_template = bind("consts", self._consts_dictionary)
        self.enum_template = bind("enum", self._enum_dictionary)
        self.enums_template = bind("enums", self._enums_dictionary)
        self.struct_template = bind("struct", self._struct_dictionary)
        # Rendered only as partials from the service fragment.
        self.finagle_client_template = bind("finagle_client", None)
        self.finagle_service_template = bind("finagle_service", None)
        self.ostrich_server_template = bind("ostrich_server", None)
        self.service_template = bind("service", self._service_dictionary)

    # Document assembly

    def generate(
        self, document: Document, service_options: Optional[Iterable] = None
    ) -> str:
        """
        Generate one Scala source file for a document.

        Field, argument and function names are converted to the configured
        case before rendering; declaration order is preserved within each
        section.
        """
        if service_options is None:
            service_options = self.config.service_options
        options = resolve_service_options(service_options)
        doc = document.normalize(self.config.naming_case)

        logger.debug(
            "Assembling %s: %d consts, %d enums, %d structs, %d services",
            doc.target_namespace,
            len(doc.consts),
            len(doc.enums),
            len(doc.structs),
            len(doc.services),
        )

        consts = self.consts_template(ConstList(doc.consts))
        enums = self.enums_template(doc.enums)
        structs = self._join(self.struct_template(s) for s in doc.structs)
        services = self._join(
            self.service_template(ScalaService(s, options)) for s in doc.services
        )
        return self.header(doc) + "\n" + consts + enums + structs + services

    @staticmethod
    def _join(sections: Iterable[str]) -> str:
        return "".join(section + "\n" for section in sections)

    def header(self, document: Document) -> str:
        return self.header_template(document)

    def render_enum(self, document: Document, enum: EnumDef) -> str:
        return self.header(document) + self.enum_template(enum)

    def render_consts(self, document: Document, consts: Sequence[Const]) -> str:
        return self.header(document) + self.consts_template(ConstList(tuple(consts)))

    def render_struct(self, document: Document, struct: Struct) -> str:
        return self.header(document) + self.struct_template(struct)

    def render_service(
        self, document: Document, service: Service, options: Iterable = ()
    ) -> str:
        scala_service = ScalaService(service, resolve_service_options(options))
        return self.header(document) + self.service_template(scala_service)

    def collect_warnings(self, document: Document) -> List[str]:
        warnings = []
        case = self.config.naming_case

        def check(owner: str, kind: str, field: Field):
            renamed = field.normalize(case)
            if renamed.name != field.name:
                warnings.append(f"{kind} {owner}.{field.name} renamed to {renamed.name}")
            if is_reserved(renamed.name):
                warnings.append(
                    f"{kind} {owner}.{renamed.name} is a Scala keyword and will be quoted"
                )

        for struct in document.structs:
            for field in struct.fields:
                check(struct.name, "Field", field)
        for service in document.services:
            for function in service.functions:
                owner = f"{service.name}.{function.name}"
                for arg in function.args:
                    check(owner, "Argument", arg)
        return warnings

    # Dictionaries

    def _header_dictionary(self, document: Document) -> Dictionary:
        own = document.target_namespace
        imports = []
        for include in document.includes:
            namespace = include.document.target_namespace
            if namespace != own and namespace not in imports:
                imports.append(namespace)
        return Dictionary(
            scalaNamespace=own,
            imports=[{"namespace": ns} for ns in imports],
            addComments=self.config.add_comments,
        )

    def _consts_dictionary(self, const_list: ConstList) -> Dictionary:
        return Dictionary(
            hasConstants=bool(const_list.consts),
            constants=[
                {
                    "name": c.name,
                    "type": self.type_mapper.scala_type(c.type),
                    "value": self.renderer.render(c.value),
                }
                for c in const_list.consts
            ],
        )

    def _enum_dictionary(self, enum: EnumDef) -> Dictionary:
        last = len(enum.values) - 1
        return Dictionary(
            enum_name=enum.name,
            values=[
                {
                    "name": v.name,
                    "nameLowerCase": v.name.lower(),
                    "value": str(v.value),
                    "last": i == last,
                }
                for i, v in enumerate(enum.values)
            ],
        )

    def _enums_dictionary(self, enums: Sequence[EnumDef]) -> Dictionary:
        return Dictionary(
            hasEnums=bool(enums),
            enums=[self.enum_template.unpacker(e) for e in enums],
            enum=self.enum_template,
        )

    def _field_dictionary(self, field: Field) -> Dictionary:
        mapper = self.type_mapper
        accessor = quote_keyword(field.name)
        local = self.field_builder.local_name(field)
        item_name = field.name + "_item"
        nullable = self.field_builder.is_nullable(field)

        read = mapper.read_value(field.type)
        if field.is_optional:
            guard, item = f"{accessor}.isDefined", f"{accessor}.get"
            read = f"Some({read})"
        elif nullable:
            guard, item = f"{accessor} ne null", accessor
        else:
            guard, item = "true", accessor

        return Dictionary(
            id=str(field.id),
            name=accessor,
            localName=local,
            wireName=quote_c(field.wire_name),
            fieldConst=field_const_name(field.name),
            constType=mapper.const_type(field.type).value,
            fieldType=self.field_builder.field_type(field),
            defaultReadValue=self.field_builder.default_read_value(field),
            readValue=read,
            writeGuard=guard,
            writeItem=item,
            setFlag=field.name + "_isSet",
            itemName=item_name,
            writeValue=mapper.write_value(field.type, item_name),
            required=field.requiredness.is_required,
            checkNotNull=field.requiredness.is_required and nullable,
        )

    def _struct_dictionary(self, struct: Struct) -> Dictionary:
        return Dictionary(
            structName=struct.name,
            parentType="Exception with ThriftStruct" if struct.is_exception else "ThriftStruct",
            fields=[self._field_dictionary(f) for f in struct.fields],
            fieldArgs=self.field_builder.field_args(struct.fields),
            constructorArgs=self.field_builder.constructor_args(struct.fields),
        )

    def _function_structs(self, function: Function):
        args = Struct(f"{function.name}_args", function.args)
        result_fields = []
        if function.return_type is not BaseType.VOID:
            result_fields.append(
                Field(0, "success", function.return_type, Requiredness.OPTIONAL)
            )
        result_fields.extend(
            replace(t, requiredness=Requiredness.OPTIONAL, default=None)
            for t in function.throws
        )
        return args, Struct(f"{function.name}_result", tuple(result_fields))

    def _function_dictionary(self, function: Function) -> Dictionary:
        args, result = self._function_structs(function)
        return Dictionary(
            name=quote_keyword(function.name),
            wireName=quote_c(function.wire_name),
            fieldArgs=self.field_builder.field_args(function.args),
            returnType=self.type_mapper.scala_type(function.return_type),
            hasReturn=function.return_type is not BaseType.VOID,
            oneway="true" if function.oneway else "false",
            argsName=args.name,
            resultName=result.name,
            argNames=self.field_builder.argument_names(function.args),
            argAccessors=self.field_builder.argument_names(function.args, prefix="args."),
            argsStruct=self.struct_template.unpacker(args),
            resultStruct=self.struct_template.unpacker(result),
            throws=[
                {
                    "name": quote_keyword(t.name),
                    "type": self.type_mapper.scala_type(t.type),
                }
                for t in function.throws
            ],
        )

    def _service_dictionary(self, scala_service: ScalaService) -> Dictionary:
        service = scala_service.service
        options = scala_service.options
        return Dictionary(
            serviceName=service.name,
            hasParent=service.parent is not None,
            parent=service.parent or "",
            functions=[self._function_dictionary(f) for f in service.functions],
            struct=self.struct_template,
            finagleClient=self.finagle_client_template,
            finagleService=self.finagle_service_template,
            ostrichServer=self.ostrich_server_template,
            withFinagleClient=ServiceOption.WITH_FINAGLE_CLIENT in options,
            withFinagleService=ServiceOption.WITH_FINAGLE_SERVICE in options,
            withOstrichServer=ServiceOption.WITH_OSTRICH_SERVER in options,
        )
