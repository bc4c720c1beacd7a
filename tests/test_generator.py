"""
Tests for the Scala document assembler.

Covers section order, header imports, per-entity rendering, service options
and error handling through ``generate_code``.
"""

from dataclasses import replace

import pytest

from thriftgen.codegen import generate_from_document, quick_generate
from thriftgen.codegen.core.ast import (
    BaseType,
    Document,
    EnumDef,
    Field,
    Function,
    Include,
    Namespace,
    ReferenceType,
    Requiredness,
    Service,
    Struct,
)
from thriftgen.codegen.core.generator import GeneratorError, InternalError, generate_code
from thriftgen.codegen.core.templates import Dictionary, TemplateBindingError
from thriftgen.codegen.languages.scala import ScalaGenerator, ServiceOption
from thriftgen.codegen.languages.scala.generator import resolve_service_options


def included(namespace: str, path: str = "shared.thrift") -> Include:
    return Include(path, Document(headers=(Namespace("scala", namespace),)))


class TestHeader:
    """Package line and imports of included documents."""

    def test_package_line(self, generator, document):
        assert "package com.example.users\n" in generator.header(document)

    def test_imports_are_deduplicated(self, generator):
        doc = Document(
            headers=(
                Namespace("scala", "a.b"),
                included("a.b", "same.thrift"),
                included("a.b", "same2.thrift"),
                included("a.c", "other.thrift"),
            )
        )
        header = generator.header(doc)
        assert header.count("import a.c._") == 1
        assert "import a.b._" not in header

    def test_imports_keep_first_seen_order(self, generator):
        doc = Document(
            headers=(included("x.y"), included("a.c"), included("x.y")),
            default_namespace="own",
        )
        header = generator.header(doc)
        assert header.count("import x.y._") == 1
        assert header.index("import x.y._") < header.index("import a.c._")

    def test_comment_can_be_disabled(self, document):
        assert "// Generated by thriftgen" in ScalaGenerator().header(document)
        quiet = ScalaGenerator({"add_comments": False})
        assert "// Generated" not in quiet.header(document)


class TestDocumentAssembly:
    def test_section_order(self, generator, document):
        code = generator.generate(document)
        positions = [
            code.index("package com.example.users"),
            code.index("object Constants {"),
            code.index("object Status {"),
            code.index("case class User("),
            code.index("case class NotFound("),
            code.index("object UserService {"),
        ]
        assert positions == sorted(positions)

    def test_regeneration_is_byte_identical(self, generator, document):
        assert generator.generate(document) == generator.generate(document)
        assert generator.generate(document) == ScalaGenerator().generate(document)

    def test_struct_order_follows_declaration(self, generator, document):
        """Reordering structs moves their sections and leaves the rest untouched."""

        def split(code):
            start = code.index("object User extends ThriftStructCodec")
            start = min(start, code.index("object NotFound extends ThriftStructCodec"))
            end = code.index("object UserService {")
            return code[:start], code[start:end], code[end:]

        before, structs, after = split(generator.generate(document))
        swapped = replace(document, structs=tuple(reversed(document.structs)))
        swapped_before, swapped_structs, swapped_after = split(generator.generate(swapped))

        assert swapped_before == before
        assert swapped_after == after
        middle = structs.index("object NotFound extends ThriftStructCodec")
        assert swapped_structs == structs[middle:] + structs[:middle]

    def test_empty_sections_vanish(self, generator):
        code = generator.generate(Document(headers=(Namespace("scala", "a.b"),)))
        assert "object Constants" not in code
        assert "ThriftStructCodec[" not in code
        assert code.startswith("// Generated by thriftgen. Do not edit.\npackage a.b\n")

    def test_fields_are_camelized(self, generator, document):
        code = generator.generate(document)
        assert "`userId`: Long" in code
        assert 'new TField("user_id", TType.I64, 1)' in code
        assert "val USERID_FIELD_DESC" in code

    def test_field_case_from_config(self, document):
        code = ScalaGenerator({"field_case": "snake"}).generate(document)
        assert "`user_id`: Long" in code

    def test_formatted_output(self, generator, document):
        result = generate_code(generator, document)
        assert result.code.endswith("}\n")
        assert "\n\n\n" not in result.code


class TestConstsAndEnums:
    def test_constants_object(self, generator, document):
        code = generator.render_consts(document, document.consts)
        assert "object Constants {\n" in code
        assert "  val MAX_USERS: Int = 100\n" in code
        assert '  val GREETING: String = "hi"\n' in code

    def test_no_constants(self, generator, document):
        assert generator.render_consts(document, []) == generator.header(document)

    def test_enum(self, generator, document):
        code = generator.render_enum(document, document.enums[0])
        assert code.startswith(generator.header(document))
        assert 'case object ACTIVE extends Status(1, "ACTIVE")' in code
        assert "      case 2 => Banned\n" in code
        assert '      case "banned" => scala.Some(Status.Banned)\n' in code
        assert "    ACTIVE,\n    Banned\n  )" in code
        assert "abstract class Status(val value: Int, val name: String) extends ThriftEnum" in code

    def test_empty_enum_list(self, generator, document):
        assert generator.enums_template(()) == ""


class TestStruct:
    def test_case_class(self, generator, document, user_struct):
        code = generator.render_struct(document, user_struct.normalize(generator.config.naming_case))
        assert (
            "case class User(`userId`: Long, `userName`: String, "
            "`tags`: Option[Seq[String]] = None) extends ThriftStruct {"
        ) in code
        assert "object User extends ThriftStructCodec[User] {" in code
        assert "new User(userId_, userName_, tags_)" in code

    def test_decode(self, generator, document, user_struct):
        code = generator.render_struct(document, user_struct)
        assert "    var user_id_: Long = 0\n" in code
        assert "    var tags_: Option[Seq[String]] = None\n" in code
        assert "tags_ = Some({ val _list0 = _iprot.readListBegin();" in code
        assert (
            "if (!user_id_isSet) throw new TProtocolException("
            "\"Required field 'user_id' was not found in serialized data for struct User\")"
        ) in code

    def test_write_guards(self, generator, document, user_struct):
        code = generator.render_struct(document, user_struct)
        assert "    if (true) {\n      val user_id_item = user_id\n" in code
        assert "    if (user_name ne null) {\n" in code
        assert "    if (tags.isDefined) {\n      val tags_item = tags.get\n" in code
        assert "      _oprot.writeI64(user_id_item)\n" in code

    def test_required_reference_is_validated(self, generator, document):
        struct = Struct("Named", (Field(1, "name", BaseType.STRING, Requiredness.REQUIRED),))
        code = generator.render_struct(document, struct)
        assert "if (name == null) throw new TProtocolException" in code

    def test_keyword_field(self, generator, document):
        struct = Struct("Typed", (Field(1, "type", BaseType.STRING),))
        code = generator.render_struct(document, struct)
        assert "case class Typed(`type`: String)" in code
        assert "val type_item = `type`" in code

    def test_exception(self, generator, document):
        code = generator.render_struct(document, document.structs[1])
        assert "case class NotFound(`message`: String) extends Exception with ThriftStruct {" in code

    def test_empty_struct(self, generator, document):
        code = generator.render_struct(document, Struct("Empty"))
        assert "case class Empty() extends ThriftStruct {" in code
        assert "new Empty()" in code

    def test_decoder_names_do_not_clash_with_fields(self, generator, document):
        """Fields named after decoder internals get their own locals."""
        struct = Struct(
            "Job",
            (
                Field(1, "done", BaseType.BOOL),
                Field(2, "field", BaseType.STRING),
                Field(3, "iprot", BaseType.I32),
            ),
        )
        code = generator.render_struct(document, struct)
        assert code.count("var _done") == 1
        assert "    var _done = false\n" in code
        assert "        _done = true\n" in code
        assert "    var done_: Boolean = false\n" in code
        assert "done_ = _iprot.readBool()" in code
        assert "field_ = _iprot.readString()" in code
        assert "iprot_ = _iprot.readI32()" in code
        assert "_field = _iprot.readString()" not in code
        assert "_iprot = _iprot" not in code
        assert "new Job(done_, field_, iprot_)" in code


class TestService:
    @pytest.fixture
    def service(self, generator, document):
        return document.normalize(generator.config.naming_case).services[0]

    def test_interfaces(self, generator, document, service):
        code = generator.render_service(document, service)
        assert "  trait Iface {\n" in code
        assert "    def getUser(`userId`: Long): User\n" in code
        assert "    def ping(): Unit\n" in code
        assert "    def getUser(`userId`: Long): Future[User]\n" in code

    def test_args_and_result_structs(self, generator, document, service):
        code = generator.render_service(document, service)
        assert "case class getUser_args(`userId`: Long) extends ThriftStruct {" in code
        assert (
            "case class getUser_result(`success`: Option[User] = None, "
            "`notFound`: Option[NotFound] = None) extends ThriftStruct {"
        ) in code
        assert 'new TField("success", TType.STRUCT, 0)' in code
        assert 'new TField("not_found", TType.STRUCT, 1)' in code
        assert "case class ping_result() extends ThriftStruct {" in code

    def test_no_options_by_default(self, generator, document, service):
        code = generator.render_service(document, service)
        assert "FinagledClient" not in code
        assert "FinagledService" not in code
        assert "ThriftServer" not in code

    def test_finagle_client(self, generator, document, service):
        code = generator.render_service(document, service, ["finagle_client"])
        assert "class FinagledClient(" in code
        assert 'encodeRequest("get_user", getUser_args(`userId`), false)' in code
        assert "scala.None orElse result.notFound" in code
        assert "getOrElse(Future.Done)" in code
        assert "FinagledService" not in code

    def test_client_arguments_do_not_shadow_members(self, generator, document):
        """An argument named like a client member does not replace it in calls."""
        mailer = Service(
            "Mailer",
            (
                Function(
                    "send",
                    BaseType.STRING,
                    (
                        Field(1, "service", BaseType.STRING),
                        Field(2, "protocolFactory", BaseType.STRING),
                    ),
                ),
            ),
        )
        code = generator.render_service(document, mailer, ["finagle_client"])
        assert (
            'this.service(this.encodeRequest("send", send_args(`service`, `protocolFactory`), false))'
        ) in code
        assert "this.decodeResponse(response, send_result)" in code
        assert 'Future.exception(this.missingResult("send"))' in code
        assert "service(request)" not in code

    def test_finagle_service(self, generator, document, service):
        code = generator.render_service(document, service, [ServiceOption.WITH_FINAGLE_SERVICE])
        assert 'functionMap("get_user") = {' in code
        assert "iface.getUser(args.`userId`)" in code
        assert (
            'case e: NotFound => reply("get_user", seqid, getUser_result(notFound = scala.Some(e)))'
        ) in code
        assert 'reply("ping", seqid, ping_result())' in code

    def test_ostrich_server_brings_finagle_service(self, generator, document, service):
        code = generator.render_service(document, service, ["ostrich_server"])
        assert "trait ThriftServer extends com.twitter.ostrich.admin.Service with FutureIface {" in code
        assert "class FinagledService(" in code

    def test_options_from_config(self, document):
        code = ScalaGenerator({"service_options": ["finagle_client"]}).generate(document)
        assert "class FinagledClient(" in code

    def test_parent_service(self, generator, document):
        child = Service("Child", parent="Base")
        code = generator.render_service(document, child)
        assert "trait Iface extends Base.Iface {" in code
        assert "trait FutureIface extends Base.FutureIface {" in code

    def test_resolve_service_options(self):
        assert resolve_service_options(["ostrich_server"]) == {
            ServiceOption.WITH_OSTRICH_SERVER,
            ServiceOption.WITH_FINAGLE_SERVICE,
        }
        with pytest.raises(GeneratorError, match="bogus"):
            resolve_service_options(["bogus"])

    def test_unknown_option_is_a_generator_error(self, generator, document, service):
        with pytest.raises(GeneratorError):
            generator.generate(document, ["bogus"])
        with pytest.raises(GeneratorError):
            generator.render_service(document, service, ["bogus"])


class TestWarnings:
    def test_renamed_fields_are_reported(self, generator, document):
        warnings = generator.collect_warnings(document)
        assert "Field User.user_id renamed to userId" in warnings
        assert "Argument UserService.get_user.user_id renamed to userId" in warnings

    def test_keyword_fields_are_reported(self, generator):
        doc = Document(structs=(Struct("Typed", (Field(1, "type", BaseType.STRING),)),))
        assert generator.collect_warnings(doc) == [
            "Field Typed.type is a Scala keyword and will be quoted"
        ]


class TestGenerateCode:
    """Successful and failed generation results."""

    def test_success_metadata(self, generator, document):
        result = generate_code(generator, document)
        assert result.success
        assert result.metadata["language"] == "scala"
        assert result.metadata["namespace"] == "com.example.users"
        assert result.metadata["struct_count"] == 2
        assert result.metadata["service_count"] == 1
        assert result.warnings

    def test_mapping_gap_fails_the_document(self, generator):
        doc = Document(structs=(Struct("Bad", (Field(1, "other", ReferenceType("Other")),)),))
        result = generate_code(generator, doc)
        assert not result.success
        assert result.code == ""
        assert isinstance(result.exception, InternalError)

    def test_binding_gap_fails_the_document(self, document):
        class BrokenGenerator(ScalaGenerator):
            def _header_dictionary(self, document):
                return Dictionary()

        result = generate_code(BrokenGenerator(), document)
        assert not result.success
        assert isinstance(result.exception, TemplateBindingError)
        assert result.exception.fragment == "header"
        assert result.exception.key == "addComments"

    def test_unknown_service_option_fails_the_document(self, document):
        generator = ScalaGenerator()
        generator.config.service_options.append("bogus")
        result = generate_code(generator, document)
        assert not result.success
        assert isinstance(result.exception, GeneratorError)
        assert "Unknown service option" in result.error_message

    def test_enum_without_values(self, generator):
        code = generator.generate(Document(enums=(EnumDef("Nothing"),)))
        assert "object Nothing {" in code


class TestPublicApi:
    """Package-level helpers wrapping registry lookup and generation."""

    def test_generate_from_document(self, document):
        result = generate_from_document(document, config={"add_comments": False})
        assert result.success
        assert result.code.startswith("package com.example.users\n")
        assert "case class User(" in result.code

    def test_generate_from_document_alias(self, document):
        result = generate_from_document(document, language="scrooge")
        assert result.success
        assert result.metadata["language"] == "scala"

    def test_quick_generate(self):
        data = {
            "structs": [
                {"name": "Point", "fields": [{"id": 1, "name": "x", "type": "i32"}]}
            ]
        }
        code = quick_generate(data, package_name="com.example.geo", add_comments=False)
        assert code.startswith("package com.example.geo\n")
        assert "case class Point(`x`: Int) extends ThriftStruct {" in code

    def test_quick_generate_raises_on_failure(self):
        data = {
            "structs": [
                {"name": "Bad", "fields": [{"id": 1, "name": "other", "type": {"ref": "Other"}}]}
            ]
        }
        with pytest.raises(InternalError):
            quick_generate(data)
