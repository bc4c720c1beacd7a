"""
Thrift Code Generation Module

Generates Scala source from Thrift documents.
"""

from .core.ast import Document
from .core.config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .core.generator import (
    CodeGenerator,
    GenerationResult,
    GeneratorError,
    InternalError,
    generate_code,
)
from .core.loader import DocumentLoadError, load_document, load_document_file
from .core.templates import TemplateBindingError, TemplateError
from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_language_info,
    get_registry,
    list_supported_languages,
)


def generate_from_document(document: Document, language: str = "scala", config=None):
    """
    Generate code for a document.

    Args:
        document: Document to generate code for
        language: Target language name
        config: Generator configuration dict or path

    Returns:
        GenerationResult with generated code
    """
    generator = get_generator(language, config)
    return generate_code(generator, document)


def quick_generate(data, language: str = "scala", **options) -> str:
    """
    Quick code generation from a JSON document description.

    Args:
        data: Parsed JSON document description
        language: Target language
        **options: Generator options

    Returns:
        Generated code string
    """
    generator = get_generator(language, options)
    document = load_document(data, generator.config.package_name)
    result = generate_code(generator, document)

    if result.success:
        return result.code
    raise result.exception


__all__ = [
    "CodeGenerator",
    "ConfigError",
    "ConfigManager",
    "Document",
    "DocumentLoadError",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "GeneratorRegistry",
    "InternalError",
    "RegistryError",
    "TemplateBindingError",
    "TemplateError",
    "generate_code",
    "generate_from_document",
    "get_generator",
    "get_language_info",
    "get_registry",
    "list_supported_languages",
    "load_config",
    "load_document",
    "load_document_file",
    "quick_generate",
]
