"""
Core code generation components.

Provides the document model and the base classes and utilities used by all
language generators.
"""

from .ast import Document
from .config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .generator import CodeGenerator, GenerationResult, GeneratorError, InternalError, generate_code
from .loader import DocumentLoadError, load_document, load_document_file
from .naming import NamingCase, convert_case
from .templates import (
    Dictionary,
    Fragment,
    FragmentRegistry,
    TemplateBindingError,
    TemplateEngine,
    TemplateError,
    create_template_engine,
)

__all__ = [
    # Document model
    "Document",
    "DocumentLoadError",
    "load_document",
    "load_document_file",
    # Base generator interface
    "CodeGenerator",
    "GeneratorError",
    "InternalError",
    "GenerationResult",
    "generate_code",
    # Naming utilities
    "NamingCase",
    "convert_case",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "Dictionary",
    "Fragment",
    "FragmentRegistry",
    "TemplateEngine",
    "TemplateError",
    "TemplateBindingError",
    "create_template_engine",
]
