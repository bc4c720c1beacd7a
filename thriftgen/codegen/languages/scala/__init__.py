"""
Scala code generator module.

Generates Scrooge-style case classes, codecs and Finagle services from
Thrift documents.
"""

from .constants import ConstantRenderer, quote_c
from .fields import FieldDescriptorBuilder
from .generator import ScalaGenerator, ScalaService, ServiceOption
from .types import ScalaTypeConfig, ScalaTypeMapper, TType, create_type_mapper

__all__ = [
    "ScalaGenerator",
    "ScalaService",
    "ServiceOption",
    "ScalaTypeConfig",
    "ScalaTypeMapper",
    "TType",
    "ConstantRenderer",
    "FieldDescriptorBuilder",
    "create_type_mapper",
    "quote_c",
    "create_generator",
]


def create_generator(**kwargs) -> ScalaGenerator:
    """
    Create a Scala generator.

    Args:
        **kwargs: Generator options (package_name, service_options, list_type, ...)

    Returns:
        Configured ScalaGenerator instance
    """
    return ScalaGenerator(kwargs)
