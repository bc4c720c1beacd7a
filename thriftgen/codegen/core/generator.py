"""
Base generator interface for all code generation targets.

Defines the contract that all language generators must implement.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...logging_config import get_logger
from .ast import Document
from .config import GeneratorConfig, load_config
from .templates import FragmentRegistry, TemplateEngine, TemplateError, create_template_engine

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class InternalError(GeneratorError):
    """
    A mapping function received a case it has no rule for.

    The document passed validation, so this is a defect in the generator's
    case tables rather than in the input.
    """

    def __init__(self, operation: str, value: Any):
        self.operation = operation
        self.value = value
        super().__init__(f"{operation}#{value!r}")


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Optional[Union[GeneratorConfig, Dict[str, Any]]] = None):
        """Initialize generator with optional configuration."""
        if config is None or isinstance(config, dict):
            config = load_config(self.language_name, custom_config=config)
        self.config = config
        self._template_engine = None
        self._setup_templates()
        self.fragments = FragmentRegistry(self._template_engine)

    def _setup_templates(self):
        """Setup template engine for this generator."""
        self._template_engine = create_template_engine(self.get_template_directory())

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'scala')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.scala')."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing fragment sources for this generator.

        Return None to use in-memory fragments only.
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        return self._template_engine

    @abstractmethod
    def generate(self, document: Document) -> str:
        """
        Generate code for a whole document.

        Args:
            document: Parsed, validated document

        Returns:
            Generated code as a string
        """
        pass

    def collect_warnings(self, document: Document) -> List[str]:
        """
        Report things worth a reader's attention that do not stop generation.

        Returns:
            List of warning messages (empty if no issues)
        """
        return []

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 1:  # Allow a single blank line
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        while formatted_lines and not formatted_lines[-1]:
            formatted_lines.pop()

        line_ending = self.config.line_ending
        return line_ending.join(formatted_lines) + line_ending


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self, code: str, warnings: List[str] = None, metadata: Dict[str, Any] = None
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def generate_code(generator: CodeGenerator, document: Document) -> GenerationResult:
    """
    Generate code using the specified generator with error handling.

    Mapping and template-binding failures abort generation of the document
    and are returned as a failed result; no partial code is produced.

    Args:
        generator: Code generator instance
        document: Document to generate code for

    Returns:
        GenerationResult with code, warnings, and metadata
    """
    try:
        warnings = generator.collect_warnings(document)
        code = generator.generate(document)
        formatted_code = generator.format_code(code)
    except (GeneratorError, TemplateError) as e:
        logger.error("Code generation failed: %s", e)
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)

    metadata = {
        "language": generator.language_name,
        "file_extension": generator.file_extension,
        "namespace": document.target_namespace,
        "const_count": len(document.consts),
        "enum_count": len(document.enums),
        "struct_count": len(document.structs),
        "service_count": len(document.services),
    }
    logger.info(
        "Generated %s code for namespace %s (%d lines)",
        generator.language_name,
        document.target_namespace,
        formatted_code.count("\n"),
    )

    return GenerationResult(formatted_code, warnings, metadata)
