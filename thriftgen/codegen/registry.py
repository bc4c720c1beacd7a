"""
Generator registry system for managing available code generators.

Provides registration by language name or alias and instantiation with a
resolved configuration.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from .core.config import ConfigError, GeneratorConfig, load_config
from .core.generator import CodeGenerator
from .core.templates import TemplateError


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


class GeneratorRegistry:
    """Registry for managing available code generators."""

    def __init__(self):
        """Initialize empty registry."""
        self._generators: Dict[str, Type[CodeGenerator]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a generator for a language.

        Args:
            language: Primary language name (e.g., 'scala')
            generator_class: Generator class implementing CodeGenerator
            aliases: Alternative names for this language
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If generator class is invalid or conflicts exist
        """
        if not (isinstance(generator_class, type) and issubclass(generator_class, CodeGenerator)):
            raise RegistryError("Generator class must inherit from CodeGenerator")

        language_key = language.lower()

        if language_key in self._generators and not replace:
            return

        self._generators[language_key] = generator_class

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key == language_key:
                continue

            if not replace:
                if alias_key in self._generators:
                    raise RegistryError(
                        f"Alias '{alias}' conflicts with existing primary language"
                    )
                if alias_key in self._aliases and self._aliases[alias_key] != language_key:
                    raise RegistryError(
                        f"Alias '{alias}' already points to '{self._aliases[alias_key]}'"
                    )

            self._aliases[alias_key] = language_key

    def unregister(self, language: str):
        """Unregister a generator and its aliases."""
        language_key = language.lower()
        self._generators.pop(language_key, None)

        for alias in [a for a, target in self._aliases.items() if target == language_key]:
            del self._aliases[alias]

    def resolve(self, language: str) -> str:
        """
        Resolve a language name or alias to its primary name.

        Raises:
            RegistryError: If language not found
        """
        language_key = language.lower()
        if language_key in self._generators:
            return language_key
        if language_key in self._aliases:
            return self._aliases[language_key]

        raise RegistryError(
            f"No generator registered for language: {language}. "
            f"Available: {', '.join(self.list_languages())}"
        )

    def get_generator_class(self, language: str) -> Type[CodeGenerator]:
        return self._generators[self.resolve(language)]

    def create_generator(
        self,
        language: str,
        config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
    ) -> CodeGenerator:
        """
        Create generator instance for language.

        Args:
            language: Language name or alias
            config: Configuration as GeneratorConfig, dict, or file path

        Returns:
            Configured generator instance

        Raises:
            RegistryError: If generator creation fails
        """
        generator_class = self.get_generator_class(language)
        primary = self.resolve(language)

        try:
            if isinstance(config, GeneratorConfig):
                final_config = config
            elif isinstance(config, (str, Path)):
                final_config = load_config(primary, config_file=config)
            elif isinstance(config, dict):
                final_config = load_config(primary, custom_config=config)
            elif config is None:
                final_config = load_config(primary)
            else:
                raise RegistryError(f"Invalid config type: {type(config)}")

            return generator_class(final_config)

        except (ConfigError, TemplateError) as e:
            raise RegistryError(f"Failed to create {language} generator: {e}") from e

    def list_languages(self) -> List[str]:
        """Get list of registered primary language names."""
        return sorted(self._generators)

    def get_aliases_for_language(self, language: str) -> List[str]:
        language_key = language.lower()
        return sorted(a for a, target in self._aliases.items() if target == language_key)

    def list_all_names(self) -> Dict[str, List[str]]:
        """
        Get all registered names including aliases.

        Returns:
            Dict mapping primary language to list of all names (including aliases)
        """
        return {
            language: [language] + self.get_aliases_for_language(language)
            for language in self._generators
        }

    def is_supported(self, language: str) -> bool:
        language_key = language.lower()
        return language_key in self._generators or language_key in self._aliases

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """
        Get information about a registered language.

        Raises:
            RegistryError: If language not found
        """
        primary = self.resolve(language)
        generator = self.create_generator(primary)

        return {
            "name": generator.language_name,
            "class": type(generator).__name__,
            "file_extension": generator.file_extension,
            "aliases": self.get_aliases_for_language(primary),
            "module": type(generator).__module__,
            "fragments": list(generator.fragments.names()),
        }


# Global registry instance - created once
_global_registry: Optional[GeneratorRegistry] = None


def get_registry() -> GeneratorRegistry:
    """Get the global generator registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = GeneratorRegistry()
        _auto_register_generators(_global_registry)
    return _global_registry


def _auto_register_generators(registry: GeneratorRegistry):
    """Register the built-in generators with their aliases."""
    from .languages.scala import ScalaGenerator

    registry.register("scala", ScalaGenerator, aliases=["scrooge"])


# Public API functions using the global registry


def register_generator(
    language: str,
    generator_class: Type[CodeGenerator],
    aliases: Optional[List[str]] = None,
):
    """Register a generator in the global registry."""
    get_registry().register(language, generator_class, aliases)


def get_generator(
    language: str,
    config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
) -> CodeGenerator:
    """Get generator instance from global registry."""
    return get_registry().create_generator(language, config)


def list_supported_languages() -> List[str]:
    """List all supported languages from global registry."""
    return get_registry().list_languages()


def is_language_supported(language: str) -> bool:
    return get_registry().is_supported(language)


def get_language_info(language: str) -> Dict[str, Any]:
    """Get information about a supported language."""
    return get_registry().get_language_info(language)
