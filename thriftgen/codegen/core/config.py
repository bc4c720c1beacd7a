"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for generator settings.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .ast import DEFAULT_NAMESPACE
from .naming import NamingCase


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


SERVICE_OPTIONS = ("finagle_client", "finagle_service", "ostrich_server")


@dataclass
class GeneratorConfig:
    """Base configuration for code generators."""

    # Output settings
    output_file: Optional[str] = None
    package_name: str = DEFAULT_NAMESPACE  # used when a document declares none
    line_ending: str = "\n"

    # Naming settings
    field_case: str = "camel"

    # Generated code settings
    add_comments: bool = True
    service_options: List[str] = field(default_factory=list)

    # Custom settings (language-specific)
    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def naming_case(self) -> NamingCase:
        return NamingCase(self.field_case)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported languages."""
        self._configs["scala"] = {
            "package_name": DEFAULT_NAMESPACE,
            "field_case": "camel",
            "add_comments": True,
            "service_options": [],
            "custom": {
                "list_type": "Seq",
                "set_type": "Set",
                "map_type": "Map",
                "option_type": "Option",
                "binary_type": "ByteBuffer",
            },
        }

    def get_config(
        self,
        language: str,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration for a language.

        Args:
            language: Target language name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration for the language
        """
        base_config = json.loads(json.dumps(self._configs.get(language, {})))

        if config_file:
            self._merge(base_config, self._load_config_file(config_file))

        if custom_config:
            self._merge(base_config, custom_config)

        return self._dict_to_config(base_config)

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]):
        for key, value in overrides.items():
            if key == "custom" and isinstance(value, dict):
                base.setdefault("custom", {}).update(value)
            else:
                base[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig; unknown keys go to custom."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = {
            "output_file": config.output_file,
            "package_name": config.package_name,
            "line_ending": config.line_ending,
            "field_case": config.field_case,
            "add_comments": config.add_comments,
            "service_options": list(config.service_options),
        }
        config_dict.update(config.custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def list_languages(self) -> List[str]:
        """Get list of languages with default configurations."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors
        """
        errors = []

        valid_cases = {case.value for case in NamingCase}
        if config.field_case not in valid_cases:
            errors.append(f"Invalid field_case: {config.field_case}")

        for option in config.service_options:
            if option not in SERVICE_OPTIONS:
                errors.append(f"Invalid service option: {option}")

        if not config.package_name:
            errors.append("package_name cannot be empty")
        elif not all(part.isidentifier() for part in config.package_name.split(".")):
            errors.append(f"Invalid Scala package name: {config.package_name}")

        return errors


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    language: str = "scala",
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load and validate configuration.

    Raises:
        ConfigError: If the merged configuration is invalid.
    """
    manager = get_config_manager()
    config = manager.get_config(language, custom_config, config_file)
    errors = manager.validate_config(config)
    if errors:
        raise ConfigError("; ".join(errors))
    return config
