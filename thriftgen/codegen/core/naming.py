"""
Naming utilities for safe code generation.

Case conversions applied when normalizing IDL identifiers into the
conventions of the target language.
"""

import re
from enum import Enum


class NamingCase(Enum):
    """Different naming case styles."""

    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    SNAKE_CASE = "snake"  # user_name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


def camel_case(name: str) -> str:
    """
    Convert a snake_case identifier to camelCase.

    Leading underscores are kept, the first letter of the first word is
    lowered and the first letter of each following word is raised. Letters
    after the first of each word are left untouched, so ``user_ID`` becomes
    ``userID`` and an already camel-cased name is returned as is.
    """
    prefix = name[: len(name) - len(name.lstrip("_"))]
    parts = [part for part in name.split("_") if part]
    if not parts:
        return name

    words = [parts[0][0].lower() + parts[0][1:]]
    words.extend(part[0].upper() + part[1:] for part in parts[1:])
    return prefix + "".join(words)


def pascal_case(name: str) -> str:
    """Convert to PascalCase."""
    camel = camel_case(name).lstrip("_")
    return camel[:1].upper() + camel[1:]


def snake_case(name: str) -> str:
    """Convert to snake_case."""
    name = name.replace("-", "_")
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = re.sub(r"_+", "_", name.lower())
    return name.strip("_")


def convert_case(name: str, target_case: NamingCase) -> str:
    """Convert name to target case style."""
    if target_case == NamingCase.CAMEL_CASE:
        return camel_case(name)
    elif target_case == NamingCase.PASCAL_CASE:
        return pascal_case(name)
    elif target_case == NamingCase.SNAKE_CASE:
        return snake_case(name)
    elif target_case == NamingCase.SCREAMING_SNAKE:
        return snake_case(name).upper()
    else:
        return name
