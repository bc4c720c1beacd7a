"""
Scala-specific naming utilities.

Handles Scala reserved words and identifier quoting.
"""

# Scala reserved words
SCALA_RESERVED_WORDS = {
    "abstract",
    "case",
    "catch",
    "class",
    "def",
    "do",
    "else",
    "extends",
    "false",
    "final",
    "finally",
    "for",
    "forSome",
    "if",
    "implicit",
    "import",
    "lazy",
    "match",
    "new",
    "null",
    "object",
    "override",
    "package",
    "private",
    "protected",
    "return",
    "sealed",
    "super",
    "this",
    "throw",
    "trait",
    "true",
    "try",
    "type",
    "val",
    "var",
    "while",
    "with",
    "yield",
}


def is_reserved(name: str) -> bool:
    return name in SCALA_RESERVED_WORDS


def escape_identifier(name: str) -> str:
    """Wrap a name in backticks so it is a valid identifier whatever it is."""
    return f"`{name}`"


def quote_keyword(name: str) -> str:
    """Wrap a name in backticks only when it collides with a reserved word."""
    return escape_identifier(name) if is_reserved(name) else name


def field_const_name(name: str) -> str:
    """Name of the companion-object constant holding a field's descriptor."""
    return name.upper() + "_FIELD_DESC"
