"""
Template engine wrapper for code generation.

Fragments are written in a small mustache-like grammar:

    {{key}}                 scalar substitution
    {{#key}}...{{/key}}     section: once per item of a sequence, once for
                            True or a nested dictionary, never for False or
                            an empty sequence
    {{^key}}...{{/key}}     inverted section: once for False or an empty
                            sequence
    {{>key}}                render the fragment stored under ``key`` with the
                            current scope
    {{! comment }}          ignored

A tag alone on its line is "standalone" and removes the whole line from the
output. Names are looked up in the innermost scope first and then in each
enclosing scope. Fragment sources are translated into Jinja2 templates, so
compilation, caching and loading are all handled by Jinja2.
"""

import re
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
)
from jinja2.exceptions import TemplateError as JinjaTemplateError

from ...logging_config import get_logger

logger = get_logger(__name__)

FRAGMENT_SUFFIX = ".mustache"


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateBindingError(TemplateError):
    """A dictionary does not satisfy what a fragment expects of it."""

    def __init__(self, key: str, fragment: str, reason: str):
        self.key = key
        self.fragment = fragment
        self.reason = reason
        super().__init__(f"Fragment '{fragment}': key '{key}' {reason}")


# Dictionary


class Dictionary(Mapping):
    """
    Immutable template model.

    Values are strings, booleans, nested dictionaries, sequences of
    dictionaries, or compiled fragments (targets of ``{{>key}}``). Plain
    mappings are converted to ``Dictionary``; anything else is rejected.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping] = None, **kwargs: Any):
        merged: Dict[str, Any] = {}
        for source in (entries or {}, kwargs):
            for key, value in source.items():
                merged[key] = self._coerce(key, value)
        self._entries = MappingProxyType(merged)

    @classmethod
    def _coerce(cls, key: str, value: Any) -> Any:
        if not isinstance(key, str):
            raise TemplateError(f"Dictionary keys must be strings, got {key!r}")
        if isinstance(value, (str, bool, Dictionary, Fragment)):
            return value
        if isinstance(value, Mapping):
            return Dictionary(value)
        if isinstance(value, (list, tuple)):
            items = []
            for item in value:
                if isinstance(item, Dictionary):
                    items.append(item)
                elif isinstance(item, Mapping):
                    items.append(Dictionary(item))
                else:
                    raise TemplateError(
                        f"Dictionary key '{key}' holds a sequence with a "
                        f"{type(item).__name__} item; only dictionaries are allowed"
                    )
            return tuple(items)
        raise TemplateError(
            f"Dictionary key '{key}' has unsupported value type {type(value).__name__}"
        )

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Dictionary({dict(self._entries)!r})"


class _Scope:
    """Lookup chain used while rendering; innermost dictionary first."""

    __slots__ = ("fragment", "dictionary", "parent")

    def __init__(
        self, fragment: str, dictionary: Dictionary, parent: Optional["_Scope"] = None
    ):
        self.fragment = fragment
        self.dictionary = dictionary
        self.parent = parent

    def resolve(self, key: str) -> Any:
        scope = self
        while scope is not None:
            if key in scope.dictionary:
                return scope.dictionary[key]
            scope = scope.parent
        raise TemplateBindingError(key, self.fragment, "is not defined")

    def push(self, dictionary: Dictionary) -> "_Scope":
        return _Scope(self.fragment, dictionary, self)

    def rebind(self, fragment: str) -> "_Scope":
        return _Scope(fragment, self.dictionary, self.parent)


def _lookup(scope: _Scope, key: str) -> str:
    value = scope.resolve(key)
    if not isinstance(value, str):
        raise TemplateBindingError(
            key, scope.fragment, f"is a {_shape(value)}, expected a scalar"
        )
    return value


def _section(scope: _Scope, key: str) -> List[_Scope]:
    value = scope.resolve(key)
    if isinstance(value, bool):
        return [scope] if value else []
    if isinstance(value, Dictionary):
        return [scope.push(value)]
    if isinstance(value, tuple):
        return [scope.push(item) for item in value]
    raise TemplateBindingError(
        key, scope.fragment, f"is a {_shape(value)}, expected a section value"
    )


def _inverted(scope: _Scope, key: str) -> List[_Scope]:
    value = scope.resolve(key)
    if isinstance(value, (bool, tuple)):
        return [] if value else [scope]
    if isinstance(value, Dictionary):
        return []
    raise TemplateBindingError(
        key, scope.fragment, f"is a {_shape(value)}, expected a section value"
    )


def _partial(scope: _Scope, key: str) -> str:
    value = scope.resolve(key)
    if not isinstance(value, Fragment):
        raise TemplateBindingError(
            key, scope.fragment, f"is a {_shape(value)}, expected a fragment"
        )
    return value.render_scope(scope)


def _shape(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "scalar"
    if isinstance(value, Dictionary):
        return "dictionary"
    if isinstance(value, tuple):
        return "sequence"
    if isinstance(value, Fragment):
        return "fragment"
    return type(value).__name__


# Fragment source translation

_TAG_RE = re.compile(r"\{\{[ \t]*([#^/>!]?)[ \t]*(.*?)[ \t]*\}\}")
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_STANDALONE_SIGILS = frozenset("#^/>!")


def _escape_text(text: str) -> str:
    # A brace that could open a Jinja delimiter, alone or together with the
    # expression that follows it, is emitted as a string expression.
    return re.sub(r"\{(?=[{%#]|\Z)", '{{ "{" }}', text)


def translate_fragment(name: str, source: str) -> str:
    """
    Translate fragment source into Jinja2 template source.

    Raises:
        TemplateError: On malformed tags or unbalanced sections.
    """
    output: List[str] = []
    sections: List[str] = []

    def emit_tag(sigil: str, key: str) -> None:
        if sigil == "!":
            return
        if not _KEY_RE.match(key):
            raise TemplateError(f"Fragment '{name}': malformed tag name {key!r}")

        depth = len(sections)
        if sigil == "":
            output.append(f'{{{{ lookup(_s{depth}, "{key}") }}}}')
        elif sigil == "#":
            sections.append(key)
            output.append(f'{{% for _s{depth + 1} in section(_s{depth}, "{key}") %}}')
        elif sigil == "^":
            sections.append(key)
            output.append(f'{{% for _s{depth + 1} in inverted(_s{depth}, "{key}") %}}')
        elif sigil == "/":
            if not sections:
                raise TemplateError(
                    f"Fragment '{name}': closing tag '{key}' without an open section"
                )
            expected = sections.pop()
            if expected != key:
                raise TemplateError(
                    f"Fragment '{name}': section '{expected}' closed by '{key}'"
                )
            output.append("{% endfor %}")
        elif sigil == ">":
            output.append(f'{{{{ partial(_s{depth}, "{key}") }}}}')

    for line in source.splitlines(keepends=True):
        tags = list(_TAG_RE.finditer(line))
        if len(tags) == 1 and tags[0].group(1) in _STANDALONE_SIGILS:
            tag = tags[0]
            rest = line[: tag.start()] + line[tag.end() :]
            if not rest.strip():
                emit_tag(tag.group(1), tag.group(2))
                continue

        position = 0
        for tag in tags:
            text = line[position : tag.start()]
            if "{{" in text:
                raise TemplateError(f"Fragment '{name}': malformed tag in {line!r}")
            output.append(_escape_text(text))
            emit_tag(tag.group(1), tag.group(2))
            position = tag.end()

        text = line[position:]
        if "{{" in text:
            raise TemplateError(f"Fragment '{name}': malformed tag in {line!r}")
        output.append(_escape_text(text))

    if sections:
        raise TemplateError(f"Fragment '{name}': unclosed section '{sections[-1]}'")

    return "".join(output)


class FragmentSourceLoader(BaseLoader):
    """
    Jinja2 loader that translates fragment sources on the way in.

    The wrapped loader is the raw fragment source provider; fragment
    ``enum`` is read from ``enum.mustache``.
    """

    def __init__(self, source_loader: BaseLoader, suffix: str = FRAGMENT_SUFFIX):
        self.source_loader = source_loader
        self.suffix = suffix

    def get_source(self, environment: Environment, template: str):
        source, filename, uptodate = self.source_loader.get_source(
            environment, template + self.suffix
        )
        return translate_fragment(template, source), filename, uptodate

    def list_templates(self) -> List[str]:
        names = self.source_loader.list_templates()
        return sorted(
            name[: -len(self.suffix)] for name in names if name.endswith(self.suffix)
        )


# Compiled fragments


class Fragment:
    """A compiled fragment bound to a ``model -> Dictionary`` transform."""

    def __init__(
        self,
        name: str,
        template,
        transform: Optional[Callable[[Any], Union[Dictionary, Mapping]]] = None,
    ):
        self.name = name
        self.template = template
        self.transform = transform

    def __call__(self, model: Any) -> str:
        return self.render(model)

    def __repr__(self) -> str:
        return f"Fragment({self.name!r})"

    def unpacker(self, model: Any) -> Dictionary:
        """Apply the transform only; used to embed a model in another dictionary."""
        if self.transform is None:
            raise TemplateError(f"Fragment '{self.name}' has no transform bound")
        dictionary = self.transform(model)
        if not isinstance(dictionary, Dictionary):
            dictionary = Dictionary(dictionary)
        return dictionary

    def render(self, model: Any) -> str:
        return self.render_dictionary(self.unpacker(model))

    def render_dictionary(self, dictionary: Union[Dictionary, Mapping]) -> str:
        if not isinstance(dictionary, Dictionary):
            dictionary = Dictionary(dictionary)
        return self.render_scope(_Scope(self.name, dictionary))

    def render_scope(self, scope: _Scope) -> str:
        try:
            return self.template.render(_s0=scope.rebind(self.name))
        except TemplateError:
            raise
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render fragment {self.name}: {e}") from e


class TemplateEngine:
    """Wrapper for the Jinja2 environment that compiles fragments."""

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        sources: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing ``*.mustache`` fragment sources
            sources: In-memory fragment sources keyed by fragment name
        """
        self.template_dir = template_dir
        self._sources: Dict[str, str] = {}
        self._env: Optional[Environment] = None
        self._setup_environment()

        for name, content in (sources or {}).items():
            self.add_template(name, content)

    def _setup_environment(self):
        """Setup Jinja2 environment; in-memory sources shadow the directory."""
        loaders = [DictLoader(self._sources)]
        if self.template_dir and Path(self.template_dir).exists():
            loaders.append(FileSystemLoader(str(self.template_dir)))

        self._env = Environment(
            loader=FragmentSourceLoader(ChoiceLoader(loaders)),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.globals.update(
            lookup=_lookup, section=_section, inverted=_inverted, partial=_partial
        )

    def add_template(self, name: str, content: str):
        """
        Add an in-memory fragment source.

        Args:
            name: Fragment name
            content: Fragment source
        """
        self._sources[name + FRAGMENT_SUFFIX] = content

    def template_exists(self, name: str) -> bool:
        try:
            self._env.loader.source_loader.get_source(self._env, name + FRAGMENT_SUFFIX)
        except TemplateNotFound:
            return False
        return True

    def list_templates(self) -> List[str]:
        return self._env.loader.list_templates()

    def compile(self, name: str, transform: Optional[Callable] = None) -> Fragment:
        """
        Compile the named fragment and bind it to a transform.

        Raises:
            TemplateError: If the fragment is missing or malformed.
        """
        try:
            template = self._env.get_template(name)
        except TemplateNotFound as e:
            raise TemplateError(f"Fragment not found: {name}") from e
        except TemplateSyntaxError as e:
            raise TemplateError(f"Failed to compile fragment {name}: {e}") from e

        logger.debug("Compiled fragment %s", name)
        return Fragment(name, template, transform)

    def compile_string(
        self, source: str, transform: Optional[Callable] = None, name: str = "<string>"
    ) -> Fragment:
        """Compile fragment source that does not come from the loader."""
        try:
            template = self._env.from_string(translate_fragment(name, source))
        except TemplateSyntaxError as e:
            raise TemplateError(f"Failed to compile fragment {name}: {e}") from e
        return Fragment(name, template, transform)

    def render_string(self, source: str, dictionary: Union[Dictionary, Mapping]) -> str:
        """
        Render fragment source with the given dictionary.

        Returns:
            Rendered content
        """
        return self.compile_string(source).render_dictionary(dictionary)


class FragmentRegistry:
    """
    Fragments compiled from one engine, keyed by name.

    Built once per generator and handed to whatever assembles documents;
    a fragment name can be bound only once.
    """

    def __init__(self, engine: TemplateEngine):
        self.engine = engine
        self._fragments: Dict[str, Fragment] = {}

    def bind(self, name: str, transform: Callable) -> Fragment:
        if name in self._fragments:
            raise TemplateError(f"Fragment already bound: {name}")
        fragment = self.engine.compile(name, transform)
        self._fragments[name] = fragment
        return fragment

    def __getitem__(self, name: str) -> Fragment:
        try:
            return self._fragments[name]
        except KeyError:
            raise TemplateError(f"Fragment not bound: {name}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._fragments

    def names(self) -> Tuple[str, ...]:
        return tuple(self._fragments)


def create_template_engine(
    template_dir: Optional[Path] = None, sources: Optional[Dict[str, str]] = None
) -> TemplateEngine:
    """Create a template engine reading from a directory or from memory."""
    return TemplateEngine(template_dir, sources)
