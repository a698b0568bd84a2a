# ==============================
# Default Template Engine
# ==============================
"""
Minimal named-target template engine.

Source format:

    <!-- target: greeting -->Hello, ${name}!
    <!-- target: box --><div id="${#main}">${title | html}</div>
    <!-- /target -->

Placeholders:
- `${expr}` looks `expr` up verbatim through `context.get(expr)`.
- `${expr | f | g('a', ${other})}` pipes the value through filters.
  Filter args are quoted strings, numbers, or `${name}` references.

No loops, conditionals or includes. Lookups always go through the context's
`get`, so the caller decides what a name means.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple, Union
from urllib.parse import quote

from widgetkit.config.schema import Settings
from widgetkit.contracts.errors import TemplateNotFound, TemplateSyntaxError


logger = logging.getLogger(__name__)

Filter = Callable[..., Any]

_MARKER_RE = re.compile(r"<!--\s*(?:target:\s*([\w-]+)|(/)target)\s*-->")
_FILTER_RE = re.compile(r"^([A-Za-z_][\w-]*)\s*(?:\((.*)\))?$", re.S)
_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")

RAW_FILTER = "raw"


class Context(Protocol):
    def get(self, name: str) -> Any:
        ...


# ==============================
# Built-in Filters
# ==============================


def _html(value: Any) -> str:
    return html.escape(_to_text(value), quote=True)


def _raw(value: Any) -> Any:
    return value


def _url(value: Any) -> str:
    return quote(_to_text(value), safe="")


BUILTIN_FILTERS: Dict[str, Filter] = {
    "html": _html,
    "raw": _raw,
    "url": _url,
}


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


# ==============================
# Compiled Nodes
# ==============================


@dataclass(frozen=True)
class Reference:
    """A `${name}` used as a filter argument."""
    name: str


Argument = Union[str, int, float, Reference]


@dataclass(frozen=True)
class FilterCall:
    name: str
    args: Tuple[Argument, ...] = ()


@dataclass(frozen=True)
class Placeholder:
    expr: str
    filters: Tuple[FilterCall, ...] = ()


Node = Union[str, Placeholder]


class Renderer:
    """Compiled template body. Call it with a context to get a string."""

    def __init__(self, engine: "TemplateEngine", nodes: Tuple[Node, ...], name: Optional[str] = None) -> None:
        self._engine = engine
        self.nodes = nodes
        self.name = name

    def __call__(self, context: Context) -> str:
        out: List[str] = []
        for node in self.nodes:
            if isinstance(node, str):
                out.append(node)
            else:
                out.append(_to_text(self._evaluate(node, context)))
        return "".join(out)

    def _evaluate(self, node: Placeholder, context: Context) -> Any:
        value = context.get(node.expr)
        for call in node.filters:
            value = self._apply(call, value, context)
        default = self._engine.default_filter
        if default and (not node.filters or node.filters[-1].name != RAW_FILTER):
            value = self._apply(FilterCall(default), value, context)
        return value

    def _apply(self, call: FilterCall, value: Any, context: Context) -> Any:
        fn = self._engine.filters.get(call.name)
        if fn is None:
            raise TemplateSyntaxError(f"Unknown filter: {call.name}")
        args = [context.get(a.name) if isinstance(a, Reference) else a for a in call.args]
        return fn(value, *args)

    def __repr__(self) -> str:
        return f"Renderer(name={self.name!r}, nodes={len(self.nodes)})"


# ==============================
# Parsing
# ==============================


def _find_close(text: str, start: int) -> int:
    """Index of the `}` closing the placeholder whose body starts at `start`."""
    depth = 0
    quote_char: Optional[str] = None
    i = start
    while i < len(text):
        ch = text[i]
        if quote_char:
            if ch == "\\":
                i += 2
                continue
            if ch == quote_char:
                quote_char = None
        elif ch in "'\"":
            quote_char = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return -1


def _split_top(text: str, sep: str) -> List[str]:
    """Split on `sep` outside quotes, parens and `${...}`."""
    parts: List[str] = []
    depth = 0
    quote_char: Optional[str] = None
    buf: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if quote_char:
            buf.append(ch)
            if ch == "\\" and i + 1 < len(text):
                buf.append(text[i + 1])
                i += 2
                continue
            if ch == quote_char:
                quote_char = None
        elif ch in "'\"":
            quote_char = ch
            buf.append(ch)
        elif ch in "({":
            depth += 1
            buf.append(ch)
        elif ch in ")}":
            depth -= 1
            buf.append(ch)
        elif ch == sep and depth == 0:
            parts.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    parts.append("".join(buf))
    return parts


def _parse_argument(raw: str, source: str) -> Argument:
    arg = raw.strip()
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in "'\"":
        return re.sub(r"\\(.)", r"\1", arg[1:-1])
    if arg.startswith("${") and arg.endswith("}"):
        return Reference(arg[2:-1].strip())
    if _NUMBER_RE.match(arg):
        return float(arg) if "." in arg else int(arg)
    raise TemplateSyntaxError(f"Bad filter argument {arg!r} in ${{{source}}}")


def _parse_filter(raw: str, source: str) -> FilterCall:
    m = _FILTER_RE.match(raw.strip())
    if not m:
        raise TemplateSyntaxError(f"Bad filter {raw.strip()!r} in ${{{source}}}")
    name, arg_text = m.group(1), m.group(2)
    if arg_text is None or not arg_text.strip():
        return FilterCall(name)
    args = tuple(_parse_argument(a, source) for a in _split_top(arg_text, ","))
    return FilterCall(name, args)


def _parse_placeholder(body: str) -> Placeholder:
    pieces = _split_top(body, "|")
    expr = pieces[0].strip()
    if not expr:
        raise TemplateSyntaxError(f"Empty placeholder: ${{{body}}}")
    return Placeholder(expr, tuple(_parse_filter(p, body) for p in pieces[1:]))


def tokenize(content: str) -> Tuple[Node, ...]:
    nodes: List[Node] = []
    pos = 0
    while True:
        start = content.find("${", pos)
        if start < 0:
            break
        end = _find_close(content, start + 2)
        if end < 0:
            raise TemplateSyntaxError(f"Unclosed placeholder at offset {start}")
        if start > pos:
            nodes.append(content[pos:start])
        nodes.append(_parse_placeholder(content[start + 2 : end]))
        pos = end + 1
    if pos < len(content):
        nodes.append(content[pos:])
    return tuple(nodes)


def split_targets(source: str) -> List[Tuple[str, str]]:
    """(name, body) pairs in declaration order. Text outside targets is ignored."""
    found: List[Tuple[str, str]] = []
    current: Optional[str] = None
    body_start = 0
    for m in _MARKER_RE.finditer(source):
        if current is not None:
            found.append((current, source[body_start : m.start()]))
        current = m.group(1)  # None for a closing marker
        body_start = m.end()
    if current is not None:
        found.append((current, source[body_start:]))
    return found


# ==============================
# Engine
# ==============================


class TemplateEngine:
    def __init__(self, *, default_filter: Optional[str] = None) -> None:
        self._targets: Dict[str, Renderer] = {}
        self._filters: Dict[str, Filter] = dict(BUILTIN_FILTERS)
        self.default_filter = default_filter

    @classmethod
    def from_settings(cls, settings: Settings) -> "TemplateEngine":
        return cls(default_filter=settings.templating.default_filter)

    @property
    def filters(self) -> Mapping[str, Filter]:
        return MappingProxyType(self._filters)

    def add_filter(self, name: str, fn: Filter) -> None:
        self._filters[name] = fn

    def parse(self, source: str) -> Optional[Renderer]:
        """Register every target in `source`; return the first one's renderer."""
        # all or nothing: a bad target leaves the table untouched
        parsed: Dict[str, Renderer] = {}
        for name, body in split_targets(source):
            if name in self._targets or name in parsed:
                raise TemplateSyntaxError(f"Target already defined: {name}")
            parsed[name] = Renderer(self, tokenize(body), name=name)
        self._targets.update(parsed)
        if parsed:
            logger.debug("registered template targets %s", ", ".join(parsed))
        return next(iter(parsed.values()), None)

    def compile(self, content: str) -> Renderer:
        return Renderer(self, tokenize(content))

    def has_target(self, name: str) -> bool:
        return name in self._targets

    def get_renderer(self, name: str) -> Renderer:
        renderer = self._targets.get(name)
        if renderer is None:
            raise TemplateNotFound(name)
        return renderer

    def render(self, name: str, context: Context) -> str:
        return self.get_renderer(name)(context)
