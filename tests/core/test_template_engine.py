# ==============================
# Template Engine Tests
# ==============================
from __future__ import annotations

import pytest

from widgetkit.contracts.errors import TemplateNotFound, TemplateSyntaxError
from widgetkit.templating.engine import Reference, TemplateEngine, split_targets, tokenize


SOURCE = """
ignored preamble
<!-- target: greeting -->Hello, ${name}!
<!-- target: shout -->${name | html}<!-- /target -->
trailing text outside any target
"""


def test_parse_registers_targets(engine: TemplateEngine) -> None:
    first = engine.parse(SOURCE)
    assert first is not None and first.name == "greeting"
    assert engine.has_target("greeting")
    assert engine.has_target("shout")
    assert engine.render("greeting", {"name": "Ada"}) == "Hello, Ada!\n"


def test_split_targets_ignores_text_outside_targets() -> None:
    assert split_targets(SOURCE) == [
        ("greeting", "Hello, ${name}!\n"),
        ("shout", "${name | html}"),
    ]


def test_duplicate_target_raises(engine: TemplateEngine) -> None:
    engine.parse("<!-- target: a -->x")
    with pytest.raises(TemplateSyntaxError):
        engine.parse("<!-- target: a -->y")


def test_unknown_target_raises(engine: TemplateEngine) -> None:
    with pytest.raises(TemplateNotFound):
        engine.render("nope", {})


def test_compile_renders_inline_body(engine: TemplateEngine) -> None:
    renderer = engine.compile("<b>${title}</b> ${missing}")
    assert renderer({"title": "Hi"}) == "<b>Hi</b> "


def test_builtin_filters(engine: TemplateEngine) -> None:
    renderer = engine.compile("${v | html}|${v | raw}|${q | url}")
    assert renderer({"v": "<a&b>", "q": "a b/c"}) == "&lt;a&amp;b&gt;|<a&b>|a%20b%2Fc"


def test_filter_arguments_literals_and_references(engine: TemplateEngine) -> None:
    engine.add_filter("join", lambda value, *args: "-".join([str(value)] + [str(a) for a in args]))
    renderer = engine.compile("${v | join('x', \"y\", 3, 1.5, ${other})}")
    assert renderer({"v": "a", "other": "z"}) == "a-x-y-3-1.5-z"


def test_filter_chain_applies_left_to_right(engine: TemplateEngine) -> None:
    engine.add_filter("upper", lambda value: str(value).upper())
    engine.add_filter("wrap", lambda value, left, right: f"{left}{value}{right}")
    renderer = engine.compile("${v | upper | wrap('[', ']')}")
    assert renderer({"v": "ok"}) == "[OK]"


def test_add_filter_last_write_wins(engine: TemplateEngine) -> None:
    engine.add_filter("tag", lambda value: "one")
    engine.add_filter("tag", lambda value: "two")
    assert engine.compile("${v | tag}")({"v": 1}) == "two"


def test_default_filter_escapes_unless_raw() -> None:
    engine = TemplateEngine(default_filter="html")
    renderer = engine.compile("${v}/${v | raw}")
    assert renderer({"v": "<i>"}) == "&lt;i&gt;/<i>"


def test_unknown_filter_raises_at_render(engine: TemplateEngine) -> None:
    renderer = engine.compile("${v | nope}")
    with pytest.raises(TemplateSyntaxError):
        renderer({"v": 1})


@pytest.mark.parametrize("content", ["${name", "${}", "${v | 1bad}", "${v | f(bare)}"])
def test_malformed_placeholders_raise(engine: TemplateEngine, content: str) -> None:
    with pytest.raises(TemplateSyntaxError):
        engine.compile(content)


def test_tokenize_keeps_nested_references() -> None:
    nodes = tokenize("a ${main | id(${instance})} b")
    assert nodes[0] == "a "
    placeholder = nodes[1]
    assert placeholder.expr == "main"
    assert placeholder.filters[0].name == "id"
    assert placeholder.filters[0].args == (Reference("instance"),)
    assert nodes[2] == " b"


def test_filters_view_is_read_only(engine: TemplateEngine) -> None:
    with pytest.raises(TypeError):
        engine.filters["x"] = lambda value: value  # type: ignore[index]
    assert set(engine.filters) == {"html", "raw", "url"}


def test_failed_parse_registers_nothing(engine: TemplateEngine) -> None:
    with pytest.raises(TemplateSyntaxError):
        engine.parse("<!-- target: a -->ok<!-- target: b -->${oops")
    assert not engine.has_target("a")

    engine.parse("<!-- target: a -->ok<!-- target: b -->${fixed}")
    assert engine.render("a", {}) == "ok"
    assert engine.render("b", {"fixed": 1}) == "1"


def test_duplicate_within_one_source_registers_nothing(engine: TemplateEngine) -> None:
    with pytest.raises(TemplateSyntaxError):
        engine.parse("<!-- target: a -->one<!-- target: a -->two")
    assert not engine.has_target("a")


def test_parse_without_targets_returns_none(engine: TemplateEngine) -> None:
    assert engine.parse("no markers here") is None
