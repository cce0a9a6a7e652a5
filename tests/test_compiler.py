"""
Page compiler tests - whole-page composition

Validates the pass order end to end: variables, sections, layout,
injection, placeholder substitution and directive merging.
"""

import tempfile
from pathlib import Path

import pytest

from jspcompose.config import AppSettings
from jspcompose.models.document import LineBuffer, PageDocument, CompositionStage
from jspcompose.lib.cache import LayoutCache
from jspcompose.lib.compiler import PageCompiler, blankLines_strip
from jspcompose.lib.errors import DuplicateMarker, EmptyReference, MissingRequiredMarker


DEFAULT_DIRECTIVE = '<%@ page session="false" trimDirectiveWhitespaces="true"%>'

MAIN_LAYOUT = "\n".join([
    '<%@ page contentType="text/html" %>',
    "<!-- @variable title=Layout Title -->",
    "<!-- @variable brand=Acme -->",
    "<html>",
    "<head>",
    "  <title>@{title} - @(brand)</title>",
    "  <!-- @head? -->",
    "</head>",
    "<body>",
    "  <!-- @doBody -->",
    "</body>",
    "</html>",
]) + "\n"

INDEX_PAGE = "\n".join([
    '<%@ page import="java.util.List" %>',
    "<!-- @variables",
    "__layout=main",
    "title=Home",
    "-->",
    "<!-- @head begin -->",
    '<link href="home.css">',
    "<!-- @head end -->",
    "<h1>@{title}</h1>",
])


@pytest.fixture
def config_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = Path(tmpdir)
        (config / "main.jsp").write_text(MAIN_LAYOUT, encoding="utf-8")
        yield config


def compiler_make(config_dir, **settings):
    return PageCompiler(config_dir, settings=AppSettings(**settings))


class TestWithoutLayout:
    """Pages that do not name a layout produce one document"""

    def test_variable_substitution(self, config_dir):
        documents = compiler_make(config_dir).text_compile(
            "hello.jsp", "<!-- @x=hello -->\nGreeting: @{x}"
        )

        assert len(documents) == 1
        assert documents[0].name == "hello.jsp"
        assert documents[0].source == [
            DEFAULT_DIRECTIVE,
            "<!-- @variable(s) processed -->",
            "Greeting: hello",
        ]

    def test_sections_without_layout_are_removed(self, config_dir):
        documents = compiler_make(config_dir).text_compile(
            "plain.jsp", "<!-- @a begin -->\nx\n<!-- @a end -->\n<p>"
        )
        assert documents[0].source == [DEFAULT_DIRECTIVE, "<!-- @a removed -->", "<p>"]


class TestWithLayout:
    """Pages that name a layout produce a body include and a composed layout"""

    def test_compose(self, config_dir):
        include, layout = compiler_make(config_dir).text_compile("index.jsp", INDEX_PAGE)

        assert include.name == "index_inc.jsp"
        assert include.source == [
            '<%@ page import="java.util.List" session="false" trimDirectiveWhitespaces="true"%>',
            "<!-- @variables processed -->",
            "<!-- @head removed -->",
            "<h1>Home</h1>",
        ]

        assert layout.name == "index.jsp"
        assert layout.source == [
            '<%@ page contentType="text/html" session="false" trimDirectiveWhitespaces="true"%>',
            "<!-- @variable(s) processed -->",
            "<html>",
            "<head>",
            "  <title>Home - Acme</title>",
            "  <!-- @head begin -->",
            '<link href="home.css">',
            "  <!-- @head end -->",
            "</head>",
            "<body>",
            "  <!-- @doBody processed -->",
            '  <%@ include file="index_inc.jsp" %>',
            "</body>",
            "</html>",
        ]

    def test_layout_variables_reach_include(self, config_dir):
        include, _layout = compiler_make(config_dir).text_compile(
            "about.jsp", "<!-- @variable __layout=main -->\n<p>@{brand}</p>"
        )
        assert include.source[-1] == "<p>Acme</p>"

    def test_optional_section_undefined(self, config_dir):
        _include, layout = compiler_make(config_dir).text_compile(
            "about.jsp", "<!-- @variable __layout=main -->\n<p>about</p>"
        )
        assert "  <!-- @head? undefined -->" in layout.source
        assert "  <title>Layout Title - Acme</title>" in layout.source

    def test_required_section_missing(self, config_dir):
        (config_dir / "strict.jsp").write_text(
            "<!-- @head -->\n<!-- @doBody -->\n", encoding="utf-8"
        )
        with pytest.raises(MissingRequiredMarker, match=r"@head is required \(jsp=index.jsp\)"):
            compiler_make(config_dir).text_compile("index.jsp", "<!-- @variable __layout=strict -->")

    def test_empty_layout_name(self, config_dir):
        with pytest.raises(EmptyReference, match=r"__layout is required \(jsp=index.jsp\)"):
            compiler_make(config_dir).text_compile("index.jsp", "<!-- @variable __layout= -->")

    def test_missing_layout_file(self, config_dir):
        with pytest.raises(OSError):
            compiler_make(config_dir).text_compile("index.jsp", "<!-- @variable __layout=nope -->")

    def test_duplicate_section(self, config_dir):
        page = "\n".join([
            "<!-- @variable __layout=main -->",
            "<!-- @head begin -->", "a", "<!-- @head end -->",
            "<!-- @head begin -->", "b", "<!-- @head end -->",
        ])
        with pytest.raises(DuplicateMarker):
            compiler_make(config_dir).text_compile("index.jsp", page)

    def test_cached_layout_not_mutated(self, config_dir):
        """Two pages sharing one layout each get a clean copy"""
        cache = LayoutCache()
        compiler = PageCompiler(config_dir, cache=cache, settings=AppSettings())

        _include, first = compiler.text_compile("a.jsp", "<!-- @variable __layout=main -->\n<!-- @variable title=A -->")
        _include, second = compiler.text_compile("b.jsp", "<!-- @variable __layout=main -->\n<!-- @variable title=B -->")

        assert "  <title>A - Acme</title>" in first.source
        assert "  <title>B - Acme</title>" in second.source
        assert '  <%@ include file="b_inc.jsp" %>' in second.source
        assert len(cache) == 1
        assert "main.jsp" in cache


class TestOptions:
    """Test minimize and encoding options"""

    def test_minimize(self, config_dir):
        documents = compiler_make(config_dir, minimize=True).text_compile(
            "page.jsp", "<p>a</p>\n\n   \n<p>b</p>"
        )
        assert documents[0].source == [DEFAULT_DIRECTIVE, "<p>a</p>", "<p>b</p>"]

    def test_minimize_override(self, config_dir):
        compiler = PageCompiler(config_dir, settings=AppSettings(minimize=True), minimize=False)
        documents = compiler.text_compile("page.jsp", "<p>a</p>\n\n<p>b</p>")
        assert "" in documents[0].source

    def test_blank_lines_kept_by_default(self, config_dir):
        documents = compiler_make(config_dir).text_compile("page.jsp", "<p>a</p>\n\n<p>b</p>")
        assert documents[0].source == [DEFAULT_DIRECTIVE, "<p>a</p>", "", "<p>b</p>"]

    def test_page_encoding(self, config_dir):
        documents = compiler_make(config_dir, page_encoding="UTF-8").text_compile("page.jsp", "<p>")
        assert documents[0].source[0] == (
            '<%@ page session="false" trimDirectiveWhitespaces="true" pageEncoding="UTF-8"%>'
        )

    def test_blank_lines_strip(self):
        source = LineBuffer(["a", "", " \t", "b"])
        blankLines_strip(source)
        assert source == ["a", "b"]


class TestStages:
    """Test the stage each pass leaves a page in"""

    def test_stage_progression(self, config_dir):
        compiler = compiler_make(config_dir)
        page = PageDocument(name="index.jsp", source=LineBuffer.text_parse(INDEX_PAGE))

        compiler.variables_extract(page)
        assert page.stage is CompositionStage.VARIABLES_EXTRACTED
        compiler.sections_extract(page)
        assert page.stage is CompositionStage.SECTIONS_EXTRACTED
        assert compiler.layout_resolve(page) is True
        assert page.stage is CompositionStage.LAYOUT_RESOLVED
        assert page.includeName == "index_inc.jsp"
        compiler.sections_inject(page)
        assert page.stage is CompositionStage.SECTIONS_INJECTED
        compiler.variables_merge(page)
        assert page.mergedVariables["title"] == "Home"
        assert page.mergedVariables["brand"] == "Acme"
        compiler.placeholders_substitute(page)
        compiler.directives_merge(page)
        assert page.stage is CompositionStage.DIRECTIVES_MERGED
        compiler.documents_emit(page)
        assert page.stage is CompositionStage.EMITTED

    def test_no_layout(self, config_dir):
        compiler = compiler_make(config_dir)
        page = PageDocument(name="page.jsp", source=LineBuffer(["<p>"]))
        compiler.variables_extract(page)
        compiler.sections_extract(page)
        assert compiler.layout_resolve(page) is False
        assert page.stage is CompositionStage.SECTIONS_EXTRACTED
