"""Tests for body renderers and the extension protocols."""

from pathlib import Path

from folio.content import FileContentLoader
from folio.extractors import CategoryExtractor, DateExtractor, ExcerptExtractor, TagExtractor, TitleExtractor
from folio.protocols import ContentLoader, ContentRenderer, MetadataExtractor
from folio.renderers import (
    HTMLRenderer,
    MarkdownRenderer,
    RendererRegistry,
    _generate_heading_id,
    render_markdown,
)

# --- Renderer Tests ---


def test_markdown_renderer():
    """Test MarkdownRenderer renders markdown to HTML."""
    renderer = MarkdownRenderer()
    assert renderer.can_render(Path("test.md"))
    assert renderer.can_render(Path("test.markdown"))
    assert not renderer.can_render(Path("test.html"))
    assert renderer.source_type == "markdown"
    html, headings = renderer.render("# Hello\n\nWorld")
    assert '<h1 id="hello">Hello</h1>' in html
    assert "<p>World</p>" in html
    assert headings[0].level == 1


def test_markdown_leaves_template_syntax_alone():
    html, _ = render_markdown("Use `${{ secrets.TOKEN }}` in the workflow.")
    assert "${{ secrets.TOKEN }}" in html


def test_duplicate_heading_ids_are_numbered():
    html, headings = render_markdown("## Setup\n\n## Setup\n\n## Setup\n")
    assert [h.id for h in headings] == ["setup", "setup-1", "setup-2"]
    assert '<h2 id="setup-2">Setup</h2>' in html


def test_heading_id_generation():
    assert _generate_heading_id("Hello <em>World</em>!") == "hello-world"
    assert _generate_heading_id("  spaced -- out  ") == "spaced-out"


def test_code_blocks():
    html, _ = render_markdown("```python\nprint('hi')\n```\n")
    assert 'class="highlight"' in html
    html, _ = render_markdown("```nosuchlang\na < b\n```\n")
    assert '<pre><code class="language-nosuchlang">a &lt; b' in html
    html, _ = render_markdown("```\nplain\n```\n")
    assert "<pre><code>plain" in html


def test_markdown_plugins():
    html, _ = render_markdown("~~gone~~ and https://example.com\n\n| a |\n|---|\n| 1 |\n")
    assert "<del>gone</del>" in html
    assert '<a href="https://example.com">' in html
    assert "<table>" in html


def test_html_renderer():
    """Test HTMLRenderer passes through HTML."""
    renderer = HTMLRenderer()
    assert renderer.can_render(Path("test.html"))
    assert renderer.can_render(Path("test.htm"))
    assert not renderer.can_render(Path("test.md"))
    assert renderer.source_type == "html"
    html, headings = renderer.render("<p>{{ site.title }}</p>")
    assert html == "<p>{{ site.title }}</p>"
    assert headings == []


def test_renderer_registry():
    """Test RendererRegistry finds appropriate renderers."""
    registry = RendererRegistry()
    assert registry.get_renderer(Path("test.md")).source_type == "markdown"
    assert registry.get_renderer(Path("test.html")).source_type == "html"
    assert registry.get_renderer(Path("test.css")) is None


def test_renderer_registry_accepts_new_renderers():
    class TextRenderer:
        source_type = "text"

        def can_render(self, path):
            return path.suffix == ".txt"

        def render(self, content):
            return f"<pre>{content}</pre>", []

    registry = RendererRegistry()
    registry.register(TextRenderer())
    assert registry.get_renderer(Path("notes.txt")).render("x") == ("<pre>x</pre>", [])


# --- Protocol Tests ---


def test_renderers_satisfy_protocol():
    assert isinstance(MarkdownRenderer(), ContentRenderer)
    assert isinstance(HTMLRenderer(), ContentRenderer)


def test_extractors_satisfy_protocol():
    for extractor in (
        TitleExtractor(),
        DateExtractor(),
        CategoryExtractor(),
        TagExtractor(),
        ExcerptExtractor("\n\n"),
    ):
        assert isinstance(extractor, MetadataExtractor)


def test_loader_satisfies_protocol(tmp_path):
    assert isinstance(FileContentLoader(tmp_path, {}), ContentLoader)
    assert not isinstance(object(), ContentLoader)
