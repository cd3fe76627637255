from folio.renderers import MarkdownRenderer


def test_heading_renders_exactly():
    assert MarkdownRenderer().render("# Hi").html == "<h1>Hi</h1>\n"


def test_common_markdown_features():
    html = MarkdownRenderer().to_html(
        "Some *emphasis* and **bold** and ~~gone~~.\n\n"
        "| a | b |\n|---|---|\n| 1 | 2 |\n\n"
        "- one\n- two\n"
    )
    assert "<em>emphasis</em>" in html
    assert "<strong>bold</strong>" in html
    assert "<del>gone</del>" in html
    assert "<table>" in html
    assert "<li>one</li>" in html


def test_fenced_code_is_verbatim():
    html = MarkdownRenderer().to_html("```python\nif a < b:\n    pass\n```\n")
    assert '<pre><code class="language-python">' in html
    assert "if a &lt; b:\n    pass\n" in html


def test_unterminated_fence_runs_to_end_without_error():
    html = MarkdownRenderer().to_html("```\ncode\n\n# not a heading\n")
    assert "<pre><code>" in html
    assert "<h1>" not in html
    assert "# not a heading" in html


def test_raw_html_escaped_by_default():
    html = MarkdownRenderer().to_html('<div class="x">hi</div>\n\ntext <b>bold</b>')
    assert "<div" not in html
    assert "&lt;div" in html
    assert "<b>" not in html


def test_raw_html_passes_through_when_allowed():
    html = MarkdownRenderer(allow_raw_html=True).to_html('<div class="x">hi</div>\n')
    assert '<div class="x">hi</div>' in html


def test_excerpt_is_plain_text_and_truncated():
    renderer = MarkdownRenderer(excerpt_length=20)
    rendered = renderer.render("# Title\n\nThe quick brown fox jumps over the lazy dog.")
    assert "<" not in rendered.excerpt
    assert rendered.excerpt.endswith("…")
    assert len(rendered.excerpt) <= 21
    assert rendered.excerpt.startswith("Title The quick")


def test_short_excerpt_is_not_truncated():
    rendered = MarkdownRenderer().render("Just *one* line.")
    assert rendered.excerpt == "Just one line."


def test_rendering_is_deterministic():
    body = "# Hi\n\nSome [link](https://example.com) and `code`.\n"
    renderer = MarkdownRenderer()
    assert renderer.render(body) == renderer.render(body)
    assert renderer.render(body) == MarkdownRenderer().render(body)
