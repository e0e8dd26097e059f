"""Tests for markdown rendering and code highlighting."""

from blogsmith.models import SourceFile
from blogsmith.plugins.markdown import MarkdownPlugin, create_renderer


class TestRenderer:
    def test_basic_markdown(self):
        md = create_renderer([])
        assert md.convert("# Hello\n\nWorld") == "<h1>Hello</h1>\n<p>World</p>"

    def test_untagged_fence_highlighted_as_javascript(self):
        md = create_renderer([])
        html = md.convert("```\nfunction tick() {}\n```")
        assert 'class="highlight"' in html
        assert '<span class="k' in html
        assert "function" in html

    def test_tagged_fence_keeps_its_language(self):
        md = create_renderer([])
        html = md.convert("```python\ndef tick():\n    pass\n```")
        assert '<span class="k">def</span>' in html

    def test_unknown_language_falls_back_to_text(self):
        md = create_renderer([])
        html = md.convert("```nosuchlang\nx = 1\n```")
        assert "x = 1" in html

    def test_without_highlighting(self):
        md = create_renderer([], highlight=False)
        html = md.convert("```\nvar x;\n```")
        assert '<code class="language-javascript">' in html

    def test_without_default_language(self):
        md = create_renderer([], highlight=False, default_language=None)
        html = md.convert("```\nvar x;\n```")
        assert "<pre><code>var x;\n</code></pre>" in html

    def test_fence_inside_fence_content_untouched(self):
        md = create_renderer([], highlight=False)
        html = md.convert("````\n```\ninner\n```\n````")
        assert "```" in html

    def test_tables_extension(self):
        md = create_renderer(["tables"])
        html = md.convert("| a | b |\n| --- | --- |\n| 1 | 2 |")
        assert "<table>" in html


class TestMarkdownPlugin:
    def test_renames_and_renders(self, builder):
        post = SourceFile(raw=b"Hello *world*", metadata={"title": "Hi"})
        files = {"posts/hello.md": post}
        MarkdownPlugin()(files, builder)
        assert list(files) == ["posts/hello.html"]
        assert files["posts/hello.html"] is post
        assert post.contents == "<p>Hello <em>world</em></p>"
        assert post["title"] == "Hi"

    def test_markdown_suffix(self, builder):
        files = {"notes.markdown": SourceFile(raw=b"text")}
        MarkdownPlugin()(files, builder)
        assert list(files) == ["notes.html"]

    def test_other_files_untouched(self, builder):
        css = SourceFile(raw=b"body { margin: 0 }")
        files = {"css/style.css": css}
        MarkdownPlugin()(files, builder)
        assert files == {"css/style.css": css}

    def test_renderer_reset_between_files(self, builder):
        files = {
            "a.md": SourceFile(raw=b"Note[^1]\n\n[^1]: first"),
            "b.md": SourceFile(raw=b"Plain"),
        }
        MarkdownPlugin(["footnotes"])(files, builder)
        assert "footnote" not in files["b.html"].contents
