"""Tests for Jinja2 layouts, in-place rendering, partials and helpers."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from blogsmith.errors import BuildError
from blogsmith.models import SourceFile
from blogsmith.plugins.templates import SiteLoader, TemplatesPlugin, create_environment

PARTIALS = {"head": "partials/head", "footer": "partials/footer"}


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "templates"
    (directory / "partials").mkdir(parents=True)
    (directory / "post.html").write_text(
        '{% include "head" %}<article><h1>{{ title }}</h1>{{ contents }}</article>'
        '{% include "footer" %}',
        encoding="utf-8",
    )
    (directory / "partials" / "head.html").write_text(
        "<title>{{ title }} | {{ site.url }}</title>", encoding="utf-8"
    )
    (directory / "partials" / "footer.html").write_text(
        "<footer>{{ datetime(date, 'YYYY') }}</footer>", encoding="utf-8"
    )
    (directory / "broken.html").write_text("{% if %}", encoding="utf-8")
    return directory


def _post(**metadata) -> SourceFile:
    defaults = {"title": "Loop", "date": datetime(2014, 2, 24, tzinfo=UTC), "template": "post.html"}
    defaults.update(metadata)
    return SourceFile(raw=b"<p>Body</p>", metadata=defaults)


class TestSiteLoader:
    def test_locates_with_and_without_extension(self, templates_dir: Path):
        loader = SiteLoader([templates_dir])
        assert loader.locate("post.html") == templates_dir / "post.html"
        assert loader.locate("post") == templates_dir / "post.html"

    def test_partial_alias(self, templates_dir: Path):
        loader = SiteLoader([templates_dir], PARTIALS)
        assert loader.locate("head") == templates_dir / "partials" / "head.html"

    def test_search_path_order(self, tmp_path: Path, templates_dir: Path):
        override = tmp_path / "override"
        override.mkdir()
        (override / "post.html").write_text("override", encoding="utf-8")
        loader = SiteLoader([override, templates_dir])
        assert loader.locate("post") == override / "post.html"

    def test_missing(self, templates_dir: Path):
        assert SiteLoader([templates_dir]).locate("nope") is None


class TestEnvironment:
    def test_datetime_helper_uses_configured_default(self, templates_dir: Path):
        env = create_environment([templates_dir], datetime_format="YYYY-MM-DD")
        rendered = env.from_string("{{ datetime(d) }}|{{ d | datetime('MMMM') }}").render(
            d=datetime(2014, 3, 2, tzinfo=UTC)
        )
        assert rendered == "2014-03-02|March"

    def test_slugify_filter(self, templates_dir: Path):
        env = create_environment([templates_dir])
        assert env.from_string("{{ 'Hello World' | slugify }}").render() == "hello-world"

    def test_extra_helpers(self, templates_dir: Path):
        env = create_environment([templates_dir], helpers={"shout": lambda s: s.upper()})
        assert env.from_string("{{ shout('hi') }}").render() == "HI"


class TestLayouts:
    def test_wraps_contents(self, builder, templates_dir: Path):
        post = _post()
        TemplatesPlugin(templates_dir, partials=PARTIALS)({"loop/index.html": post}, builder)
        assert post.contents == (
            "<title>Loop | http://example.com</title>"
            "<article><h1>Loop</h1><p>Body</p></article>"
            "<footer>2014</footer>"
        )

    def test_template_name_without_extension(self, builder, templates_dir: Path):
        post = _post(template="post")
        TemplatesPlugin(templates_dir, partials=PARTIALS)({"loop/index.html": post}, builder)
        assert "<h1>Loop</h1>" in post.contents

    def test_files_without_template_untouched(self, builder, templates_dir: Path):
        page = SourceFile(raw=b"{{ title }}", metadata={"title": "x"})
        TemplatesPlugin(templates_dir)({"raw.html": page}, builder)
        assert page.contents == "{{ title }}"

    def test_missing_layout_fails(self, builder, templates_dir: Path):
        post = _post(template="missing.html")
        with pytest.raises(BuildError, match="missing.html"):
            TemplatesPlugin(templates_dir)({"loop/index.html": post}, builder)

    def test_layout_syntax_error_fails(self, builder, templates_dir: Path):
        post = _post(template="broken.html")
        with pytest.raises(BuildError, match="syntax error"):
            TemplatesPlugin(templates_dir)({"loop/index.html": post}, builder)

    def test_neighbours_readable_as_attributes(self, builder, templates_dir: Path):
        (templates_dir / "nav.html").write_text(
            "{% if next %}{{ next.title }} at /{{ next.path }}/{% endif %}", encoding="utf-8"
        )
        newer = SourceFile(raw=b"", metadata={"title": "Newer", "path": "2014/03/02/newer"})
        post = _post(template="nav.html", next=newer)
        TemplatesPlugin(templates_dir)({"loop/index.html": post}, builder)
        assert post.contents == "Newer at /2014/03/02/newer/"


class TestInPlace:
    def test_renders_contents_with_global_metadata(self, builder, tmp_path: Path, templates_dir: Path):
        builder.metadata["posts"] = [
            SourceFile(raw=b"<p>B</p>", metadata={"title": "B", "path": "b"}),
            SourceFile(raw=b"<p>A</p>", metadata={"title": "A", "path": "a"}),
        ]
        index = SourceFile(
            raw=b"{% for post in posts %}<a href='/{{ post.path }}/'>{{ post.title }}</a>{% endfor %}"
        )
        plugin = TemplatesPlugin(tmp_path / "src", in_place=True, fallback_directories=[templates_dir])
        plugin({"index.html": index}, builder)
        assert index.contents == "<a href='/b/'>B</a><a href='/a/'>A</a>"

    def test_partials_from_fallback_directory(self, builder, tmp_path: Path, templates_dir: Path):
        page = SourceFile(raw=b'{% include "head" %}', metadata={"title": "About"})
        plugin = TemplatesPlugin(
            tmp_path / "src", in_place=True, partials=PARTIALS, fallback_directories=[templates_dir]
        )
        plugin({"about/index.html": page}, builder)
        assert page.contents == "<title>About | http://example.com</title>"

    def test_pattern_limits_files(self, builder, tmp_path: Path):
        css = SourceFile(raw=b"{{ untouched }}")
        page = SourceFile(raw=b"{{ site.url }}")
        plugin = TemplatesPlugin(tmp_path, in_place=True, pattern="**/*.html")
        plugin({"css/style.css": css, "index.html": page}, builder)
        assert css.contents == "{{ untouched }}"
        assert page.contents == "http://example.com"

    def test_binary_files_skipped(self, builder, tmp_path: Path):
        image = SourceFile(raw=b"\x89PNG\xff")
        TemplatesPlugin(tmp_path, in_place=True)({"logo.png": image}, builder)
        assert image.raw == b"\x89PNG\xff"

    def test_syntax_error_fails(self, builder, tmp_path: Path):
        page = SourceFile(raw=b"{% for %}")
        with pytest.raises(BuildError, match="index.html"):
            TemplatesPlugin(tmp_path, in_place=True)({"index.html": page}, builder)
