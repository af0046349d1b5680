from pathlib import Path

import pytest

from inkwell.binder import Page
from inkwell.build import _format_error_message, build_site
from inkwell.config import SiteConfig
from inkwell.errors import DuplicateRouteError, RenderError
from inkwell.parser import DocumentParser, Node
from inkwell.protocols import PageRenderer
from inkwell.render import SiteRenderer, _generate_heading_id, build_head, render_html, to_tokens


def create_project(tmp_path: Path) -> Path:
    (tmp_path / "blog" / "posts").mkdir(parents=True)
    (tmp_path / "inkwell.yaml").write_text(
        """site_metadata:
  title: Ethan Yang
  site_url: https://example.com
plugins:
  - mdx
  - resolve: source-filesystem
    options:
      name: blog
      path: blog
""",
        encoding="utf-8",
    )
    (tmp_path / "blog" / "index.md").write_text(
        "---\ntitle: Home\ndate: 2024-01-01\n---\nWelcome!", encoding="utf-8"
    )
    (tmp_path / "blog" / "about.md").write_text(
        "---\ntitle: About Me\ndate: 2024-01-02\n---\n程序员， 迪士尼爱好者", encoding="utf-8"
    )
    (tmp_path / "blog" / "posts" / "2024-03-01-hello.md").write_text(
        "---\ntitle: Hello\n---\n# Intro\n\n```python\nprint('hi')\n```\n", encoding="utf-8"
    )
    (tmp_path / "blog" / "secret.md").write_text(
        "---\ntitle: Secret\ndate: 2024-01-03\ndraft: true\n---\nNot yet", encoding="utf-8"
    )
    return tmp_path


def make_page(text: str, route: str = "/post", **metadata) -> Page:
    doc = DocumentParser().parse(text)
    return Page(route=route, metadata={**doc.front_matter, **metadata}, content=doc.body)


def test_render_html_headings_and_inline():
    html, toc = render_html(DocumentParser().parse("# Title\n\nHello **world**").body)
    assert '<h1 id="title">Title</h1>' in html
    assert "<p>Hello <strong>world</strong></p>" in html
    assert [(h.id, h.level) for h in toc] == [("title", 1)]


def test_render_html_duplicate_heading_ids():
    _, toc = render_html(DocumentParser().parse("## Notes\n\n## Notes").body)
    assert [h.id for h in toc] == ["notes", "notes-1"]


def test_render_html_highlights_known_languages():
    html, _ = render_html(DocumentParser().parse("```python\nprint(1)\n```").body)
    assert 'class="highlight"' in html

    plain, _ = render_html(DocumentParser().parse("```nosuchlang\nx < y\n```").body)
    assert '<pre><code class="language-nosuchlang">x &lt; y' in plain


def test_render_html_lists_links_and_breaks():
    body = DocumentParser().parse("- [a](/a)\n- b\n\n***\n").body
    html, _ = render_html(body)
    assert '<a href="/a">a</a>' in html
    assert "<ul>" in html
    assert "<hr />" in html


def test_render_html_skips_mdx_esm():
    body = DocumentParser().parse("import X from './x'\n\nText", mdx=True).body
    html, _ = render_html(body)
    assert "import" not in html
    assert "<p>Text</p>" in html


def test_to_tokens_round_trips_structure():
    node = Node("document", children=(Node("thematic_break"), Node("paragraph", children=(Node("text", text="x"),))))
    assert to_tokens(node) == [
        {"type": "thematic_break"},
        {"type": "paragraph", "children": [{"type": "text", "raw": "x"}]},
    ]


def test_generate_heading_id():
    assert _generate_heading_id("Hello World") == "hello-world"
    assert _generate_heading_id("  Spaces  Around  ") == "spaces-around"
    assert _generate_heading_id("Special!@#$%Chars") == "specialchars"


def test_build_head_titles():
    config = SiteConfig(title="Ethan Yang", site_url="https://example.com/")
    head = build_head(make_page("Body", title="About Me", description="Hi"), config)
    assert head.title == "About Me | Ethan Yang"
    assert head.description == "Hi"
    assert head.canonical_url == "https://example.com/post"

    assert build_head(make_page("x"), config).title == "Ethan Yang"
    assert build_head(make_page("x", title="Ethan Yang"), config).title == "Ethan Yang"
    assert build_head(make_page("x", title="Solo"), SiteConfig()).canonical_url == ""


def test_site_renderer_default_layout(tmp_path):
    config = SiteConfig(title="Ethan Yang", layouts_dir=tmp_path / "layouts")
    renderer = SiteRenderer(config)
    html = renderer.render_page(make_page("Body <b>text</b>", title="A & B"))
    assert "<title>A &amp; B | Ethan Yang</title>" in html
    assert "<p>Body <b>text</b></p>" in html
    assert isinstance(renderer, PageRenderer)


def test_site_renderer_custom_layout(tmp_path):
    layouts = tmp_path / "layouts"
    layouts.mkdir()
    (layouts / "post.html.jinja").write_text(
        "<article data-count='{{ pages|length }}'>{{ head.title }}{{ page_content }}</article>",
        encoding="utf-8",
    )
    page = make_page("Hi", title="T", layout="post")
    page = Page(route=page.route, metadata=page.metadata, content=page.content, layout="post")
    renderer = SiteRenderer(SiteConfig(title="S", layouts_dir=layouts), [page])
    assert renderer.render_page(page) == "<article data-count='1'>T | S<p>Hi</p>\n</article>"


def test_build_site_writes_pages_and_sitemap(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project)

    output = project / "public"
    assert result.output_dir == output
    assert sorted(p.route for p in result.pages) == ["/", "/about", "/posts/hello"]

    index = (output / "index.html").read_text(encoding="utf-8")
    assert "<title>Home | Ethan Yang</title>" in index
    about = (output / "about" / "index.html").read_text(encoding="utf-8")
    assert "迪士尼爱好者" in about
    hello = (output / "posts" / "hello" / "index.html").read_text(encoding="utf-8")
    assert 'class="highlight"' in hello
    assert not (output / "secret").exists()

    sitemap = (output / "sitemap.xml").read_text(encoding="utf-8")
    assert "<loc>https://example.com/about</loc>" in sitemap
    assert "<lastmod>2024-03-01</lastmod>" in sitemap


def test_build_site_includes_drafts_on_request(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project, include_drafts=True, output_dir_override=tmp_path / "out")
    assert "/secret" in {p.route for p in result.pages}
    assert (tmp_path / "out" / "secret" / "index.html").exists()


def test_build_site_cleans_output(tmp_path):
    project = create_project(tmp_path)
    stale = project / "public" / "stale.html"
    stale.parent.mkdir()
    stale.write_text("old", encoding="utf-8")
    build_site(project)
    assert not stale.exists()

    keep = project / "public" / "keep.txt"
    keep.write_text("x", encoding="utf-8")
    build_site(project, clean_output=False)
    assert keep.exists()


def test_build_site_without_site_url_skips_sitemap(tmp_path):
    project = create_project(tmp_path)
    config = (project / "inkwell.yaml").read_text(encoding="utf-8")
    (project / "inkwell.yaml").write_text(
        config.replace("  site_url: https://example.com\n", ""), encoding="utf-8"
    )
    build_site(project)
    assert not (project / "public" / "sitemap.xml").exists()


def test_build_site_reports_layout_errors(tmp_path):
    project = create_project(tmp_path)
    (project / "layouts").mkdir()
    (project / "layouts" / "default.html.jinja").write_text("{% if %}", encoding="utf-8")
    with pytest.raises(RenderError) as excinfo:
        build_site(project)
    assert "Template syntax error" in excinfo.value.message


def test_build_site_reports_undefined_errors(tmp_path):
    project = create_project(tmp_path)
    (project / "layouts").mkdir()
    (project / "layouts" / "default.html.jinja").write_text(
        "{{ missing.attr }}", encoding="utf-8"
    )
    with pytest.raises(RenderError) as excinfo:
        build_site(project)
    assert excinfo.value.message.startswith("Undefined variable")


def test_build_site_duplicate_route_aborts_before_writing(tmp_path):
    project = create_project(tmp_path)
    (project / "blog" / "about").mkdir()
    (project / "blog" / "about" / "index.md").write_text("dup", encoding="utf-8")
    with pytest.raises(DuplicateRouteError):
        build_site(project)
    assert not (project / "public").exists()


def test_format_error_message():
    assert _format_error_message(ValueError("bad")) == "ValueError: bad"
