from datetime import date, datetime, timedelta, timezone
from pathlib import Path, PurePosixPath

from inkwell import utils


def test_slugify_and_titleize():
    assert utils.slugify("2024-01-01-Hello World") == "hello-world"
    assert utils.slugify("关于") == "关于"
    assert utils.slugify("---") == "index"
    assert utils.titleize("2024-01-15-hello-world.md") == "Hello World"
    assert utils.titleize("my_notes.mdx") == "My Notes"
    assert utils.titleize("") == "Untitled"


def test_extract_date_from_name():
    assert utils.extract_date_from_name("2024-02-03-post") == datetime(2024, 2, 3)
    assert utils.extract_date_from_name("2024-13-40-post") is None
    assert utils.extract_date_from_name("post") is None


def test_coerce_datetime():
    assert utils.coerce_datetime(date(2024, 1, 2)) == datetime(2024, 1, 2)
    stamp = datetime(2024, 1, 2, 3, 4)
    assert utils.coerce_datetime(stamp) is stamp
    assert utils.coerce_datetime("soon") == "soon"


def test_coerce_datetime_converts_aware_values_to_naive_utc():
    aware = datetime(2024, 1, 2, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert utils.coerce_datetime(aware) == datetime(2024, 1, 2, 10, 0)
    assert utils.coerce_datetime(aware).tzinfo is None


def test_first_paragraph():
    text = "# Title\n\nimport X from 'x'\n\nThe <em>first</em>\nparagraph.\n\nSecond."
    assert utils.first_paragraph(text) == "The first paragraph."
    assert utils.first_paragraph("word " * 100, limit=10) == "word word "
    assert utils.first_paragraph("") == ""


def test_path_helpers():
    assert utils.is_hidden_path(PurePosixPath(".git/x.md"))
    assert not utils.is_hidden_path(PurePosixPath("posts/x.md"))
    assert utils.has_extension(Path("a.MD"), (".md",))
    assert not utils.has_extension(Path("a.txt"), (".md",))
    assert utils.is_mdx("posts/chart.MDX")
    assert not utils.is_mdx("posts/chart.md")


def test_normalize_tags():
    assert utils.normalize_tags("a, b ,a") == ["a", "b"]
    assert utils.normalize_tags(["x", 2]) == ["x", "2"]
    assert utils.normalize_tags(None) == []


def test_number_prefix_helpers():
    assert utils.extract_number_from_name("01-intro") == 1
    assert utils.extract_number_from_name("2024-01-01-3-part") == 3
    assert utils.extract_number_from_name("intro") is None
    assert utils.strip_number_prefix("2024-01-01-3-part") == "part"
    assert utils.strip_number_prefix("02-setup") == "setup"


def test_join_root_url():
    assert utils.join_root_url("https://example.com/", "/about") == "https://example.com/about"
    assert utils.join_root_url("", "/about") == "/about"


def test_ensure_clean_dir(tmp_path):
    target = tmp_path / "out"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "file.txt").write_text("x", encoding="utf-8")
    utils.ensure_clean_dir(target)
    assert target.exists()
    assert list(target.iterdir()) == []
