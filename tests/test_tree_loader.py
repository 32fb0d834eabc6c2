"""
Tests for tree loading and artifact writing.
"""

import json

import pytest

from responsive_merge.io.tree_loader import (
    ArtifactManager,
    TreeLoader,
    element_to_html,
    escape_class_selector,
    render_custom_css,
)
from responsive_merge.models import CustomRule, Element, Variant
from responsive_merge.orchestration import run_merge

WIDE_HTML = """<!DOCTYPE html>
<html>
<body>
  <div data-name="Page" class="flex flex-row gap-8" id="root">
    <nav data-name="Nav" class="flex items-center">Menu</nav>
    <section class="grid">
      <p class="text-lg">Hello</p>
    </section>
  </div>
</body>
</html>
"""


@pytest.fixture
def sample_dir(tmp_path):
    """Create a sample directory with the three variants."""
    (tmp_path / "wide.html").write_text(WIDE_HTML, encoding="utf-8")
    (tmp_path / "medium.html").write_text(
        WIDE_HTML.replace("gap-8", "gap-4"), encoding="utf-8"
    )
    narrow = Element(tag="div", identity="Page", tokens="flex flex-col gap-2", children=[
        Element(tag="nav", identity="Nav", tokens="flex items-center", text="Menu"),
        Element(tag="section", tokens="grid", children=[Element(tag="p", tokens="text-lg", text="Hello")]),
    ])
    (tmp_path / "narrow.json").write_text(narrow.model_dump_json(), encoding="utf-8")
    return tmp_path


def test_parse_html(sample_dir):
    loader = TreeLoader()

    root = loader.load_tree(sample_dir / "wide.html")

    assert root.tag == "div"
    assert root.identity == "Page"
    assert root.tokens == ["flex", "flex-row", "gap-8"]
    assert root.attributes == {"id": "root"}
    assert [child.tag for child in root.children] == ["nav", "section"]
    assert root.children[0].text == "Menu"
    assert root.children[1].identity is None


def test_parse_html_fragment_without_body():
    root = TreeLoader().parse_html('<ul class="flex"><li>One</li><li>Two</li></ul>')
    assert root.tag == "ul"
    assert [child.text for child in root.children] == ["One", "Two"]


def test_parse_html_without_elements():
    with pytest.raises(ValueError):
        TreeLoader().parse_html("just text")


def test_load_json(sample_dir):
    root = TreeLoader().load_tree(sample_dir / "narrow.json")
    assert root.tokens == ["flex", "flex-col", "gap-2"]
    assert root.children[1].children[0].text == "Hello"


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        TreeLoader().load_tree(tmp_path / "missing.json")


def test_unsupported_format(tmp_path):
    path = tmp_path / "wide.txt"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(ValueError):
        TreeLoader().load_tree(path)


def test_find_variant_files(sample_dir):
    files = TreeLoader().find_variant_files(sample_dir)
    assert files[Variant.WIDE].name == "wide.html"
    assert files[Variant.NARROW].name == "narrow.json"


def test_find_variant_files_missing_variant(tmp_path):
    (tmp_path / "wide.json").write_text("{}", encoding="utf-8")
    with pytest.raises(FileNotFoundError):
        TreeLoader().find_variant_files(tmp_path)


def test_validate_variants():
    loader = TreeLoader()
    good = Element(tag="div")
    is_valid, error = loader.validate_variants(good, good, Element(tag=" "))
    assert not is_valid
    assert "narrow" in error
    assert loader.validate_variants(good, good, good) == (True, None)


def test_element_to_html_round_trip():
    element = Element(tag="div", identity="Card", tokens="flex max-md:flex-col", children=[
        Element(tag="span", text="Title"),
    ])
    html = element_to_html(element, pretty=False)
    assert html == '<div class="flex max-md:flex-col" data-name="Card"><span>Title</span></div>'
    assert TreeLoader().parse_html(html) == element


def test_render_custom_css():
    rules = [
        CustomRule(token="max-md:overflow-x-auto", media_query="(max-width: 768px)",
                   declarations={"overflow-x": "auto"}, source="add-horizontal-scroll"),
        CustomRule(token="max-lg:w-auto", media_query="(max-width: 1024px)",
                   declarations={"width": "auto"}, source="merge-desktop-first"),
        CustomRule(token="max-md:text-lg", media_query="(max-width: 768px)", source="merge-desktop-first"),
    ]

    css = render_custom_css(rules)

    assert css.startswith("@media (max-width: 768px) {")
    assert ".max-md\\:overflow-x-auto { overflow-x: auto; }" in css
    assert ".max-lg\\:w-auto { width: auto; }" in css
    assert "/* max-md:text-lg: no declarations" in css
    assert css.count("@media") == 2


def test_escape_class_selector():
    assert escape_class_selector("max-md:w-[280px]") == "max-md\\:w-\\[280px\\]"
    assert escape_class_selector("w-1/2") == "w-1\\/2"


def test_artifact_manager_saves_result(sample_dir, tmp_path):
    loader = TreeLoader()
    files = loader.find_variant_files(sample_dir)
    wide, medium, narrow = loader.load_variants(files[Variant.WIDE], files[Variant.MEDIUM], files[Variant.NARROW])
    result = run_merge(wide, medium, narrow, sample_id="sample")

    manager = ArtifactManager(tmp_path / "outputs")
    paths = manager.save_result("sample", result)

    assert paths["html"].exists()
    merged = Element.model_validate_json(paths["json"].read_text(encoding="utf-8"))
    assert merged.tokens == ["flex", "flex-row", "gap-8", "max-lg:gap-4", "max-md:flex-col", "max-md:gap-2"]

    report = json.loads(paths["report"].read_text(encoding="utf-8"))
    assert "merged_tree" not in report
    assert report["stats"]["classes_merged"] == 3
    assert paths["css"].exists()
