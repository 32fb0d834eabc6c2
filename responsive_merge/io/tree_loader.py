"""
Utilities for loading variant trees and writing merge artifacts.
"""

import json
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag

from responsive_merge.exceptions import MergeInputError
from responsive_merge.models import CustomRule, Element, MergeResult, Variant
from responsive_merge.orchestration.utils import validate_inputs

IDENTITY_ATTRIBUTE = "data-name"
TREE_SUFFIXES = (".json", ".html", ".htm")

# Characters that must be escaped in a CSS class selector
CSS_ESCAPE = re.compile(r"([:\[\]\.\/#%()!,])")


def tag_to_element(tag: Tag) -> Element:
    """
    Convert a parsed HTML tag (and its descendants) to an Element.

    Args:
        tag: BeautifulSoup tag

    Returns:
        Element with identity from data-name and tokens from class
    """
    attributes: Dict[str, str] = {}
    for name, value in tag.attrs.items():
        if name in ("class", IDENTITY_ATTRIBUTE):
            continue
        attributes[name] = " ".join(value) if isinstance(value, list) else str(value)

    text_parts = [str(child).strip() for child in tag.children if isinstance(child, NavigableString)]
    text = " ".join(part for part in text_parts if part) or None

    return Element(
        tag=tag.name,
        tokens=tag.get("class") or [],
        identity=tag.get(IDENTITY_ATTRIBUTE) or None,
        attributes=attributes,
        text=text,
        children=[tag_to_element(child) for child in tag.children if isinstance(child, Tag)],
    )


def element_to_tag(soup: BeautifulSoup, element: Element) -> Tag:
    """Build a BeautifulSoup tag from an Element (inverse of tag_to_element)."""
    attrs = {}
    if element.tokens:
        attrs["class"] = element.class_name
    if element.identity:
        attrs[IDENTITY_ATTRIBUTE] = element.identity
    attrs.update(element.attributes)

    tag = soup.new_tag(element.tag, attrs=attrs)
    if element.text:
        tag.append(element.text)
    for child in element.children:
        tag.append(element_to_tag(soup, child))
    return tag


def element_to_html(element: Element, pretty: bool = True) -> str:
    """
    Serialize an element tree to HTML.

    Args:
        element: Root element
        pretty: Whether to indent the output

    Returns:
        HTML fragment string
    """
    soup = BeautifulSoup("", "html.parser")
    soup.append(element_to_tag(soup, element))
    return soup.prettify() if pretty else str(soup)


def escape_class_selector(token: str) -> str:
    return CSS_ESCAPE.sub(r"\\\1", token)


def render_custom_css(rules: List[CustomRule]) -> str:
    """
    Render synthesized rules as CSS, grouped by media query.

    Args:
        rules: Custom rules collected during a run

    Returns:
        CSS text; rules without declarations are emitted as comments
    """
    groups: Dict[Optional[str], List[CustomRule]] = {}
    for rule in rules:
        groups.setdefault(rule.media_query, []).append(rule)

    blocks = []
    for media_query, group in groups.items():
        lines = []
        indent = "  " if media_query else ""
        for rule in group:
            selector = f".{escape_class_selector(rule.token)}"
            if not rule.declarations:
                lines.append(f"{indent}/* {rule.token}: no declarations ({rule.source}) */")
                continue
            body = " ".join(f"{prop}: {value};" for prop, value in rule.declarations.items())
            lines.append(f"{indent}{selector} {{ {body} }}")

        if media_query:
            blocks.append(f"@media {media_query} {{\n" + "\n".join(lines) + "\n}")
        else:
            blocks.append("\n".join(lines))

    return "\n\n".join(blocks) + ("\n" if blocks else "")


class TreeLoader:
    """Loads variant element trees from JSON or HTML files."""

    def load_tree(self, path: Union[str, Path]) -> Element:
        """
        Load one element tree from disk.

        Args:
            path: Path to a .json file (serialized Element) or an .html file

        Returns:
            Root Element
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Tree file not found: {path}")

        suffix = path.suffix.lower()
        content = path.read_text(encoding="utf-8")

        if suffix == ".json":
            data = json.loads(content)
            if isinstance(data, dict) and "root" in data:
                data = data["root"]
            return Element.model_validate(data)
        elif suffix in (".html", ".htm"):
            return self.parse_html(content, source=str(path))
        else:
            raise ValueError(f"Unsupported tree format: {path.suffix}")

    def parse_html(self, html_content: str, source: str = "<string>") -> Element:
        """
        Parse an HTML document or fragment into an Element tree.

        The root is the first element inside <body>, or the first top-level
        element when there is no body.
        """
        soup = BeautifulSoup(html_content, "html.parser")
        container = soup.find("body") or soup
        root = container.find(True, recursive=False)
        if root is None:
            raise ValueError(f"No element found in HTML: {source}")
        return tag_to_element(root)

    def find_variant_files(self, directory: Union[str, Path]) -> Dict[Variant, Path]:
        """
        Locate wide/medium/narrow tree files in a sample directory.

        Args:
            directory: Directory containing files named after each variant

        Returns:
            Mapping of variant to file path
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Sample directory not found: {directory}")

        found: Dict[Variant, Path] = {}
        for variant in Variant:
            for suffix in TREE_SUFFIXES:
                candidate = directory / f"{variant.value}{suffix}"
                if candidate.exists():
                    found[variant] = candidate
                    break
            else:
                raise FileNotFoundError(f"No {variant.value} tree in {directory}")
        return found

    def load_variants(
        self,
        wide_path: Union[str, Path],
        medium_path: Union[str, Path],
        narrow_path: Union[str, Path],
    ) -> Tuple[Element, Element, Element]:
        """
        Load the three variant trees.

        Returns:
            Tuple of (wide, medium, narrow) roots
        """
        return (
            self.load_tree(wide_path),
            self.load_tree(medium_path),
            self.load_tree(narrow_path),
        )

    def validate_variants(self, wide: Element, medium: Element, narrow: Element) -> Tuple[bool, Optional[str]]:
        """
        Validate that the three trees can be merged.

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            validate_inputs(wide, medium, narrow)
            return True, None
        except MergeInputError as e:
            return False, str(e)


class ArtifactManager:
    """Manages writing merge artifacts."""

    def __init__(self, output_dir: Union[str, Path] = "outputs"):
        """
        Initialize artifact manager.

        Args:
            output_dir: Root directory for merge outputs.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def create_sample_directory(self, sample_id: str) -> Path:
        """
        Create output directory for a sample.

        Args:
            sample_id: Sample identifier.

        Returns:
            Path to sample directory.
        """
        sample_dir = self.output_dir / sample_id
        sample_dir.mkdir(parents=True, exist_ok=True)
        (sample_dir / "logs").mkdir(exist_ok=True)
        return sample_dir

    def save_merged_tree(self, sample_id: str, result: MergeResult) -> Dict[str, Path]:
        """
        Save the merged tree as JSON and HTML.

        Returns:
            Mapping of format name to written path
        """
        sample_dir = self.create_sample_directory(sample_id)

        json_path = sample_dir / "merged.json"
        json_path.write_text(result.merged_tree.model_dump_json(indent=2), encoding="utf-8")

        html_path = sample_dir / "merged.html"
        html_path.write_text(element_to_html(result.merged_tree), encoding="utf-8")

        return {"json": json_path, "html": html_path}

    def save_report(self, sample_id: str, result: MergeResult, filename: str = "report.json") -> Path:
        """Save statistics, conflicts, unmatched elements and rules as JSON."""
        sample_dir = self.create_sample_directory(sample_id)
        report = result.model_dump(mode="json", exclude={"merged_tree"})
        report_path = sample_dir / filename
        report_path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
        return report_path

    def save_custom_css(self, sample_id: str, rules: List[CustomRule], filename: str = "custom.css") -> Path:
        """Save synthesized rules as a stylesheet."""
        sample_dir = self.create_sample_directory(sample_id)
        css_path = sample_dir / filename
        css_path.write_text(render_custom_css(rules), encoding="utf-8")
        return css_path

    def save_result(self, sample_id: str, result: MergeResult) -> Dict[str, Path]:
        """Save every artifact of a merge run."""
        paths = self.save_merged_tree(sample_id, result)
        paths["report"] = self.save_report(sample_id, result)
        paths["css"] = self.save_custom_css(sample_id, result.custom_rules)
        return paths
