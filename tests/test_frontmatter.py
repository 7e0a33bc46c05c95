"""Tests for markdown frontmatter parsing."""

import pytest

from agentx.frontmatter import FrontmatterError, parse_allowed_tools, parse_document


class TestParseDocument:
    def test_metadata_and_body(self) -> None:
        doc = parse_document("---\nname: pdf\ndescription: PDFs\n---\n# Title\nBody")

        assert doc.has_frontmatter
        assert doc.get_str("name") == "pdf"
        assert doc.body == "# Title\nBody"

    def test_no_frontmatter(self) -> None:
        doc = parse_document("# Title\n---\nnot metadata")

        assert not doc.has_frontmatter
        assert doc.get_str("name") == ""
        assert doc.body.startswith("# Title")

    def test_empty_block(self) -> None:
        doc = parse_document("---\n---\nBody")

        assert doc.metadata == {}
        assert doc.body == "Body"

    def test_unterminated_block_is_all_metadata(self) -> None:
        doc = parse_document("---\nname: pdf\n")

        assert doc.get_str("name") == "pdf"
        assert doc.body == ""

    def test_null_and_numeric_values(self) -> None:
        doc = parse_document("---\nname: ~\nversion: 2\n---\n")

        assert doc.get_str("name") == ""
        assert doc.get_str("version") == "2"

    def test_invalid_yaml(self) -> None:
        with pytest.raises(FrontmatterError, match="invalid frontmatter YAML"):
            parse_document("---\nname: [\n---\n")

    def test_scalar_block(self) -> None:
        with pytest.raises(FrontmatterError, match="mapping"):
            parse_document("---\njust a string\n---\n")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, []),
        ("Read, Write", ["Read", "Write"]),
        (" , Bash ,", ["Bash"]),
        (["Read", " Grep "], ["Read", "Grep"]),
        (42, ["42"]),
    ],
)
def test_parse_allowed_tools(value: object, expected: list[str]) -> None:
    assert parse_allowed_tools(value) == expected
