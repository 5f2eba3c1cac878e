"""
Tests for task body parsing, serialization and markdown rendering.
"""

import json

import pytest

from hod.core.index import IndexEntry
from hod.core.tasks import (
    ParseError,
    TaskBody,
    TaskView,
    is_json_content,
    parse_content,
    parse_json,
    parse_markdown,
    render_markdown,
    serialize_json,
    title_case_key,
)


class TestParseJson:
    """Test parse_json()."""

    def test_basic(self) -> None:
        body = parse_json(
            '{"title": " Write docs ", "description": "Cover the CLI", "Priority": "high"}'
        )

        assert body.title == "Write docs"
        assert body.description == "Cover the CLI"
        assert body.custom == {"priority": "high"}

    def test_status_and_dependencies_ignored(self) -> None:
        body = parse_json('{"title": "T", "status": "done", "dependencies": ["1"]}')
        assert body.custom == {}

    def test_null_values_skipped(self) -> None:
        body = parse_json('{"title": "T", "priority": null}')
        assert body.custom == {}

    @pytest.mark.parametrize(
        "text,match",
        [
            ("", "Empty input"),
            ("   ", "Empty input"),
            ("{", "Invalid JSON"),
            ("[1]", "must be an object"),
            ('{"description": "x"}', "title"),
            ('{"title": 5}', "title"),
            ('{"title": "T", "description": 1}', "description"),
            ('{"title": "T", "priority": 3}', "got number"),
            ('{"title": "T", "tags": ["a"]}', "got array"),
            ('{"title": "T", "flag": true}', "got boolean"),
        ],
    )
    def test_errors(self, text, match) -> None:
        with pytest.raises(ParseError, match=match):
            parse_json(text)


class TestParseMarkdown:
    """Test parse_markdown() for legacy files."""

    def test_sections(self) -> None:
        text = (
            "# Title\nWrite docs\n\n"
            "# Description\nLine one\nLine two\n\n"
            "# Status\npending\n\n"
            "# Dependencies\n1, 2\n\n"
            "# Priority\nhigh\n"
        )

        body = parse_markdown(text)

        assert body.title == "Write docs"
        assert body.description == "Line one\nLine two"
        assert body.custom == {"priority": "high"}

    def test_first_heading_wins(self) -> None:
        body = parse_markdown("# Title\nFirst\n\n# Title\nSecond\n")
        assert body.title == "First"

    def test_text_before_first_heading_ignored(self) -> None:
        body = parse_markdown("preamble\n# Title\nT\n")
        assert body.title == "T"

    def test_missing_title(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_markdown("# Description\nNo title here\n")
        assert exc_info.value.section == "Title"

    def test_empty_title_section(self) -> None:
        with pytest.raises(ParseError):
            parse_markdown("# Title\n\n# Description\nx\n")

    def test_empty_input(self) -> None:
        with pytest.raises(ParseError, match="Empty input"):
            parse_markdown("\n\n")


class TestParseContent:
    """Test format detection."""

    def test_detects_json(self) -> None:
        assert is_json_content('  {"title": "T"}')
        assert parse_content('{"title": "T"}').title == "T"

    def test_detects_markdown(self) -> None:
        assert not is_json_content("# Title\nT\n")
        assert parse_content("# Title\nT\n").title == "T"

    def test_broken_json_falls_back_to_markdown(self) -> None:
        assert not is_json_content('{"title": ')
        with pytest.raises(ParseError, match="Title"):
            parse_content('{"title": ')


class TestSerializeJson:
    """Test serialize_json()."""

    def test_format(self) -> None:
        body = TaskBody(title="Write docs", description="Cover it", custom={"priority": "high"})

        text = serialize_json(body)

        assert text.endswith("}\n")
        assert json.loads(text) == {
            "title": "Write docs",
            "description": "Cover it",
            "priority": "high",
        }
        assert '\n  "title"' in text

    def test_drops_empty_fields(self) -> None:
        body = TaskBody(title="T", description="  ", custom={"priority": ""})
        assert json.loads(serialize_json(body)) == {"title": "T"}

    def test_keeps_unicode(self) -> None:
        assert "Café" in serialize_json(TaskBody(title="Café"))

    def test_empty_title(self) -> None:
        with pytest.raises(ParseError):
            serialize_json(TaskBody(title="  "))

    def test_parse_preserves_fields(self) -> None:
        body = TaskBody(title="T", description="D", custom={"test-strategy": "Run it"})
        assert parse_json(serialize_json(body)) == body


class TestTaskBody:
    """Test TaskBody helpers."""

    def test_with_field(self) -> None:
        body = TaskBody(title="T")

        updated = body.with_field("priority", "high").with_field("description", "D")

        assert updated.get("priority") == "high"
        assert updated.get("description") == "D"
        assert body.custom == {}

    def test_remove_field(self) -> None:
        body = TaskBody(title="T", custom={"priority": "high"})
        assert body.with_field("priority", None).get("priority") is None

    def test_fields_order(self) -> None:
        body = TaskBody(title="T", description="D", custom={"priority": "high"})
        assert list(body.fields()) == ["title", "description", "priority"]


class TestTaskView:
    """Test TaskView joining."""

    def test_indexed(self) -> None:
        view = TaskView("2", TaskBody(title="T"), IndexEntry(status="done", dependencies=["1"]))

        assert view.status == "done"
        assert view.to_dict() == {
            "id": "2",
            "title": "T",
            "status": "done",
            "dependencies": ["1"],
        }

    def test_not_indexed(self) -> None:
        view = TaskView("2", TaskBody(title="T"))

        assert view.status == "pending"
        assert view.dependencies == []
        assert view.to_dict() == {"id": "2", "title": "T"}


class TestRenderMarkdown:
    """Test render_markdown()."""

    def test_section_order(self) -> None:
        body = TaskBody(
            title="Write docs",
            description="Cover the CLI",
            custom={"test-strategy": "Read it", "priority": "high"},
        )
        entry = IndexEntry(status="pending", dependencies=["1", "3"])

        text = render_markdown("2", body, entry)

        assert text == (
            "# Title\nWrite docs\n\n"
            "# Description\nCover the CLI\n\n"
            "# Dependencies\n1, 3\n\n"
            "# Priority\nhigh\n\n"
            "# Test-Strategy\nRead it\n"
        )

    def test_without_entry(self) -> None:
        assert render_markdown("1", TaskBody(title="T")) == "# Title\nT\n"

    def test_empty_title(self) -> None:
        with pytest.raises(ParseError, match="task 4"):
            render_markdown("4", TaskBody(title=""))

    @pytest.mark.parametrize(
        "key,expected",
        [("priority", "Priority"), ("test-strategy", "Test-Strategy"), ("API-key", "Api-Key")],
    )
    def test_title_case_key(self, key, expected) -> None:
        assert title_case_key(key) == expected
