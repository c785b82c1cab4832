import pytest

from extractdesk.ai.exceptions import AiResponseError
from extractdesk.ai.json_parsing import parse_json_object, strip_code_fences


class TestStripCodeFences:
    def test_plain_text_unchanged(self) -> None:
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'

    def test_json_fence_removed(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence_removed(self) -> None:
        assert strip_code_fences('```\n{"a": 1}\n```\n') == '{"a": 1}'


class TestParseJsonObject:
    def test_parses_object(self) -> None:
        assert parse_json_object('{"案号": "(2023)1号"}') == {"案号": "(2023)1号"}

    def test_parses_fenced_object(self) -> None:
        assert parse_json_object('```json\n{"found": false}\n```') == {"found": False}

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(AiResponseError, match="Invalid JSON response"):
            parse_json_object("Sorry, I cannot help")

    def test_non_object_raises(self) -> None:
        with pytest.raises(AiResponseError, match="must be an object"):
            parse_json_object('["a"]')
