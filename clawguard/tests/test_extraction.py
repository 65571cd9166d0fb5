"""Tests for the extraction module."""

from ..extraction import (
    ActionRequest,
    ActionableItem,
    ContentKind,
    extract_command,
    extract_items,
    extract_urls,
)


class TestActionRequest:
    """Tests for ActionRequest construction."""

    def test_from_tool_call(self):
        action = ActionRequest.from_tool_call({"tool": "exec", "parameters": {"command": "ls"}})
        assert action.tool == "exec"
        assert action.parameters == {"command": "ls"}

    def test_from_tool_call_missing_parameters(self):
        action = ActionRequest.from_tool_call({"tool": "exec"})
        assert action.parameters == {}

    def test_from_tool_call_non_dict_parameters(self):
        action = ActionRequest.from_tool_call({"tool": "exec", "parameters": "ls"})
        assert action.parameters == {}


class TestExtractCommand:
    """Tests for command extraction."""

    def test_exec_command(self):
        items = extract_command(ActionRequest("exec", {"command": "rm -rf /tmp/x"}))
        assert items == [ActionableItem(ContentKind.COMMAND, "rm -rf /tmp/x")]

    def test_execute_alias(self):
        items = extract_command(ActionRequest("execute", {"command": "ls"}))
        assert len(items) == 1

    def test_empty_command(self):
        assert extract_command(ActionRequest("exec", {"command": ""})) == []

    def test_missing_command(self):
        assert extract_command(ActionRequest("exec", {})) == []

    def test_non_string_command(self):
        assert extract_command(ActionRequest("exec", {"command": ["ls"]})) == []

    def test_other_tool(self):
        assert extract_command(ActionRequest("web_fetch", {"command": "ls"})) == []


class TestExtractUrls:
    """Tests for URL extraction."""

    def test_web_fetch(self):
        items = extract_urls(ActionRequest("web_fetch", {"url": "https://example.com"}))
        assert items == [ActionableItem(ContentKind.URL, "https://example.com")]

    def test_web_fetch_missing_url(self):
        assert extract_urls(ActionRequest("web_fetch", {})) == []

    def test_browser_target_url(self):
        items = extract_urls(ActionRequest("browser", {"action": "open", "targetUrl": "https://a.test"}))
        assert [i.value for i in items] == ["https://a.test"]

    def test_browser_collects_every_url_parameter_in_order(self):
        items = extract_urls(ActionRequest("browse", {
            "url": "https://second.test",
            "targetUrl": "https://first.test",
        }))
        assert [i.value for i in items] == ["https://first.test", "https://second.test"]

    def test_browser_keeps_duplicates(self):
        items = extract_urls(ActionRequest("browser", {
            "targetUrl": "https://same.test",
            "url": "https://same.test",
        }))
        assert len(items) == 2

    def test_browser_without_urls(self):
        assert extract_urls(ActionRequest("browser", {"action": "snapshot"})) == []


class TestExtractItems:
    """Tests for combined extraction."""

    def test_unknown_tool_yields_nothing(self):
        assert extract_items(ActionRequest("read_file", {"path": "/etc/passwd"})) == []

    def test_empty_tool_name(self):
        assert extract_items(ActionRequest.from_tool_call({})) == []

    def test_exec_yields_only_command(self):
        items = extract_items(ActionRequest("exec", {"command": "ls", "url": "https://x.test"}))
        assert [i.kind for i in items] == [ContentKind.COMMAND]
