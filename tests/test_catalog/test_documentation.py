"""Tests for node documentation synthesis and the upstream README fetch."""

from unittest.mock import MagicMock

import requests

from n8n_mcp.catalog.documentation import (
    AGENT_NODE_TYPE,
    GITHUB_RAW_URL,
    build_codex_documentation,
    build_documentation,
    fetch_remote_documentation,
)


def _response(ok, text=""):
    response = MagicMock()
    response.ok = ok
    response.text = text
    return response


class TestBuildDocumentation:
    """Test documentation priority and markdown synthesis."""

    def test_nothing_to_say_returns_none(self):
        assert build_documentation({}, "nodes-base.noOp") is None
        assert build_documentation({"name": "noOp", "properties": []}, "nodes-base.noOp") is None

    def test_heading_from_description(self):
        doc = build_documentation({"displayName": "Slack", "description": "Consume Slack API"}, "nodes-base.slack")

        assert doc.startswith("# Slack\n\nConsume Slack API")

    def test_heading_falls_back_to_node_type(self):
        doc = build_documentation({"description": "Does things"}, "nodes-base.thing")

        assert doc.startswith("# nodes-base.thing")

    def test_docs_map_wins(self):
        doc = build_documentation(
            {"displayName": "Slack", "description": "Consume Slack API"},
            "nodes-base.slack",
            {"nodes-base.slack": "# From README"},
        )

        assert doc == "# From README"

    def test_empty_docs_map_entry_falls_back_to_synthesis(self):
        doc = build_documentation({"description": "d"}, "nodes-base.x", {"nodes-base.x": ""})

        assert doc.startswith("# nodes-base.x\n\nd")

    def test_empty_docs_map_entry_without_content_is_none(self):
        assert build_documentation({}, "nodes-base.x", {"nodes-base.x": ""}) is None

    def test_docs_map_for_other_node_ignored(self):
        doc = build_documentation({"description": "x"}, "nodes-base.slack", {"nodes-base.gmail": "# Gmail"})

        assert "Gmail" not in doc

    def test_parameters_and_subtitle(self):
        doc = build_documentation(
            {
                "displayName": "Slack",
                "description": "Consume Slack API",
                "subtitle": '={{$parameter["operation"]}}',
                "properties": [
                    {"displayName": "Channel", "description": "Channel to post to"},
                    {"name": "hidden"},
                ],
            },
            "nodes-base.slack",
        )

        assert "## Parameters" in doc
        assert "**Channel**: Channel to post to" in doc
        assert "hidden" not in doc
        assert '## ={{$parameter["operation"]}}' in doc

    def test_hints_list(self):
        doc = build_documentation(
            {"hints": [{"message": "Use a bot token"}, {"type": "info"}]},
            "nodes-base.slack",
        )

        assert "## Hints" in doc
        assert "- Use a bot token" in doc


class TestCodexDocumentation:
    """Test codex metadata rendering."""

    def test_empty_codex(self):
        assert build_codex_documentation(None) is None
        assert build_codex_documentation({}) is None

    def test_full_codex(self):
        doc = build_codex_documentation(
            {
                "categories": ["Communication", "HITL"],
                "subcategories": {"HITL": ["Human in the Loop"]},
                "resources": {"primaryDocumentation": [{"url": "https://docs.n8n.io/slack"}]},
                "alias": ["chat", "message"],
            }
        )

        assert "## Categories\n\nCommunication, HITL" in doc
        assert "- HITL: Human in the Loop" in doc
        assert "- [primaryDocumentation](https://docs.n8n.io/slack)" in doc
        assert "## Also known as\n\nchat, message" in doc

    def test_resource_list(self):
        doc = build_codex_documentation({"resources": [{"label": "Guide", "url": "https://example.com"}]})

        assert doc.strip() == "## Resources\n\n- [Guide](https://example.com)"


class TestFetchRemoteDocumentation:
    """Test the best-effort README fetch."""

    def test_collects_available_readmes(self):
        base = f"{GITHUB_RAW_URL}/n8n@2.0.3"

        def get(url, timeout=None):
            if url == f"{base}/packages/nodes-base/nodes/Slack/README.md":
                return _response(True, "# Slack README")
            if url == f"{base}/packages/nodes-base/nodes/Gmail/README.md":
                raise requests.ConnectionError("offline")
            return _response(False)

        session = MagicMock()
        session.get.side_effect = get

        docs = fetch_remote_documentation("n8n@2.0.3", session=session)

        assert docs == {"nodes-base.slack": "# Slack README"}

    def test_agent_falls_back_to_package_readme(self):
        def get(url, timeout=None):
            if url.endswith("packages/@n8n/n8n-nodes-langchain/README.md"):
                return _response(True, "LangChain nodes for n8n")
            return _response(False)

        session = MagicMock()
        session.get.side_effect = get

        docs = fetch_remote_documentation("master", session=session)

        assert docs == {AGENT_NODE_TYPE: "# AI Agent\n\nLangChain nodes for n8n"}

    def test_timeout_is_passed_through(self):
        session = MagicMock()
        session.get.return_value = _response(False)

        fetch_remote_documentation("master", session=session, timeout=5.0)

        assert all(call.kwargs["timeout"] == 5.0 for call in session.get.call_args_list)

    def test_empty_readme_is_skipped(self):
        def get(url, timeout=None):
            if url.endswith("nodes/Slack/README.md"):
                return _response(True, "  \n")
            return _response(False)

        session = MagicMock()
        session.get.side_effect = get

        assert fetch_remote_documentation("master", session=session) == {}
