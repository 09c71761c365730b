import asyncio

import pytest

from fakes import FakeResponse, FakeSession, make_tool_call
from pagechat.markdown import WebpageFetchError
from pagechat.messages import FunctionMessage
from pagechat.tool_use import (
    Tool,
    ToolArgumentsError,
    UnknownToolError,
    decode_arguments,
    get_tool_definitions,
    lookup_tool,
    use_tool,
    use_tools,
)


def test_tool_definition():
    (definition,) = get_tool_definitions()
    assert definition["type"] == "function"

    function = definition["function"]
    assert function["name"] == "parseWebpageToMarkdown"
    assert function["description"] == "Parse a webpage into Markdown format"
    assert function["parameters"]["required"] == ["url"]
    assert function["parameters"]["properties"]["url"]["type"] == "string"


def test_lookup_tool():
    assert lookup_tool("parseWebpageToMarkdown") is Tool.PARSE_WEBPAGE_TO_MARKDOWN

    with pytest.raises(UnknownToolError, match="deleteEverything"):
        lookup_tool("deleteEverything")


def test_decode_arguments():
    assert decode_arguments('{"url": "https://example.com"}') == {"url": "https://example.com"}


@pytest.mark.parametrize("raw", ["{not json", "", '["https://example.com"]', '"https://example.com"'])
def test_decode_arguments_rejects_malformed_payloads(raw):
    with pytest.raises(ToolArgumentsError):
        decode_arguments(raw)


def test_use_tool_returns_function_message():
    session = FakeSession(pages={"https://example.com/": FakeResponse(200, text="<body><p>Hello</p></body>")})

    message = asyncio.run(use_tool(session, make_tool_call("https://example.com/", call_id="call_42")))

    assert message == FunctionMessage(tool_call_id="call_42", name="parseWebpageToMarkdown", content="Hello\n\n")
    assert message.to_json() == {"role": "function", "tool_call_id": "call_42", "name": "parseWebpageToMarkdown", "content": "Hello\n\n"}


def test_use_tool_requires_url():
    session = FakeSession()

    with pytest.raises(ToolArgumentsError, match="url"):
        asyncio.run(use_tool(session, make_tool_call(None, arguments='{"link": "https://example.com"}')))

    assert session.requests == []


def test_use_tool_propagates_fetch_failures():
    with pytest.raises(WebpageFetchError):
        asyncio.run(use_tool(FakeSession(), make_tool_call("https://example.com/gone")))


def test_use_tools_runs_calls_in_order():
    session = FakeSession(
        pages={
            "https://a.example/": FakeResponse(200, text="<h1>A</h1>"),
            "https://b.example/": FakeResponse(200, text="<h1>B</h1>"),
        }
    )
    calls = [make_tool_call("https://a.example/", call_id="1"), make_tool_call("https://b.example/", call_id="2")]

    messages = asyncio.run(use_tools(session, calls))

    assert [m.tool_call_id for m in messages] == ["1", "2"]
    assert [m.content for m in messages] == ["# A\n\n", "# B\n\n"]
    assert [r["url"] for r in session.requests] == ["https://a.example/", "https://b.example/"]
