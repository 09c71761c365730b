# pagechat -- Webpage-aware chat completions
#
# Copyright (C) 2025 Thomas Müller <contact@tom94.net>
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import json
from collections.abc import Mapping
from enum import Enum

import aiohttp
from loguru import logger

from .common import PagechatError
from .json import JSON, get, get_or, get_or_default
from .markdown import parse_webpage_to_markdown
from .messages import FunctionMessage


class ToolArgumentsError(PagechatError):
    pass


class UnknownToolError(PagechatError):
    pass


class Tool(Enum):
    PARSE_WEBPAGE_TO_MARKDOWN = "parseWebpageToMarkdown"


def get_tool_definitions() -> list[JSON]:
    """
    Tool definitions in the format of the chat completions API.
    """
    return [
        {
            "type": "function",
            "function": {
                "name": Tool.PARSE_WEBPAGE_TO_MARKDOWN.value,
                "description": "Parse a webpage into Markdown format",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "url": {"type": "string", "description": "The URL of the webpage to parse"},
                    },
                    "required": ["url"],
                },
            },
        }
    ]


def decode_arguments(raw: str) -> dict[str, JSON]:
    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ToolArgumentsError(f"Tool call arguments are not valid JSON: {e}") from e

    if not isinstance(arguments, Mapping):
        raise ToolArgumentsError(f"Tool call arguments must be a JSON object, got {type(arguments).__name__}")

    return dict(arguments)


def lookup_tool(name: str) -> Tool:
    try:
        return Tool(name)
    except ValueError:
        raise UnknownToolError(f"Tool {name} not found") from None


async def use_tool(session: aiohttp.ClientSession, tool_call: JSON, user_agent: str | None = None) -> FunctionMessage:
    """
    Run a single tool call of an assistant reply and wrap its result in a function message.
    """
    function = get_or_default(tool_call, "function", dict[str, JSON])
    name = get_or(function, "name", "")
    tool_call_id = get_or(tool_call, "id", "")

    tool = lookup_tool(name)
    arguments = decode_arguments(get_or(function, "arguments", ""))
    logger.debug(f"Tool call {tool_call_id}: {name}({arguments})")

    match tool:
        case Tool.PARSE_WEBPAGE_TO_MARKDOWN:
            url = get(arguments, "url", str)
            if url is None:
                raise ToolArgumentsError(f"{name} requires a string argument 'url'")
            content = await parse_webpage_to_markdown(session, url, user_agent=user_agent)

    return FunctionMessage(tool_call_id=tool_call_id, name=name, content=content)


async def use_tools(session: aiohttp.ClientSession, tool_calls: list[JSON], user_agent: str | None = None) -> list[FunctionMessage]:
    """
    Run the tool calls of an assistant reply one after the other.
    """
    return [await use_tool(session, tool_call, user_agent=user_agent) for tool_call in tool_calls]
