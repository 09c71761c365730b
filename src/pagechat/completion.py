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
from typing import Protocol

import aiohttp
from loguru import logger

from .common import PagechatError
from .json import JSON, get, get_or, get_path


class CompletionError(PagechatError):
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status: int | None = status


class CompletionService(Protocol):
    async def create(
        self,
        messages: list[JSON],
        model: str,
        tools: list[JSON] | None = None,
        tool_choice: str | None = None,
        **extra: JSON,
    ) -> JSON: ...


class TokenCounter:
    def __init__(self, prompt_tokens: int = 0, completion_tokens: int = 0, total_tokens: int = 0):
        self.prompt: int = prompt_tokens
        self.completion: int = completion_tokens
        self.total: int = total_tokens

    @classmethod
    def from_reply(cls, reply: JSON) -> "TokenCounter":
        usage = get(reply, "usage", dict[str, JSON])
        return cls(
            prompt_tokens=get_or(usage, "prompt_tokens", 0),
            completion_tokens=get_or(usage, "completion_tokens", 0),
            total_tokens=get_or(usage, "total_tokens", 0),
        )

    def __add__(self, other: "TokenCounter") -> "TokenCounter":
        return TokenCounter(
            prompt_tokens=self.prompt + other.prompt,
            completion_tokens=self.completion + other.completion,
            total_tokens=self.total + other.total,
        )

    def __str__(self) -> str:
        return f"prompt={self.prompt} completion={self.completion} total={self.total}"


def reply_text(reply: JSON) -> str | None:
    content = get_path(reply, "choices", 0, "message", "content")
    return content if isinstance(content, str) else None


def reply_tool_calls(reply: JSON) -> list[JSON]:
    tool_calls = get_path(reply, "choices", 0, "message", "tool_calls")
    return list(tool_calls) if isinstance(tool_calls, list) else []


async def _error_from_response(response: aiohttp.ClientResponse) -> CompletionError:
    # OpenAI-compatible APIs put a human readable message into {"error": {"message": ...}}.
    body = await response.text()
    message = None
    try:
        message = get_path(json.loads(body), "error", "message")
    except json.JSONDecodeError:
        pass

    if not isinstance(message, str) or not message:
        message = f"{response.status} {response.reason}"

    return CompletionError(message, status=response.status)


class CompletionClient:
    """
    Client of an OpenAI-compatible chat completions endpoint. See `endpoints.get_chat_completions_endpoint`.
    """

    def __init__(self, session: aiohttp.ClientSession, url: str, headers: dict[str, str]):
        self.session: aiohttp.ClientSession = session
        self.url: str = url
        self.headers: dict[str, str] = headers

    async def create(
        self,
        messages: list[JSON],
        model: str,
        tools: list[JSON] | None = None,
        tool_choice: str | None = None,
        **extra: JSON,
    ) -> JSON:
        params: dict[str, JSON] = {"model": model, "messages": messages}
        if tools:
            params["tools"] = tools
            if tool_choice is not None:
                params["tool_choice"] = tool_choice

        # Extra parameters come last and may override anything above.
        params.update(extra)

        logger.debug(f"Requesting completion from {model} with {len(messages)} messages.")
        async with self.session.post(self.url, headers=self.headers, json=params) as response:
            if not response.ok:
                raise await _error_from_response(response)

            reply: JSON = await response.json()

        logger.debug(f"Completion {get(reply, 'id', str)}: {TokenCounter.from_reply(reply)}")
        return reply
