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

"""
Runs a batch of prompts through a chat completions API as one conversation.

Each prompt is answered in turn. If the model asks to read a webpage, the page is fetched, converted to Markdown, and handed back to the model,
whose second answer becomes the result of the prompt. A failing prompt yields an error completion and does not affect the prompts after it.
"""

import asyncio
import contextlib
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import aiohttp
from loguru import logger

from .common import error_message, escape
from .completion import CompletionClient, CompletionService, TokenCounter, reply_text, reply_tool_calls
from .config import PagechatConfig
from .endpoints import get_chat_completions_endpoint
from .json import JSON, get, get_path
from .messages import AssistantMessage, History, UserMessage
from .tool_use import get_tool_definitions, use_tools

API_KEY = "API_KEY"
API_BASE = "API_BASE"
NO_RESPONSE = "No response."


@dataclass
class ErrorRecord:
    error: str
    model: str


type RawResult = JSON | ErrorRecord


@dataclass
class Completion:
    content: str | None
    token_usage: int | None
    error: str | None = None

    def to_json(self) -> dict[str, JSON]:
        result: dict[str, JSON] = {"Content": self.content, "TokenUsage": self.token_usage}
        if self.error is not None:
            result["Error"] = self.error
        return result


@dataclass
class ConnectorResponse:
    completions: list[Completion]
    model_type: str

    def to_json(self) -> dict[str, JSON]:
        return {"Completions": [c.to_json() for c in self.completions], "ModelType": self.model_type}


@dataclass
class ConnectorError:
    error: str
    model_type: str

    def to_json(self) -> dict[str, JSON]:
        return {"Error": self.error, "ModelType": self.model_type}


def to_completion(result: RawResult) -> Completion:
    match result:
        case ErrorRecord(error=error):
            return Completion(content=None, token_usage=None, error=error)
        case _:
            total_tokens = get_path(result, "usage", "total_tokens")
            return Completion(
                content=reply_text(result),
                token_usage=total_tokens if isinstance(total_tokens, int) else None,
            )


def model_type_of(results: list[RawResult], model: str) -> str:
    for result in results:
        result_model = result.model if isinstance(result, ErrorRecord) else get(result, "model", str)
        if result_model:
            return result_model
    return model


def map_to_response(results: list[RawResult], model: str) -> ConnectorResponse:
    return ConnectorResponse(completions=[to_completion(r) for r in results], model_type=model_type_of(results, model))


async def answer_prompt(
    client: CompletionService,
    session: aiohttp.ClientSession,
    history: History,
    prompt: str,
    model: str,
    extra: dict[str, JSON],
    user_agent: str | None = None,
) -> JSON:
    """
    Answer a single prompt, running the tools the model asks for. Returns the reply that answers the prompt. The prompt and its answer are
    only added to `history` if answering succeeds.
    """
    turn = history.begin_turn()
    turn.append(UserMessage(prompt))

    reply = await client.create(messages=turn.to_json(), model=model, tools=get_tool_definitions(), tool_choice="auto", **extra)
    turn.append(AssistantMessage(reply_text(reply) or NO_RESPONSE))

    tool_calls = reply_tool_calls(reply)
    if tool_calls:
        logger.info(f"Model requested {len(tool_calls)} tool call(s).")
        turn.extend(await use_tools(session, tool_calls, user_agent=user_agent))

        reply = await client.create(messages=turn.to_json(), model=model, **extra)
        turn.append(AssistantMessage(reply_text(reply) or NO_RESPONSE))

    history.commit(turn)
    return reply


def _split_properties(properties: Mapping[str, JSON], config: PagechatConfig) -> tuple[str, dict[str, JSON]]:
    extra = dict(properties)
    prompt = extra.pop("prompt", None)
    if not isinstance(prompt, str) or not prompt:
        prompt = config.default_system_prompt()
    return prompt, extra


async def run(
    model: str,
    prompts: Sequence[str],
    properties: Mapping[str, JSON],
    settings: Mapping[str, JSON],
    *,
    session: aiohttp.ClientSession | None = None,
    client: CompletionService | None = None,
    config: PagechatConfig | None = None,
) -> ConnectorResponse | ConnectorError:
    """
    Answer `prompts` in order within one conversation and return one completion per prompt.

    `properties` may contain the system prompt under `prompt`; all other properties are passed on to every completion request. `settings`
    holds the API key under `API_KEY` (default: $OPENAI_API_KEY) and optionally the API base URL under `API_BASE`.

    If the run cannot even be set up, a `ConnectorError` is returned instead.
    """
    if config is None:
        config = PagechatConfig()

    try:
        async with contextlib.AsyncExitStack() as stack:
            if session is None:
                timeout = aiohttp.ClientTimeout(total=config.request_timeout)
                session = await stack.enter_async_context(aiohttp.ClientSession(timeout=timeout))

            if client is None:
                api_key = get(settings, API_KEY, str) or os.environ.get("OPENAI_API_KEY")
                api_base = get(settings, API_BASE, str) or config.api_base
                url, headers = get_chat_completions_endpoint(api_base, api_key)
                client = CompletionClient(session, url, headers)

            system_prompt, extra = _split_properties(properties, config)
            history = History(system_prompt)
            results: list[RawResult] = []
            tokens = TokenCounter()

            for i, prompt in enumerate(prompts):
                logger.debug(f"Prompt {i + 1}/{len(prompts)}: {escape(prompt)}")
                try:
                    reply = await answer_prompt(client, session, history, prompt, model, extra, user_agent=config.user_agent)
                    tokens += TokenCounter.from_reply(reply)
                    results.append(reply)
                except Exception as e:
                    logger.opt(exception=e).error(f"Prompt {i + 1} failed: {error_message(e)}")
                    results.append(ErrorRecord(error=error_message(e), model=model))

            logger.debug(f"Tokens of recorded replies: {tokens}")
            return map_to_response(results, model)
    except Exception as e:
        logger.opt(exception=e).error(f"Failed to run prompts: {error_message(e)}")
        return ConnectorError(error=error_message(e), model_type=model)


def run_sync(
    model: str,
    prompts: Sequence[str],
    properties: Mapping[str, JSON],
    settings: Mapping[str, JSON],
    config: PagechatConfig | None = None,
) -> ConnectorResponse | ConnectorError:
    return asyncio.run(run(model, prompts, properties, settings, config=config))
