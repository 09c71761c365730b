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

from dataclasses import dataclass
from typing import TypeAlias

from .json import JSON


@dataclass(frozen=True)
class SystemMessage:
    content: str

    def to_json(self) -> dict[str, JSON]:
        return {"role": "system", "content": self.content}


@dataclass(frozen=True)
class UserMessage:
    content: str

    def to_json(self) -> dict[str, JSON]:
        return {"role": "user", "content": self.content}


@dataclass(frozen=True)
class AssistantMessage:
    content: str

    def to_json(self) -> dict[str, JSON]:
        return {"role": "assistant", "content": self.content}


@dataclass(frozen=True)
class FunctionMessage:
    """
    Result of a tool call, tagged with the id of the call it answers.
    """

    tool_call_id: str
    name: str
    content: str

    def to_json(self) -> dict[str, JSON]:
        return {"role": "function", "tool_call_id": self.tool_call_id, "name": self.name, "content": self.content}


Message: TypeAlias = SystemMessage | UserMessage | AssistantMessage | FunctionMessage


class History:
    """
    Conversation of a single run. Messages are only ever appended.

    A prompt is answered on a copy obtained from `begin_turn`, which is committed once the prompt has been answered. A failed prompt thus
    leaves no unanswered user message behind.
    """

    def __init__(self, system_prompt: str | None = None):
        self._messages: list[Message] = []
        if system_prompt is not None:
            self.append(SystemMessage(system_prompt))

    def append(self, message: Message):
        self._messages.append(message)

    def extend(self, messages: list[Message] | list[FunctionMessage]):
        for message in messages:
            self.append(message)

    def begin_turn(self) -> "History":
        turn = History()
        turn.extend(self._messages)
        return turn

    def commit(self, turn: "History"):
        if turn._messages[: len(self._messages)] != self._messages:
            raise ValueError("Turn was not started from this history.")
        self.extend(turn._messages[len(self._messages) :])

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    def to_json(self) -> list[JSON]:
        return [m.to_json() for m in self._messages]
