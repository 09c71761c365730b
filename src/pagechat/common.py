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

import os
import sys


class PagechatError(Exception):
    """
    Base class of all errors raised by pagechat itself. Errors of the libraries we use (aiohttp, json, ...) are not wrapped.
    """


class SetupError(PagechatError):
    pass


def error_message(e: BaseException) -> str:
    """
    Human readable message of an exception. Falls back to the exception's repr if it carries no message.
    """
    message = str(e)
    return message if message else repr(e)


def ansi(cmd: str) -> str:
    return f"\033[{cmd}"


ANSI_RESET = ansi("0m")


def wrap_style(msg: str, cmd: str, pretty: bool = True) -> str:
    if pretty:
        return f"{ansi(cmd)}{msg}{ANSI_RESET}"
    return msg


def prompt_style(msg: str) -> str:
    return wrap_style(msg, "0;35m")  # magenta


def gray_style(msg: str) -> str:
    return wrap_style(msg, "38;5;245m")  # gray


def escape(text: str) -> str:
    return repr(text.strip().replace("\n", " ").replace("\r", "").replace("\t", " "))


def get_log_dir() -> str:
    if "XDG_STATE_HOME" in os.environ:
        state_dir = os.environ["XDG_STATE_HOME"]
    else:
        state_dir = os.path.join(os.path.expanduser("~"), ".local", "state")

    return os.path.join(state_dir, "pagechat")


def get_config_dir() -> str:
    if "XDG_CONFIG_HOME" in os.environ:
        config_dir = os.environ["XDG_CONFIG_HOME"]
    else:
        config_dir = os.path.join(os.path.expanduser("~"), ".config")

    return os.path.join(config_dir, "pagechat")


def read_user_input(input: list[str]) -> list[str]:
    """
    Each command line argument is one prompt. Without arguments, all of stdin is read as a single prompt, unless stdin is a terminal.
    """
    if input:
        return [i for i in input if i.strip()]

    if sys.stdin.isatty():
        return []

    text = sys.stdin.read().strip()
    return [text] if text else []


def word_wrap(text: str, wrap_width: int) -> str:
    if not text or wrap_width <= 0:
        return text

    from wcwidth import wcswidth  # pyright: ignore

    lines: list[str] = []

    for line in text.split("\n"):
        # Preserve empty lines
        if not line.strip():
            lines.append(line)
            continue

        stripped_line = line.lstrip()
        indent = line[: len(line) - len(stripped_line)]
        indent_width = wcswidth(indent)

        if wcswidth(line) <= wrap_width:
            lines.append(line)
            continue

        available_width = wrap_width - indent_width
        current_line: list[str] = []
        current_width = 0

        for word in stripped_line.split():
            word_width = wcswidth(word)

            # Words that don't fit on a line of their own get hard-split by character.
            if word_width > available_width > 0:
                if current_line:
                    lines.append(indent + " ".join(current_line))
                    current_line, current_width = [], 0

                chunk, chunk_width = "", 0
                for char in word:
                    char_width = wcswidth(char)
                    if chunk_width + char_width > available_width and chunk:
                        lines.append(indent + chunk)
                        chunk, chunk_width = "", 0
                    chunk += char
                    chunk_width += char_width

                if chunk:
                    current_line, current_width = [chunk], chunk_width
                continue

            separator_width = 1 if current_line else 0
            if current_line and current_width + separator_width + word_width > available_width:
                lines.append(indent + " ".join(current_line))
                current_line, current_width = [word], word_width
            else:
                current_line.append(word)
                current_width += separator_width + word_width

        if current_line:
            lines.append(indent + " ".join(current_line))

    return "\n".join(lines)
