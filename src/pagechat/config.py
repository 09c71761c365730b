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

import argparse
import os
import sys
import tomllib
from dataclasses import dataclass, fields, is_dataclass
from types import NoneType, UnionType
from typing import Any, cast, get_args

from loguru import logger

from .common import get_config_dir
from .json import JSON

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant. When a question refers to a webpage, read it with the tools available to you."


def load_system_prompt(path: str) -> str | None:
    """
    Read a system prompt from a markdown file. Bare file names are also looked up in the `roles` directory of the config dir.
    """
    system_prompt = None
    if not os.path.isfile(path):
        candidate = os.path.join(get_config_dir(), "roles", path)
        if os.path.isfile(candidate):
            path = candidate
    try:
        with open(path, "r") as f:
            system_prompt = f.read().strip()
    except FileNotFoundError:
        logger.error(f"System prompt file {path} not found.")
    return system_prompt


class PagechatArgs(argparse.Namespace):
    def __init__(self):
        super().__init__()

        self.input: list[str]

        self.config: str = "pagechat.toml"
        self.version: bool = False
        self.json: bool = False

        # Configuration overrides (default values are set in PagechatConfig)
        self.api_base: str | None = None
        self.model: str | None = None
        self.role: str | None = None
        self.verbose: bool | None = None


def parse_pagechat_args(argv: list[str] | None = None) -> PagechatArgs:
    parser = argparse.ArgumentParser(description="Chat completions that can read webpages")
    _ = parser.add_argument("input", nargs="*", help="Prompts to send, one per argument (default: read a single prompt from stdin)")

    _ = parser.add_argument("--config", help="Path to the configuration file (default: pagechat.toml)")
    _ = parser.add_argument("--api-base", help="Base URL of the chat completions API (default: https://api.openai.com/v1)")
    _ = parser.add_argument("--json", action="store_true", help="Print the normalized response as JSON")
    _ = parser.add_argument("-m", "--model", help="Model to use (default: gpt-4o-mini)")
    _ = parser.add_argument("-r", "--role", help="Path to a markdown file containing a system prompt")
    _ = parser.add_argument("--verbose", action="store_true", default=None, help="Enable verbose output")
    _ = parser.add_argument("-v", "--version", action="store_true", help="Print version information and exit")

    args = parser.parse_args(argv, namespace=PagechatArgs())
    if args.version:
        from . import __version__

        print(f"pagechat — webpage-aware chat completions\nversion {__version__}")
        sys.exit(0)

    return args


@dataclass
class PagechatConfig:
    model: str = "gpt-4o-mini"
    api_base: str = "https://api.openai.com/v1"

    # Used when the caller does not pass a `prompt` property. A role file takes precedence over the literal prompt.
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    role: str | None = None

    # Seconds. None leaves requests without a timeout.
    request_timeout: float | None = None
    user_agent: str = "pagechat/0.1"

    verbose: bool = False

    def default_system_prompt(self) -> str:
        if self.role is not None:
            prompt = load_system_prompt(self.role)
            if prompt is not None:
                return prompt
        return self.system_prompt

    def apply_args_override(self, args: PagechatArgs):
        if args.api_base is not None:
            self.api_base = args.api_base
        if args.model is not None:
            self.model = args.model
        if args.role is not None:
            self.role = args.role
        if args.verbose is not None:
            self.verbose = args.verbose


def _accepts(value: JSON, annotation: Any) -> bool:
    if isinstance(annotation, UnionType):
        return any(_accepts(value, a) for a in get_args(annotation))
    if annotation is NoneType:
        return value is None
    if annotation is float:
        # TOML distinguishes 30 from 30.0; both are fine for a float field.
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if annotation is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, annotation)


def dataclass_from_dict[T](cls: type[T], data: dict[str, JSON]) -> T:
    assert is_dataclass(cls), f"Expected a dataclass type, got {cls}"

    data = dict(data)
    result = cls()
    for f in fields(cls):
        if f.name not in data:
            continue

        if isinstance(f.type, str):
            raise TypeError(f"field '{f.name}' has an invalid type: {f.type}")

        value = data.pop(f.name)
        if not _accepts(value, f.type):
            raise ValueError(f"'{f.name}' must be of type {f.type}, got {type(value).__name__}")

        if isinstance(value, int) and (f.type is float or float in get_args(f.type)):
            value = float(value)
        setattr(result, f.name, value)

    if data:
        extra_keys = ", ".join(data.keys())
        raise ValueError(f"unexpected variables: {extra_keys}")

    return result


def load_config(filename: str | None) -> PagechatConfig:
    """
    Load the configuration. `filename` is looked up in the working directory first, then in the config directory. If neither exists, the
    default configuration shipped with pagechat is used.
    """
    if filename is None:
        filename = "pagechat.toml"

    if not os.path.isfile(filename):
        filename = os.path.join(get_config_dir(), filename)
        if not os.path.isfile(filename):
            logger.debug(f"Configuration file {filename} not found. Using default configuration.")

            from importlib import resources

            resources_path = resources.files(__package__)
            filename = str(resources_path.joinpath("default-config", "pagechat.toml"))

    try:
        with open(filename, "rb") as f:
            config = dataclass_from_dict(PagechatConfig, cast(dict[str, JSON], tomllib.load(f)))
        return config
    except FileNotFoundError as e:
        logger.error(f"Failed to load {filename}: {e}")
    except (tomllib.TOMLDecodeError, ValueError) as e:
        logger.error(f"{filename} is invalid: {e}")

    return PagechatConfig()
