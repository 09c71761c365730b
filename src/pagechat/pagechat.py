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
import os
import sys

from loguru import logger

from . import common, logging
from .config import load_config, parse_pagechat_args
from .connector import ConnectorError, run_sync
from .print import response_to_string


def main():
    args = parse_pagechat_args()
    config = load_config(args.config)
    config.apply_args_override(args)

    logging.setup(verbose=config.verbose)

    if not "OPENAI_API_KEY" in os.environ:
        print("Set the OPENAI_API_KEY environment variable to your API key to use pagechat.", file=sys.stderr)
        sys.exit(1)

    prompts = common.read_user_input(args.input)
    if not prompts:
        print("No input provided.", file=sys.stderr)
        sys.exit(1)

    logger.debug(f"Running {len(prompts)} prompt(s) with {config.model} against {config.api_base}")
    response = run_sync(config.model, prompts, properties={}, settings={"API_KEY": os.environ["OPENAI_API_KEY"]}, config=config)

    if args.json:
        print(json.dumps(response.to_json(), indent=2))
    else:
        pretty = os.isatty(1)
        wrap_width = os.get_terminal_size().columns if pretty else 0
        print(response_to_string(response, prompts, pretty=pretty, wrap_width=wrap_width))

    if isinstance(response, ConnectorError):
        sys.exit(1)


if __name__ == "__main__":
    main()
