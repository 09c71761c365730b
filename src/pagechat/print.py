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

from io import StringIO

from . import common
from .common import wrap_style
from .connector import Completion, ConnectorError, ConnectorResponse

RESULT_COLOR = "0;36m"  # cyan
ERROR_COLOR = "0;91m"  # bright red


def write_block(heading: str, block_text: str, io: StringIO, pretty: bool, color: str, wrap_width: int):
    _ = io.write(wrap_style(f"╭── {heading}\n", color, pretty=pretty))
    # The -2 accounts for the "│ " prefix
    block_text = common.word_wrap(block_text, wrap_width - 2)
    for line in block_text.splitlines():
        _ = io.write(f"{wrap_style('│ ', color, pretty=pretty)}{line}\n")
    _ = io.write(wrap_style("╰─", color, pretty=pretty))


def write_completion(index: int, prompt: str | None, completion: Completion, io: StringIO, pretty: bool, wrap_width: int):
    if prompt is not None:
        chevron = common.prompt_style(">") if pretty else ">"
        _ = io.write(f"{chevron} {prompt}\n")

    if completion.error is not None:
        write_block(f"Error in prompt {index + 1}", completion.error, io, pretty, ERROR_COLOR, wrap_width)
    else:
        write_block(f"Response {index + 1}", completion.content or "", io, pretty, RESULT_COLOR, wrap_width)

    if completion.token_usage is not None:
        tokens = f" {completion.token_usage} tokens"
        _ = io.write(common.gray_style(tokens) if pretty else tokens)


def response_to_string(
    response: ConnectorResponse | ConnectorError, prompts: list[str] | None = None, pretty: bool = True, wrap_width: int = 0
) -> str:
    io = StringIO()

    match response:
        case ConnectorError(error=error, model_type=model_type):
            write_block(f"Error ({model_type})", error, io, pretty, ERROR_COLOR, wrap_width)
        case ConnectorResponse(completions=completions, model_type=model_type):
            heading = f"Model: {model_type}"
            _ = io.write(f"{common.gray_style(heading) if pretty else heading}\n\n")
            for i, completion in enumerate(completions):
                if i > 0:
                    _ = io.write("\n\n")
                prompt = prompts[i] if prompts is not None and i < len(prompts) else None
                write_completion(i, prompt, completion, io, pretty, wrap_width)

    return io.getvalue()
