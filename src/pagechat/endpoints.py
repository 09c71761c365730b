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

from .common import SetupError


def get_chat_completions_endpoint(api_base: str, api_key: str | None) -> tuple[str, dict[str, str]]:
    """
    URL and headers of an OpenAI-compatible chat completions endpoint.
    """
    if not api_key:
        raise SetupError("No API key. Pass API_KEY in the settings or set the OPENAI_API_KEY environment variable.")

    if not api_base:
        raise SetupError("No API base URL configured.")

    url = f"{api_base.rstrip('/')}/chat/completions"
    headers = {
        "authorization": f"Bearer {api_key}",
        "content-type": "application/json",
    }

    return url, headers
