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

from loguru import logger

from .common import get_log_dir

STDERR_FORMAT = "<level>{level: <8}</level> <dim>{name}:{line}</dim> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup(verbose: bool = False, log_to_file: bool = True):
    """
    Route loguru's output to stderr, so that stdout only ever contains responses, and keep a rotating debug log in the state directory.
    """
    logger.remove()
    _ = logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=STDERR_FORMAT, colorize=sys.stderr.isatty())

    if not log_to_file:
        return

    log_dir = get_log_dir()
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create log directory {log_dir}: {e}")
        return

    _ = logger.add(os.path.join(log_dir, "pagechat.log"), level="DEBUG", format=FILE_FORMAT, rotation="5 MB", retention=3, enqueue=True)
