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

from collections.abc import Mapping, Sequence
from typing import cast

type JSON = Mapping[str, JSON] | Sequence[JSON] | str | int | float | bool | None


def _matches(value: JSON, target: JSON | type) -> bool:
    # Containers only need to agree on their kind. Scalars must agree exactly, except that bool is never accepted as an int.
    kind = target if isinstance(target, type) else type(target)
    if issubclass(kind, str):
        return isinstance(value, str)
    if issubclass(kind, Mapping):
        return isinstance(value, Mapping)
    if issubclass(kind, Sequence):
        return isinstance(value, Sequence) and not isinstance(value, str)
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


def get[T: JSON](d: JSON, key: str, target_type: type[T]) -> T | None:
    """
    Get a typed value from a JSON object. Returns None if `d` is not an object, the key is missing, or the value has a different type.
    """
    if isinstance(d, Mapping) and key in d:
        v = d[key]
        origin = getattr(target_type, "__origin__", target_type)
        if v is not None and _matches(v, origin):
            return cast(T, v)
    return None


def get_or[T: JSON](d: JSON, key: str, value: T) -> T:
    """
    Like `get`, but falls back to `value` whose type also determines the expected type of the entry.
    """
    if isinstance(d, Mapping) and key in d:
        v = d[key]
        if v is not None and _matches(v, value):
            return cast(T, v)
    return value


def get_or_default[T: JSON](d: JSON, key: str, target_type: type[T]) -> T:
    origin = getattr(target_type, "__origin__", target_type)
    return get_or(d, key, cast(T, origin()))


def get_path(d: JSON, *path: str | int) -> JSON:
    """
    Walk nested objects and arrays, e.g. `get_path(reply, "choices", 0, "message", "content")`. Returns None as soon as a step is missing.
    """
    for step in path:
        match step, d:
            case str(), Mapping():
                d = d.get(step)
            case int(), Sequence() if not isinstance(d, str) and -len(d) <= step < len(d):
                d = d[step]
            case _:
                return None
    return d
