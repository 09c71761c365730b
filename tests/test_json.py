from pagechat.json import JSON, get, get_or, get_or_default, get_path

REPLY = {
    "model": "gpt-test",
    "choices": [{"message": {"content": "hi", "tool_calls": None}}],
    "usage": {"total_tokens": 7, "cached": True},
}


def test_get():
    assert get(REPLY, "model", str) == "gpt-test"
    assert get(REPLY, "model", int) is None
    assert get(REPLY, "usage", dict[str, JSON]) == {"total_tokens": 7, "cached": True}
    assert get(REPLY, "missing", str) is None
    assert get("not an object", "model", str) is None


def test_get_or_rejects_bool_as_int():
    usage = REPLY["usage"]
    assert get_or(usage, "total_tokens", 0) == 7
    assert get_or(usage, "cached", 0) == 0


def test_get_or_default():
    assert get_or_default(REPLY, "choices", list[JSON]) == REPLY["choices"]
    assert get_or_default(REPLY, "model", list[JSON]) == []
    assert get_or_default({}, "function", dict[str, JSON]) == {}


def test_get_path():
    assert get_path(REPLY, "choices", 0, "message", "content") == "hi"
    assert get_path(REPLY, "choices", 0, "message", "tool_calls") is None
    assert get_path(REPLY, "choices", 3, "message") is None
    assert get_path(REPLY, "model", 0) is None
