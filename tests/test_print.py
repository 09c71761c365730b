from pagechat.common import word_wrap
from pagechat.connector import Completion, ConnectorError, ConnectorResponse
from pagechat.print import response_to_string


def test_plain_response():
    response = ConnectorResponse(
        completions=[Completion(content="Hello there", token_usage=12), Completion(content=None, token_usage=None, error="boom")],
        model_type="gpt-test",
    )

    text = response_to_string(response, ["hi", "fail"], pretty=False)

    assert "\033[" not in text
    assert text.startswith("Model: gpt-test\n\n")
    assert "> hi\n╭── Response 1\n│ Hello there\n╰─ 12 tokens" in text
    assert "> fail\n╭── Error in prompt 2\n│ boom\n╰─" in text


def test_setup_error():
    text = response_to_string(ConnectorError(error="No API key.", model_type="gpt-test"), pretty=False)
    assert text == "╭── Error (gpt-test)\n│ No API key.\n╰─"


def test_word_wrap():
    assert word_wrap("aaa bbb ccc", 7) == "aaa bbb\nccc"
    assert word_wrap("  indented words here", 12) == "  indented\n  words here"
    assert word_wrap("abcdefghij", 4) == "abcd\nefgh\nij"
    assert word_wrap("short", 0) == "short"
