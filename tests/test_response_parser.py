import pytest

from cosmicbuilder.core.actions import ChatAction, EditAction
from cosmicbuilder.core.errors import MalformedReplyError
from cosmicbuilder.core.response_parser import ReplyNormalizer


@pytest.fixture
def normalizer():
    return ReplyNormalizer()


def test_bare_json_object(normalizer):
    actions = normalizer.parse_actions('{"actions": [{"type": "chat", "message": "hi"}]}')
    assert actions == [ChatAction(message="hi")]


def test_fenced_block_wins_over_prose(normalizer):
    text = (
        "Sure! Here you go:\n"
        "```json\n"
        '{"actions": [{"type": "edit", "fileId": "1-2", "content": "a {}"}]}\n'
        "```\n"
        "Let me know {if} you need more."
    )
    assert normalizer.parse_actions(text) == [EditAction(file_id="1-2", content="a {}")]


def test_jsonc_fence_is_normalized(normalizer):
    text = '```JSONC\n{"actions": []}\n```'
    assert normalizer.parse_actions(text) == []


def test_object_surrounded_by_prose(normalizer):
    text = 'Here it is: {"actions": [{"type": "chat", "message": "ok"}]} thanks'
    assert normalizer.parse_actions(text) == [ChatAction(message="ok")]


def test_empty_reply(normalizer):
    with pytest.raises(MalformedReplyError) as exc:
        normalizer.parse_actions("   ")
    assert exc.value.message == "The AI response was empty."
    assert exc.value.code == "invalid_format"


def test_braces_that_do_not_decode(normalizer):
    with pytest.raises(MalformedReplyError) as exc:
        normalizer.parse_actions("I would {probably} edit the file")
    assert exc.value.message.startswith("Could not find a valid JSON object in the response.")
    assert exc.value.raw_text == "I would {probably} edit the file"


def test_plain_prose(normalizer):
    with pytest.raises(MalformedReplyError) as exc:
        normalizer.parse_actions("I cannot help with that.")
    assert exc.value.message.startswith("No valid JSON object found in the AI response.")


def test_top_level_array_is_rejected(normalizer):
    with pytest.raises(MalformedReplyError):
        normalizer.parse_actions('[{"type": "chat", "message": "hi"}]')


def test_missing_actions_key_keeps_raw_text(normalizer):
    with pytest.raises(MalformedReplyError) as exc:
        normalizer.parse_actions('{"result": "done"}')
    assert "missing 'actions' key" in exc.value.message
    assert exc.value.raw_text == '{"result": "done"}'


def test_normalize_error_message(normalizer):
    assert normalizer.normalize_error_message("Error: bad\nthing") == "bad thing"
    assert normalizer.normalize_error_message("") == ""
