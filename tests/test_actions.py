import pytest

from cosmicbuilder.core.actions import (
    ActionType,
    ChatAction,
    CreateAction,
    DeleteAction,
    EditAction,
    SkippedAction,
    action_to_dict,
    batch_modifies_tree,
    normalize_action_type,
    parse_action,
    parse_batch,
)
from cosmicbuilder.core.errors import MalformedReplyError
from cosmicbuilder.core.tree_store import NodeType


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("edit", ActionType.EDIT),
        ("EDIT", ActionType.EDIT),
        ("edit_file", ActionType.EDIT),
        ("create-file", ActionType.CREATE),
        ("Delete", ActionType.DELETE),
        ("reply", ActionType.CHAT),
        ("rename", None),
        (None, None),
        (3, None),
    ],
)
def test_normalize_action_type(raw, expected):
    assert normalize_action_type(raw) is expected


def test_parse_edit():
    action = parse_action({"type": "edit", "fileId": "1-1", "content": "<p>hi</p>"})
    assert action == EditAction(file_id="1-1", content="<p>hi</p>")
    assert action.type is ActionType.EDIT


def test_parse_edit_without_content_is_skipped():
    action = parse_action({"type": "edit", "fileId": "1-1"})
    assert isinstance(action, SkippedAction)
    assert action.type is ActionType.EDIT
    assert action.file_id == "1-1"


def test_parse_create_file_and_folder():
    file_action = parse_action(
        {"type": "create", "parentId": "1", "fileType": "file", "name": "a.js", "content": "x"}
    )
    assert file_action == CreateAction(parent_id="1", name="a.js", kind=NodeType.FILE, content="x")

    folder_action = parse_action(
        {"type": "create", "parentId": None, "fileType": "folder", "name": "img", "content": "ignored"}
    )
    assert folder_action.parent_id is None
    assert folder_action.kind is NodeType.FOLDER
    assert folder_action.content == ""


def test_parse_create_normalizes_parent_id():
    assert parse_action({"type": "create", "parentId": 1, "fileType": "file", "name": "a"}).parent_id == "1"
    assert parse_action({"type": "create", "parentId": "", "fileType": "file", "name": "a"}).parent_id is None
    # Missing content on a file defaults to empty
    assert parse_action({"type": "create", "parentId": None, "fileType": "file", "name": "a"}).content == ""


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "create", "parentId": None, "fileType": "file"},
        {"type": "create", "parentId": None, "fileType": "file", "name": "   "},
        {"type": "create", "parentId": None, "fileType": "link", "name": "a"},
        {"type": "create", "parentId": ["1"], "fileType": "file", "name": "a"},
        {"type": "create", "parentId": None, "fileType": "file", "name": "a", "content": 5},
    ],
)
def test_malformed_create_is_skipped(raw):
    action = parse_action(raw)
    assert isinstance(action, SkippedAction)
    assert action.type is ActionType.CREATE


def test_parse_delete_and_chat():
    assert parse_action({"type": "delete", "fileId": "2"}) == DeleteAction(file_id="2")
    assert parse_action({"type": "chat", "message": "done"}) == ChatAction(message="done")
    assert isinstance(parse_action({"type": "chat"}), SkippedAction)


def test_unknown_type_and_non_object():
    unknown = parse_action({"type": "rename", "fileId": "2"})
    assert isinstance(unknown, SkippedAction)
    assert unknown.type is None
    assert unknown.raw_type == "rename"

    not_object = parse_action("edit")
    assert isinstance(not_object, SkippedAction)
    assert not_object.raw_type == "str"


def test_parse_batch_accepts_object_or_list():
    batch = parse_batch({"actions": [{"type": "chat", "message": "a"}, {"type": "bogus"}]})
    assert isinstance(batch[0], ChatAction)
    assert isinstance(batch[1], SkippedAction)
    assert parse_batch([]) == []


def test_parse_batch_rejects_missing_actions():
    with pytest.raises(MalformedReplyError):
        parse_batch({"message": "hi"})
    with pytest.raises(MalformedReplyError):
        parse_batch({"actions": "nope"})


def test_batch_modifies_tree():
    assert not batch_modifies_tree([ChatAction("hi")])
    assert not batch_modifies_tree([])
    assert batch_modifies_tree([ChatAction("hi"), DeleteAction("2")])
    # A malformed edit still counts as an attempted change
    assert batch_modifies_tree([parse_action({"type": "edit", "fileId": "x"})])


def test_action_to_dict_uses_wire_names():
    assert action_to_dict(EditAction("1-1", "c")) == {"type": "edit", "fileId": "1-1", "content": "c"}
    assert action_to_dict(CreateAction(None, "img", NodeType.FOLDER)) == {
        "type": "create",
        "parentId": None,
        "fileType": "folder",
        "name": "img",
    }
    raw = {"type": "rename", "fileId": "2"}
    assert action_to_dict(parse_action(raw)) == raw
