from itertools import count

import pytest

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.actions import (
    ChatAction,
    CreateAction,
    DeleteAction,
    EditAction,
    parse_action,
)
from cosmicbuilder.core.constants import DEFAULT_OPEN_IDS, initial_tree
from cosmicbuilder.core.interpreter import (
    ActionInterpreter,
    MissingParentPolicy,
    SideEffect,
    SideEffectKind,
)
from cosmicbuilder.core.tree_store import FileNode, FolderNode, NodeType


def sequential_ids(prefix="new"):
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def interpreter():
    return ActionInterpreter(id_factory=sequential_ids())


def test_edit_updates_opens_and_activates(interpreter):
    tree = initial_tree()
    result = interpreter.apply(tree, [EditAction("4", "MIT")], open_ids=["1-1"], active_id="1-1")

    assert tree_store.find_by_id(result.tree, "4").content == "MIT"
    assert result.summary == ["Updated file: LICENSE"]
    assert result.open_ids == ["1-1", "4"]
    assert result.active_id == "4"
    assert result.side_effects == [
        SideEffect(SideEffectKind.OPEN, "4"),
        SideEffect(SideEffectKind.ACTIVATE, "4"),
    ]
    assert result.modified


def test_input_tree_is_never_modified(interpreter):
    tree = initial_tree()
    before = tree_store.tree_to_dict(tree)
    interpreter.apply(
        tree,
        [EditAction("1-1", "x"), DeleteAction("2"), CreateAction(None, "a.txt", NodeType.FILE, "a")],
    )
    assert tree_store.tree_to_dict(tree) == before


def test_later_actions_see_earlier_creates(interpreter):
    actions = [
        CreateAction("1", "components", NodeType.FOLDER),
        CreateAction("new-1", "nav.js", NodeType.FILE, "// nav"),
        EditAction("new-2", "export const nav = 1;"),
    ]
    result = interpreter.apply(initial_tree(), actions)

    assert result.created_ids == ["new-1", "new-2"]
    folder = tree_store.find_by_id(result.tree, "new-1")
    assert isinstance(folder, FolderNode)
    assert tree_store.find_parent(result.tree, "new-1").id == "1"
    assert folder.children[0].content == "export const nav = 1;"
    assert result.summary == [
        "Created folder: components",
        "Created file: nav.js",
        "Updated file: nav.js",
    ]
    assert result.active_id == "new-2"


def test_partial_failure_keeps_applying(interpreter):
    actions = [
        EditAction("missing", "x"),
        CreateAction(None, "notes.md", NodeType.FILE, "# notes"),
        parse_action({"type": "rename", "fileId": "2"}),
        parse_action({"type": "create", "parentId": None, "fileType": "file"}),
        DeleteAction("3"),
    ]
    result = interpreter.apply(initial_tree(), actions)

    assert result.summary == [
        "Skipped malformed 'edit' action for file ID missing.",
        "Created file: notes.md",
        "Skipped unknown action type 'rename'.",
        "Skipped malformed 'create' action: requires a non-empty 'name'.",
        "Deleted file: .gitignore",
    ]
    assert result.skipped == 3
    assert tree_store.find_by_id(result.tree, "new-1").name == "notes.md"
    assert tree_store.find_by_id(result.tree, "3") is None


def test_edit_of_folder_is_skipped(interpreter):
    result = interpreter.apply(initial_tree(), [EditAction("1", "x")])
    assert result.summary == ["Skipped malformed 'edit' action for file ID 1."]
    assert result.tree == initial_tree()


def test_malformed_edit_reports_its_file_id(interpreter):
    result = interpreter.apply(initial_tree(), [parse_action({"type": "edit", "fileId": "1-1"})])
    assert result.summary == ["Skipped malformed 'edit' action for file ID 1-1."]


def test_delete_folder_closes_open_descendants(interpreter):
    result = interpreter.apply(
        initial_tree(), [DeleteAction("1")], open_ids=list(DEFAULT_OPEN_IDS), active_id="1-1"
    )
    assert result.summary == ["Deleted folder: project"]
    assert result.open_ids == ["2"]
    assert result.active_id == "2"
    assert SideEffect(SideEffectKind.CLOSE, "1-1") in result.side_effects
    assert SideEffect(SideEffectKind.ACTIVATE, "2") in result.side_effects


def test_delete_last_open_file_clears_active(interpreter):
    result = interpreter.apply(initial_tree(), [DeleteAction("2")], open_ids=["2"], active_id="2")
    assert result.open_ids == []
    assert result.active_id is None


def test_delete_missing_id_is_skipped(interpreter):
    tree = initial_tree()
    result = interpreter.apply(tree, [DeleteAction("99")])
    assert result.summary == ["Skipped 'delete' action for missing file ID 99."]
    assert result.tree is tree


def test_create_under_missing_parent_lands_at_root_by_default(interpreter):
    result = interpreter.apply(initial_tree(), [CreateAction("99", "orphan.txt", NodeType.FILE, "o")])
    assert result.tree[-1] == FileNode(id="new-1", name="orphan.txt", content="o")
    assert result.summary == ["Created file: orphan.txt"]


def test_create_under_file_parent_with_drop_policy():
    interpreter = ActionInterpreter(missing_parent=MissingParentPolicy.DROP, id_factory=sequential_ids())
    tree = initial_tree()
    result = interpreter.apply(tree, [CreateAction("2", "child.txt", NodeType.FILE)])
    assert result.summary == ["Skipped 'create' action: parent 2 not found."]
    assert result.tree is tree
    assert result.created_ids == []


def test_created_folder_is_not_opened(interpreter):
    result = interpreter.apply(initial_tree(), [CreateAction(None, "assets", NodeType.FOLDER)], active_id="1-1")
    assert result.open_ids == []
    assert result.active_id == "1-1"


def test_chat_only_batch_does_not_modify(interpreter):
    tree = initial_tree()
    result = interpreter.apply(tree, [ChatAction("Hello there")])
    assert result.summary == ["Hello there"]
    assert not result.modified
    assert result.tree is tree


def test_default_id_factory_generates_unique_ids():
    interpreter = ActionInterpreter()
    result = interpreter.apply(
        (), [CreateAction(None, "a", NodeType.FILE), CreateAction(None, "b", NodeType.FILE)]
    )
    assert len(set(result.created_ids)) == 2
    assert [n.id for n in result.tree] == result.created_ids


def test_non_object_action_gets_its_own_skip_line(interpreter):
    result = interpreter.apply(initial_tree(), [parse_action("edit 1-1"), parse_action(["chat"])])
    assert result.summary == [
        "Skipped malformed action: expected an object, got str.",
        "Skipped malformed action: expected an object, got list.",
    ]
    assert result.skipped == 2
