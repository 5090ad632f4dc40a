# cosmicbuilder/core/tree_store.py
"""
Tree Store

Canonical project file/folder tree as immutable snapshots.

Every mutation returns a new tree and leaves the input untouched. Only the
nodes on the path from the root to the mutated node are rebuilt; untouched
subtrees are shared between the old and the new snapshot. Holding a
reference to an old tree is therefore enough to roll back to it.

Nodes are always addressed by id. Path lookup exists for the preview
asset resolver only.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class NodeType(Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class FileNode:
    id: str
    name: str
    content: str = ""

    @property
    def type(self) -> NodeType:
        return NodeType.FILE


@dataclass(frozen=True)
class FolderNode:
    id: str
    name: str
    children: Tuple["Node", ...] = field(default_factory=tuple)

    @property
    def type(self) -> NodeType:
        return NodeType.FOLDER


Node = Union[FileNode, FolderNode]
Tree = Tuple[Node, ...]


@dataclass(frozen=True)
class FlatNode:
    """One entry of a flattened tree listing."""
    id: str
    name: str
    type: NodeType
    path: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "path": self.path,
        }


def new_node_id() -> str:
    """Random 128-bit id, hex encoded."""
    return uuid.uuid4().hex


# ----------------------------------------------------------------------
# Lookup
# ----------------------------------------------------------------------

def iter_nodes(tree: Tree) -> Iterator[Node]:
    """Depth-first, pre-order walk over every node."""
    for node in tree:
        yield node
        if isinstance(node, FolderNode):
            yield from iter_nodes(node.children)


def find_by_id(tree: Tree, node_id: str) -> Optional[Node]:
    """
    Depth-first search by id. The first match wins.
    Returns None when the id is absent.
    """
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def find_parent(tree: Tree, node_id: str) -> Optional[FolderNode]:
    """
    Return the folder whose immediate children include ``node_id``.
    Root-level (and missing) nodes have no parent.
    """
    for node in iter_nodes(tree):
        if isinstance(node, FolderNode):
            if any(child.id == node_id for child in node.children):
                return node
    return None


def find_by_path(tree: Tree, path: str) -> Optional[Node]:
    """
    Resolve a ``/``-delimited sequence of names, e.g. ``project/index.html``.

    A leading ``./`` and empty segments are ignored. Fails as soon as a
    segment is absent, or when a segment would have to descend into a file.
    """
    if path.startswith("./"):
        path = path[2:]
    parts = [part for part in path.split("/") if part and part != "."]
    if not parts:
        return None

    current: Tree = tree
    found: Optional[Node] = None
    for index, part in enumerate(parts):
        found = next((node for node in current if node.name == part), None)
        if found is None:
            return None
        if isinstance(found, FolderNode):
            current = found.children
        elif index < len(parts) - 1:
            return None
    return found


def descendant_ids(node: Node) -> List[str]:
    """Ids of ``node`` and every node below it."""
    if isinstance(node, FolderNode):
        return [node.id] + [n.id for n in iter_nodes(node.children)]
    return [node.id]


# ----------------------------------------------------------------------
# Mutation (copy-on-write)
# ----------------------------------------------------------------------

def _rebuild_first(
    nodes: Tree, node_id: str, fn: Callable[[Node], Node]
) -> Tuple[Tree, bool]:
    """
    Replace the first node matching ``node_id`` with ``fn(node)``.
    Only the ancestors of the match are copied.
    """
    for index, node in enumerate(nodes):
        if node.id == node_id:
            new_node = fn(node)
            if new_node is node:
                return nodes, False
            return nodes[:index] + (new_node,) + nodes[index + 1:], True
        if isinstance(node, FolderNode):
            children, changed = _rebuild_first(node.children, node_id, fn)
            if changed:
                new_folder = replace(node, children=children)
                return nodes[:index] + (new_folder,) + nodes[index + 1:], True
    return nodes, False


def update(tree: Tree, node_id: str, content: str) -> Tree:
    """
    Replace the content of file ``node_id``.
    No-op when the id is absent or names a folder.
    """
    def _set_content(node: Node) -> Node:
        if isinstance(node, FileNode):
            return replace(node, content=content)
        return node

    new_tree, changed = _rebuild_first(tree, node_id, _set_content)
    if not changed:
        logger.debug(f"update: no file with id {node_id}")
    return new_tree


def insert(tree: Tree, parent_id: Optional[str], node: Node) -> Tree:
    """
    Append ``node`` as the last child of ``parent_id``, or as a new
    root-level entry when ``parent_id`` is None.
    No-op when the parent is missing or is not a folder.
    """
    if parent_id is None:
        return tree + (node,)

    def _append(parent: Node) -> Node:
        if isinstance(parent, FolderNode):
            return replace(parent, children=parent.children + (node,))
        return parent

    new_tree, changed = _rebuild_first(tree, parent_id, _append)
    if not changed:
        logger.debug(f"insert: parent {parent_id} missing or not a folder")
    return new_tree


def _remove_all(nodes: Tree, node_id: str) -> Tuple[Tree, bool]:
    changed = False
    kept: List[Node] = []
    for node in nodes:
        if node.id == node_id:
            changed = True
            continue
        if isinstance(node, FolderNode):
            children, child_changed = _remove_all(node.children, node_id)
            if child_changed:
                node = replace(node, children=children)
                changed = True
        kept.append(node)
    if not changed:
        return nodes, False
    return tuple(kept), True


def remove(tree: Tree, node_id: str) -> Tree:
    """
    Remove every node with ``node_id`` together with its subtree.
    No-op when absent.
    """
    new_tree, _ = _remove_all(tree, node_id)
    return new_tree


# ----------------------------------------------------------------------
# Views
# ----------------------------------------------------------------------

def flatten(tree: Tree, prefix: str = "./") -> List[FlatNode]:
    """
    Depth-first listing with materialized paths.
    Folder paths end with ``/``: ``./project/``, ``./project/index.html``.
    """
    flat: List[FlatNode] = []
    for node in tree:
        is_folder = isinstance(node, FolderNode)
        path = prefix + node.name + ("/" if is_folder else "")
        flat.append(FlatNode(id=node.id, name=node.name, type=node.type, path=path))
        if is_folder:
            flat.extend(flatten(node.children, path))
    return flat


def path_index(tree: Tree) -> Dict[str, str]:
    """Map of node id to materialized path."""
    index: Dict[str, str] = {}
    for flat in flatten(tree):
        index.setdefault(flat.id, flat.path)
    return index


# ----------------------------------------------------------------------
# Plain-data conversion
# ----------------------------------------------------------------------

def node_to_dict(node: Node) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": node.id, "name": node.name, "type": node.type.value}
    if isinstance(node, FolderNode):
        data["children"] = [node_to_dict(child) for child in node.children]
    else:
        data["content"] = node.content
    return data


def node_from_dict(data: Dict[str, Any]) -> Node:
    """
    Build a node from its persisted form.

    Raises:
        ValueError: If the mapping is not a valid node.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Node must be an object, got {type(data).__name__}")
    node_id = data.get("id")
    name = data.get("name")
    if not isinstance(node_id, str) or not isinstance(name, str):
        raise ValueError(f"Node requires string 'id' and 'name': {data!r}")

    node_type = data.get("type")
    if node_type == NodeType.FOLDER.value:
        children = data.get("children")
        if children is None:
            children = []
        if not isinstance(children, list):
            raise ValueError(f"Folder {node_id} has non-list 'children': {children!r}")
        return FolderNode(
            id=node_id,
            name=name,
            children=tuple(node_from_dict(child) for child in children),
        )
    if node_type == NodeType.FILE.value:
        content = data.get("content")
        return FileNode(id=node_id, name=name, content=content if isinstance(content, str) else "")
    raise ValueError(f"Unknown node type: {node_type!r}")


def tree_to_dict(tree: Tree) -> List[Dict[str, Any]]:
    return [node_to_dict(node) for node in tree]


def tree_from_dict(items: List[Dict[str, Any]]) -> Tree:
    if not isinstance(items, list):
        raise ValueError("Tree must be a list of nodes")
    return tuple(node_from_dict(item) for item in items)
