# cosmicbuilder/core/prompt_builder.py
"""
Prompt construction.

Pure functions that serialize the project tree, the open files and the
user's intent (or, for auto-fix, the failed batch and the preview error)
into a single text prompt. The system instruction and response schema are
shared by every backend.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.actions import Action, action_to_dict
from cosmicbuilder.core.tree_store import FileNode, Tree

SYSTEM_INSTRUCTION = """You are an expert full-stack web developer AI assistant. Your task is to help users build web applications by providing a sequence of actions in a single JSON object.

Your entire response MUST be a single, valid JSON object, and nothing else.

The JSON object must have a single key, "actions", which is an array of action objects.
Each action object must have a "type" field. Based on the type, other fields are required:
- type: "edit" -> requires "fileId" (string) and "content" (string, the complete new file content).
- type: "create" -> requires "parentId" (string ID or null for root), "fileType" ('file' or 'folder'), and "name" (string). If "fileType" is "file", it also requires "content" (string).
- type: "delete" -> requires "fileId" (string).
- type: "chat" -> requires "message" (string) for conversational replies.

- Analyze the user's request, the provided file structure (with file paths and IDs), and the content of open files.
- Use the provided 'id' for any file-specific operation. Use the 'path' for your own context and understanding only.
- For 'create', use the parent folder's ID for 'parentId'. For root-level files/folders, 'parentId' should be null.
- If a request requires multiple steps (e.g., create a CSS file, then edit HTML to link to it), provide all necessary actions in the correct order in the 'actions' array.
- ERROR FIXING: If the prompt is an "AUTO-FIX" request, your primary goal is to resolve the provided error. Analyze the error message and the faulty code, then generate a new set of actions to correct the problem.
- The previewed site lives in the 'project' folder; index.html there may reference local style sheets and scripts by relative path."""

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "actions": {
            "type": "array",
            "description": "A list of actions to perform.",
            "items": {
                "type": "object",
                "properties": {
                    "type": {
                        "type": "string",
                        "enum": ["edit", "create", "delete", "chat"],
                        "description": "The type of action to perform.",
                    },
                    "fileId": {
                        "type": "string",
                        "description": "The ID of the file/folder for 'edit' or 'delete' actions.",
                    },
                    "content": {
                        "type": "string",
                        "description": "The new content for 'edit' or 'create' file actions.",
                    },
                    "parentId": {
                        "type": "string",
                        "description": "The ID of the parent folder for 'create' actions (null for root).",
                    },
                    "fileType": {
                        "type": "string",
                        "enum": ["file", "folder"],
                        "description": "The type of node to 'create'.",
                    },
                    "name": {
                        "type": "string",
                        "description": "The name for the new file/folder in a 'create' action.",
                    },
                    "message": {
                        "type": "string",
                        "description": "The conversational response for a 'chat' action.",
                    },
                },
                "required": ["type"],
            },
        }
    },
    "required": ["actions"],
}

NO_OPEN_FILES = "No files are currently open."


def describe_tree(tree: Tree) -> str:
    """Flattened listing with id, name, type and path for every node."""
    return json.dumps([flat.to_dict() for flat in tree_store.flatten(tree)], indent=2)


def describe_open_files(tree: Tree, open_ids: Sequence[str]) -> str:
    """
    Contents of the open files, labeled by path and id, read from ``tree``.
    Open ids that do not name a file in ``tree`` are left out.
    """
    paths = tree_store.path_index(tree)
    sections: List[str] = []
    for node_id in open_ids:
        node = tree_store.find_by_id(tree, node_id)
        if not isinstance(node, FileNode):
            continue
        path = paths.get(node_id, node.name)
        sections.append(f"File: {path} (id: {node_id})\n```\n{node.content}\n```")
    return "\n\n".join(sections) or NO_OPEN_FILES


def build_user_prompt(intent: str, tree: Tree, open_ids: Sequence[str]) -> str:
    """Prompt for a fresh user request."""
    return (
        f'User Request: "{intent}"\n\n'
        f"Current Project File Structure (with IDs):\n{describe_tree(tree)}\n\n"
        f"Content of currently open files:\n{describe_open_files(tree, open_ids)}"
    )


def build_fix_prompt(
    original_prompt: str,
    failed_batch: Sequence[Action],
    error_text: str,
    tree: Tree,
    open_ids: Sequence[str],
) -> str:
    """
    Prompt for an auto-fix attempt.

    ``tree`` must be the snapshot the failed batch was applied to, so the
    model sees the exact inputs that produced the faulty output.
    """
    failed = json.dumps({"actions": [action_to_dict(a) for a in failed_batch]}, indent=2)
    return (
        "ATTEMPTING AUTO-FIX.\n"
        f'Original User Request: "{original_prompt}"\n\n'
        "The following AI actions resulted in an error when applied:\n"
        f"```json\n{failed}\n```\n\n"
        "This produced the following error in the preview:\n"
        f'"{error_text}"\n\n'
        f"Project File Structure before those actions (with IDs):\n{describe_tree(tree)}\n\n"
        f"Content of currently open files:\n{describe_open_files(tree, open_ids)}\n\n"
        "Please analyze the error and the code that caused it, and provide a new, "
        "corrected set of actions to fix the problem."
    )


def compose_for_chat(prompt: str, system: Optional[str] = None) -> List[Dict[str, str]]:
    """System + user message list for chat-completion style backends."""
    return [
        {"role": "system", "content": system or SYSTEM_INSTRUCTION},
        {"role": "user", "content": prompt},
    ]
