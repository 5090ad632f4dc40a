# cosmicbuilder/core/constants.py
"""
Starter project and model catalogue.
"""

from dataclasses import dataclass
from typing import List, Tuple

from cosmicbuilder.core.tree_store import FileNode, FolderNode, Tree

# Folder that holds the previewable site (index.html and its assets)
PREVIEW_ROOT = "project"

DEFAULT_ACTIVE_ID = "1-1"
DEFAULT_OPEN_IDS: Tuple[str, ...] = ("1-1", "1-2", "1-3", "2")

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Cosmic App</title>
  <script src="https://cdn.tailwindcss.com"></script>
  <link rel="stylesheet" href="style.css">
  <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;700&display=swap" rel="stylesheet">
</head>
<body class="bg-gray-900 text-white flex items-center justify-center h-screen flex-col font-sans">
  <header class="p-4 text-center">
    <h1 class="text-5xl font-bold">Welcome to Your AI Site</h1>
  </header>
  <main class="p-8">
    <div class="glass-card p-8 text-center">
      <p class="text-lg">This is a modern landing page generated by your AI assistant.</p>
      <button id="cta-button" class="mt-6 px-6 py-3 bg-purple-600 rounded-full font-semibold">
        Get Started
      </button>
    </div>
  </main>
  <footer class="mt-8 text-gray-500">
    <p>Powered by Cosmic Builder</p>
  </footer>

  <script src="script.js"></script>
</body>
</html>"""

STYLE_CSS = """/* Custom styles that complement Tailwind */
body {
  font-family: 'Inter', sans-serif;
}

.glass-card {
  background: rgba(255, 255, 255, 0.05);
  border-radius: 16px;
  box-shadow: 0 4px 30px rgba(0, 0, 0, 0.1);
  border: 1px solid rgba(255, 255, 255, 0.1);
}"""

SCRIPT_JS = """console.log("Welcome to your AI-powered website!");

const button = document.getElementById('cta-button');
if (button) {
  button.addEventListener('click', () => {
    alert('Button clicked! You can add more functionality here.');
  });
}"""

README_MD = """# Cosmic App

A small site built together with an AI assistant.

- `project/index.html` is the page shown in the live preview.
- `project/style.css` and `project/script.js` are inlined into the preview.

Ask the assistant for changes in plain language, e.g.
"add a red border to all buttons in style.css".
"""

GITIGNORE = """# Dependencies
node_modules/

# Build artifacts
dist/
build/

# Environment variables
.env
.env.local

# System files
.DS_Store
Thumbs.db
"""

LICENSE_TEXT = """MIT License

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND.
"""


def initial_tree() -> Tree:
    """The project every new session starts from."""
    return (
        FolderNode(
            id="1",
            name=PREVIEW_ROOT,
            children=(
                FileNode(id="1-1", name="index.html", content=INDEX_HTML),
                FileNode(id="1-2", name="style.css", content=STYLE_CSS),
                FileNode(id="1-3", name="script.js", content=SCRIPT_JS),
            ),
        ),
        FileNode(id="2", name="README.md", content=README_MD),
        FileNode(id="3", name=".gitignore", content=GITIGNORE),
        FileNode(id="4", name="LICENSE", content=LICENSE_TEXT),
    )


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    api_key_env_vars: Tuple[str, ...]


AI_MODELS: List[ModelInfo] = [
    ModelInfo(id="gemini", name="Google Gemini", api_key_env_vars=("API_KEY", "GEMINI_API_KEY")),
    ModelInfo(id="deepseek", name="DeepSeek", api_key_env_vars=("DEEPSEEK_API_KEY",)),
    ModelInfo(id="openai", name="OpenAI", api_key_env_vars=("OPENAI_API_KEY",)),
    ModelInfo(id="claude", name="Anthropic Claude", api_key_env_vars=("ANTHROPIC_API_KEY",)),
    ModelInfo(id="ollama", name="Ollama (local)", api_key_env_vars=()),
]

DEFAULT_MODEL = "gemini"


def get_model_info(model_id: str) -> ModelInfo:
    for info in AI_MODELS:
        if info.id == model_id:
            return info
    raise KeyError(model_id)
