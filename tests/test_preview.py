from cosmicbuilder.core import tree_store
from cosmicbuilder.core.constants import STYLE_CSS, SCRIPT_JS, initial_tree
from cosmicbuilder.core.preview import PreviewError, build_preview_html
from cosmicbuilder.core.tree_store import FileNode, FolderNode


def _site(index_html, *assets):
    return (FolderNode(id="1", name="project", children=(FileNode("1-1", "index.html", index_html),) + assets),)


def test_starter_project_inlines_local_assets():
    html = build_preview_html(initial_tree())
    assert f"<style>{STYLE_CSS}</style>" in html
    assert f"<script>{SCRIPT_JS}</script>" in html
    assert 'href="style.css"' not in html
    assert 'src="script.js"' not in html


def test_remote_references_are_left_alone():
    html = build_preview_html(initial_tree())
    assert '<script src="https://cdn.tailwindcss.com"></script>' in html
    assert 'href="https://fonts.googleapis.com/css2?family=Inter:wght@400;700&display=swap"' in html


def test_missing_assets_become_comments():
    tree = _site(
        '<link rel="stylesheet" href="missing.css"><script src="app.js"></script>',
        FileNode("1-2", "app.js", ""),
    )
    html = build_preview_html(tree)
    assert "<!-- CSS file not found: missing.css -->" in html
    # Empty files count as missing
    assert "<!-- JS file not found: app.js -->" in html


def test_nested_asset_paths_resolve():
    tree = _site(
        '<script src="js/app.js"></script>',
        FolderNode("1-2", "js", (FileNode("1-2-1", "app.js", "run()"),)),
    )
    assert build_preview_html(tree) == "<script>run()</script>"


def test_missing_index():
    tree = tree_store.remove(initial_tree(), "1-1")
    assert build_preview_html(tree) == "<h1>index.html not found in project folder</h1>"
    assert build_preview_html(initial_tree(), root="site") == "<h1>index.html not found in site folder</h1>"


def test_preview_error_description():
    error = PreviewError.from_dict({"message": "x is not defined", "line": "12", "column": 5})
    assert error == PreviewError("x is not defined", 12, 5)
    assert error.describe() == "Error in preview: x is not defined at line 12, column 5"
    assert PreviewError.from_dict({"message": "boom", "line": "?"}).line is None
