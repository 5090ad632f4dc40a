"""
Cosmic Builder command line entry point.

Interactive chat over the in-memory project tree, plus a few one-shot
subcommands that work on the stored session.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from cosmicbuilder.config.settings import load_config, resolve_api_key
from cosmicbuilder.core import tree_store
from cosmicbuilder.core.ai.factory import ModelGateway
from cosmicbuilder.core.constants import AI_MODELS, get_model_info
from cosmicbuilder.core.correction_engine import CorrectionEngine
from cosmicbuilder.core.interpreter import ActionInterpreter, MissingParentPolicy
from cosmicbuilder.core.preview import PreviewError
from cosmicbuilder.core.session import SessionState
from cosmicbuilder.core.tree_store import FileNode
from cosmicbuilder.services.session_store import SessionStore
from cosmicbuilder.ui.colors import ACCENT_FG, BOLD, ERROR_FG, MUTED_FG, RESET, SUCCESS_FG, WARNING_FG
from cosmicbuilder.ui.transcript import format_message, format_tree

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  <text>               ask the assistant for a change
  :tree                list the project tree
  :open <id>           open a file in a tab and make it active
  :close <id>          close a tab
  :show [id]           print a file (default: active file)
  :preview [path]      write the preview markup (default: preview.html)
  :error <message>     report a preview runtime error (triggers auto-fix)
  :model [name]        show or switch the model backend
  :clear               clear the chat transcript
  :reset               restore the starter project
  :help                this text
  :quit                exit"""


# =====================================================================
#  WIRING
# =====================================================================

def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _interpreter_from_config(config: Dict[str, Any]) -> ActionInterpreter:
    policy_name = (config.get("interpreter") or {}).get("missing_parent", "root")
    try:
        policy = MissingParentPolicy(policy_name)
    except ValueError:
        logger.warning(f"Unknown interpreter.missing_parent '{policy_name}', using 'root'")
        policy = MissingParentPolicy.ROOT
    return ActionInterpreter(missing_parent=policy)


def _store_from_args(args, config: Dict[str, Any]) -> SessionStore:
    path = args.store or (config.get("storage") or {}).get("path")
    return SessionStore(path=Path(path)) if path else SessionStore()


def build_engine(args) -> CorrectionEngine:
    """Construct the engine from CLI arguments and config."""
    config = load_config(Path(args.config) if args.config else None)
    store = _store_from_args(args, config)
    session = store.load_session()
    if args.provider:
        session.model = args.provider
    gateway = ModelGateway(config)
    return CorrectionEngine(
        session=session,
        complete=gateway.complete,
        interpreter=_interpreter_from_config(config),
        store=store,
        preview_root=(config.get("preview") or {}).get("root"),
    )


# =====================================================================
#  INTERACTIVE CHAT
# =====================================================================

def _save(engine: CorrectionEngine) -> None:
    if engine.store is not None:
        engine.store.save_session(engine.session)


def _print_new_messages(session: SessionState, start: int) -> None:
    for message in session.messages[start:]:
        if message.role != "user":
            print(format_message(message))


async def handle_line(engine: CorrectionEngine, line: str) -> bool:
    """
    Execute one REPL line. Returns False when the session should end.
    """
    session = engine.session
    line = line.strip()
    if not line:
        return True

    if not line.startswith(":"):
        start = len(session.messages)
        await engine.submit_prompt(line)
        _print_new_messages(session, start)
        return True

    command, _, arg = line[1:].partition(" ")
    arg = arg.strip()

    if command in ("quit", "exit", "q"):
        return False
    if command == "help":
        print(HELP_TEXT)
    elif command == "tree":
        print(format_tree(session.tree, session.open_ids, session.active_id))
    elif command == "open":
        if not session.select_file(arg):
            print(f"{ERROR_FG}No file with id {arg}{RESET}")
        _save(engine)
    elif command == "close":
        session.close_file(arg)
        _save(engine)
    elif command == "show":
        node = tree_store.find_by_id(session.tree, arg) if arg else session.active_file
        if isinstance(node, FileNode):
            print(f"{BOLD}{node.name}{RESET}\n{node.content}")
        else:
            print(f"{ERROR_FG}No file to show{RESET}")
    elif command == "preview":
        snapshot = engine.render_preview()
        out = Path(arg or "preview.html")
        out.write_text(snapshot.html, encoding="utf-8")
        print(f"{SUCCESS_FG}Preview written to {out} (revision {snapshot.revision}){RESET}")
    elif command == "error":
        start = len(session.messages)
        result = await engine.report_preview_error(PreviewError(message=arg))
        if result is None and len(session.messages) == start:
            print(f"{WARNING_FG}Error ignored: no auto-fix is pending.{RESET}")
        _print_new_messages(session, start)
    elif command == "model":
        if arg:
            try:
                get_model_info(arg)
            except KeyError:
                print(f"{ERROR_FG}Unknown model '{arg}'{RESET}")
                return True
            session.model = arg
            _save(engine)
        print(f"{ACCENT_FG}Model: {session.model}{RESET}")
    elif command == "clear":
        session.clear_messages()
        _save(engine)
    elif command == "reset":
        if engine.store is not None:
            fresh = engine.store.reset()
        else:
            fresh = SessionState(model=session.model)
        engine.reset_session(fresh)
        print(f"{SUCCESS_FG}Project reset.{RESET}")
    else:
        print(f"{ERROR_FG}Unknown command :{command}{RESET} (try :help)")
    return True


async def run_interactive_chat(engine: CorrectionEngine) -> int:
    print(f"{BOLD}{ACCENT_FG}Cosmic Builder{RESET} (model: {engine.session.model}). Type :help for commands.")
    for message in engine.session.messages[-5:]:
        print(format_message(message))
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        if not await handle_line(engine, line):
            return 0


# =====================================================================
#  SUBCOMMANDS
# =====================================================================

def cmd_chat(args) -> int:
    return asyncio.run(run_interactive_chat(build_engine(args)))


def cmd_preview(args) -> int:
    engine = build_engine(args)
    html = engine.render_preview().html
    if args.out:
        Path(args.out).write_text(html, encoding="utf-8")
        print(f"Preview written to {args.out}")
    else:
        print(html)
    return 0


def cmd_tree(args) -> int:
    session = build_engine(args).session
    print(format_tree(session.tree, session.open_ids, session.active_id, color=sys.stdout.isatty()))
    return 0


def cmd_doctor(args) -> int:
    """Report which backends have credentials."""
    config = load_config(Path(args.config) if args.config else None)
    for info in AI_MODELS:
        if not info.api_key_env_vars:
            status = f"{MUTED_FG}no key needed{RESET}"
        elif resolve_api_key(config, info.id):
            status = f"{SUCCESS_FG}configured{RESET}"
        else:
            status = f"{ERROR_FG}missing ({' or '.join(info.api_key_env_vars)}){RESET}"
        print(f"{info.name:<20} {status}")
    return 0


# =====================================================================
#  CLI ENTRY WITH SUBCOMMANDS
# =====================================================================

def _create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cosmic-builder",
        description="Cosmic Builder: describe a change, let the model edit the project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cosmic-builder                      # Interactive chat
  cosmic-builder --provider deepseek  # Chat using DeepSeek
  cosmic-builder preview --out p.html # Write the preview markup
  cosmic-builder doctor               # Check API keys
        """,
    )
    parser.add_argument("--version", action="version", version="cosmic-builder 0.1.0")
    parser.add_argument("--config", type=str, help="Path to config.json")
    parser.add_argument("--store", type=str, help="Path to the session store file")
    parser.add_argument("--provider", type=str, help="Model backend to use for this session")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("chat", help="Interactive chat (default)")
    parser_preview = subparsers.add_parser("preview", help="Build preview markup from the stored session")
    parser_preview.add_argument("--out", type=str, help="Output file (default: stdout)")
    subparsers.add_parser("tree", help="Print the project tree")
    subparsers.add_parser("doctor", help="Check provider credentials")
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point with subcommand routing."""
    parser = _create_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "preview":
        return cmd_preview(args)
    elif args.command == "tree":
        return cmd_tree(args)
    elif args.command == "doctor":
        return cmd_doctor(args)
    elif args.command in ("chat", None):
        return cmd_chat(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
