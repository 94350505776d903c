# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Command-line interface for Local Proofread.

Usage:
    proofread                   Interactive form (stdin piped: same as fix)
    proofread fix [text]        Correct text (argument or stdin) and show the diff
        --copy                  Copy the correction to the clipboard
        --html                  Render the diff as HTML
        --no-diff               Print only the corrected text
    proofread diff <a> <b>      Word diff of two files (no model involved)
        --html                  Render the diff as HTML
    proofread status            Backend, model, host and reachability
    proofread backend           Show current + list available
    proofread backend <name>    Switch backend in config
    proofread config            Show resolved configuration
    proofread config path       Print path to config file
    proofread version           Show version
"""

import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .backends import BACKEND_REGISTRY, get_backend_info
from .clipboard import copy_to_clipboard
from . import config as config_module
from .config import ENV_MODEL, get_config, update_config_field
from .diff import diff_stats, diff_words, render_ansi, render_html
from .stream import Corrector, StreamStatus
from .utils import C_BOLD, C_CYAN, C_DIM, C_GREEN, C_RED, C_RESET, C_YELLOW, log
from .view import TerminalView


def _split_flags(args: List[str], known: Tuple[str, ...]) -> Tuple[List[str], set]:
    """Separate --flags from positional arguments."""
    flags = set()
    positional = []
    for arg in args:
        if arg.startswith("--"):
            if arg not in known:
                print(f"{C_RED}Unknown option: {arg}{C_RESET}", file=sys.stderr)
                sys.exit(2)
            flags.add(arg)
        else:
            positional.append(arg)
    return positional, flags


def _get_config_path() -> Path:
    """Return the config file path."""
    return config_module.CONFIG_FILE


def _color_enabled() -> bool:
    return get_config().ui.color and sys.stdout.isatty()


def cmd_fix(args: list) -> int:
    """Correct text from the argument list or stdin."""
    positional, flags = _split_flags(args, ("--copy", "--html", "--no-diff"))

    if positional:
        text = " ".join(positional)
    elif not sys.stdin.isatty():
        text = sys.stdin.read()
    else:
        print(f"{C_RED}Nothing to correct.{C_RESET} Pass text or pipe it on stdin.", file=sys.stderr)
        return 1

    if not text.strip():
        print(f"{C_RED}Nothing to correct.{C_RESET}", file=sys.stderr)
        return 1

    config = get_config()
    if not config.grammar.model:
        log(f"No model configured - set {ENV_MODEL} or [grammar] model in {_get_config_path()}", "WARN")
        return 1

    try:
        corrector = Corrector.from_config(config)
    except ValueError as e:
        log(str(e), "ERR")
        return 1

    interactive = sys.stdout.isatty()
    # Piped stdout gets only the corrected text unless HTML is asked for
    if "--html" in flags:
        show_diff = "--no-diff" not in flags
    else:
        show_diff = config.ui.show_diff and interactive and "--no-diff" not in flags
    view = TerminalView(
        color=_color_enabled(),
        show_diff=show_diff,
        html="--html" in flags,
        progress=interactive,
        err=sys.stderr,
    )
    corrector.subscribe(view)

    try:
        snapshot = corrector.submit(text)
    finally:
        corrector.close()

    if snapshot.status is not StreamStatus.SUCCESS:
        return 1

    if "--copy" in flags or config.ui.auto_copy:
        if copy_to_clipboard(snapshot.response):
            log("Copied to clipboard", "OK")
        else:
            return 1
    return 0


def cmd_diff(args: list) -> int:
    """Word diff of two files."""
    positional, flags = _split_flags(args, ("--html",))
    if len(positional) != 2:
        print(f"{C_RED}Usage: proofread diff <original> <corrected>{C_RESET}", file=sys.stderr)
        return 2

    texts = []
    for name in positional:
        path = Path(name)
        try:
            texts.append(path.read_text(encoding="utf-8"))
        except OSError as e:
            print(f"{C_RED}Cannot read {path}: {e.strerror}{C_RESET}", file=sys.stderr)
            return 1

    changes = diff_words(texts[0], texts[1])
    if "--html" in flags:
        print(render_html(changes))
    else:
        print(render_ansi(changes, color=_color_enabled()))

    stats = diff_stats(changes)
    print(f"{C_DIM}+{stats.added} -{stats.removed} words{C_RESET}", file=sys.stderr)
    return 0


def cmd_status() -> int:
    """Show backend, model and reachability."""
    config = get_config()
    info = get_backend_info(config.grammar.backend)
    backend = info.factory()
    try:
        reachable = backend.running()
    finally:
        backend.close()

    state = f"{C_GREEN}{C_BOLD}Reachable{C_RESET}" if reachable else f"{C_RED}Unreachable{C_RESET}"
    model = config.grammar.model or f"{C_YELLOW}not set{C_RESET}"
    print(f"  Backend: {C_CYAN}{info.name}{C_RESET}")
    print(f"  Host:    {config.api_host}  {state}")
    print(f"  Model:   {model}")
    print(f"  Config:  {C_DIM}{_get_config_path()}{C_RESET}")
    return 0 if reachable else 1


def cmd_backend(args: list) -> int:
    """Show or switch the backend."""
    config = get_config()
    current = config.grammar.backend

    if not args:
        print(f"  Current backend: {C_CYAN}{current}{C_RESET}")
        print()
        print(f"  {C_BOLD}Available:{C_RESET}")
        for bid, info in BACKEND_REGISTRY.items():
            marker = f"{C_GREEN}●{C_RESET}" if bid == current else " "
            print(f"    {marker} {bid:<12} {C_DIM}{info.description}{C_RESET}")
        return 0

    new_backend = args[0]
    if new_backend not in BACKEND_REGISTRY:
        available = ", ".join(BACKEND_REGISTRY)
        print(f"{C_RED}Unknown backend: {new_backend}{C_RESET}. Available: {available}", file=sys.stderr)
        return 1

    if new_backend == current:
        print(f"Already using {C_CYAN}{new_backend}{C_RESET}")
        return 0

    if not update_config_field("grammar", "backend", new_backend):
        return 1
    print(f"Backend switched: {C_DIM}{current}{C_RESET} → {C_CYAN}{new_backend}{C_RESET}")
    return 0


def cmd_config(args: list) -> int:
    """Show resolved configuration or the config path."""
    if args and args[0] == "path":
        print(_get_config_path())
        return 0

    if args:
        print(f"{C_RED}Unknown config command: {args[0]}{C_RESET}", file=sys.stderr)
        return 1

    config = get_config()
    prompt = config.grammar.system_prompt
    print(f"  {C_BOLD}[grammar]{C_RESET}")
    print(f"    backend        {C_CYAN}{config.grammar.backend}{C_RESET}")
    print(f"    model          {C_CYAN}{config.grammar.model or '-'}{C_RESET}")
    print(f"    system_prompt  {C_DIM}{_preview(prompt) if prompt else '(none)'}{C_RESET}")
    print(f"  {C_BOLD}[ollama]{C_RESET}")
    print(f"    host           {config.ollama.host}")
    print(f"    keep_alive     {config.ollama.keep_alive}")
    print(f"  {C_BOLD}[lm_studio]{C_RESET}")
    print(f"    host           {config.lm_studio.host}")
    print(f"  {C_BOLD}[ui]{C_RESET}")
    print(f"    color          {config.ui.color}")
    print(f"    show_diff      {config.ui.show_diff}")
    print(f"    auto_copy      {config.ui.auto_copy}")
    print(f"  {C_DIM}{_get_config_path()}{C_RESET}")
    return 0


def _preview(text: str, length: int = 50) -> str:
    text = " ".join(text.split())
    return text if len(text) <= length else text[:length] + "..."


def cmd_version() -> int:
    from . import __version__
    print(f"local-proofread {__version__}")
    return 0


def _print_help():
    print(f"""  {C_BOLD}Usage:{C_RESET} proofread [command]

  {C_BOLD}Correct{C_RESET}
    {C_CYAN}(none){C_RESET}          Interactive form
    {C_CYAN}fix [text]{C_RESET}      Correct text from args or stdin  {C_DIM}--copy --html --no-diff{C_RESET}
    {C_CYAN}diff <a> <b>{C_RESET}    Word diff of two files  {C_DIM}--html{C_RESET}

  {C_BOLD}Setup{C_RESET}
    {C_CYAN}status{C_RESET}          Backend, model and reachability
    {C_CYAN}backend [name]{C_RESET}  Show or switch backend
    {C_CYAN}config [path]{C_RESET}   Show configuration or its path
    {C_CYAN}version{C_RESET}         Show version
""")


def cli_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the proofread CLI."""
    args = sys.argv[1:] if argv is None else argv

    if not args:
        if not sys.stdin.isatty():
            return cmd_fix([])
        from .app import main
        return main()

    cmd = args[0]
    rest = args[1:]

    if cmd == "fix":
        return cmd_fix(rest)
    elif cmd == "diff":
        return cmd_diff(rest)
    elif cmd == "status":
        return cmd_status()
    elif cmd == "backend":
        return cmd_backend(rest)
    elif cmd == "config":
        return cmd_config(rest)
    elif cmd == "version":
        return cmd_version()
    elif cmd in ("-h", "--help", "help"):
        _print_help()
        return 0
    else:
        print(f"{C_RED}Unknown command: {cmd}{C_RESET}", file=sys.stderr)
        print(f"{C_DIM}Run 'proofread help' for usage.{C_RESET}", file=sys.stderr)
        return 1


def run():
    """Console-script wrapper."""
    try:
        sys.exit(cli_main())
    except KeyboardInterrupt:
        print()
        sys.exit(130)
