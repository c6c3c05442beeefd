# ============================================
# file: src/mailview_shell/core/handlers/render_handler.py
# ============================================
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from mailview_shell.core.managers.attachment_manager import FileAttachmentManager
from mailview_shell.core.managers.config_manager import config_manager
from mailview_shell.core.services.preference_service import ConfigPreferenceStore
from mailview_shell.errors import MailViewError
from sanitizer.controllers.batch_sanitize_controller import BatchSanitizeController
from sanitizer.services.active_content_service import remove_tracking
from sanitizer.services.embedded_image_service import inline_embedded
from sanitizer.services.sanitize_service import SanitizeService
from textify.services.preview_service import get_preview
from textify.services.text_linearize_service import linearize

logger = logging.getLogger(__name__)

render_help_text = """
  sanitize <file|-> [--hide-quotes] [--no-paranoid]
      Prints the display-safe HTML of a message body.
  strip <file|->
      Quick strip: removes tracking pixel sources, javascript: URLs and scripts.
  text <file|-> [--base-url URL]
      Prints the plain-text rendering (with '>' quote markers).
  preview <file|-> [--size N]
      Prints the one-line preview.
  embed <file|-> --owner ID --attachments DIR
      Inlines cid: images as data: URIs from an attachment directory.
  batch <dir> --out DIR [--workers N] [--hide-quotes] [--no-paranoid]
      Sanitizes every *.html file of a directory in parallel.
""".strip()


def _read_input(name: str, stdin: Optional[str] = None) -> str:
    if name == "-":
        return stdin if stdin is not None else sys.stdin.read()
    return Path(name).read_text(encoding="utf-8", errors="replace")


def _parse(parser: argparse.ArgumentParser, args: List[str]) -> Optional[argparse.Namespace]:
    try:
        return parser.parse_args(args)
    except SystemExit:
        return None


def handle_sanitize(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="sanitize", description="Sanitize a message body.")
    parser.add_argument("file", help="HTML file, or '-' for stdin.")
    parser.add_argument("--hide-quotes", action="store_true", help="Collapse quoted text to an ellipsis.")
    parser.add_argument("--no-paranoid", action="store_true", help="Keep tracking pixels.")
    pargs = _parse(parser, args)
    if pargs is None:
        return 2

    paranoid = False if pargs.no_paranoid else None
    service = SanitizeService(prefs=ConfigPreferenceStore())
    print(service.sanitize(_read_input(pargs.file, _stdin), show_quotes=not pargs.hide_quotes, paranoid=paranoid))
    return 0


def handle_strip(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="strip", description="Quick strip of active content.")
    parser.add_argument("file", help="HTML file, or '-' for stdin.")
    pargs = _parse(parser, args)
    if pargs is None:
        return 2

    print(remove_tracking(_read_input(pargs.file, _stdin), ConfigPreferenceStore()))
    return 0


def handle_text(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="text", description="Plain-text rendering of a message body.")
    parser.add_argument("file", help="HTML file, or '-' for stdin.")
    parser.add_argument("--base-url", default=None, help="Base URL for relative links.")
    pargs = _parse(parser, args)
    if pargs is None:
        return 2

    sys.stdout.write(linearize(_read_input(pargs.file, _stdin), base_url=pargs.base_url))
    return 0


def handle_preview(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="preview", description="Preview text of a message body.")
    parser.add_argument("file", help="HTML file, or '-' for stdin.")
    parser.add_argument("--size", type=int, default=None,
                        help=f"Maximum length (default: {config_manager.get_nested('preview.size', 250)}).")
    pargs = _parse(parser, args)
    if pargs is None:
        return 2

    print(get_preview(_read_input(pargs.file, _stdin), size=pargs.size) or "")
    return 0


def handle_embed(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="embed", description="Inline cid: images as data: URIs.")
    parser.add_argument("file", help="HTML file, or '-' for stdin.")
    parser.add_argument("--owner", type=int, required=True, help="Message id owning the attachments.")
    parser.add_argument("--attachments", type=Path, required=True, help="Directory holding index.json.")
    pargs = _parse(parser, args)
    if pargs is None:
        return 2

    store = FileAttachmentManager(pargs.attachments)
    try:
        print(inline_embedded(pargs.owner, _read_input(pargs.file, _stdin), store))
    except MailViewError as e:
        logger.error("Embedding failed: %s", e)
        return 1
    return 0


def handle_batch(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="batch", description="Sanitize a directory of HTML files.")
    parser.add_argument("source", type=Path, help="Directory with *.html files.")
    parser.add_argument("--out", type=Path, required=True, help="Output directory.")
    parser.add_argument("--workers", type=int, default=None, help="Number of parallel processes.")
    parser.add_argument("--hide-quotes", action="store_true", help="Collapse quoted text to an ellipsis.")
    parser.add_argument("--no-paranoid", action="store_true", help="Keep tracking pixels.")
    parser.add_argument("--quiet", action="store_true", help="No progress bar.")
    pargs = _parse(parser, args)
    if pargs is None:
        return 2

    if not pargs.source.is_dir():
        print(f"Not a directory: {pargs.source}")
        return 1

    paranoid = False if pargs.no_paranoid else ConfigPreferenceStore().get_bool("paranoid", True)
    stats = BatchSanitizeController().sanitize_directory(
        source_dir=pargs.source,
        out_dir=pargs.out,
        show_quotes=not pargs.hide_quotes,
        paranoid=paranoid,
        workers=pargs.workers,
        show_progress=not pargs.quiet,
    )
    print(json.dumps(stats, indent=2))
    return 0 if stats["files_failed"] == 0 else 1
