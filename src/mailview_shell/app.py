# src/mailview_shell/app.py
from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, List, Optional

from mailview_shell.core.handlers.config_handler import config_help_text, handle_config
from mailview_shell.core.handlers.image_handler import handle_fetch, image_help_text
from mailview_shell.core.handlers.render_handler import (
    handle_batch,
    handle_embed,
    handle_preview,
    handle_sanitize,
    handle_strip,
    handle_text,
    render_help_text,
)
from mailview_shell.core.managers.config_manager import config_manager
from mailview_shell.core.utils.configure_logging import configure_logger
from mailview_shell.errors import MailViewError

logger = logging.getLogger(__name__)

CommandRegistry: Dict[str, Callable[..., int]] = {
    "sanitize": handle_sanitize,
    "strip": handle_strip,
    "text": handle_text,
    "preview": handle_preview,
    "embed": handle_embed,
    "batch": handle_batch,
    "fetch": handle_fetch,
    "config": handle_config,
}

USAGE = "\n".join([
    "Usage: mailview <command> [args]",
    "",
    render_help_text,
    image_help_text,
    config_help_text,
])


def _configure_logging_from_config() -> None:
    configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        config_manager.get_nested("debug.modules", {}),
        config_manager.get_nested("debug.silenced", {}),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for running mailview from the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    _configure_logging_from_config()

    if not args or args[0] in ("-h", "--help", "help"):
        print(USAGE)
        return 0

    name, rest = args[0], args[1:]
    handler = CommandRegistry.get(name)
    if handler is None:
        print(f"Unknown command: '{name}'.\n\n{USAGE}")
        return 2

    logger.debug("Running command '%s' with %d argument(s)", name, len(rest))
    try:
        return handler(rest)
    except (OSError, MailViewError) as e:
        logger.error("Command '%s' failed: %s", name, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
