"""Linkmark CLI entry point.

Allows running via `python -m linkmark` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import logging
import sys

from .version import get_version_string

logger = logging.getLogger(__name__)

USAGE = """usage: linkmark [--version] [--strip] [FILE]

  FILE       markdown file to edit (created on first save)
  --strip    print FILE as plain text and exit
  --version  print version and exit"""


def main() -> None:
    # Very small arg parsing to support version, strip and optional filename
    args = sys.argv[1:]
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return
    if args and args[0] in ("--help", "-h"):
        print(USAGE)
        return
    if args and args[0] == "--strip":
        if len(args) != 2:
            print(USAGE, file=sys.stderr)
            sys.exit(2)
        from .markdown import strip_markdown
        with open(args[1], "r", encoding="utf-8") as f:
            print(strip_markdown(f.read()))
        return

    # Lazy import to avoid importing UI deps for --version
    from .editor import Editor
    from .settings import configure_logging

    log_file = configure_logging()
    logger.info(f"Starting linkmark, logging to {log_file}")

    editor = Editor()
    if args:
        editor.load_file(args[0])
    editor.run()


if __name__ == "__main__":  # pragma: no cover
    main()
