"""
Main Entry Point for the ngcc-reflect CLI.

This module handles argument parsing and dispatches to the command handler
defined in `ngcc_reflect.cli.commands`.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from ngcc_reflect import __version__
from ngcc_reflect.cli import commands
from ngcc_reflect.config import RuntimeConfig
from ngcc_reflect.utils.console import log_error


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, 1 for a missing entry point or an aborted pass).
  """
  parser = argparse.ArgumentParser(description="ngcc-reflect: Annotation provenance reflection for lowered packages")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("path", type=Path, help="Root directory of the lowered package")
  parser.add_argument("--entry-point", default=None, help="Entry-point file inside the root (default: from toml)")
  parser.add_argument("--core-module", default=None, help="Module trusted annotations come from (default: from toml)")
  parser.add_argument("--json", action="store_true", help="Print the report as JSON on stdout")
  parser.add_argument("--trace", type=Path, default=None, help="Dump all diagnostic events to a JSON file")

  args = parser.parse_args(argv)

  try:
    config = RuntimeConfig.load(core_module=args.core_module, entry_point=args.entry_point, search_path=args.path)
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  return commands.handle_reflect(args.path, config, json_mode=args.json, trace_path=args.trace)


if __name__ == "__main__":
  raise SystemExit(main())
