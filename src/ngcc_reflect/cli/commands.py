"""
Reflect Command Handler.

Runs a full pass over a package root and reports the outcome: a rich summary on
the error stream, or the JSON report on stdout.
"""

import json
from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.table import Table

from ngcc_reflect.config import RuntimeConfig
from ngcc_reflect.core.diagnostics import DiagnosticSink
from ngcc_reflect.core.parser import PackageParser, PackageReport
from ngcc_reflect.utils.console import console, log_error, log_info, log_success


def handle_reflect(
  path: Path,
  config: RuntimeConfig,
  json_mode: bool = False,
  trace_path: Optional[Path] = None,
) -> int:
  """
  Reflects over the package rooted at ``path``.

  Args:
      path: Package root directory.
      config: Resolved runtime configuration.
      json_mode: If True, print the report as JSON to stdout and suppress the summary.
      trace_path: If set, write every diagnostic event there as JSON.

  Returns:
      int: 0 if the pass succeeded, 1 if the entry point is missing or outside
      the root, or the pass was aborted.
  """
  entry_point = path / config.entry_point
  if not entry_point.is_file():
    log_error(f"Entry point not found: {entry_point}")
    return 1

  if not json_mode:
    log_info(f"Reflecting over [path]{escape(str(entry_point))}[/path] (core module: [code]{config.core_module}[/code])")

  parser = PackageParser(config=config, sink=DiagnosticSink())
  try:
    report = parser.run(path)
  except (FileNotFoundError, ValueError) as e:
    log_error(escape(str(e)))
    return 1

  if trace_path:
    trace_path.write_text(json.dumps(report.diagnostics, indent=2, default=str), "utf-8")

  if json_mode:
    print(report.model_dump_json(indent=2))
  else:
    _print_summary(report)

  return 0 if report.success else 1


def _print_summary(report: PackageReport) -> None:
  if not report.success:
    for error in report.errors:
      log_error(escape(error))
    return

  table = Table(title="Decorated classes")
  table.add_column("Category", style="bold")
  table.add_column("Classes")
  for category, names in report.decorated_classes.items():
    table.add_row(category, ", ".join(names) if names else "[dim]-[/dim]")
  console.print(table)

  for definition in report.definitions:
    console.print(definition.rstrip(), markup=False, highlight=False)

  total = sum(len(names) for names in report.decorated_classes.values())
  log_success(f"{total} decorated classes, {len(report.definitions)} definitions emitted")
