"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Writers for lowered packages under ``tmp_path``.
- Registry and diagnostic sink isolation between tests.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

# Add src to path so we can import 'ngcc_reflect' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from ngcc_reflect.analysis.locator import AnnotationLocator
from ngcc_reflect.analysis.models import ClassSymbol
from ngcc_reflect.analysis.program import Program
from ngcc_reflect.analysis.provenance import ProvenanceResolver
from ngcc_reflect.analysis.scanner import SymbolScanner
from ngcc_reflect.config import RuntimeConfig
from ngcc_reflect.core.diagnostics import DiagnosticSink, reset_sink
from ngcc_reflect.extraction.models import ExtractionContext
from ngcc_reflect.extraction.registry import clear_extractors

PackageWriter = Callable[..., Path]


@pytest.fixture(autouse=True)
def isolate_state():
  """Fresh extractor registry and global sink for every test."""
  clear_extractors()
  reset_sink()
  yield
  clear_extractors()
  reset_sink()


@pytest.fixture
def write_package(tmp_path: Path) -> PackageWriter:
  """
  Returns a function writing ``{relative path: source}`` into a package root.

  Sources are dedented, so tests can use indented triple-quoted strings.
  """

  def _write(files: Dict[str, str], root_name: str = "cars") -> Path:
    root = tmp_path / root_name
    for rel, source in files.items():
      path = root / rel
      path.parent.mkdir(parents=True, exist_ok=True)
      path.write_text(textwrap.dedent(source).lstrip("\n"), "utf-8")
    return root

  return _write


class ReflectedPackage:
  """
  A loaded package plus the services the extraction layer expects.
  """

  def __init__(self, root: Path, config: RuntimeConfig):
    self.config = config
    self.sink = DiagnosticSink()
    self.program = Program(root)
    self.entry = self.program.load_file(root / config.entry_point)
    self.resolver = ProvenanceResolver(self.program)
    self.locator = AnnotationLocator(config)
    self.context = ExtractionContext(
      program=self.program,
      resolver=self.resolver,
      locator=self.locator,
      config=config,
      sink=self.sink,
    )

  def symbols(self) -> Dict[str, ClassSymbol]:
    return {symbol.name: symbol for symbol in SymbolScanner(self.program).scan(self.entry)}

  def symbol(self, name: str) -> ClassSymbol:
    return self.symbols()[name]


@pytest.fixture
def load_package(write_package: PackageWriter) -> Callable[..., ReflectedPackage]:
  """Writes the files and loads the entry point into a `ReflectedPackage`."""

  def _load(files: Dict[str, str], config: RuntimeConfig = None, root_name: str = "cars") -> ReflectedPackage:
    root = write_package(files, root_name=root_name)
    return ReflectedPackage(root, config or RuntimeConfig())

  return _load
