"""
Package Parser: orchestration of one entry-point pass.

The pass runs in three phases:

1.  **Parse**: load the entry point into a `Program`, scan its exported classes
    once, and match them against every category, giving a `ParsedPackage`.
2.  **Analyze**: run the registered extractor of each category over its matched
    classes, giving `AnalysisOutput` records keyed by category.
3.  **Transform**: hand every analysis output to the emitter of its category,
    one at a time, giving `TransformResult` records.

Any `ReflectionError` aborts the pass for the whole entry point; there is no
partial result. `run` wraps the three phases and turns such a failure into an
unsuccessful `PackageReport`.
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import libcst as cst
from pydantic import BaseModel, Field

from ngcc_reflect.analysis.locator import AnnotationLocator
from ngcc_reflect.analysis.matcher import AnnotationMatcher
from ngcc_reflect.analysis.models import DecoratedClass, Import
from ngcc_reflect.analysis.program import Program, SourceModule
from ngcc_reflect.analysis.provenance import ProvenanceResolver
from ngcc_reflect.analysis.scanner import SymbolScanner
from ngcc_reflect.config import RuntimeConfig
from ngcc_reflect.core.diagnostics import DiagnosticSink, get_sink
from ngcc_reflect.core.emitter import DefinitionEmitter, InjectableDefinitionEmitter
from ngcc_reflect.enums import DecoratorCategory, DiagnosticCode, Severity
from ngcc_reflect.errors import ReflectionError
from ngcc_reflect.extraction.models import AnalysisOutput, ExtractionContext
from ngcc_reflect.extraction.registry import get_extractor

AnalysisOutputs = Dict[DecoratorCategory, List[AnalysisOutput]]


@dataclass(frozen=True, eq=False)
class ParsedPackage:
  """
  The classes of one entry point, grouped by category in scan order.
  """

  package_path: Path
  entry_point_path: Path
  program: Program
  entry_point_module: SourceModule
  decorated_classes: Mapping[DecoratorCategory, Tuple[DecoratedClass, ...]]


@dataclass(frozen=True, eq=False)
class TransformResult:
  decorated_class: DecoratedClass
  definition: str


class PackageReport(BaseModel):
  """
  Summary of a full pass, suitable for printing or JSON serialization.
  """

  entry_point: str = Field(default="", description="Path of the entry-point file.")
  decorated_classes: Dict[str, List[str]] = Field(
    default_factory=dict, description="Class names matched per category."
  )
  definitions: List[str] = Field(default_factory=list, description="Generated definitions, in emission order.")
  errors: List[str] = Field(default_factory=list, description="Failures that aborted the pass.")
  success: bool = Field(default=True, description="False if the pass was aborted.")
  diagnostics: List[Dict[str, Any]] = Field(default_factory=list, description="Structured diagnostic events.")


class PackageParser:
  """
  Drives the parse, analyze and transform phases over an entry point.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    sink: Optional[DiagnosticSink] = None,
    emitters: Optional[Dict[DecoratorCategory, DefinitionEmitter]] = None,
  ):
    """
    Args:
        config: Runtime settings. Defaults are used when None.
        sink: Destination of diagnostics. The process-wide sink when None.
        emitters: Emitter per category. Defaults to the injectable emitter.
    """
    self.config = config or RuntimeConfig()
    self.sink = sink or get_sink()
    self.emitters = emitters if emitters is not None else {DecoratorCategory.INJECTABLES: InjectableDefinitionEmitter()}
    self.locator = AnnotationLocator(self.config)

  def category_target(self, category: DecoratorCategory) -> Import:
    """The provenance an annotation needs to belong to ``category``."""
    return Import(name=category.decorator_name, from_module=self.config.core_module)

  def parse_entry_point(self, package_path: Path, entry_point: Optional[str] = None) -> ParsedPackage:
    """
    Loads the entry point and groups its exported classes by category.

    Args:
        package_path: Root directory of the package.
        entry_point: Entry-point file relative to the root (config default if None).

    Returns:
        ParsedPackage: The grouped classes.

    Raises:
        FileNotFoundError: If the entry-point file does not exist.
        StructuralParseError: If a class has a malformed annotation member.
    """
    entry_point_path = (package_path / (entry_point or self.config.entry_point)).resolve()
    self.sink.start_phase("Parse", str(entry_point_path))
    try:
      program = Program(package_path)
      module = program.load_file(entry_point_path)
      symbols = SymbolScanner(program).scan(module)
      for symbol in symbols:
        self.sink.report(
          Severity.DEBUG,
          DiagnosticCode.CLASS_SCANNED,
          f"Scanned exported class {symbol.name}",
          location=symbol.module.location(symbol.declaration),
        )

      matcher = AnnotationMatcher(ProvenanceResolver(program), self.locator, self.sink)
      grouped = {
        category: tuple(matcher.find_decorated_classes(symbols, self.category_target(category)))
        for category in DecoratorCategory
      }
    finally:
      self.sink.end_phase()

    return ParsedPackage(
      package_path=program.root,
      entry_point_path=entry_point_path,
      program=program,
      entry_point_module=module,
      decorated_classes=MappingProxyType(grouped),
    )

  def analyze_decorators(self, parsed: ParsedPackage) -> AnalysisOutputs:
    """
    Runs the registered extractor of each category over its classes.

    Categories without an extractor are left out of the result.
    """
    context = ExtractionContext(
      program=parsed.program,
      resolver=ProvenanceResolver(parsed.program),
      locator=self.locator,
      config=self.config,
      sink=self.sink,
    )
    outputs: AnalysisOutputs = {}
    self.sink.start_phase("Analyze")
    try:
      for category, decorated_classes in parsed.decorated_classes.items():
        extractor = get_extractor(category)
        if extractor is None:
          continue
        outputs[category] = [
          AnalysisOutput(decorated_class=d, analysis=extractor(d, context)) for d in decorated_classes
        ]
    finally:
      self.sink.end_phase()
    return outputs

  def transform_decorators(self, outputs: AnalysisOutputs) -> Dict[DecoratorCategory, List[TransformResult]]:
    """
    Hands every analysis output to the emitter of its category.

    Categories without an emitter are skipped.
    """
    results: Dict[DecoratorCategory, List[TransformResult]] = {}
    self.sink.start_phase("Transform")
    try:
      for category, analysis_outputs in outputs.items():
        emitter = self.emitters.get(category)
        if emitter is None:
          continue
        for output in analysis_outputs:
          definition = emitter.emit(output.analysis)
          symbol = output.decorated_class.class_symbol
          self.sink.report(
            Severity.INFO,
            DiagnosticCode.DEFINITION_EMITTED,
            f"Emitted {category.decorator_name} definition for {symbol.class_name}",
            location=symbol.module.location(symbol.declaration),
            definition=definition.strip(),
          )
          results.setdefault(category, []).append(TransformResult(output.decorated_class, definition))
    finally:
      self.sink.end_phase()
    return results

  def run(self, package_path: Path, entry_point: Optional[str] = None) -> PackageReport:
    """
    Runs all three phases and summarizes them.

    Reflection failures, syntax errors and undecodable sources in the package
    produce an unsuccessful report without definitions; a missing entry point
    still raises.

    Args:
        package_path: Root directory of the package.
        entry_point: Entry-point file relative to the root (config default if None).

    Returns:
        PackageReport: The summary.
    """
    report = PackageReport(entry_point=str(package_path / (entry_point or self.config.entry_point)))
    try:
      parsed = self.parse_entry_point(package_path, entry_point)
      report.entry_point = str(parsed.entry_point_path)
      report.decorated_classes = {
        category.value: [d.class_symbol.class_name for d in decorated]
        for category, decorated in parsed.decorated_classes.items()
      }
      results = self.transform_decorators(self.analyze_decorators(parsed))
    except ReflectionError as e:
      report.success = False
      report.errors.append(f"{e.location}: {e.message}" if e.location else e.message)
      report.decorated_classes = {}
    except cst.ParserSyntaxError as e:
      report.success = False
      report.errors.append(f"Syntax error: {e}")
    except UnicodeDecodeError as e:
      report.success = False
      report.errors.append(f"Cannot decode source: {e}")
    else:
      report.definitions = [r.definition for category_results in results.values() for r in category_results]

    report.diagnostics = self.sink.export()
    return report
