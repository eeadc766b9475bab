"""
Metadata records produced by the extractors and consumed by emitters.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

import libcst as cst

from ngcc_reflect.analysis.locator import AnnotationLocator
from ngcc_reflect.analysis.models import DecoratedClass
from ngcc_reflect.analysis.program import Program
from ngcc_reflect.analysis.provenance import ProvenanceResolver
from ngcc_reflect.config import RuntimeConfig
from ngcc_reflect.core.diagnostics import DiagnosticSink
from ngcc_reflect.enums import ResolvedDependencyKind


@dataclass(frozen=True, eq=False)
class ConstructorDependency:
  """
  What to supply for one constructor parameter.
  """

  token: cst.BaseExpression
  resolved: ResolvedDependencyKind = ResolvedDependencyKind.TOKEN
  optional: bool = False
  self_: bool = False
  skip_self: bool = False
  host: bool = False


@dataclass(frozen=True, eq=False)
class InjectableMetadata:
  """
  Everything needed to generate the injectable definition of a class.

  At most one of the ``use_*`` providers is set. ``provided_in`` is None for a
  null scope. ``deps`` is None when the provider takes no dependencies.
  """

  name: str
  type: cst.BaseExpression
  provided_in: Optional[cst.BaseExpression] = None
  deps: Optional[List[ConstructorDependency]] = None
  use_value: Optional[cst.BaseExpression] = None
  use_existing: Optional[cst.BaseExpression] = None
  use_class: Optional[cst.BaseExpression] = None
  use_factory: Optional[cst.BaseExpression] = None


@dataclass(frozen=True, eq=False)
class AnalysisOutput:
  decorated_class: DecoratedClass
  analysis: Any


@dataclass(frozen=True)
class ExtractionContext:
  """
  Read-only services handed to every extractor.
  """

  program: Program
  resolver: ProvenanceResolver
  locator: AnnotationLocator
  config: RuntimeConfig
  sink: DiagnosticSink
