"""
Annotation Matcher.

Decides whether a class carries the annotation of a requested category, where a
category is identified by its provenance (module + original name), e.g.
``Import("Injectable", "angular.core")``.
"""

from typing import List, Optional

import libcst as cst

from ngcc_reflect.analysis.locator import AnnotationLocator
from ngcc_reflect.analysis.models import (
  ClassSymbol,
  DecoratedClass,
  Import,
  Malformed,
  MalformedAnnotation,
  NotAnnotated,
)
from ngcc_reflect.analysis.provenance import ProvenanceResolver
from ngcc_reflect.core.diagnostics import DiagnosticSink
from ngcc_reflect.enums import DiagnosticCode, Severity
from ngcc_reflect.errors import StructuralParseError


class AnnotationMatcher:
  """
  Combines the `AnnotationLocator` with the `ProvenanceResolver`.
  """

  def __init__(self, resolver: ProvenanceResolver, locator: AnnotationLocator, sink: DiagnosticSink):
    self.resolver = resolver
    self.locator = locator
    self.sink = sink

  def match(self, symbol: ClassSymbol, target: Import) -> Optional[DecoratedClass]:
    """
    Returns the first annotation of ``symbol`` whose type resolves to ``target``.

    Args:
        symbol: The class to inspect.
        target: Required provenance of the annotation type.

    Returns:
        DecoratedClass: The match, or None if the class is not annotated with
        ``target`` (including look-alikes that are declared locally).

    Raises:
        StructuralParseError: If the annotation member, or the ``args`` of the
            matching entry, does not have the lowered shape.
    """
    module = symbol.module
    parsed = self.locator.locate(symbol)

    if isinstance(parsed, NotAnnotated):
      return None
    if isinstance(parsed, Malformed):
      raise self.sink.fail(
        StructuralParseError(symbol.class_name, parsed.reason),
        module.location(parsed.member.node),
      )

    for entry in parsed.entries:
      origin = self.resolver.resolve(entry.type_expr, module)
      if origin != target:
        self._note_lookalike(symbol, entry.type_expr, origin, target)
        continue
      if isinstance(entry, MalformedAnnotation):
        raise self.sink.fail(StructuralParseError(symbol.class_name, entry.reason), module.location(entry.node))

      self.sink.report(
        Severity.INFO,
        DiagnosticCode.ANNOTATION_MATCHED,
        f"{symbol.class_name} is annotated with @{target.name}",
        location=module.location(entry.node),
        class_name=symbol.class_name,
        annotation=str(target),
      )
      return DecoratedClass(class_symbol=symbol, decorators_member=parsed.member, annotation=entry)

    return None

  def find_decorated_classes(self, symbols: List[ClassSymbol], target: Import) -> List[DecoratedClass]:
    """Matches every symbol, in order, keeping those annotated with ``target``."""
    decorated = []
    for symbol in symbols:
      match = self.match(symbol, target)
      if match is not None:
        decorated.append(match)
    return decorated

  def _note_lookalike(
    self, symbol: ClassSymbol, type_expr: cst.BaseExpression, origin: Optional[Import], target: Import
  ) -> None:
    name = type_expr.value if isinstance(type_expr, cst.Name) else None
    if isinstance(type_expr, cst.Attribute):
      name = type_expr.attr.value
    if name != target.name:
      return
    self.sink.report(
      Severity.DEBUG,
      DiagnosticCode.ANNOTATION_REJECTED,
      f"{symbol.class_name}: '{name}' is not {target} (resolved to {origin or 'no import'})",
      location=symbol.module.location(type_expr),
      class_name=symbol.class_name,
    )
