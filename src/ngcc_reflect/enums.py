"""
Enumerations for ngcc-reflect.

This module defines the closed sets of values shared across the reflection
pipeline: the decorator categories a package is grouped by, the dependency kinds
produced by constructor analysis, and the diagnostic codes emitted along the way.
"""

from enum import Enum


class DecoratorCategory(str, Enum):
  """
  Structural roles a decorated class can play.

  The value is the key used in grouped outputs; ``decorator_name`` is the
  original name the matching annotation is imported under in the core module.
  """

  NG_MODULES = "ng_modules"
  PIPES = "pipes"
  DIRECTIVES = "directives"
  COMPONENTS = "components"
  INJECTABLES = "injectables"

  @property
  def decorator_name(self) -> str:
    """The annotation name this category matches (e.g. ``Injectable``)."""
    return _DECORATOR_NAMES[self]


_DECORATOR_NAMES = {
  DecoratorCategory.NG_MODULES: "NgModule",
  DecoratorCategory.PIPES: "Pipe",
  DecoratorCategory.DIRECTIVES: "Directive",
  DecoratorCategory.COMPONENTS: "Component",
  DecoratorCategory.INJECTABLES: "Injectable",
}


class ResolvedDependencyKind(str, Enum):
  """
  How a constructor dependency is satisfied at construction time.
  """

  TOKEN = "Token"
  ATTRIBUTE = "Attribute"
  ELEMENT_REF = "ElementRef"
  INJECTOR = "Injector"
  TEMPLATE_REF = "TemplateRef"
  VIEW_CONTAINER_REF = "ViewContainerRef"


class Severity(str, Enum):
  DEBUG = "debug"
  INFO = "info"
  WARNING = "warning"
  ERROR = "error"


class DiagnosticCode(str, Enum):
  """
  Machine-readable identifiers for diagnostic events.
  """

  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  CLASS_SCANNED = "class_scanned"
  ANNOTATION_MATCHED = "annotation_matched"
  ANNOTATION_REJECTED = "annotation_rejected"  # same name, wrong or no provenance
  DEFINITION_EMITTED = "definition_emitted"
  # Failures
  STRUCTURAL_PARSE = "structural_parse"
  ARGUMENT_COUNT = "argument_count"
  UNRECOGNIZED_PARAMETER_ANNOTATION = "unrecognized_parameter_annotation"
  UNRESOLVED_DEPENDENCY_TOKEN = "unresolved_dependency_token"
