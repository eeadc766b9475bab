"""
Data structures produced by the analysis passes.

The parse of a ``decorators`` member is expressed as tagged variants
(`NotAnnotated`, `Malformed`, `AnnotationList`) so that shape validation happens
once, up front, and consumers only branch on the variant.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import libcst as cst

from ngcc_reflect.analysis.program import SourceModule
from ngcc_reflect.analysis.symbol_table import StaticMember


@dataclass(frozen=True)
class Import:
  """
  The provenance of an identifier: the external module it was imported from and
  the name it carries there.
  """

  name: str
  from_module: str

  def __str__(self) -> str:
    return f"{self.from_module}#{self.name}"


@dataclass(frozen=True, eq=False)
class ClassSymbol:
  """
  An exported class and the module that declares it.
  """

  name: str
  """The name the class is exported under from the entry point."""

  declaration: cst.ClassDef
  module: SourceModule

  @property
  def class_name(self) -> str:
    """The declared name of the class (may differ from an aliased export)."""
    return self.declaration.name.value


@dataclass(frozen=True, eq=False)
class Annotation:
  """
  One ``{"type": <expr>, "args": [...]}`` element of an annotation list.
  """

  node: cst.Dict
  type_expr: cst.BaseExpression
  args: Optional[Tuple[cst.BaseExpression, ...]] = None

  @property
  def arguments(self) -> Tuple[cst.BaseExpression, ...]:
    return self.args or ()


@dataclass(frozen=True, eq=False)
class MalformedAnnotation:
  """An element with a ``"type"`` whose ``"args"`` is not a list literal."""

  node: cst.Dict
  type_expr: cst.BaseExpression
  reason: str


AnnotationEntry = Union[Annotation, MalformedAnnotation]


@dataclass(frozen=True, eq=False)
class NotAnnotated:
  """The class has no annotation member at all."""


@dataclass(frozen=True, eq=False)
class Malformed:
  """The member exists but its value breaks the lowered shape."""

  member: StaticMember
  reason: str


@dataclass(frozen=True, eq=False)
class AnnotationList:
  member: StaticMember
  entries: Tuple[AnnotationEntry, ...]


DecoratorsParse = Union[NotAnnotated, Malformed, AnnotationList]


@dataclass(frozen=True, eq=False)
class ParameterRecord:
  """
  One ``{"type": <expr>, "decorators": [...]}`` element of ``ctor_parameters``.
  """

  node: cst.Dict
  type_expr: Optional[cst.BaseExpression]
  decorators: Tuple[AnnotationEntry, ...] = ()


@dataclass(frozen=True, eq=False)
class ParameterList:
  member: StaticMember
  records: Tuple[ParameterRecord, ...]


ParametersParse = Union[NotAnnotated, Malformed, ParameterList]


@dataclass(frozen=True, eq=False)
class DecoratedClass:
  """
  A class matched against one category, after provenance verification.
  """

  class_symbol: ClassSymbol
  decorators_member: StaticMember
  annotation: Annotation
