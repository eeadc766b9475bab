"""
Annotation Locator.

Finds the lowered annotation members of a class and validates their shape,
turning the raw CST region into one of the variants of
`ngcc_reflect.analysis.models`:

- ``decorators`` member: `NotAnnotated` | `Malformed` | `AnnotationList`
- ``ctor_parameters`` member: `NotAnnotated` | `Malformed` | `ParameterList`

The locator never raises for shape problems; callers decide whether a
`Malformed` result is fatal.
"""

from typing import Dict, Optional, Tuple

import libcst as cst

from ngcc_reflect.analysis.models import (
  Annotation,
  AnnotationEntry,
  AnnotationList,
  ClassSymbol,
  DecoratorsParse,
  Malformed,
  MalformedAnnotation,
  NotAnnotated,
  ParameterList,
  ParameterRecord,
  ParametersParse,
)
from ngcc_reflect.analysis.program import SourceModule
from ngcc_reflect.analysis.symbol_table import StaticMember, ValueAssignment
from ngcc_reflect.config import RuntimeConfig

# Bound on `X = Y` hops when tracing a member value to its literal.
_MAX_ALIAS_DEPTH = 16


def literal_dict_fields(node: cst.Dict) -> Dict[str, cst.BaseExpression]:
  """
  Maps the string-literal keys of a dict literal to their value expressions.

  Non-literal keys and ``**spread`` elements are ignored.
  """
  fields: Dict[str, cst.BaseExpression] = {}
  for element in node.elements:
    if isinstance(element, cst.DictElement) and isinstance(element.key, cst.SimpleString):
      key = element.key.evaluated_value
      if isinstance(key, str):
        fields[key] = element.value
  return fields


def list_elements(node: cst.List) -> Tuple[cst.BaseExpression, ...]:
  return tuple(element.value for element in node.elements if isinstance(element, cst.Element))


def is_none(node: Optional[cst.BaseExpression]) -> bool:
  return isinstance(node, cst.Name) and node.value == "None"


def parse_annotation(element: cst.BaseExpression) -> Optional[AnnotationEntry]:
  """
  Parses one element of an annotation list.

  Returns:
      An `Annotation`, a `MalformedAnnotation` when ``"args"`` is present but not
      a list literal, or None when the element is not an annotation at all
      (not a dict literal, or no ``"type"`` key).
  """
  if not isinstance(element, cst.Dict):
    return None
  fields = literal_dict_fields(element)
  type_expr = fields.get("type")
  if type_expr is None:
    return None

  args = fields.get("args")
  if args is None:
    return Annotation(element, type_expr)
  if not isinstance(args, cst.List):
    return MalformedAnnotation(element, type_expr, "expected list literal for args")
  return Annotation(element, type_expr, list_elements(args))


def parse_annotation_list(node: cst.List) -> Tuple[AnnotationEntry, ...]:
  entries = []
  for element in list_elements(node):
    parsed = parse_annotation(element)
    if parsed is not None:
      entries.append(parsed)
  return tuple(entries)


class AnnotationLocator:
  """
  Reads the lowered annotation members of classes.
  """

  def __init__(self, config: RuntimeConfig):
    """
    Args:
        config: Supplies the member names to look for.
    """
    self.config = config

  def member(self, symbol: ClassSymbol, name: str) -> Optional[StaticMember]:
    return symbol.module.scope.members_of(symbol.declaration).get(name)

  def locate(self, symbol: ClassSymbol) -> DecoratorsParse:
    """
    Parses the ``decorators`` member of a class.

    Args:
        symbol: The class to inspect.

    Returns:
        DecoratorsParse: The validated variant.
    """
    member = self.member(symbol, self.config.decorators_property)
    if member is None:
      return NotAnnotated()

    value = self._trace_value(member.value, symbol.module)
    if not isinstance(value, cst.List):
      return Malformed(
        member,
        f"expected list literal for '{self.config.decorators_property}', found {type(value).__name__}",
      )
    return AnnotationList(member, parse_annotation_list(value))

  def locate_ctor_parameters(self, symbol: ClassSymbol) -> ParametersParse:
    """
    Parses the ``ctor_parameters`` member of a class.

    The value may be a list literal or a zero-argument lambda returning one.
    Every element must be a dict literal; a ``"decorators"`` entry, when present,
    must be a list literal.

    Args:
        symbol: The class to inspect.

    Returns:
        ParametersParse: The validated variant.
    """
    prop = self.config.ctor_parameters_property
    member = self.member(symbol, prop)
    if member is None:
      return NotAnnotated()

    value = self._trace_value(member.value, symbol.module)
    if isinstance(value, cst.Lambda) and not value.params.params:
      value = value.body
    if not isinstance(value, cst.List):
      return Malformed(member, f"expected list literal for '{prop}', found {type(value).__name__}")

    records = []
    for index, element in enumerate(list_elements(value)):
      if not isinstance(element, cst.Dict):
        return Malformed(member, f"expected dict literal for '{prop}[{index}]', found {type(element).__name__}")
      fields = literal_dict_fields(element)
      type_expr = fields.get("type")
      decorators = fields.get("decorators")
      if decorators is not None and not isinstance(decorators, cst.List):
        return Malformed(member, f"expected list literal for decorators of '{prop}[{index}]'")
      records.append(
        ParameterRecord(
          node=element,
          type_expr=None if is_none(type_expr) else type_expr,
          decorators=parse_annotation_list(decorators) if decorators is not None else (),
        )
      )
    return ParameterList(member, tuple(records))

  def _trace_value(self, value: cst.BaseExpression, module: SourceModule) -> cst.BaseExpression:
    """Follows a bare name to the module-level value it was assigned."""
    for _ in range(_MAX_ALIAS_DEPTH):
      if not isinstance(value, cst.Name):
        break
      binding = module.scope.get(value.value)
      if not isinstance(binding, ValueAssignment):
        break
      value = binding.value
    return value
