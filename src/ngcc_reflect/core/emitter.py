"""
Definition Emitters.

An emitter turns one category's metadata record into generated source. The
pipeline only depends on the `DefinitionEmitter` protocol; the
`InjectableDefinitionEmitter` here is the reference implementation for
injectables and builds its output with LibCST nodes, reusing the token
expressions recovered from the package verbatim.

Example output::

    Car.ng_injectable_def = define_injectable(token=Car, provided_in="root", factory=lambda: Car(inject(Engine), inject_element_ref()))
"""

from typing import Any, List, Optional, Protocol

import libcst as cst

from ngcc_reflect.enums import ResolvedDependencyKind
from ngcc_reflect.extraction.models import ConstructorDependency, InjectableMetadata

# Bit values understood by `inject(token, flags)`
FLAG_HOST = 1
FLAG_SELF = 2
FLAG_SKIP_SELF = 4
FLAG_OPTIONAL = 8

_NO_SPACE = cst.SimpleWhitespace("")


class DefinitionEmitter(Protocol):
  def emit(self, metadata: Any) -> str: ...


def inject_flags(dep: ConstructorDependency) -> int:
  flags = 0
  if dep.host:
    flags |= FLAG_HOST
  if dep.self_:
    flags |= FLAG_SELF
  if dep.skip_self:
    flags |= FLAG_SKIP_SELF
  if dep.optional:
    flags |= FLAG_OPTIONAL
  return flags


def _call(func: str, *args: cst.BaseExpression, **kwargs: cst.BaseExpression) -> cst.Call:
  arguments = [cst.Arg(value=a) for a in args]
  for key, value in kwargs.items():
    arguments.append(
      cst.Arg(
        value=value,
        keyword=cst.Name(key),
        equal=cst.AssignEqual(whitespace_before=_NO_SPACE, whitespace_after=_NO_SPACE),
      )
    )
  return cst.Call(func=cst.Name(func), args=arguments)


def dependency_expression(dep: ConstructorDependency) -> cst.BaseExpression:
  """
  Renders the injection call for one dependency.

  Args:
      dep: The resolved dependency.

  Returns:
      cst.BaseExpression: e.g. ``inject(Engine, 8)`` or ``inject_attribute("title")``.
  """
  flags = inject_flags(dep)
  flag_args = [cst.Integer(str(flags))] if flags else []

  if dep.resolved == ResolvedDependencyKind.ATTRIBUTE:
    return _call("inject_attribute", dep.token)
  if dep.resolved == ResolvedDependencyKind.ELEMENT_REF:
    return _call("inject_element_ref")
  if dep.resolved == ResolvedDependencyKind.TEMPLATE_REF:
    return _call("inject_template_ref")
  if dep.resolved == ResolvedDependencyKind.VIEW_CONTAINER_REF:
    return _call("inject_view_container_ref")
  if dep.resolved == ResolvedDependencyKind.INJECTOR:
    return _call("inject", cst.Name("INJECTOR"), *flag_args)
  return _call("inject", dep.token, *flag_args)


class InjectableDefinitionEmitter:
  """
  Emits ``<Class>.<attribute> = define_injectable(...)`` for `InjectableMetadata`.
  """

  def __init__(self, attribute: str = "ng_injectable_def"):
    self.attribute = attribute

  def emit(self, metadata: InjectableMetadata) -> str:
    """
    Args:
        metadata: The extracted injectable description.

    Returns:
        str: One line of Python source, newline terminated.
    """
    definition = _call(
      "define_injectable",
      token=metadata.type,
      provided_in=metadata.provided_in if metadata.provided_in is not None else cst.Name("None"),
      factory=cst.Lambda(params=cst.Parameters(), body=self._factory_body(metadata)),
    )
    target = cst.Attribute(value=cst.Name(metadata.name), attr=cst.Name(self.attribute))
    statement = cst.SimpleStatementLine(body=[cst.Assign(targets=[cst.AssignTarget(target=target)], value=definition)])
    return cst.Module(body=[statement]).code

  def _factory_body(self, metadata: InjectableMetadata) -> cst.BaseExpression:
    if metadata.use_value is not None:
      return metadata.use_value
    if metadata.use_existing is not None:
      return _call("inject", metadata.use_existing)
    if metadata.use_factory is not None:
      return cst.Call(func=metadata.use_factory, args=self._dependency_args(metadata.deps))
    if metadata.use_class is not None:
      return cst.Call(func=metadata.use_class, args=self._dependency_args(metadata.deps))
    return cst.Call(func=metadata.type, args=self._dependency_args(metadata.deps))

  def _dependency_args(self, deps: Optional[List[ConstructorDependency]]) -> List[cst.Arg]:
    return [cst.Arg(value=dependency_expression(dep)) for dep in deps or []]
