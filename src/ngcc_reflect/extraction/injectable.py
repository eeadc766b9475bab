"""
Injectable metadata extraction.

Reads the ``args`` of a matched ``Injectable`` annotation:

- ``{"type": Injectable}`` or ``"args": []``: constructed with its own
  constructor dependencies, no ``provided_in`` scope.
- ``"args": [{...}]``: a single inline dict whose keys select the provider, by
  priority ``use_value``, ``use_existing``, ``use_class``, ``use_factory``; with
  none of them the class itself is constructed. ``provided_in`` sets the scope
  and ``deps`` lists explicit dependencies for ``use_class``/``use_factory``.
"""

import libcst as cst

from ngcc_reflect.analysis.locator import is_none, literal_dict_fields
from ngcc_reflect.analysis.models import DecoratedClass
from ngcc_reflect.errors import ArgumentCountError, StructuralParseError
from ngcc_reflect.extraction.dependencies import get_constructor_dependencies, resolve_dependency_list
from ngcc_reflect.extraction.models import ExtractionContext, InjectableMetadata


def extract_injectable_metadata(decorated: DecoratedClass, context: ExtractionContext) -> InjectableMetadata:
  """
  Builds the `InjectableMetadata` of a class matched as injectable.

  Args:
      decorated: The matched class and annotation.
      context: Extraction services.

  Returns:
      InjectableMetadata: The provider description.

  Raises:
      ArgumentCountError: More than one annotation argument.
      StructuralParseError: The argument is not an inline dict literal, or ``deps``
          is not a list literal.
      ReflectionError: Any constructor dependency failure.
  """
  symbol = decorated.class_symbol
  module = symbol.module
  clazz = symbol.declaration
  name = clazz.name.value
  args = decorated.annotation.arguments

  if not args:
    return InjectableMetadata(
      name=name,
      type=clazz.name,
      provided_in=None,
      deps=get_constructor_dependencies(symbol, context),
    )

  if len(args) > 1:
    raise context.sink.fail(
      ArgumentCountError("Injectable", name, len(args), expected=1),
      module.location(decorated.annotation.node),
    )

  meta_node = args[0]
  if not isinstance(meta_node, cst.Dict):
    raise context.sink.fail(
      StructuralParseError(name, "Injectable metadata must be an inline dict literal"),
      module.location(meta_node),
    )

  meta = literal_dict_fields(meta_node)
  provided_in = meta.get("provided_in")
  if is_none(provided_in):
    provided_in = None

  if "use_value" in meta:
    return InjectableMetadata(name=name, type=clazz.name, provided_in=provided_in, use_value=meta["use_value"])
  if "use_existing" in meta:
    return InjectableMetadata(
      name=name, type=clazz.name, provided_in=provided_in, use_existing=meta["use_existing"]
    )
  if "use_class" in meta:
    deps = resolve_dependency_list(meta["deps"], symbol, context) if "deps" in meta else None
    return InjectableMetadata(
      name=name, type=clazz.name, provided_in=provided_in, use_class=meta["use_class"], deps=deps
    )
  if "use_factory" in meta:
    deps = resolve_dependency_list(meta["deps"], symbol, context) if "deps" in meta else []
    return InjectableMetadata(
      name=name, type=clazz.name, provided_in=provided_in, use_factory=meta["use_factory"], deps=deps
    )

  return InjectableMetadata(
    name=name,
    type=clazz.name,
    provided_in=provided_in,
    deps=get_constructor_dependencies(symbol, context),
  )
