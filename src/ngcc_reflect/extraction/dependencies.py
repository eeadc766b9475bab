"""
Constructor Dependency Resolution.

Computes, for every ``__init__`` parameter of a class, the token to inject and
how to inject it.

Per parameter:

1.  The token defaults to the declared type reference: the ``"type"`` of the
    matching ``ctor_parameters`` entry, or the ``__init__`` annotation when the
    class has no ``ctor_parameters`` member. An entry whose type is ``None``
    declares no token.
2.  The kind defaults to ``Token`` and every flag to False.
3.  Parameter decorators imported from the core module are applied in order:
    ``Inject(token)`` and ``Attribute(name)`` replace the token (``Attribute``
    also sets the kind), ``Optional``/``Self``/``SkipSelf``/``Host`` set flags.
    Any other core decorator is an error; decorators from other modules are
    ignored.
4.  A parameter left without a token is an error.
5.  A bare identifier token imported from the core module as ``ElementRef``,
    ``Injector``, ``TemplateRef`` or ``ViewContainerRef`` switches the kind to
    that special reference.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import libcst as cst

from ngcc_reflect.analysis.models import (
  Annotation,
  ClassSymbol,
  Import,
  Malformed,
  MalformedAnnotation,
  ParameterList,
)
from ngcc_reflect.analysis.locator import list_elements
from ngcc_reflect.analysis.program import SourceModule
from ngcc_reflect.enums import ResolvedDependencyKind
from ngcc_reflect.errors import (
  ArgumentCountError,
  StructuralParseError,
  UnrecognizedParameterAnnotationError,
  UnresolvedDependencyTokenError,
)
from ngcc_reflect.extraction.models import ConstructorDependency, ExtractionContext

# Decorator name -> ConstructorDependency flag it sets.
_FLAG_DECORATORS: Dict[str, str] = {
  "Optional": "optional",
  "SkipSelf": "skip_self",
  "Self": "self_",
  "Host": "host",
}

_SPECIAL_KINDS: Dict[str, ResolvedDependencyKind] = {
  "ElementRef": ResolvedDependencyKind.ELEMENT_REF,
  "Injector": ResolvedDependencyKind.INJECTOR,
  "TemplateRef": ResolvedDependencyKind.TEMPLATE_REF,
  "ViewContainerRef": ResolvedDependencyKind.VIEW_CONTAINER_REF,
}


@dataclass(frozen=True, eq=False)
class CtorParameter:
  """
  A constructor parameter with its lowered type reference and decorators.
  """

  name: str
  node: cst.Param
  type_expr: Optional[cst.BaseExpression]
  decorators: Tuple[Annotation, ...] = ()


def find_constructor(class_def: cst.ClassDef) -> Optional[cst.FunctionDef]:
  body = class_def.body
  if not isinstance(body, cst.IndentedBlock):
    return None
  for stmt in body.body:
    if isinstance(stmt, cst.FunctionDef) and stmt.name.value == "__init__":
      return stmt
  return None


def _declared_parameters(init: Optional[cst.FunctionDef]) -> List[cst.Param]:
  if init is None:
    return []
  params = init.params
  positional = [*params.posonly_params, *params.params][1:]  # drop `self`
  return [*positional, *params.kwonly_params]


def _annotation_type(param: cst.Param) -> Optional[cst.BaseExpression]:
  if param.annotation is None:
    return None
  annotation = param.annotation.annotation
  # String annotations are forward references, not value expressions
  if isinstance(annotation, (cst.SimpleString, cst.ConcatenatedString, cst.FormattedString)):
    return None
  return annotation


def reflect_constructor_parameters(symbol: ClassSymbol, context: ExtractionContext) -> List[CtorParameter]:
  """
  Pairs the ``__init__`` parameters of a class with its ``ctor_parameters`` entries.

  A class without ``__init__`` has no parameters.

  Args:
      symbol: The class to inspect.
      context: Extraction services.

  Returns:
      List[CtorParameter]: Parameters in declaration order.

  Raises:
      StructuralParseError: If ``ctor_parameters`` is malformed, has a malformed
          decorator entry, or does not have one entry per parameter.
  """
  module = symbol.module
  declared = _declared_parameters(find_constructor(symbol.declaration))
  parsed = context.locator.locate_ctor_parameters(symbol)

  if isinstance(parsed, Malformed):
    raise context.sink.fail(
      StructuralParseError(symbol.class_name, parsed.reason),
      module.location(parsed.member.node),
    )

  records = parsed.records if isinstance(parsed, ParameterList) else None
  if records is not None and len(records) != len(declared):
    raise context.sink.fail(
      StructuralParseError(
        symbol.class_name,
        f"'{context.config.ctor_parameters_property}' lists {len(records)} entries "
        f"for {len(declared)} constructor parameters",
      ),
      module.location(parsed.member.node),
    )

  parameters = []
  for index, param in enumerate(declared):
    record = records[index] if records is not None else None
    # Annotations stand in only when the class has no ctor_parameters member
    type_expr = record.type_expr if record is not None else _annotation_type(param)

    decorators = []
    for entry in record.decorators if record is not None else ():
      if isinstance(entry, MalformedAnnotation):
        raise context.sink.fail(
          StructuralParseError(symbol.class_name, f"parameter '{param.name.value}': {entry.reason}"),
          module.location(entry.node),
        )
      decorators.append(entry)

    parameters.append(
      CtorParameter(name=param.name.value, node=param, type_expr=type_expr, decorators=tuple(decorators))
    )
  return parameters


def get_constructor_dependencies(symbol: ClassSymbol, context: ExtractionContext) -> List[ConstructorDependency]:
  """
  Resolves one `ConstructorDependency` per constructor parameter.

  Args:
      symbol: The class whose constructor is analyzed.
      context: Extraction services.

  Returns:
      List[ConstructorDependency]: In parameter declaration order.

  Raises:
      ArgumentCountError: ``Inject``/``Attribute`` without exactly one argument.
      UnrecognizedParameterAnnotationError: Unknown core-module parameter decorator.
      UnresolvedDependencyTokenError: No token left for a parameter.
      StructuralParseError: Malformed ``ctor_parameters``.
  """
  module = symbol.module
  core = context.config.core_module
  dependencies = []

  for param in reflect_constructor_parameters(symbol, context):
    token = param.type_expr
    resolved = ResolvedDependencyKind.TOKEN
    flags = {}
    observed = []

    for decorator in param.decorators:
      origin = context.resolver.resolve(decorator.type_expr, module)
      observed.append(str(origin) if origin is not None else module.code_for(decorator.type_expr))
      if origin is None or origin.from_module != core:
        continue

      if origin.name == "Inject":
        token = _single_argument(decorator, origin, symbol, param, context)
      elif origin.name in _FLAG_DECORATORS:
        flags[_FLAG_DECORATORS[origin.name]] = True
      elif origin.name == "Attribute":
        token = _single_argument(decorator, origin, symbol, param, context)
        resolved = ResolvedDependencyKind.ATTRIBUTE
      else:
        raise context.sink.fail(
          UnrecognizedParameterAnnotationError(symbol.class_name, param.name, origin.name),
          module.location(decorator.node),
        )

    if token is None:
      raise context.sink.fail(
        UnresolvedDependencyTokenError(symbol.class_name, param.name, observed),
        module.location(param.node),
      )

    resolved = classify_token(token, module, context, resolved)
    dependencies.append(ConstructorDependency(token=token, resolved=resolved, **flags))

  return dependencies


def classify_token(
  token: cst.BaseExpression,
  module: SourceModule,
  context: ExtractionContext,
  resolved: ResolvedDependencyKind = ResolvedDependencyKind.TOKEN,
) -> ResolvedDependencyKind:
  """
  Returns the special reference kind of a bare identifier token, else ``resolved``.
  """
  if not isinstance(token, cst.Name):
    return resolved
  origin = context.resolver.resolve(token, module)
  if origin is not None and origin.from_module == context.config.core_module:
    return _SPECIAL_KINDS.get(origin.name, resolved)
  return resolved


def resolve_dependency_list(
  deps: cst.BaseExpression, symbol: ClassSymbol, context: ExtractionContext
) -> List[ConstructorDependency]:
  """
  Resolves an explicit provider ``deps`` list, as given to ``use_factory``.

  Each element is either a token, or a list of core-module flag decorators
  (``Optional``, ``Self``, ``SkipSelf``, ``Host``, bare or called) and
  ``Inject(token)`` calls, with the token as the remaining plain item.

  Raises:
      StructuralParseError: If ``deps`` is not a list literal.
      ArgumentCountError: If an ``Inject`` marker does not take exactly one argument.
      UnresolvedDependencyTokenError: If an element yields no token.
  """
  module = symbol.module
  if not isinstance(deps, cst.List):
    raise context.sink.fail(
      StructuralParseError(symbol.class_name, "expected list literal for deps"),
      module.location(deps),
    )

  dependencies = []
  for index, element in enumerate(list_elements(deps)):
    if not isinstance(element, cst.List):
      dependencies.append(ConstructorDependency(token=element, resolved=classify_token(element, module, context)))
      continue

    token = None
    flags = {}
    observed = []
    for item in list_elements(element):
      origin, call = _core_marker(item, module, context)
      if origin is None:
        token = item
        continue
      observed.append(str(origin))
      if origin.name in _FLAG_DECORATORS:
        flags[_FLAG_DECORATORS[origin.name]] = True
        continue
      count = len(call.args) if call is not None else 0
      if count != 1:
        raise context.sink.fail(
          ArgumentCountError("Inject", symbol.class_name, count, parameter_name=f"deps[{index}]"),
          module.location(item),
        )
      token = call.args[0].value

    if token is None:
      raise context.sink.fail(
        UnresolvedDependencyTokenError(symbol.class_name, f"deps[{index}]", observed),
        module.location(element),
      )
    dependencies.append(
      ConstructorDependency(token=token, resolved=classify_token(token, module, context), **flags)
    )
  return dependencies


def _core_marker(
  item: cst.BaseExpression, module: SourceModule, context: ExtractionContext
) -> Tuple[Optional[Import], Optional[cst.Call]]:
  """Provenance of a deps item used as a marker (``Optional`` or ``Optional()``)."""
  call = item if isinstance(item, cst.Call) else None
  target = call.func if call is not None else item
  origin = context.resolver.resolve(target, module)
  if origin is None or origin.from_module != context.config.core_module:
    return None, None
  if origin.name not in _FLAG_DECORATORS and origin.name != "Inject":
    return None, None
  return origin, call


def _single_argument(
  decorator: Annotation,
  origin: Import,
  symbol: ClassSymbol,
  param: CtorParameter,
  context: ExtractionContext,
) -> cst.BaseExpression:
  args = decorator.arguments
  if len(args) != 1:
    raise context.sink.fail(
      ArgumentCountError(origin.name, symbol.class_name, len(args), parameter_name=param.name),
      symbol.module.location(decorator.node),
    )
  return args[0]
