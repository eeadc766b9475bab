"""
Exception taxonomy for the reflection pipeline.

Every error aborts the current entry-point pass. Each one carries the identifying
context needed to find the offending source (class, parameter, decorator) both
in its message and as attributes, so callers can report it structurally.

Provenance failures are *not* errors: the resolver returns ``None`` and the
caller treats the annotation as unmatched.
"""

from typing import Any, Dict, List, Optional

from ngcc_reflect.enums import DiagnosticCode


class ReflectionError(Exception):
  """
  Base class for failures raised while reflecting over a package.
  """

  code: DiagnosticCode = DiagnosticCode.STRUCTURAL_PARSE

  def __init__(self, message: str, **context: Any):
    """
    Args:
        message: Human readable description.
        **context: Identifying values (class name, parameter, decorator...).
    """
    super().__init__(message)
    self.message = message
    self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}
    self.location: Optional[str] = None


class StructuralParseError(ReflectionError):
  """
  A ``decorators``/``ctor_parameters`` member or an ``args`` entry is present
  but does not have the lowered shape (list literal of dict literals).
  """

  code = DiagnosticCode.STRUCTURAL_PARSE

  def __init__(self, class_name: str, detail: str):
    super().__init__(f"Class '{class_name}': {detail}", class_name=class_name)
    self.class_name = class_name
    self.detail = detail


class ArgumentCountError(ReflectionError):
  """A single-argument decorator was given zero or several arguments."""

  code = DiagnosticCode.ARGUMENT_COUNT

  def __init__(
    self,
    decorator_name: str,
    class_name: str,
    count: int,
    parameter_name: Optional[str] = None,
    expected: int = 1,
  ):
    where = f"parameter '{parameter_name}' of class '{class_name}'" if parameter_name else f"class '{class_name}'"
    super().__init__(
      f"Unexpected number of arguments to @{decorator_name}() on {where}: expected {expected}, got {count}",
      decorator_name=decorator_name,
      class_name=class_name,
      parameter_name=parameter_name,
      count=count,
    )
    self.decorator_name = decorator_name
    self.class_name = class_name
    self.parameter_name = parameter_name
    self.count = count


class UnrecognizedParameterAnnotationError(ReflectionError):
  """A parameter annotation comes from the core module but is not a known one."""

  code = DiagnosticCode.UNRECOGNIZED_PARAMETER_ANNOTATION

  def __init__(self, class_name: str, parameter_name: str, decorator_name: str):
    super().__init__(
      f"Unexpected decorator @{decorator_name} on parameter '{parameter_name}' of class '{class_name}'",
      class_name=class_name,
      parameter_name=parameter_name,
      decorator_name=decorator_name,
    )
    self.class_name = class_name
    self.parameter_name = parameter_name
    self.decorator_name = decorator_name


class UnresolvedDependencyTokenError(ReflectionError):
  """No token expression is left for a parameter after applying its decorators."""

  code = DiagnosticCode.UNRESOLVED_DEPENDENCY_TOKEN

  def __init__(self, class_name: str, parameter_name: str, decorator_names: List[str]):
    super().__init__(
      f"No suitable token for parameter '{parameter_name}' of class '{class_name}' "
      f"with decorators [{', '.join(decorator_names)}]",
      class_name=class_name,
      parameter_name=parameter_name,
      decorator_names=list(decorator_names),
    )
    self.class_name = class_name
    self.parameter_name = parameter_name
    self.decorator_names = list(decorator_names)
