"""
Provenance Resolution.

Annotation names are not trustworthy: a package can declare its own class called
``Injectable``. The `ProvenanceResolver` answers the question "after following
every alias, which external module was this identifier imported from, and under
which name?" by walking bindings, never by comparing text.

Resolution follows, through any number of package-local modules:

- ``from m import N as A`` and relative variants,
- ``import m as A`` / ``import m`` followed by attribute access (``A.N``),
- ``from pkg import submodule`` followed by attribute access,
- ``from m import *`` re-exports,
- plain ``A = B`` aliases.

The first import that leaves the package (its module is not a file under the
root) is the provenance. Local declarations, unbound names and cycles resolve
to None; resolution never raises.
"""

import logging
from typing import Optional, Set, Tuple, Union

import libcst as cst

from ngcc_reflect.analysis.models import Import
from ngcc_reflect.analysis.program import Program, SourceModule
from ngcc_reflect.analysis.symbol_table import ImportedModule, ImportedName, ValueAssignment

logger = logging.getLogger(__name__)

# A module reference: a loaded package-local module, or the dotted name of an external one.
ModuleRef = Union[SourceModule, str]


class ProvenanceResolver:
  """
  Resolves identifiers to their import origin.
  """

  def __init__(self, program: Program):
    """
    Args:
        program: The package's modules; queried, never modified.
    """
    self.program = program

  def resolve(self, expr: cst.BaseExpression, module: SourceModule) -> Optional[Import]:
    """
    Resolves the provenance of an expression appearing in ``module``.

    Args:
        expr: A ``Name`` or ``Attribute`` expression. Other shapes have no provenance.
        module: The module the expression belongs to.

    Returns:
        Import: The origin, or None when it cannot be traced to an import.
    """
    return self._resolve_expr(expr, module, set())

  def is_import_of(self, expr: cst.BaseExpression, module: SourceModule, target: Import) -> bool:
    return self.resolve(expr, module) == target

  def _resolve_expr(
    self, expr: cst.BaseExpression, module: SourceModule, seen: Set[Tuple[str, str]]
  ) -> Optional[Import]:
    if isinstance(expr, cst.Name):
      return self._resolve_name(module, expr.value, seen)
    if isinstance(expr, cst.Attribute):
      owner = self._resolve_module_expr(expr.value, module, seen)
      return self._member_of(owner, expr.attr.value, seen)
    return None

  def _resolve_name(self, module: SourceModule, name: str, seen: Set[Tuple[str, str]]) -> Optional[Import]:
    key = (module.name, name)
    if key in seen:
      logger.debug(f"Alias cycle while resolving '{name}' in {module.name}")
      return None
    seen.add(key)

    found = self.program.lookup(module, name)
    if found is None:
      return None
    binding, owner = found

    if isinstance(binding, ImportedName):
      # `from pkg import sub` naming a local submodule is a module, not a symbol
      if self.program.get_module(f"{binding.module}.{binding.name}") is not None:
        return None
      return self._member_of(self._module_ref(binding.module), binding.name, seen)
    if isinstance(binding, ValueAssignment):
      return self._resolve_expr(binding.value, owner, seen)
    # Class, function or module binding: declared here, not imported.
    return None

  def _member_of(self, owner: Optional[ModuleRef], name: str, seen: Set[Tuple[str, str]]) -> Optional[Import]:
    if owner is None:
      return None
    if isinstance(owner, str):
      return Import(name=name, from_module=owner)
    return self._resolve_name(owner, name, seen)

  def _module_ref(self, module_name: str) -> ModuleRef:
    local = self.program.get_module(module_name)
    return local if local is not None else module_name

  def _resolve_module_expr(
    self, expr: cst.BaseExpression, module: SourceModule, seen: Set[Tuple[str, str]]
  ) -> Optional[ModuleRef]:
    """Resolves an expression used as a module (the ``a.b`` in ``a.b.Name``)."""
    if isinstance(expr, cst.Attribute):
      base = self._resolve_module_expr(expr.value, module, seen)
      if base is None:
        return None
      if isinstance(base, str):
        return f"{base}.{expr.attr.value}"
      return self._submodule(base, expr.attr.value, seen)

    if not isinstance(expr, cst.Name):
      return None
    return self._module_binding(module, expr.value, seen)

  def _module_binding(self, module: SourceModule, name: str, seen: Set[Tuple[str, str]]) -> Optional[ModuleRef]:
    key = (module.name, f"<module>{name}")
    if key in seen:
      return None
    seen.add(key)

    found = self.program.lookup(module, name)
    if found is None:
      return None
    binding, owner = found

    if isinstance(binding, ImportedModule):
      return self._module_ref(binding.module)
    if isinstance(binding, ImportedName):
      source = self._module_ref(binding.module)
      if isinstance(source, str):
        return f"{binding.module}.{binding.name}"
      return self._submodule(source, binding.name, seen)
    if isinstance(binding, ValueAssignment):
      return self._resolve_module_expr(binding.value, owner, seen)
    return None

  def _submodule(self, package: SourceModule, name: str, seen: Set[Tuple[str, str]]) -> Optional[ModuleRef]:
    local = self.program.get_module(f"{package.name}.{name}")
    if local is not None:
      return local
    # Not a file: maybe the package re-exports a module under that name.
    return self._module_binding(package, name, seen)
