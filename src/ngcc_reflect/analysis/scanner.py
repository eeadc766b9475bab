"""
Symbol Scanner.

Enumerates the classes an entry-point module exports. No filtering on
annotations happens here.
"""

import logging
from typing import List, Optional, Set, Tuple

import libcst as cst

from ngcc_reflect.analysis.models import ClassSymbol
from ngcc_reflect.analysis.program import Program, SourceModule
from ngcc_reflect.analysis.symbol_table import ClassDeclaration, ImportedName, ValueAssignment

logger = logging.getLogger(__name__)


class SymbolScanner:
  """
  Lists exported class symbols, following re-exports to their declarations.
  """

  def __init__(self, program: Program):
    self.program = program

  def scan(self, module: SourceModule) -> List[ClassSymbol]:
    """
    Returns every exported name of ``module`` that denotes a class.

    A class exported under several names is reported once, under the first.

    Args:
        module: The entry-point module.

    Returns:
        List[ClassSymbol]: Symbols in export order.
    """
    symbols: List[ClassSymbol] = []
    seen_declarations: Set[int] = set()

    for name in self.exported_names(module):
      declared = self._resolve_class(module, name, set())
      if declared is None:
        continue
      class_def, owner = declared
      if id(class_def) in seen_declarations:
        continue
      seen_declarations.add(id(class_def))
      symbols.append(ClassSymbol(name=name, declaration=class_def, module=owner))
      logger.debug(f"Exported class {name} declared in {owner.name}")

    return symbols

  def exported_names(self, module: SourceModule, _visited: Optional[Set[str]] = None) -> List[str]:
    """
    The public names of a module: ``__all__`` when it is a literal list,
    otherwise every top-level name without a leading underscore plus the names
    re-exported by ``from <local module> import *``.
    """
    if module.scope.exports is not None:
      return list(module.scope.exports)

    visited = _visited if _visited is not None else set()
    visited.add(module.name)

    names = [name for name in module.scope.bindings if not name.startswith("_")]
    for star in module.scope.star_imports:
      target = self.program.get_module(star)
      if target is None or target.name in visited:
        continue
      for name in self.exported_names(target, visited):
        if name not in names:
          names.append(name)
    return names

  def _resolve_class(
    self, module: SourceModule, name: str, seen: Set[Tuple[str, str]]
  ) -> Optional[Tuple[cst.ClassDef, SourceModule]]:
    key = (module.name, name)
    if key in seen:
      return None
    seen.add(key)

    found = self.program.lookup(module, name)
    if found is None:
      return None
    binding, owner = found

    if isinstance(binding, ClassDeclaration):
      return binding.node, owner
    if isinstance(binding, ImportedName):
      target = self.program.get_module(binding.module)
      if target is not None:
        return self._resolve_class(target, binding.name, seen)
    elif isinstance(binding, ValueAssignment) and isinstance(binding.value, cst.Name):
      return self._resolve_class(owner, binding.value.value, seen)
    return None
