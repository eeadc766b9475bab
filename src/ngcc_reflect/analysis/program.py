"""
Program: the read-only resolution service for one package.

A `Program` owns the parsed modules of a package root. Modules are parsed with
LibCST on first request (the entry point, or any package-local module an import
chain leads to) and never mutated afterwards; every component of the pipeline
queries the same instance.

Module naming follows Python: the package root directory ``<root>`` is the
package ``<root.name>``, ``<root>/cars/engine.py`` is ``<root.name>.cars.engine``
and ``<root>/cars/__init__.py`` is ``<root.name>.cars``. Any module outside the
root (the trusted core library included) is *external* and is only ever seen
through import specifiers.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Set, Tuple

import libcst as cst
from libcst.metadata import CodeRange, PositionProvider

from ngcc_reflect.analysis.symbol_table import Binding, ImportedName, ModuleScope, ModuleScopeBuilder

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class SourceModule:
  """
  A parsed package-local module.
  """

  name: str
  """Absolute dotted module name."""

  path: Path
  tree: cst.Module
  scope: ModuleScope
  is_package: bool
  positions: Mapping[cst.CSTNode, CodeRange] = field(default_factory=dict, repr=False)

  def line_of(self, node: cst.CSTNode) -> Optional[int]:
    code_range = self.positions.get(node)
    return code_range.start.line if code_range else None

  def location(self, node: Optional[cst.CSTNode] = None) -> str:
    """Formats ``path:line`` for diagnostics (just the path if the line is unknown)."""
    line = self.line_of(node) if node is not None else None
    return f"{self.path}:{line}" if line else str(self.path)

  def code_for(self, node: cst.CSTNode) -> str:
    """Renders a node of this module back to source text."""
    return self.tree.code_for_node(node)


class Program:
  """
  Parsed modules of a package root, loaded lazily and cached.
  """

  def __init__(self, root: Path):
    """
    Args:
        root: The package root directory.
    """
    self.root = root.resolve()
    self.package_name = self.root.name
    self._modules: Dict[str, SourceModule] = {}
    self._missing: Set[str] = set()

  @property
  def modules(self) -> Dict[str, SourceModule]:
    """Modules loaded so far, by dotted name."""
    return dict(self._modules)

  def load_file(self, path: Path) -> SourceModule:
    """
    Loads the module stored at ``path`` (which must live under the root).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is outside the package root.
        libcst.ParserSyntaxError: If the file is not valid Python.
    """
    resolved = path.resolve()
    if not resolved.is_file():
      raise FileNotFoundError(f"No such source file: {resolved}")
    try:
      rel = resolved.relative_to(self.root)
    except ValueError:
      raise ValueError(f"{resolved} is not inside package root {self.root}")

    parts = list(rel.with_suffix("").parts)
    is_package = bool(parts) and parts[-1] == "__init__"
    if is_package:
      parts.pop()
    name = ".".join([self.package_name, *parts])

    if name in self._modules:
      return self._modules[name]
    return self._parse(name, resolved, is_package)

  def get_module(self, name: str) -> Optional[SourceModule]:
    """
    Returns the package-local module ``name``, loading it on first use.

    Args:
        name: Absolute dotted module name.

    Returns:
        The module, or None when ``name`` does not denote a file under the root
        (i.e. the module is external).
    """
    if name in self._modules:
      return self._modules[name]
    if name in self._missing:
      return None
    if name != self.package_name and not name.startswith(f"{self.package_name}."):
      return None

    parts = name.split(".")[1:]
    base = self.root.joinpath(*parts)
    for candidate, is_package in ((base.with_suffix(".py") if parts else None, False), (base / "__init__.py", True)):
      if candidate is not None and candidate.is_file():
        return self._parse(name, candidate, is_package)

    self._missing.add(name)
    return None

  def lookup(self, module: SourceModule, name: str) -> Optional[Tuple[Binding, SourceModule]]:
    """
    Finds the binding of a top-level ``name`` as seen from ``module``.

    Direct bindings win; otherwise star imports of package-local modules are
    searched, most recent first. Only when none of them binds the name is a
    star import from an external module assumed to provide it.

    Returns:
        The binding and the module it belongs to, or None if unbound.
    """
    return self._lookup(module, name, set(), assume_external=False) or self._lookup(
      module, name, set(), assume_external=True
    )

  def _lookup(
    self, module: SourceModule, name: str, seen: Set[str], assume_external: bool
  ) -> Optional[Tuple[Binding, SourceModule]]:
    if module.name in seen:
      return None
    seen.add(module.name)

    binding = module.scope.get(name)
    if binding is not None:
      return binding, module

    for star in reversed(module.scope.star_imports):
      target = self.get_module(star)
      if target is None:
        if assume_external:
          return ImportedName(star, name, module.tree), module
        continue
      if target.scope.exports is not None and name not in target.scope.exports:
        continue
      if name.startswith("_") and target.scope.exports is None:
        continue
      found = self._lookup(target, name, seen, assume_external)
      if found is not None:
        return found
    return None

  def _parse(self, name: str, path: Path, is_package: bool) -> SourceModule:
    # Bytes, so libcst honours the PEP 263 coding declaration
    wrapper = cst.MetadataWrapper(cst.parse_module(path.read_bytes()))
    positions = wrapper.resolve(PositionProvider)
    tree = wrapper.module

    builder = ModuleScopeBuilder(name, is_package)
    tree.visit(builder)

    module = SourceModule(
      name=name,
      path=path,
      tree=tree,
      scope=builder.scope,
      is_package=is_package,
      positions=positions,
    )
    self._modules[name] = module
    logger.debug(f"Loaded module {name} from {path}")
    return module
