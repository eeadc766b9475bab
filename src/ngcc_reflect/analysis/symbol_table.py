"""
Module-level Symbol Table.

This module provides a static analysis pass that records what every top-level
name of a lowered module is bound to, without importing or executing it.

The `ModuleScopeBuilder` visitor populates a `ModuleScope` by tracking:
1.  **Imports**: ``import a.b as c`` and ``from a import b as c``, with relative
    module paths made absolute against the importing module.
2.  **Declarations**: Classes and functions (their bodies are not entered).
3.  **Assignments**: ``x = <expr>`` aliases and ``Cls.member = <expr>`` static
    members, the form decorator lowering produces.
4.  **Exports**: ``__all__`` and ``from m import *`` re-exports.

Rebinding a name replaces the previous binding, as it would at runtime.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import libcst as cst


def get_full_name(node: Union[cst.Name, cst.Attribute]) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
    node: The CST node representing the identifier.

  Returns:
    str: The fully qualified string (e.g., "angular.core"), or an empty string
    if the node is not a Name/Attribute chain.
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    return f"{get_full_name(node.value)}.{node.attr.value}"
  return ""


def resolve_relative(importer: str, is_package: bool, module: str, level: int) -> str:
  """
  Makes a (possibly relative) import path absolute.

  Args:
      importer: Dotted name of the importing module.
      is_package: Whether the importer is a package ``__init__``.
      module: The module text after the dots (may be empty).
      level: Number of leading dots.

  Returns:
      str: The absolute dotted module path.
  """
  if level == 0:
    return module
  package = importer if is_package else importer.rpartition(".")[0]
  parts = package.split(".") if package else []
  if level > 1:
    parts = parts[: max(len(parts) - (level - 1), 0)]
  if module:
    parts.append(module)
  return ".".join(parts)


@dataclass(frozen=True, eq=False)
class ImportedName:
  """``from <module> import <name>`` (module path is absolute)."""

  module: str
  name: str
  node: cst.CSTNode


@dataclass(frozen=True, eq=False)
class ImportedModule:
  """``import <module>`` or ``import <module> as <alias>``."""

  module: str
  node: cst.CSTNode


@dataclass(frozen=True, eq=False)
class ClassDeclaration:
  node: cst.ClassDef


@dataclass(frozen=True, eq=False)
class FunctionDeclaration:
  node: cst.FunctionDef


@dataclass(frozen=True, eq=False)
class ValueAssignment:
  """``<name> = <value>`` at module level."""

  value: cst.BaseExpression
  node: cst.CSTNode


Binding = Union[ImportedName, ImportedModule, ClassDeclaration, FunctionDeclaration, ValueAssignment]


@dataclass(frozen=True, eq=False)
class StaticMember:
  """
  A static member of a class: ``Cls.name = value`` or ``name = value`` in the body.
  """

  name: str
  value: cst.BaseExpression
  node: cst.CSTNode


class ModuleScope:
  """
  The top-level bindings of one module.
  """

  def __init__(self):
    self.bindings: Dict[str, Binding] = {}
    self.star_imports: List[str] = []
    self.exports: Optional[List[str]] = None
    # Class name -> member name -> member, from module-level `Cls.member = ...`
    self.static_members: Dict[str, Dict[str, StaticMember]] = {}

  def bind(self, name: str, binding: Binding) -> None:
    self.bindings[name] = binding

  def get(self, name: str) -> Optional[Binding]:
    return self.bindings.get(name)

  def members_of(self, class_def: cst.ClassDef) -> Dict[str, StaticMember]:
    """
    Collects the static members of a class declared in this module.

    Body assignments come first; module-level ``Cls.member = ...`` assignments
    override them, matching execution order of a lowered module.

    Args:
        class_def: The class declaration.

    Returns:
        Dict[str, StaticMember]: Members keyed by name.
    """
    members: Dict[str, StaticMember] = {}
    body = class_def.body
    if isinstance(body, cst.IndentedBlock):
      for stmt in body.body:
        if not isinstance(stmt, cst.SimpleStatementLine):
          continue
        for small in stmt.body:
          if isinstance(small, cst.Assign):
            for target in small.targets:
              if isinstance(target.target, cst.Name):
                members[target.target.value] = StaticMember(target.target.value, small.value, small)
          elif isinstance(small, cst.AnnAssign) and small.value is not None:
            if isinstance(small.target, cst.Name):
              members[small.target.value] = StaticMember(small.target.value, small.value, small)

    members.update(self.static_members.get(class_def.name.value, {}))
    return members


class ModuleScopeBuilder(cst.CSTVisitor):
  """
  Populates a `ModuleScope` from a parsed module.

  Only module-level statements bind names here; class and function bodies are
  skipped. Statements nested in ``if``/``try`` blocks still count as top level.
  """

  def __init__(self, module_name: str, is_package: bool):
    """
    Args:
        module_name: Absolute dotted name of the module being scanned.
        is_package: True for a package ``__init__`` module.
    """
    self.module_name = module_name
    self.is_package = is_package
    self.scope = ModuleScope()

  def visit_ClassDef(self, node: cst.ClassDef) -> bool:
    self.scope.bind(node.name.value, ClassDeclaration(node))
    return False

  def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
    self.scope.bind(node.name.value, FunctionDeclaration(node))
    return False

  def visit_Import(self, node: cst.Import) -> bool:
    """
    `import a.b` binds `a` to module `a`; `import a.b as c` binds `c` to `a.b`.
    """
    for alias in node.names:
      full_path = get_full_name(alias.name)
      if alias.asname and isinstance(alias.asname.name, cst.Name):
        self.scope.bind(alias.asname.name.value, ImportedModule(full_path, node))
      else:
        root = full_path.split(".")[0]
        self.scope.bind(root, ImportedModule(root, node))
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    level = len(node.relative)
    module_text = get_full_name(node.module) if node.module else ""
    module = resolve_relative(self.module_name, self.is_package, module_text, level)

    if isinstance(node.names, cst.ImportStar):
      self.scope.star_imports.append(module)
      return False

    for alias in node.names:
      import_name = get_full_name(alias.name)
      bind_name = import_name
      if alias.asname and isinstance(alias.asname.name, cst.Name):
        bind_name = alias.asname.name.value
      self.scope.bind(bind_name, ImportedName(module, import_name, node))
    return False

  def visit_Assign(self, node: cst.Assign) -> bool:
    for target in node.targets:
      self._record_target(target.target, node.value, node)
    return False

  def visit_AnnAssign(self, node: cst.AnnAssign) -> bool:
    if node.value is not None:
      self._record_target(node.target, node.value, node)
    return False

  def _record_target(self, target: cst.BaseExpression, value: cst.BaseExpression, node: cst.CSTNode) -> None:
    if isinstance(target, cst.Name):
      if target.value == "__all__":
        self.scope.exports = _literal_names(value)
      self.scope.bind(target.value, ValueAssignment(value, node))
    elif isinstance(target, cst.Attribute) and isinstance(target.value, cst.Name):
      members = self.scope.static_members.setdefault(target.value.value, {})
      members[target.attr.value] = StaticMember(target.attr.value, value, node)


def _literal_names(value: cst.BaseExpression) -> Optional[List[str]]:
  """Reads ``__all__ = ["a", "b"]``; any non-literal form yields None."""
  if not isinstance(value, (cst.List, cst.Tuple)):
    return None
  names = []
  for element in value.elements:
    if not isinstance(element, cst.Element) or not isinstance(element.value, cst.SimpleString):
      return None
    evaluated = element.value.evaluated_value
    if not isinstance(evaluated, str):
      return None
    names.append(evaluated)
  return names
