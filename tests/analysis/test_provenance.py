"""
Tests for ProvenanceResolver.

Verifies that identifiers are traced through alias chains to the external module
they come from, and that local declarations never count as imports, whatever
their name.
"""

import libcst as cst
import pytest

from ngcc_reflect.analysis.models import Import
from ngcc_reflect.analysis.program import Program
from ngcc_reflect.analysis.provenance import ProvenanceResolver

INJECTABLE = Import("Injectable", "angular.core")


def resolve(root, expression, module="__init__.py"):
  program = Program(root)
  entry = program.load_file(root / module)
  return ProvenanceResolver(program).resolve(cst.parse_expression(expression), entry)


def test_direct_import(write_package):
  root = write_package({"__init__.py": "from angular.core import Injectable\n"})
  assert resolve(root, "Injectable") == INJECTABLE


def test_aliased_import_keeps_original_name(write_package):
  root = write_package({"__init__.py": "from angular.core import Injectable as Service\n"})
  assert resolve(root, "Service") == INJECTABLE
  assert resolve(root, "Injectable") is None


def test_local_lookalike_has_no_provenance(write_package):
  root = write_package({"__init__.py": "class Injectable:\n  pass\n"})
  assert resolve(root, "Injectable") is None


def test_module_alias_attribute(write_package):
  root = write_package({"__init__.py": "import angular.core as ng\nimport angular\n"})
  assert resolve(root, "ng.Injectable") == INJECTABLE
  assert resolve(root, "angular.core.Injectable") == INJECTABLE


def test_from_import_of_external_submodule(write_package):
  root = write_package({"__init__.py": "from angular import core\n"})
  assert resolve(root, "core.Injectable") == INJECTABLE


def test_chain_through_local_modules(write_package):
  root = write_package(
    {
      "__init__.py": "from .shared import Svc\n",
      "shared/__init__.py": "from .decorators import Injectable as Svc\n",
      "shared/decorators.py": "from angular.core import Injectable\n",
    }
  )
  assert resolve(root, "Svc") == INJECTABLE


def test_value_alias_and_star_reexport(write_package):
  root = write_package(
    {
      "__init__.py": "from .reexport import *\nService = Injectable\n",
      "reexport.py": "from angular.core import *\n",
    }
  )
  assert resolve(root, "Service") == INJECTABLE


def test_attribute_through_local_submodule(write_package):
  root = write_package(
    {
      "__init__.py": "from . import shared\n",
      "shared.py": "from angular.core import Injectable\n",
    }
  )
  assert resolve(root, "shared.Injectable") == INJECTABLE
  # The bare name denotes a module, not a symbol
  assert resolve(root, "shared") is None


def test_lookalike_in_local_module(write_package):
  root = write_package(
    {
      "__init__.py": "from .fake import Injectable\n",
      "fake.py": "class Injectable:\n  pass\n",
    }
  )
  assert resolve(root, "Injectable") is None


@pytest.mark.parametrize("expression", ["Unknown", "make()", "'Injectable'", "items[0]"])
def test_unresolvable_expressions(write_package, expression):
  root = write_package({"__init__.py": "from angular.core import Injectable\n"})
  assert resolve(root, expression) is None


def test_alias_cycles_terminate(write_package):
  root = write_package(
    {
      "__init__.py": "from .a import X\n",
      "a.py": "from .b import X\n",
      "b.py": "from .a import X\n",
    }
  )
  assert resolve(root, "X") is None


def test_is_import_of(write_package):
  root = write_package({"__init__.py": "from angular.core import Injectable, Pipe\n"})
  program = Program(root)
  entry = program.load_file(root / "__init__.py")
  resolver = ProvenanceResolver(program)

  assert resolver.is_import_of(cst.Name("Injectable"), entry, INJECTABLE)
  assert not resolver.is_import_of(cst.Name("Pipe"), entry, INJECTABLE)
