"""
Tests for RuntimeConfig validation and TOML loading.
"""

import pytest
from pydantic import ValidationError

from ngcc_reflect.config import RuntimeConfig


def test_defaults():
  config = RuntimeConfig()
  assert config.core_module == "angular.core"
  assert config.entry_point == "__init__.py"
  assert config.decorators_property == "decorators"
  assert config.ctor_parameters_property == "ctor_parameters"


def test_config_is_frozen():
  config = RuntimeConfig()
  with pytest.raises(ValidationError):
    config.core_module = "other"


@pytest.mark.parametrize(
  "field, value",
  [
    ("core_module", "angular..core"),
    ("core_module", "angular core"),
    ("core_module", ""),
    ("entry_point", "index.js"),
    ("decorators_property", "not-an-identifier"),
  ],
)
def test_validation(field, value):
  with pytest.raises(ValidationError):
    RuntimeConfig(**{field: value})


def test_core_module_is_stripped():
  assert RuntimeConfig(core_module="  ng.core ").core_module == "ng.core"


def test_load_from_pyproject(tmp_path):
  (tmp_path / "pyproject.toml").write_text(
    '[tool.ngcc_reflect]\ncore_module = "ng.core"\nentry_point = "public_api.py"\nunknown_key = 1\n',
    "utf-8",
  )
  nested = tmp_path / "dist" / "cars"
  nested.mkdir(parents=True)

  config = RuntimeConfig.load(search_path=nested)
  assert config.core_module == "ng.core"
  assert config.entry_point == "public_api.py"


def test_overrides_beat_toml(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.ngcc_reflect]\ncore_module = "ng.core"\n', "utf-8")
  config = RuntimeConfig.load(core_module="angular.core", entry_point="api.py", search_path=tmp_path)
  assert config.core_module == "angular.core"
  assert config.entry_point == "api.py"


def test_nearest_pyproject_without_section(tmp_path):
  (tmp_path / "pyproject.toml").write_text('[tool.ngcc_reflect]\ncore_module = "ng.core"\n', "utf-8")
  inner = tmp_path / "inner"
  inner.mkdir()
  (inner / "pyproject.toml").write_text("[project]\nname = 'x'\n", "utf-8")

  assert RuntimeConfig.load(search_path=inner).core_module == "angular.core"


def test_unreadable_toml_is_ignored(tmp_path, caplog):
  (tmp_path / "pyproject.toml").write_text("[tool.ngcc_reflect\n", "utf-8")
  config = RuntimeConfig.load(search_path=tmp_path)
  assert config.core_module == "angular.core"
  assert "Ignoring unreadable" in caplog.text
