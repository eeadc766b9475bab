"""
Runtime Configuration Store.

Settings are resolved from (lowest to highest priority) field defaults, the
``[tool.ngcc_reflect]`` table of the nearest ``pyproject.toml``, and explicit
overrides passed by the CLI or the caller.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the reflection engine.
  """

  core_module: str = Field(
    "angular.core",
    description="Module the trusted annotations must be imported from.",
  )
  entry_point: str = Field(
    "__init__.py",
    description="Entry-point file, relative to the package root.",
  )
  decorators_property: str = Field(
    "decorators",
    description="Static member holding the lowered class annotation list.",
  )
  ctor_parameters_property: str = Field(
    "ctor_parameters",
    description="Static member holding the lowered constructor parameter list.",
  )

  model_config = ConfigDict(frozen=True)

  @field_validator("core_module")
  @classmethod
  def validate_core_module(cls, v: str) -> str:
    """
    Ensures the core module is a dotted path of identifiers.

    Args:
        v (str): The raw module path.

    Returns:
        str: The stripped module path.

    Raises:
        ValueError: If any segment is not a valid identifier.
    """
    v_clean = v.strip()
    if not v_clean or not all(part.isidentifier() for part in v_clean.split(".")):
      raise ValueError(f"Invalid core module: '{v}'. Expected a dotted module path (e.g. 'angular.core').")
    return v_clean

  @field_validator("decorators_property", "ctor_parameters_property")
  @classmethod
  def validate_property(cls, v: str) -> str:
    if not v.isidentifier():
      raise ValueError(f"Invalid member name: '{v}'.")
    return v

  @field_validator("entry_point")
  @classmethod
  def validate_entry_point(cls, v: str) -> str:
    if not v.endswith(".py"):
      raise ValueError(f"Entry point must be a Python source file, got '{v}'.")
    return v

  @classmethod
  def load(
    cls,
    core_module: Optional[str] = None,
    entry_point: Optional[str] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        core_module (Optional[str]): Override for the trusted module.
        entry_point (Optional[str]): Override for the entry-point file name.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)
    if toml_dir:
      logger.debug(f"Using [tool.ngcc_reflect] from {toml_dir / 'pyproject.toml'}")

    values: Dict[str, Any] = {k: v for k, v in toml_config.items() if k in cls.model_fields}
    if core_module:
      values["core_module"] = core_module
    if entry_point:
      values["entry_point"] = entry_point

    return cls(**values)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  current = start_path.resolve()
  if current.is_file():
    current = current.parent

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable {toml_path}: {e}")
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("ngcc_reflect", {}), parent

  return {}, None
