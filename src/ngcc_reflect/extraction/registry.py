"""
Extractor Registry.

Maps each `DecoratorCategory` to the function converting a matched class into
its metadata record. New categories are supported by registering an extractor;
the matcher and the parser do not change.

.. code-block:: python

    @register_extractor(DecoratorCategory.PIPES)
    def extract_pipe(decorated: DecoratedClass, context: ExtractionContext) -> PipeMetadata:
        ...
"""

import importlib
from typing import Any, Callable, Dict, List, Optional

from ngcc_reflect.analysis.models import DecoratedClass
from ngcc_reflect.enums import DecoratorCategory
from ngcc_reflect.extraction.models import ExtractionContext

ExtractorFunction = Callable[[DecoratedClass, ExtractionContext], Any]

_EXTRACTORS: Dict[DecoratorCategory, ExtractorFunction] = {}
_DEFAULTS_LOADED = False

# category -> "module:function", imported on first lookup
_BUILTIN_EXTRACTORS: Dict[DecoratorCategory, str] = {
  DecoratorCategory.INJECTABLES: "ngcc_reflect.extraction.injectable:extract_injectable_metadata",
}


def register_extractor(category: DecoratorCategory) -> Callable[[ExtractorFunction], ExtractorFunction]:
  """
  Decorator to register a function as the extractor of a category.

  Args:
      category: The category handled. A later registration replaces an earlier one.
  """

  def decorator(func: ExtractorFunction) -> ExtractorFunction:
    _EXTRACTORS[category] = func
    return func

  return decorator


def get_extractor(category: DecoratorCategory) -> Optional[ExtractorFunction]:
  """
  Retrieves the extractor registered for ``category``.
  Lazily loads the built-in extractors on first use.
  """
  load_default_extractors()
  return _EXTRACTORS.get(category)


def registered_categories() -> List[DecoratorCategory]:
  """Categories with an extractor, in declaration order of the enum."""
  load_default_extractors()
  return [category for category in DecoratorCategory if category in _EXTRACTORS]


def clear_extractors() -> None:
  """Resets the registry. Primarily for testing."""
  global _DEFAULTS_LOADED
  _EXTRACTORS.clear()
  _DEFAULTS_LOADED = False


def load_default_extractors() -> None:
  """Registers the built-in extractors, without replacing user registrations."""
  global _DEFAULTS_LOADED
  if _DEFAULTS_LOADED:
    return
  _DEFAULTS_LOADED = True
  for category, target in _BUILTIN_EXTRACTORS.items():
    module_name, _, attr = target.partition(":")
    func = getattr(importlib.import_module(module_name), attr)
    _EXTRACTORS.setdefault(category, func)
