"""
Tests for the Extractor Registry.
Verifies lazy loading of built-ins, user registration and reset.
"""

from ngcc_reflect.enums import DecoratorCategory
from ngcc_reflect.extraction.injectable import extract_injectable_metadata
from ngcc_reflect.extraction.registry import (
  clear_extractors,
  get_extractor,
  register_extractor,
  registered_categories,
)


def test_builtin_injectable_extractor():
  assert get_extractor(DecoratorCategory.INJECTABLES) is extract_injectable_metadata
  assert registered_categories() == [DecoratorCategory.INJECTABLES]


def test_unregistered_category():
  assert get_extractor(DecoratorCategory.PIPES) is None


def test_register_new_category():
  @register_extractor(DecoratorCategory.PIPES)
  def extract_pipe(decorated, context):
    return {"name": decorated.class_symbol.class_name}

  assert get_extractor(DecoratorCategory.PIPES) is extract_pipe
  assert registered_categories() == [DecoratorCategory.PIPES, DecoratorCategory.INJECTABLES]


def test_user_registration_is_not_replaced_by_builtins():
  @register_extractor(DecoratorCategory.INJECTABLES)
  def custom(decorated, context):
    return None

  assert get_extractor(DecoratorCategory.INJECTABLES) is custom


def test_clear_restores_builtins():
  @register_extractor(DecoratorCategory.INJECTABLES)
  def custom(decorated, context):
    return None

  clear_extractors()
  assert get_extractor(DecoratorCategory.INJECTABLES) is extract_injectable_metadata
