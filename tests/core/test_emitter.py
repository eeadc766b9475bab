"""
Tests for the injectable definition emitter.
"""

import libcst as cst
import pytest

from ngcc_reflect.core.emitter import InjectableDefinitionEmitter, dependency_expression, inject_flags
from ngcc_reflect.enums import ResolvedDependencyKind
from ngcc_reflect.extraction.models import ConstructorDependency, InjectableMetadata


def expr(source):
  return cst.parse_expression(source)


def render(node):
  return cst.Module(body=[]).code_for_node(node)


def test_flags_bits():
  dep = ConstructorDependency(token=expr("Engine"), optional=True, host=True)
  assert inject_flags(dep) == 9
  assert inject_flags(ConstructorDependency(token=expr("Engine"))) == 0


@pytest.mark.parametrize(
  "dep, expected",
  [
    (ConstructorDependency(token=expr("Engine")), "inject(Engine)"),
    (ConstructorDependency(token=expr("Engine"), skip_self=True, self_=True), "inject(Engine, 6)"),
    (ConstructorDependency(token=expr('"title"'), resolved=ResolvedDependencyKind.ATTRIBUTE), 'inject_attribute("title")'),
    (ConstructorDependency(token=expr("ElementRef"), resolved=ResolvedDependencyKind.ELEMENT_REF), "inject_element_ref()"),
    (ConstructorDependency(token=expr("TemplateRef"), resolved=ResolvedDependencyKind.TEMPLATE_REF), "inject_template_ref()"),
    (
      ConstructorDependency(token=expr("ViewContainerRef"), resolved=ResolvedDependencyKind.VIEW_CONTAINER_REF),
      "inject_view_container_ref()",
    ),
    (
      ConstructorDependency(token=expr("Injector"), resolved=ResolvedDependencyKind.INJECTOR, optional=True),
      "inject(INJECTOR, 8)",
    ),
  ],
)
def test_dependency_expression(dep, expected):
  assert render(dependency_expression(dep)) == expected


def test_constructor_factory():
  meta = InjectableMetadata(
    name="Car",
    type=expr("Car"),
    deps=[ConstructorDependency(token=expr("Engine")), ConstructorDependency(token=expr("Wheels"), optional=True)],
  )
  assert InjectableDefinitionEmitter().emit(meta) == (
    "Car.ng_injectable_def = define_injectable(token=Car, provided_in=None, "
    "factory=lambda: Car(inject(Engine), inject(Wheels, 8)))\n"
  )


def test_provider_variants():
  emitter = InjectableDefinitionEmitter(attribute="prov")
  value = InjectableMetadata(name="Cfg", type=expr("Cfg"), provided_in=expr('"root"'), use_value=expr("{'a': 1}"))
  existing = InjectableMetadata(name="Car", type=expr("Car"), use_existing=expr("Engine"))
  klass = InjectableMetadata(name="Car", type=expr("Car"), use_class=expr("Engine"))
  factory = InjectableMetadata(
    name="Car",
    type=expr("Car"),
    use_factory=expr("make_car"),
    deps=[ConstructorDependency(token=expr("Engine"))],
  )

  assert emitter.emit(value) == "Cfg.prov = define_injectable(token=Cfg, provided_in=\"root\", factory=lambda: {'a': 1})\n"
  assert "factory=lambda: inject(Engine))" in emitter.emit(existing)
  assert "factory=lambda: Engine())" in emitter.emit(klass)
  assert "factory=lambda: make_car(inject(Engine)))" in emitter.emit(factory)
