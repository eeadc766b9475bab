"""
ngcc-reflect Package.

Annotation-provenance reflection for lowered Python packages: finds the exported
classes whose ``decorators`` member carries an annotation genuinely imported from
the core module (not a same-named local class), and extracts the metadata a code
generator needs, in particular constructor injection dependencies.

Usage
-----

.. code-block:: python

    from pathlib import Path
    from ngcc_reflect import PackageParser, RuntimeConfig

    parser = PackageParser(RuntimeConfig(core_module="angular.core"))
    parsed = parser.parse_entry_point(Path("dist/cars"))
    outputs = parser.analyze_decorators(parsed)
    for category, results in parser.transform_decorators(outputs).items():
        for result in results:
            print(result.definition)
"""

from pathlib import Path
from typing import Optional

from ngcc_reflect.config import RuntimeConfig
from ngcc_reflect.core.diagnostics import DiagnosticSink
from ngcc_reflect.core.parser import PackageParser, PackageReport, ParsedPackage
from ngcc_reflect.enums import DecoratorCategory, ResolvedDependencyKind

__version__ = "0.1.0"


def reflect(package_path: Path, core_module: Optional[str] = None, entry_point: Optional[str] = None) -> PackageReport:
  """
  Runs a full pass over a package with a private diagnostic sink.

  Args:
      package_path (Path): Root directory of the lowered package.
      core_module (str, optional): Trusted module, overriding configuration.
      entry_point (str, optional): Entry-point file, overriding configuration.

  Returns:
      PackageReport: The summary; ``success`` is False if the pass was aborted.
  """
  config = RuntimeConfig.load(core_module=core_module, entry_point=entry_point, search_path=package_path)
  return PackageParser(config=config, sink=DiagnosticSink()).run(package_path)


__all__ = [
  "DecoratorCategory",
  "PackageParser",
  "PackageReport",
  "ParsedPackage",
  "ResolvedDependencyKind",
  "RuntimeConfig",
  "reflect",
  "__version__",
]
