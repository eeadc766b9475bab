"""
Static Analysis Package.

Read-only passes over the LibCST trees of a lowered package.

Modules:
    - ``program``: Lazily parsed package modules (the resolution service).
    - ``symbol_table``: Top-level bindings of a module.
    - ``scanner``: Exported class enumeration.
    - ``locator``: Validated parsing of ``decorators`` / ``ctor_parameters`` members.
    - ``provenance``: Import-origin resolution of identifiers.
    - ``matcher``: Provenance-based annotation matching.
"""
