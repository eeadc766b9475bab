"""
Metadata Extraction Package.

Turns matched classes into typed metadata records.

Modules:
    - ``registry``: Category -> extractor mapping.
    - ``dependencies``: Constructor dependency resolution.
    - ``injectable``: The injectable extractor.
"""
