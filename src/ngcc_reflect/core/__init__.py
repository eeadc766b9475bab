"""
Core Package.

Contains the pipeline driver and its collaborators:
- Package Parser (parse, analyze, transform phases)
- Definition Emitters
- Diagnostic Sink
"""
