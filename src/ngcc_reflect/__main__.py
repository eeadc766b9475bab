"""
Entry point for module execution (``python -m ngcc_reflect``).

This module delegates execution to the CLI handler in ``ngcc_reflect.cli.__main__``.
"""

import sys
from ngcc_reflect.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
