"""
Entry point for module execution (``python -m chainlint``).

This module delegates execution to the CLI handler in ``chainlint.cli.__main__``.
"""

import sys
from chainlint.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
