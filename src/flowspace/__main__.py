"""
Main entry point for Flowspace.

Runs the command line interface: ``python -m flowspace analyze board.json``.
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
