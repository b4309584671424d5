"""Entry point for python -m photorenamer."""

import sys

from photorenamer.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
