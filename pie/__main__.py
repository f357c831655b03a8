"""Entry point for python -m pie."""

import sys

from pie.cli.main import main


if __name__ == "__main__":
    sys.exit(main())
