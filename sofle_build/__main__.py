"""Allow running as ``python -m sofle_build``."""

import sys

from sofle_build.cli import main


if __name__ == "__main__":
    sys.exit(main())
