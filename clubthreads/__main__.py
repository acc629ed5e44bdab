"""Allow running the package as a module: python -m clubthreads."""

import sys

from clubthreads.main import main

if __name__ == "__main__":
    sys.exit(main())
