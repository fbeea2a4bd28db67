import sys

from momentum_engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
