"""Allow running the installer with ``python -m clustercost``."""

from clustercost.cli import main

if __name__ == "__main__":
    main()
