"""Allow ``python -m copain``."""

from copain.cli import main

if __name__ == "__main__":
    main()
