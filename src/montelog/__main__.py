"""Allow running Monte-Log with ``python -m montelog``."""

from montelog.cli import main

if __name__ == "__main__":
    main()
