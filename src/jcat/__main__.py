"""Entry point for ``python -m jcat``."""

from jcat.main import main

if __name__ == "__main__":  # pragma: no cover - manual execution path
    main()
