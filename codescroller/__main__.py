"""Module entrypoint for ``python -m codescroller``.

All argument parsing and session setup happen in ``codescroller.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
