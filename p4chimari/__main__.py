"""Module entrypoint for ``python -m p4chimari``.

All argument parsing and session setup happen in ``p4chimari.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
