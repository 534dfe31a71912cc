"""Module entrypoint for running pdfnarrator as ``python -m pdfnarrator``."""

from __future__ import annotations

from pdfnarrator.cli import main


if __name__ == "__main__":
    main()
