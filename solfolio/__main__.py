"""Module entrypoint for the portfolio dashboard.

Run:
  python -m solfolio
"""

from __future__ import annotations

from .main import main


if __name__ == "__main__":
    main()
