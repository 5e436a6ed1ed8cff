#!/usr/bin/env python3
"""Launch the portfolio dashboard against the mock ledger by default."""
from __future__ import annotations

import os

from solfolio.main import main


if __name__ == "__main__":
    os.environ.setdefault("SOLFOLIO_SOURCE", "mock")
    main()
