#!/usr/bin/env python3
"""PomPom entry point.

Run with:
    python main.py
    python -m pompom
"""

from pompom.__main__ import main


if __name__ == "__main__":
    main()
