"""
main_RemoveBackground.py
========================

Top-level launcher that delegates to ``rmbg.controllers.cli``.  It is
equivalent to the ``rmbg`` console script.

Usage
-----

    python3 main_RemoveBackground.py -t 5 50 -i photos/*.jpg

Each input gets a transparent PNG written next to it.
"""

from __future__ import annotations

from rmbg.controllers.cli import main as controller_main


def main() -> None:
    controller_main()


if __name__ == "__main__":
    main()
