#!/usr/bin/env python3
"""Entry point for the Vibe Copy application.

Usage:
    python main.py

Or with uv:
    uv run main.py

The provider credential is read from ``GEMINI_API_KEY`` (a ``.env`` file in
the working directory is honoured). The application opens a phone-sized
window with the photo restyling wizard.
"""

import logging

import flet as ft

from vibecopy.ui import main


def run() -> None:
    """Configure logging and launch the Flet application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ft.app(target=main)


if __name__ == "__main__":
    run()
