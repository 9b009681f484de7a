"""
Main entry point for Codebuff.

This module allows Codebuff to be run as:
    python -m codebuff
"""

from .cli.main import main

if __name__ == "__main__":
    main()
