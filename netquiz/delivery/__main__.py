"""
Entry point for running netquiz as a module.

Usage:
    python -m netquiz.delivery status
    python -m netquiz.delivery modes
    python -m netquiz.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
