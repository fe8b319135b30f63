"""
ClassiCore Entry Point
======================

Allows running the CLI via: python -m classical
"""

from classical.cli import main

if __name__ == "__main__":
    main()
