"""Entry point for running tagmatch as a module.

Allows running with: python -m tagmatch
"""

from tagmatch.cli import app

if __name__ == "__main__":
    app()
