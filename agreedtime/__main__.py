"""
Entry point for ``python -m agreedtime``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
