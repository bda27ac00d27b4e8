"""Allow ``python -m assignment_verifier``."""

from .cli import app

if __name__ == "__main__":
    app()
