"""Allow ``python -m launchpad``."""

from launchpad.cli.app import app

if __name__ == "__main__":
    app()
