"""Allows running the CLI as a module: python -m h1_watcher"""

from h1_watcher.cli import app

if __name__ == "__main__":
    app()
