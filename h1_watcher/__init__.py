"""h1-watcher: detect newly public HackerOne programs and alert on them."""

__version__ = "1.0.0"
