"""tinygit - fetch repository snapshots from hosting providers without git."""

__version__ = "0.1.0"
