"""covenforcer - coverage enforcement for Go coverage profiles."""

__version__ = "0.1.0"
