"""Order tracking backend with per-entity in-memory read-through caches."""

__version__ = "0.4.0"
