"""Exchange rate API with an in-process read-through cache."""

__version__ = "0.1.0"
