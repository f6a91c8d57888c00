"""ReviewScout: code reviewer recommendation from contribution history."""

__version__ = "0.1.0"
