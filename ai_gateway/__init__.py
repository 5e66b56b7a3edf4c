"""AI request gateway: response caching and cost-aware model routing."""

__version__ = "0.1.0"
