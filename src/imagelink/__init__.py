"""Remote image gallery backend: manifest loading and two-tier image caching."""

__version__ = "0.1.0"
