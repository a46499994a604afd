"""DepLoad - plugin package acquisition and framework-compatible assembly resolution."""

__version__ = "0.3.0"
