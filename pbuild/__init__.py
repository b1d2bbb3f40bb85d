"""pbuild: programmable build pipeline with changelog-driven versioning."""

__version__ = "0.3.0"
