"""Release automation for Gradle plugin repositories."""

__version__ = "0.3.0"
