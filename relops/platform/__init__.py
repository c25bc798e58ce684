"""Thin wrappers over the operating system (processes, files)."""
