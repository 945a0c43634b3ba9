"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Column names, CRS definitions, delimiters, artifact suffixes
- exceptions: Conversion exception taxonomy
- ingress: HTTP boundary helpers for the Functions entry point
"""
