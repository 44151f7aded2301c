"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants (CRS identifiers, defaults, bounds)
- exceptions: Custom exception hierarchy
"""
