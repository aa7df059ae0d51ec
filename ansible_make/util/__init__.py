"""
Utility functions and helpers.

Modules:
- console: coloured stderr messaging for make targets
- logging: Logging configuration
"""
