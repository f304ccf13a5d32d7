"""
Shared Utilities
===============

Common helper functions used across the compiler.

Modules:
- values: JSON value rendering and runtime type inference
"""
