"""
Data Models
===========

Pydantic models for the DSL syntax tree, the generated n8n workflow document,
and compiler options and results.
"""
