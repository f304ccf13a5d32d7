"""
Validation Module
=================

Structural checks on the parsed AST and on the generated workflow graph.
"""
