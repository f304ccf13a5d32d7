"""
Generator Module
================

Workflow graph generation from the parsed AST.

Components:
- node_types: DSL type tag and type version lookup tables
- evaluator: expression and ${...} template evaluation
- generator: node layout, parameter mapping and connection building
"""
