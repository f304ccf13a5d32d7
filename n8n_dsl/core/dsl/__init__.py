"""
DSL Processing Module
=====================

Workflow DSL lexical analysis and parsing.

Components:
- lexer: source text to token stream
- parser: token stream to workflow AST
"""
