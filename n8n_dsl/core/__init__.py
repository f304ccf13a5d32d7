"""
Core Compiler Logic
===================

Core modules for compiling the workflow DSL into n8n workflow JSON.

Modules:
- dsl: lexical analysis and recursive-descent parsing
- generator: expression evaluation and workflow graph generation
- templates: per-node-type parameter reshaping strategies
- validation: AST and generated-graph structural checks
- compiler: pipeline orchestration
"""
