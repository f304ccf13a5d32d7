"""
Test Suite
==========

Test suite matching the n8n_dsl/ package structure.

Test Categories:
- unit: Unit tests for individual pipeline stages
- integration: Full compile pipeline tests
"""
