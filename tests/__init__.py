"""
Test package for the editorconfig-formatter.

This package contains:
- Unit tests for the document, edits, handler, parser and detector
- Integration tests for the formatting runner and the CLI
- Property-based tests using Hypothesis
"""
