"""
Command-line interface for the editorconfig-formatter.
"""
