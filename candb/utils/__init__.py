"""
Utility modules for DBC tokenizing.

This package contains:
- regex_patterns: Compiled patterns for every supported DBC directive
"""
