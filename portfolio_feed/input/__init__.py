"""
Input parsing.

This package loads the locally maintained project list.
"""

from .projects import load_projects, parse_projects

__all__ = ["load_projects", "parse_projects"]
