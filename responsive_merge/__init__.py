"""
Responsive Breakpoint Merge Engine

Fuses three breakpoint-specific UI element trees (wide, medium, narrow) into a
single tree annotated with breakpoint-scoped style overrides.
"""

__version__ = "0.1.0"
