"""
rulebook - rule document schema checker and template renderer

Validates markdown "rules" documents against a fixed section schema and
tiered rule-identifier convention, and scaffolds new documents from
templates.
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
