"""
Aster - Cross-language lint rules for test code.

Provides:
- Changed-line scoping of structural-match violations (unified diff ranges)
- Detection of test names that reference implementation symbols
- Test colocation conventions for Python and TypeScript
"""

__version__ = "0.1.0"
