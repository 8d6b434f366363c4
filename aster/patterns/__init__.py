"""Structural matching engines.

Components:
- StructuralMatch: Result type for shape matches
- StructuralMatcher: Abstract base class for engines
- Shape / ShapeRole / shapes_for: Fixed declaration and test shapes
- AstGrepMatcher: ast-grep subprocess engine (shapes and rule scans)
- TreeSitterMatcher: In-process tree-sitter engine (shapes only)

Usage:
    from aster.patterns import AstGrepMatcher, ShapeRole, shapes_for

    matcher = AstGrepMatcher()
    for shape in shapes_for("python", ShapeRole.SYMBOL):
        for match in matcher.match_shape(shape, "python", ["src"]):
            print(match.name)
"""

from .ast_grep import AstGrepMatcher
from .ast_matcher import TreeSitterMatcher
from .matcher import StructuralMatch, StructuralMatcher
from .shapes import Shape, ShapeRole, shapes_for

__all__ = [
    "AstGrepMatcher",
    "Shape",
    "ShapeRole",
    "StructuralMatch",
    "StructuralMatcher",
    "TreeSitterMatcher",
    "shapes_for",
]
