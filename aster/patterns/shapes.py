"""Fixed catalog of declaration and test-registration shapes.

Each shape carries an ast-grep pattern (``$NAME`` binds the identifier)
and, where needed, a tree-sitter query capturing ``@name``. Several
ast-grep patterns are covered by one broader tree-sitter query; those
shapes have ``query=None`` so the in-process engine does not report the
same declaration twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from aster.types import SymbolKind


class ShapeRole(StrEnum):
    """What a shape is used to collect."""

    SYMBOL = "symbol"
    TEST = "test"


@dataclass(frozen=True)
class Shape:
    """A syntactic shape to search for."""

    name: str
    language: str
    role: ShapeRole
    pattern: str
    query: str | None = None
    kind: SymbolKind | None = None
    callee: str | None = None
    description: str = ""


_PY_FUNCTION_QUERY = """
(function_definition
    name: (identifier) @name) @match
"""

PYTHON_SHAPES: list[Shape] = [
    Shape(
        name="py_function",
        language="python",
        role=ShapeRole.SYMBOL,
        pattern="def $NAME($$$): $$$BODY",
        query=_PY_FUNCTION_QUERY,
        kind=SymbolKind.FUNCTION,
        description="Python function definitions",
    ),
    Shape(
        name="py_class",
        language="python",
        role=ShapeRole.SYMBOL,
        pattern="class $NAME: $$$BODY",
        query="""
        (class_definition
            name: (identifier) @name) @match
        """,
        kind=SymbolKind.CLASS,
        description="Python class definitions",
    ),
    Shape(
        name="py_test_function",
        language="python",
        role=ShapeRole.TEST,
        pattern="def $NAME($$$): $$$BODY",
        query=_PY_FUNCTION_QUERY,
        description="Python functions, filtered to the test prefix by the collector",
    ),
]

_TS_CALL_QUERY = """
(call_expression
    function: (identifier) @callee
    arguments: (arguments . (string) @name)) @match
"""

TYPESCRIPT_SHAPES: list[Shape] = [
    Shape(
        name="ts_function",
        language="typescript",
        role=ShapeRole.SYMBOL,
        pattern="function $NAME($$$) { $$$BODY }",
        query="""
        (function_declaration
            name: (identifier) @name) @match
        """,
        kind=SymbolKind.FUNCTION,
        description="Function declarations",
    ),
    Shape(
        name="ts_function_typed",
        language="typescript",
        role=ShapeRole.SYMBOL,
        pattern="function $NAME($$$): $TYPE { $$$BODY }",
        kind=SymbolKind.FUNCTION,
        description="Function declarations with a return type",
    ),
    Shape(
        name="ts_class",
        language="typescript",
        role=ShapeRole.SYMBOL,
        pattern="class $NAME { $$$BODY }",
        query="""
        (class_declaration
            name: (type_identifier) @name) @match
        """,
        kind=SymbolKind.CLASS,
        description="Class declarations",
    ),
    Shape(
        name="ts_arrow",
        language="typescript",
        role=ShapeRole.SYMBOL,
        pattern="const $NAME = ($$$) => $BODY",
        query="""
        (variable_declarator
            name: (identifier) @name
            value: (arrow_function)) @match
        """,
        kind=SymbolKind.FUNCTION,
        description="Arrow functions assigned to a name",
    ),
    Shape(
        name="ts_arrow_typed",
        language="typescript",
        role=ShapeRole.SYMBOL,
        pattern="const $NAME = ($$$): $TYPE => $BODY",
        kind=SymbolKind.FUNCTION,
        description="Arrow functions with a return type",
    ),
    Shape(
        name="ts_async_arrow",
        language="typescript",
        role=ShapeRole.SYMBOL,
        pattern="const $NAME = async ($$$) => $BODY",
        kind=SymbolKind.FUNCTION,
        description="Async arrow functions",
    ),
    Shape(
        name="ts_async_arrow_typed",
        language="typescript",
        role=ShapeRole.SYMBOL,
        pattern="const $NAME = async ($$$): $TYPE => $BODY",
        kind=SymbolKind.FUNCTION,
        description="Async arrow functions with a return type",
    ),
    Shape(
        name="ts_test_call",
        language="typescript",
        role=ShapeRole.TEST,
        pattern="test($NAME, $$$)",
        query=_TS_CALL_QUERY,
        callee="test",
        description='test("name", ...) registrations',
    ),
    Shape(
        name="ts_it_call",
        language="typescript",
        role=ShapeRole.TEST,
        pattern="it($NAME, $$$)",
        query=_TS_CALL_QUERY,
        callee="it",
        description='it("name", ...) registrations',
    ),
]

# tsx files use the TypeScript shapes with the tsx grammar.
_SHAPES_BY_FAMILY: dict[str, list[Shape]] = {
    "python": PYTHON_SHAPES,
    "typescript": TYPESCRIPT_SHAPES,
}

_FAMILY_BY_LANGUAGE: dict[str, str] = {
    "python": "python",
    "typescript": "typescript",
    "tsx": "typescript",
}


def shapes_for(language: str, role: ShapeRole) -> list[Shape]:
    """Get the shapes to search for in a language, by role.

    Args:
        language: Grammar name (python, typescript, tsx).
        role: Symbol declarations or test registrations.

    Returns:
        Shapes in catalog order; empty for unsupported languages.
    """
    family = _FAMILY_BY_LANGUAGE.get(language.lower())
    if family is None:
        return []
    return [s for s in _SHAPES_BY_FAMILY[family] if s.role == role]
