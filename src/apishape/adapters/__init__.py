"""Source-language adapters.

Only PHP is supported; the adapter turns source text into tree-sitter trees,
raw declarations and inferred expression types.
"""

from apishape.adapters.php import (
    DeclarationWalker,
    FileContext,
    SyntaxParser,
    SyntaxTree,
    TypeInferrer,
    WalkResult,
)

__all__ = [
    "DeclarationWalker",
    "FileContext",
    "SyntaxParser",
    "SyntaxTree",
    "TypeInferrer",
    "WalkResult",
]
