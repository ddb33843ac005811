"""PHP syntax layer: tree-sitter parser wrapper, declaration walker and type inference."""

from apishape.adapters.php.ast_utils import PhpAstUtils
from apishape.adapters.php.parser import SyntaxParser, SyntaxTree
from apishape.adapters.php.type_inferrer import BUILTIN_FUNCTION_TYPES, TypeInferrer
from apishape.adapters.php.walker import DeclarationWalker, FileContext, WalkResult

__all__ = [
    "BUILTIN_FUNCTION_TYPES",
    "DeclarationWalker",
    "FileContext",
    "PhpAstUtils",
    "SyntaxParser",
    "SyntaxTree",
    "TypeInferrer",
    "WalkResult",
]
