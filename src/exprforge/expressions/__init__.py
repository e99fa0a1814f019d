"""Expression language engine for exprforge.

This module provides:
- Lexer: Tokenizes expression strings
- Parser: Produces AST from tokens
- FunctionRegistry: Registry for expression functions and constants
- Compiler: Type-checks an AST and closes it over variable slots
- Evaluator: The compiled, reusable result
"""

from exprforge.expressions.builtins import BUILTINS, create_builtin_registry
from exprforge.expressions.compiler import (
    Compiled,
    Compiler,
    Evaluator,
    compile_expression,
    validate_declarations,
)
from exprforge.expressions.functions import (
    ConstantDefinition,
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    FunctionRegistry,
)
from exprforge.expressions.lexer import Lexer, Token, TokenType
from exprforge.expressions.parser import (
    ASTNode,
    BinaryOp,
    Conditional,
    FunctionCall,
    Identifier,
    Literal,
    Parser,
    UnaryOp,
    parse,
)

__all__ = [
    # Builtins
    "BUILTINS",
    "create_builtin_registry",
    # Compiler
    "Compiled",
    "Compiler",
    "Evaluator",
    "compile_expression",
    "validate_declarations",
    # Functions
    "ConstantDefinition",
    "FunctionCategory",
    "FunctionDefinition",
    "FunctionParameter",
    "FunctionRegistry",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Parser
    "ASTNode",
    "BinaryOp",
    "Conditional",
    "FunctionCall",
    "Identifier",
    "Literal",
    "Parser",
    "UnaryOp",
    "parse",
]
