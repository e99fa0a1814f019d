"""exprforge: compile expression text into reusable, typed evaluators.

Example:
    from exprforge import Expression

    area = Expression("w * h", "w", "h")
    area.invoke(2, 3)                  # 6.0
    area.invoke_named({"h": 3, "w": 2})  # 6.0
"""

from exprforge.config import EngineConfig
from exprforge.domains import (
    DecimalDomain,
    NumericDomain,
    ValueType,
    get_domain,
)
from exprforge.errors import (
    ArityError,
    BindError,
    BuildError,
    DomainError,
    EvaluationError,
    ExpressionError,
    ExpressionSyntaxError,
    ExpressionTypeError,
    InvalidDeclarationError,
    LexerError,
    LimitExceededError,
    MissingParameterError,
    ParseError,
    UnexpectedParametersError,
    UnknownIdentifierError,
)
from exprforge.expression import Expression
from exprforge.expressions import BUILTINS, Evaluator, compile_expression

__version__ = "0.1.0"

__all__ = [
    "Expression",
    "Evaluator",
    "compile_expression",
    "BUILTINS",
    # Configuration and domains
    "EngineConfig",
    "DecimalDomain",
    "NumericDomain",
    "ValueType",
    "get_domain",
    # Errors
    "ArityError",
    "BindError",
    "BuildError",
    "DomainError",
    "EvaluationError",
    "ExpressionError",
    "ExpressionSyntaxError",
    "ExpressionTypeError",
    "InvalidDeclarationError",
    "LexerError",
    "LimitExceededError",
    "MissingParameterError",
    "ParseError",
    "UnexpectedParametersError",
    "UnknownIdentifierError",
]
