"""Compiler for the exprforge expression language.

Turns an AST into an Evaluator: a tree of closures that read variable values
from a positional slot sequence. Identifier resolution, arity checks and the
static typing policy all run here, once, so the evaluator itself does no
lookups or dispatch when it is called.

Typing policy (NUMBER, BOOLEAN, ANY; ANY unifies with everything):
- + - * / % and unary - + take NUMBER operands and yield NUMBER
- < <= > >= take NUMBER operands and yield BOOLEAN
- == != take operands of the same type and yield BOOLEAN
- ! && || take BOOLEAN operands and yield BOOLEAN
- c ? a : b takes a BOOLEAN condition and branches of the same type
- the whole expression must yield the domain's value type
"""

import logging
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from exprforge.config import EngineConfig
from exprforge.domains import NumericDomain, ValueType, get_domain
from exprforge.errors import (
    DomainError,
    EvaluationError,
    ExpressionTypeError,
    InvalidDeclarationError,
    UnknownIdentifierError,
)
from exprforge.expressions.builtins import BUILTINS
from exprforge.expressions.functions import FunctionRegistry
from exprforge.expressions.lexer import IDENTIFIER_PATTERN, is_keyword
from exprforge.expressions.parser import (
    ASTNode,
    BinaryOp,
    Conditional,
    FunctionCall,
    Identifier,
    Literal,
    UnaryOp,
    parse,
)

logger = logging.getLogger(__name__)

Closure = Callable[[Sequence[Any]], Any]
Step = Callable[[Any, Sequence[Any]], Any]

ARITHMETIC_OPERATORS = ("+", "-", "*", "/", "%")
ORDERING_OPERATORS = {
    "<": lambda c: c < 0,
    "<=": lambda c: c <= 0,
    ">": lambda c: c > 0,
    ">=": lambda c: c >= 0,
}
EQUALITY_OPERATORS = {"==": operator.eq, "!=": operator.ne}
LOGICAL_OPERATORS = ("&&", "||")


@dataclass(frozen=True)
class Compiled:
    """A compiled sub-expression: its static type and its closure."""

    type: ValueType
    fn: Closure


@dataclass(frozen=True)
class Evaluator:
    """The built, reusable form of an expression.

    Calling it with one value per declared variable, in declared order,
    returns the result. The argument count is not checked here; the binder
    in Expression does that.

    Attributes:
        arity: Number of declared variables
        domain: Numeric domain the expression computes in
        result_type: Static type of the result
    """

    arity: int
    domain: NumericDomain
    result_type: ValueType
    fn: Closure = field(repr=False)

    def evaluate(self, args: Sequence[Any]) -> Any:
        return self.fn(args)

    def __call__(self, *args: Any) -> Any:
        return self.fn(args)


def _numeric_operand(value_type: ValueType) -> bool:
    return value_type in (ValueType.NUMBER, ValueType.ANY)


def _boolean_operand(value_type: ValueType) -> bool:
    return value_type in (ValueType.BOOLEAN, ValueType.ANY)


class Compiler:
    """Compiles AST nodes against declared variables, a domain and a registry.

    Usage:
        compiler = Compiler(["a", "b"], get_domain("float"), BUILTINS)
        compiled = compiler.compile(parse("a + b * 2"))
        compiled.fn([3.0, 4.0])  # 11.0
    """

    def __init__(
        self,
        variables: Sequence[str],
        domain: NumericDomain,
        registry: FunctionRegistry,
    ):
        self.slots = {name: index for index, name in enumerate(variables)}
        self.domain = domain
        self.registry = registry

    def compile(self, node: ASTNode) -> Compiled:
        """Compile an AST node and return its typed closure."""
        method_name = f"_compile_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise ExpressionTypeError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    # -------------------------------------------------------------------------
    # Node type compilers
    # -------------------------------------------------------------------------

    def _compile_literal(self, node: Literal) -> Compiled:
        if not node.is_number:
            flag = bool(node.value)
            return Compiled(ValueType.BOOLEAN, lambda args: flag)

        value = self.domain.parse_literal(str(node.value))
        return Compiled(ValueType.NUMBER, lambda args: value)

    def _compile_identifier(self, node: Identifier) -> Compiled:
        name = node.name

        # Declared variables shadow constants
        if name in self.slots:
            return Compiled(self.domain.value_type, operator.itemgetter(self.slots[name]))

        constant = self.registry.get_constant(name)
        if constant is None:
            raise UnknownIdentifierError(name, node.position)

        if constant.requires_real and not self.domain.supports_real:
            raise ExpressionTypeError(
                f"Constant '{name}' is not available in the {self.domain.name} domain"
            )
        value = self.domain.from_float(constant.value)
        return Compiled(ValueType.NUMBER, lambda args: value)

    def _compile_unaryop(self, node: UnaryOp) -> Compiled:
        operand = self.compile(node.operand)
        inner = operand.fn

        if node.operator == "!":
            if not _boolean_operand(operand.type):
                raise ExpressionTypeError(
                    f"Operator '!' requires a boolean operand, got {operand.type.value}"
                )
            return Compiled(ValueType.BOOLEAN, lambda args: not inner(args))

        if not _numeric_operand(operand.type):
            raise ExpressionTypeError(
                f"Unary '{node.operator}' requires a number operand, got {operand.type.value}"
            )

        if node.operator == "+":
            return operand

        negate = self.domain.negate
        return Compiled(operand.type, lambda args: negate(inner(args)))

    def _compile_binaryop(self, node: BinaryOp) -> Compiled:
        """Compile a left-nested operator chain as one loop.

        ``a + b - c`` parses as ``(a + b) - c``; the chain is walked down its
        left operands and folded from the innermost operand outwards, so long
        flat chains neither recurse here nor when evaluated.
        """
        links: list[BinaryOp] = []
        current: ASTNode = node
        while isinstance(current, BinaryOp):
            links.append(current)
            current = current.left
        links.reverse()

        first = self.compile(current)
        result_type = first.type
        steps: list[Step] = []
        for link in links:
            result_type, step = self._link(link.operator, result_type, self.compile(link.right))
            steps.append(step)

        start = first.fn
        chain = tuple(steps)

        def fold(args: Sequence[Any]) -> Any:
            value = start(args)
            for step in chain:
                value = step(value, args)
            return value

        return Compiled(result_type, fold)

    def _link(self, op: str, left_type: ValueType, right: Compiled) -> tuple[ValueType, Step]:
        """Type-check one operator application and return its fold step."""
        rhs = right.fn

        if op in LOGICAL_OPERATORS:
            if not (_boolean_operand(left_type) and _boolean_operand(right.type)):
                raise ExpressionTypeError(
                    f"Operator '{op}' requires boolean operands, "
                    f"got {left_type.value} and {right.type.value}"
                )
            # Short-circuit evaluation
            if op == "&&":
                return ValueType.BOOLEAN, lambda value, args: bool(value) and bool(rhs(args))
            return ValueType.BOOLEAN, lambda value, args: bool(value) or bool(rhs(args))

        if op in EQUALITY_OPERATORS:
            if not left_type.unifies_with(right.type):
                raise ExpressionTypeError(
                    f"Operator '{op}' cannot compare {left_type.value} with {right.type.value}"
                )
            test = EQUALITY_OPERATORS[op]
            return ValueType.BOOLEAN, lambda value, args: test(value, rhs(args))

        if not (_numeric_operand(left_type) and _numeric_operand(right.type)):
            raise ExpressionTypeError(
                f"Operator '{op}' requires number operands, "
                f"got {left_type.value} and {right.type.value}"
            )

        if op in ORDERING_OPERATORS:
            compare = self.domain.compare
            accept = ORDERING_OPERATORS[op]
            return ValueType.BOOLEAN, lambda value, args: accept(compare(value, rhs(args)))

        if op in ARITHMETIC_OPERATORS:
            apply = {
                "+": self.domain.add,
                "-": self.domain.subtract,
                "*": self.domain.multiply,
                "/": self.domain.divide,
                "%": self.domain.modulo,
            }[op]
            result_type = (
                ValueType.NUMBER
                if left_type is ValueType.NUMBER and right.type is ValueType.NUMBER
                else ValueType.ANY
            )
            return result_type, lambda value, args: apply(value, rhs(args))

        raise ExpressionTypeError(f"Unknown operator: {op}")

    def _compile_conditional(self, node: Conditional) -> Compiled:
        condition = self.compile(node.condition)
        if_true = self.compile(node.if_true)
        if_false = self.compile(node.if_false)

        if not _boolean_operand(condition.type):
            raise ExpressionTypeError(
                f"Conditional requires a boolean condition, got {condition.type.value}"
            )
        if not if_true.type.unifies_with(if_false.type):
            raise ExpressionTypeError(
                f"Conditional branches disagree: {if_true.type.value} and {if_false.type.value}"
            )

        result_type = if_true.type if if_true.type is if_false.type else ValueType.ANY
        test, yes, no = condition.fn, if_true.fn, if_false.fn
        return Compiled(result_type, lambda args: yes(args) if test(args) else no(args))

    def _compile_functioncall(self, node: FunctionCall) -> Compiled:
        name = node.name

        if not self.registry.is_registered(name):
            raise UnknownIdentifierError(name, node.position)

        func_def = self.registry.get(name)

        if func_def.requires_real and not self.domain.supports_real:
            raise ExpressionTypeError(
                f"{name}() is not available in the {self.domain.name} domain"
            )

        count = len(node.arguments)
        if count < func_def.min_args or (
            func_def.max_args is not None and count > func_def.max_args
        ):
            raise ExpressionTypeError(
                f"{func_def.signature()} does not accept {count} argument(s)"
            )

        arguments = [self.compile(arg) for arg in node.arguments]
        for index, compiled in enumerate(arguments):
            param = func_def.parameter_for(index)
            if not compiled.type.unifies_with(param.type):
                raise ExpressionTypeError(
                    f"{name}() argument '{param.name}' must be {param.type.value}, "
                    f"got {compiled.type.value}"
                )

        arg_fns = tuple(compiled.fn for compiled in arguments)
        implementation = func_def.implementation
        domain = self.domain

        def call(args: Sequence[Any]) -> Any:
            values = [fn(args) for fn in arg_fns]
            try:
                return implementation(domain, *values)
            except EvaluationError:
                raise
            except (ArithmeticError, ValueError) as e:
                raise DomainError(f"{name}() is undefined for {values}: {e}") from e
            except TypeError as e:
                raise EvaluationError(f"Error calling {name}: {e}") from e

        return Compiled(func_def.return_type, call)


# -----------------------------------------------------------------------------
# Build entry point
# -----------------------------------------------------------------------------


def validate_declarations(variables: Sequence[Any]) -> tuple[str, ...]:
    """Check declared variable names, returning them as a tuple.

    Raises:
        InvalidDeclarationError: For a non-string, malformed, reserved or
            duplicated name
    """
    seen: set[str] = set()
    for name in variables:
        if not isinstance(name, str):
            raise InvalidDeclarationError(name, "variable names must be strings")
        if not IDENTIFIER_PATTERN.match(name):
            raise InvalidDeclarationError(name, "not a valid identifier")
        if is_keyword(name):
            raise InvalidDeclarationError(name, "is a reserved keyword")
        if name in seen:
            raise InvalidDeclarationError(name, "is declared more than once")
        seen.add(name)
    return tuple(variables)


def resolve_domain(
    domain: NumericDomain | str | None, config: EngineConfig
) -> NumericDomain:
    if isinstance(domain, NumericDomain):
        return domain
    return get_domain(domain or config.domain, config)


def compile_expression(
    text: str,
    variables: Sequence[str] = (),
    domain: NumericDomain | str | None = None,
    registry: FunctionRegistry | None = None,
    config: EngineConfig | None = None,
) -> Evaluator:
    """Build an Evaluator from expression text and declared variables.

    This is the main entry point for compilation.

    Args:
        text: The expression string
        variables: Declared variable names, in binding order
        domain: Numeric domain (instance or name); defaults to config.domain
        registry: Function catalogue; defaults to BUILTINS
        config: Engine configuration; defaults to EngineConfig()

    Returns:
        The compiled Evaluator

    Raises:
        BuildError: InvalidDeclarationError, ExpressionSyntaxError,
            UnknownIdentifierError, ExpressionTypeError or LimitExceededError
        ValueError: If ``domain`` (or ``config.domain``) names no known
            domain; this is a caller error, not a problem with the text

    Example:
        evaluator = compile_expression("a + b * 2", ["a", "b"])
        evaluator(3, 4)
        # 11.0
    """
    config = config or EngineConfig()
    names = validate_declarations(variables)
    numeric_domain = resolve_domain(domain, config)

    ast = parse(text, config.max_depth)
    compiled = Compiler(names, numeric_domain, registry or BUILTINS).compile(ast)

    if not compiled.type.unifies_with(numeric_domain.value_type):
        raise ExpressionTypeError(
            f"Expression yields {compiled.type.value} but the {numeric_domain.name} "
            f"domain requires {numeric_domain.value_type.value}"
        )

    logger.debug(
        "Compiled expression %r with %d variable(s) in the %s domain",
        text,
        len(names),
        numeric_domain.name,
    )
    return Evaluator(
        arity=len(names),
        domain=numeric_domain,
        result_type=compiled.type,
        fn=compiled.fn,
    )
