"""Function registry for the exprforge expression language.

Functions are callable from expressions (e.g., `sqrt(x) > 2`, `max(a, b)`).
Each function is registered with metadata for documentation and for the
compiler's build-time arity and type checks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from exprforge.domains import ValueType


class FunctionCategory(Enum):
    """Groups used by the `functions` listing and the exported docs."""

    ARITHMETIC = "arithmetic"
    ROUNDING = "rounding"
    EXPONENTIAL = "exponential"
    TRIGONOMETRIC = "trigonometric"


@dataclass(frozen=True)
class FunctionParameter:
    """One declared parameter of a builtin.

    Attributes:
        name: Name shown in signatures
        type: Expected static type
        description: Human-readable description
        required: False for trailing optional parameters
        variadic: If True, this parameter accepts one or more values
    """

    name: str
    type: ValueType
    description: str
    required: bool = True
    variadic: bool = False


@dataclass(frozen=True)
class FunctionDefinition:
    """A builtin callable plus the metadata the compiler checks calls against.

    Attributes:
        name: Name used at call sites
        description: Human-readable description
        category: Listing group
        parameters: Parameter definitions
        return_type: Static type of the return value
        requires_real: Only available in domains with real-valued functions
        examples: Sample expressions for the docs
        implementation: Callable taking (domain, *args)
    """

    name: str
    description: str
    category: FunctionCategory
    parameters: tuple[FunctionParameter, ...]
    return_type: ValueType
    implementation: Callable[..., Any]
    requires_real: bool = False
    examples: tuple[str, ...] = ()

    @property
    def min_args(self) -> int:
        return sum(1 for p in self.parameters if p.required)

    @property
    def max_args(self) -> int | None:
        """Maximum argument count, or None for variadic functions."""
        if any(p.variadic for p in self.parameters):
            return None
        return len(self.parameters)

    def parameter_for(self, index: int) -> FunctionParameter:
        """Parameter definition for the argument at ``index``."""
        if index < len(self.parameters):
            return self.parameters[index]
        return self.parameters[-1]

    def signature(self) -> str:
        parts = []
        for p in self.parameters:
            part = f"{p.name}..." if p.variadic else p.name
            parts.append(part if p.required else f"[{part}]")
        return f"{self.name}({', '.join(parts)})"

    def to_dict(self) -> dict[str, Any]:
        """Export for the documentation listing."""
        return {
            "name": self.name,
            "signature": self.signature(),
            "description": self.description,
            "category": self.category.value,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type.value,
                    "description": p.description,
                    "required": p.required,
                    "variadic": p.variadic,
                }
                for p in self.parameters
            ],
            "returnType": self.return_type.value,
            "requiresReal": self.requires_real,
            "examples": list(self.examples),
        }


@dataclass(frozen=True)
class ConstantDefinition:
    """A named constant usable as a bare identifier (e.g., `pi`)."""

    name: str
    value: float
    description: str
    requires_real: bool = True


@dataclass
class FunctionRegistry:
    """Registry for expression functions and constants.

    A registry is filled once and then frozen; the compiler only reads it.

    Example:
        registry = FunctionRegistry()
        registry.register(FunctionDefinition(name="abs", ...))
        registry.freeze()

        func = registry.get("abs")
        result = func.implementation(domain, -5)  # Returns 5
    """

    _functions: dict[str, FunctionDefinition] = field(default_factory=dict)
    _constants: dict[str, ConstantDefinition] = field(default_factory=dict)
    _frozen: bool = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("Function registry is frozen")

    def register(self, func_def: FunctionDefinition) -> None:
        """Add or replace a function.

        Raises:
            RuntimeError: If the registry has been frozen
        """
        self._check_writable()
        self._functions[func_def.name] = func_def

    def register_constant(self, constant: ConstantDefinition) -> None:
        self._check_writable()
        self._constants[constant.name] = constant

    def freeze(self) -> "FunctionRegistry":
        self._frozen = True
        return self

    def get(self, name: str) -> FunctionDefinition:
        """Look up a function.

        Raises:
            KeyError: If function is not registered
        """
        if name not in self._functions:
            raise KeyError(f"Unknown function: {name}")
        return self._functions[name]

    def is_registered(self, name: str) -> bool:
        """Whether ``name`` is a known function."""
        return name in self._functions

    def get_constant(self, name: str) -> ConstantDefinition | None:
        return self._constants.get(name)

    def list_all(self) -> list[FunctionDefinition]:
        """Functions in registration order."""
        return list(self._functions.values())

    def list_constants(self) -> list[ConstantDefinition]:
        return list(self._constants.values())

    def list_by_category(self, category: FunctionCategory) -> list[FunctionDefinition]:
        """Functions belonging to ``category``."""
        return [f for f in self._functions.values() if f.category == category]

    def export_documentation(self) -> dict[str, Any]:
        """Export the full registry for documentation.

        Returns:
            Mapping with "functions" by name, "byCategory" and "constants"
        """
        by_category: dict[str, list[dict[str, Any]]] = {}
        for func_def in self._functions.values():
            by_category.setdefault(func_def.category.value, []).append(func_def.to_dict())

        return {
            "functions": {name: f.to_dict() for name, f in self._functions.items()},
            "byCategory": by_category,
            "constants": {
                c.name: {"value": c.value, "description": c.description}
                for c in self._constants.values()
            },
        }
