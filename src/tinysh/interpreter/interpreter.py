"""Evaluator - AST execution engine.

Walks a ``Program`` statement by statement against one ``Environment``.
Delegates to specialized modules for:
- String interpolation (expansion.py)
- Arithmetic (arithmetic.py)
- Test operators (conditionals.py)
- Builtin commands (builtins/)

Expressions are evaluated in one of two modes. Regular mode is string
biased: barewords stand for themselves and unset variables are empty.
Arithmetic mode, entered by ``$(( ... ))`` and array subscripts, reads
every name as a variable and treats unset variables as 0.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence, assert_never

from ..ast.types import (
    ArithmeticExpression,
    ArrayAccess,
    ArrayLiteral,
    Assignment,
    Condition,
    Expression,
    ExpressionStatement,
    FunctionApplication,
    Identifier,
    InfixExpression,
    NumberConstant,
    PrefixExpression,
    Program,
    Statement,
    StringConstant,
    WholeArray,
)
from ..types import Builtins, CommandInvoker, OutputSink
from .arithmetic import ARITHMETIC_OPERATORS, apply_arithmetic, negate, to_arithmetic
from .builtins import BUILTIN_NAMES
from .conditionals import (
    NUMERIC_OPERATORS,
    STRING_OPERATORS,
    UNARY_OPERATORS,
    compare_numbers,
    compare_strings,
    unary_test,
)
from .errors import EvaluationError, UnhandledOperatorError
from .expansion import expand_string, parameter_length
from .types import Environment, InterpreterState
from .values import (
    EMPTY,
    VOID,
    Array,
    Boolean,
    Number,
    String,
    Value,
    type_name,
)


class EvalMode(Enum):
    REGULAR = "regular"
    ARITHMETIC = "arithmetic"


class Evaluator:
    """AST interpreter for tinysh programs."""

    def __init__(
        self,
        builtins: Builtins,
        invoker: CommandInvoker,
        state: Optional[InterpreterState] = None,
        trace: Optional[OutputSink] = None,
    ):
        """Initialize the evaluator.

        Args:
            builtins: Receives ``echo`` invocations.
            invoker: Runs every other command.
            state: Initial state; a fresh empty environment if not provided.
            trace: Where xtrace lines go when ``state.options.xtrace`` is set.
        """
        self._builtins = builtins
        self._invoker = invoker
        self._state = state or InterpreterState()
        self._trace = trace

    @property
    def state(self) -> InterpreterState:
        return self._state

    @property
    def env(self) -> Environment:
        return self._state.env

    async def run(self, program: Program) -> None:
        """Execute every statement of ``program`` in order."""
        for statement in program.statements:
            await self.execute_statement(statement)

    # =========================================================================
    # Statements
    # =========================================================================

    async def execute_statement(self, node: Statement) -> None:
        if isinstance(node, Assignment):
            await self._execute_assignment(node)
        elif isinstance(node, Condition):
            await self._evaluate_condition(node)
        elif isinstance(node, ExpressionStatement):
            expression = node.expression
            if isinstance(expression, StringConstant):
                # A lone word is a command without arguments.
                expression = FunctionApplication(expression)
            await self.evaluate(expression)
        else:
            assert_never(node)

    async def _execute_assignment(self, node: Assignment) -> None:
        value = await self.evaluate(node.rhs)
        lhs = node.lhs
        if isinstance(lhs, Identifier):
            self.env[lhs.name] = value
            return

        if isinstance(lhs.index, WholeArray):
            raise EvaluationError(f"{lhs}: cannot assign to a whole array", node)
        index = await self.evaluate(lhs.index, EvalMode.ARITHMETIC)
        if not isinstance(index, Number) or index.n < 0:
            raise EvaluationError(f"{lhs}: bad array subscript", node)

        current = self.env.get(lhs.name.name)
        if current is None:
            current = Array()
        elif not isinstance(current, Array):
            raise EvaluationError(
                f"{lhs.name}: cannot index a {type_name(current)}", node
            )
        self.env[lhs.name.name] = current.with_element(index.n, value)

    async def _evaluate_condition(self, node: Condition) -> Value:
        test = await self.evaluate(node.test)
        if not isinstance(test, Boolean):
            raise EvaluationError(
                f"test expression must be a boolean, got {type_name(test)}", node
            )
        if test.b:
            await self.execute_statement(node.then)
        elif node.otherwise is not None:
            await self.execute_statement(node.otherwise)
        return VOID

    # =========================================================================
    # Expressions
    # =========================================================================

    async def evaluate(
        self, node: Expression, mode: EvalMode = EvalMode.REGULAR
    ) -> Value:
        """Evaluate an expression in the given mode."""
        if isinstance(node, NumberConstant):
            return Number(node.n)
        if isinstance(node, StringConstant):
            return await expand_string(self, node)
        if isinstance(node, Identifier):
            return self._evaluate_identifier(node, mode)
        if isinstance(node, ArithmeticExpression):
            return await self.evaluate(node.inner, EvalMode.ARITHMETIC)
        if isinstance(node, InfixExpression):
            return await self._evaluate_infix(node, mode)
        if isinstance(node, PrefixExpression):
            return await self._evaluate_prefix(node, mode)
        if isinstance(node, FunctionApplication):
            return await self._evaluate_application(node)
        if isinstance(node, ArrayLiteral):
            elements = [await self.evaluate(element) for element in node.elements]
            return Array(tuple(elements))
        if isinstance(node, ArrayAccess):
            return await self._evaluate_array_access(node, mode)
        if isinstance(node, Condition):
            return await self._evaluate_condition(node)
        assert_never(node)

    def lookup(self, name: str) -> Value:
        """Regular-mode variable lookup: unset is the empty string.

        An array referenced without a subscript stands for its first element.
        """
        value = self.env.get(name, EMPTY)
        if isinstance(value, Array):
            return value.get(0)
        return value

    def _evaluate_identifier(self, node: Identifier, mode: EvalMode) -> Value:
        name = node.name
        if mode is EvalMode.ARITHMETIC:
            return to_arithmetic(self.env.get(name.removeprefix("$"), Number(0)))
        if not name.startswith("$"):
            # Bareword: the name stands for itself.
            return String(name)
        return self.lookup(name[1:])

    async def _evaluate_infix(self, node: InfixExpression, mode: EvalMode) -> Value:
        lhs = await self.evaluate(node.lhs, mode)
        rhs = await self.evaluate(node.rhs, mode)
        op = node.op

        if op in ARITHMETIC_OPERATORS:
            return apply_arithmetic(op, lhs, rhs)
        if op in STRING_OPERATORS:
            return compare_strings(op, lhs, rhs)
        if op in NUMERIC_OPERATORS:
            return compare_numbers(op, lhs, rhs)
        raise UnhandledOperatorError(op, lhs, rhs)

    async def _evaluate_prefix(self, node: PrefixExpression, mode: EvalMode) -> Value:
        op = node.op
        # A length is taken of the parameter as stored, even inside $((...)).
        operand = await self.evaluate(node.operand, EvalMode.REGULAR if op == "#" else mode)

        if op in UNARY_OPERATORS:
            return unary_test(op, operand)
        if op == "-":
            return negate(operand)
        if op == "#":
            return parameter_length(operand)
        raise UnhandledOperatorError(op, operand)

    async def _evaluate_array_access(self, node: ArrayAccess, mode: EvalMode) -> Value:
        array = self.env.get(node.name.name)
        if array is None:
            return Number(0) if mode is EvalMode.ARITHMETIC else EMPTY
        if not isinstance(array, Array):
            raise EvaluationError(
                f"{node.name}: cannot index a {type_name(array)}", node
            )

        if isinstance(node.index, WholeArray):
            return array
        index = await self.evaluate(node.index, EvalMode.ARITHMETIC)
        if not isinstance(index, Number):
            raise EvaluationError(
                f"{node}: array index must be a number, got {type_name(index)}", node
            )

        element = array.get(index.n)
        if mode is EvalMode.ARITHMETIC:
            return to_arithmetic(element)
        return element

    async def _evaluate_application(self, node: FunctionApplication) -> Value:
        name = (await self.evaluate(node.name)).show()
        args: list[str] = []
        for arg in node.args:
            args.extend(_words(await self.evaluate(arg)))
        if not name and not args:
            # An unset variable as the whole command runs nothing.
            return VOID

        self._xtrace(name, args)
        if name in BUILTIN_NAMES:
            self._builtins.echo(args)
        else:
            await self._invoker.exec(name, args)
        return VOID

    def _xtrace(self, name: str, args: Sequence[str]) -> None:
        if self._state.options.xtrace and self._trace is not None:
            self._trace.write(" ".join(["+", name, *args]) + "\n")


def _words(value: Value) -> list[str]:
    """Command words for an argument value; an array contributes one per element."""
    if isinstance(value, Array):
        return [element.show() for element in value.elements]
    return [value.show()]
