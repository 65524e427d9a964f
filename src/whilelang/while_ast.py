"""
Defines the abstract syntax tree (AST) of the While language.

Node families:
    Statement:
        Skip, Assignment, Composition, Conditional, While
    BooleanExp:
        Boolean, Not, And, ArithmeticCondition
    ArithmeticExp:
        Integer, Variable, BinaryOperation

All nodes are frozen dataclasses: a tree is built once by the parser, bottom
up, and never mutated afterwards. Two trees compare equal when they have the
same shape and payloads, so parsing the same tokens twice gives equal trees.

Only `While` carries a source `Position` (loop invariants are reported per
loop by downstream analyzers); no other node records where it came from.

Comparisons are kept in a normal form, see `ArithmeticCondition.normal_form`.

Every node supports:
    extract_vars(): the variable names the node mentions.
    extract_constants(): the integer literals the node mentions.
    to_dict(): a JSON-ready `ASTDict`.

Example:
    prog = Composition(Assignment("x", Integer(1)), Skip())
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypedDict


class ASTDict(TypedDict, total=False):
    """
    Dictionary form of an AST node, used for JSON output and test assertions.

    Fields:
        kind (str): The node kind (e.g. "seq", "while", "arith").
        value (Any): Payload such as a variable name, literal or operator name.
        line (int): Source line, present on "while" nodes only.
        col (int): Source column, present on "while" nodes only.
        children (List[ASTDict]): Sub-trees, in source order.
    """

    kind: str
    value: Any
    line: int
    col: int
    children: list["ASTDict"]


@dataclass(frozen=True, order=True)
class Position:
    """1-based source location of a `while` keyword."""

    line: int
    col: int


class Operator(Enum):
    ADD = "Add"
    SUB = "Sub"
    MUL = "Mul"
    DIV = "Div"


class ConditionOperator(Enum):
    STRICTLY_LESS = "StrictlyLess"
    EQUAL = "Equal"


# Arithmetic expressions


@dataclass(frozen=True)
class ArithmeticExp:
    def extract_vars(self) -> set[str]:
        raise NotImplementedError

    def extract_constants(self) -> set[int]:
        raise NotImplementedError

    def to_dict(self) -> ASTDict:
        raise NotImplementedError


@dataclass(frozen=True)
class Integer(ArithmeticExp):
    value: int

    def extract_vars(self) -> set[str]:
        return set()

    def extract_constants(self) -> set[int]:
        return {self.value}

    def to_dict(self) -> ASTDict:
        return {"kind": "number", "value": self.value, "children": []}


@dataclass(frozen=True)
class Variable(ArithmeticExp):
    name: str

    def extract_vars(self) -> set[str]:
        return {self.name}

    def extract_constants(self) -> set[int]:
        return set()

    def to_dict(self) -> ASTDict:
        return {"kind": "identifier", "value": self.name, "children": []}


@dataclass(frozen=True)
class BinaryOperation(ArithmeticExp):
    lhs: ArithmeticExp
    operator: Operator
    rhs: ArithmeticExp

    def extract_vars(self) -> set[str]:
        return self.lhs.extract_vars() | self.rhs.extract_vars()

    def extract_constants(self) -> set[int]:
        return self.lhs.extract_constants() | self.rhs.extract_constants()

    def to_dict(self) -> ASTDict:
        return {
            "kind": "arith",
            "value": self.operator.value,
            "children": [self.lhs.to_dict(), self.rhs.to_dict()],
        }


# Boolean expressions


@dataclass(frozen=True)
class BooleanExp:
    def extract_vars(self) -> set[str]:
        raise NotImplementedError

    def extract_constants(self) -> set[int]:
        raise NotImplementedError

    def to_dict(self) -> ASTDict:
        raise NotImplementedError


@dataclass(frozen=True)
class Boolean(BooleanExp):
    value: bool

    def extract_vars(self) -> set[str]:
        return set()

    def extract_constants(self) -> set[int]:
        return set()

    def to_dict(self) -> ASTDict:
        return {"kind": "bool", "value": self.value, "children": []}


@dataclass(frozen=True)
class Not(BooleanExp):
    exp: BooleanExp

    def extract_vars(self) -> set[str]:
        return self.exp.extract_vars()

    def extract_constants(self) -> set[int]:
        return self.exp.extract_constants()

    def to_dict(self) -> ASTDict:
        return {"kind": "not", "children": [self.exp.to_dict()]}


@dataclass(frozen=True)
class And(BooleanExp):
    lhs: BooleanExp
    rhs: BooleanExp

    def extract_vars(self) -> set[str]:
        return self.lhs.extract_vars() | self.rhs.extract_vars()

    def extract_constants(self) -> set[int]:
        return self.lhs.extract_constants() | self.rhs.extract_constants()

    def to_dict(self) -> ASTDict:
        return {"kind": "and", "children": [self.lhs.to_dict(), self.rhs.to_dict()]}


@dataclass(frozen=True)
class ArithmeticCondition(BooleanExp):
    """A comparison `lhs operator rhs`.

    Build it with `normal_form`, never directly: the normal form compares a
    single expression against zero, so `a < b` is stored as `(a - b) < 0`
    and `x = 0` stays as it is.
    """

    lhs: ArithmeticExp
    operator: ConditionOperator
    rhs: ArithmeticExp

    @classmethod
    def normal_form(
        cls, lhs: ArithmeticExp, operator: ConditionOperator, rhs: ArithmeticExp
    ) -> "ArithmeticCondition":
        zero = Integer(0)
        if rhs == zero:
            return cls(lhs, operator, rhs)
        return cls(BinaryOperation(lhs, Operator.SUB, rhs), operator, zero)

    def extract_vars(self) -> set[str]:
        return self.lhs.extract_vars() | self.rhs.extract_vars()

    def extract_constants(self) -> set[int]:
        # rhs is the zero introduced by the normal form
        return self.lhs.extract_constants()

    def to_dict(self) -> ASTDict:
        return {
            "kind": "compare",
            "value": self.operator.value,
            "children": [self.lhs.to_dict(), self.rhs.to_dict()],
        }


# Statements


@dataclass(frozen=True)
class Statement:
    def extract_vars(self) -> set[str]:
        raise NotImplementedError

    def extract_constants(self) -> set[int]:
        raise NotImplementedError

    def to_dict(self) -> ASTDict:
        raise NotImplementedError


@dataclass(frozen=True)
class Skip(Statement):
    def extract_vars(self) -> set[str]:
        return set()

    def extract_constants(self) -> set[int]:
        return set()

    def to_dict(self) -> ASTDict:
        return {"kind": "skip", "children": []}


@dataclass(frozen=True)
class Assignment(Statement):
    var: str
    value: ArithmeticExp

    def extract_vars(self) -> set[str]:
        return {self.var} | self.value.extract_vars()

    def extract_constants(self) -> set[int]:
        return self.value.extract_constants()

    def to_dict(self) -> ASTDict:
        return {"kind": "assign", "value": self.var, "children": [self.value.to_dict()]}


@dataclass(frozen=True)
class Composition(Statement):
    """Sequential execution: `lhs ; rhs`."""

    lhs: Statement
    rhs: Statement

    def extract_vars(self) -> set[str]:
        return self.lhs.extract_vars() | self.rhs.extract_vars()

    def extract_constants(self) -> set[int]:
        return self.lhs.extract_constants() | self.rhs.extract_constants()

    def to_dict(self) -> ASTDict:
        return {"kind": "seq", "children": [self.lhs.to_dict(), self.rhs.to_dict()]}


@dataclass(frozen=True)
class Conditional(Statement):
    guard: BooleanExp
    true_branch: Statement
    false_branch: Statement

    def extract_vars(self) -> set[str]:
        return (
            self.guard.extract_vars()
            | self.true_branch.extract_vars()
            | self.false_branch.extract_vars()
        )

    def extract_constants(self) -> set[int]:
        return (
            self.guard.extract_constants()
            | self.true_branch.extract_constants()
            | self.false_branch.extract_constants()
        )

    def to_dict(self) -> ASTDict:
        return {
            "kind": "if",
            "children": [
                self.guard.to_dict(),
                self.true_branch.to_dict(),
                self.false_branch.to_dict(),
            ],
        }


@dataclass(frozen=True)
class While(Statement):
    position: Position
    guard: BooleanExp
    body: Statement

    def extract_vars(self) -> set[str]:
        return self.guard.extract_vars() | self.body.extract_vars()

    def extract_constants(self) -> set[int]:
        return self.guard.extract_constants() | self.body.extract_constants()

    def to_dict(self) -> ASTDict:
        return {
            "kind": "while",
            "line": self.position.line,
            "col": self.position.col,
            "children": [self.guard.to_dict(), self.body.to_dict()],
        }


Node = Statement | BooleanExp | ArithmeticExp
"""Any AST node; the result type of a parse from an arbitrary entry point."""
