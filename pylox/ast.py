"""Abstract Syntax Tree (AST) definitions for Lox.

The AST classes defined in this module represent the syntactic structure
of parsed Lox programs. They are produced by the parser, annotated by the
resolver and evaluated by the interpreter.

Nodes are declared with ``eq=False`` so that they compare and hash by
identity: the resolver keys its distance table on the exact expression
node, and two structurally equal references in different scopes must not
collide.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass(frozen=True)
class Token:
    """A lexical token together with its source position."""
    type: str
    lexeme: str
    literal: Any = None
    line: int = 0
    column: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.lexeme!r}, line={self.line})"


@dataclass(eq=False)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(eq=False)
class Stmt(Node):
    pass


@dataclass(eq=False)
class Expr(Node):
    pass


# Statements

@dataclass(eq=False)
class Block(Stmt):
    statements: List[Stmt]


@dataclass(eq=False)
class FunctionDecl(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass(eq=False)
class ClassDecl(Stmt):
    name: Token
    superclass: Optional['Variable']
    methods: List[FunctionDecl]


@dataclass(eq=False)
class ExprStmt(Stmt):
    expr: Expr


@dataclass(eq=False)
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class PrintStmt(Stmt):
    value: Expr


@dataclass(eq=False)
class ReturnStmt(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class VarDecl(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt


# Expressions

@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    op: Token
    right: Expr


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used for error locations
    arguments: List[Expr]


@dataclass(eq=False)
class Get(Expr):
    obj: Expr
    name: Token


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False)
class Literal(Expr):
    value: Any  # None, bool, float or str


@dataclass(eq=False)
class Logical(Expr):
    left: Expr
    op: Token
    right: Expr


@dataclass(eq=False)
class Set(Expr):
    obj: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class Super(Expr):
    keyword: Token
    method: Token


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Unary(Expr):
    op: Token
    right: Expr


@dataclass(eq=False)
class Variable(Expr):
    name: Token
