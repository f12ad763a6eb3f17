"""Debug pretty-printer rendering Lox ASTs as S-expressions."""

from __future__ import annotations

from typing import List

from .ast import (
    Node, Stmt, Block, ClassDecl, ExprStmt, FunctionDecl, IfStmt,
    PrintStmt, ReturnStmt, VarDecl, WhileStmt, Assign, Binary, Call, Get,
    Grouping, Literal, Logical, Set, Super, This, Unary, Variable,
)
from .types import to_string


class AstPrinter:
    def print(self, statements: List[Stmt]) -> str:
        return '\n'.join(self.show(stmt) for stmt in statements)

    def parenthesize(self, name: str, *parts: Node) -> str:
        inner = ' '.join([name] + [self.show(part) for part in parts])
        return f"({inner})"

    def show(self, node: Node) -> str:
        if isinstance(node, Block):
            return '(block' + ''.join(' ' + self.show(s) for s in node.statements) + ')'
        if isinstance(node, ClassDecl):
            head = f"(class {node.name.lexeme}"
            if node.superclass is not None:
                head += f" < {node.superclass.name.lexeme}"
            return head + ''.join(' ' + self.show(m) for m in node.methods) + ')'
        if isinstance(node, ExprStmt):
            return self.parenthesize(';', node.expr)
        if isinstance(node, FunctionDecl):
            params = ' '.join(p.lexeme for p in node.params)
            body = ''.join(' ' + self.show(s) for s in node.body)
            return f"(fun {node.name.lexeme} ({params}){body})"
        if isinstance(node, IfStmt):
            if node.else_branch is None:
                return self.parenthesize('if', node.condition, node.then_branch)
            return self.parenthesize('if-else', node.condition, node.then_branch, node.else_branch)
        if isinstance(node, PrintStmt):
            return self.parenthesize('print', node.value)
        if isinstance(node, ReturnStmt):
            if node.value is None:
                return '(return)'
            return self.parenthesize('return', node.value)
        if isinstance(node, VarDecl):
            if node.initializer is None:
                return f"(var {node.name.lexeme})"
            return self.parenthesize(f"var {node.name.lexeme}", node.initializer)
        if isinstance(node, WhileStmt):
            return self.parenthesize('while', node.condition, node.body)

        if isinstance(node, Assign):
            return self.parenthesize(f"= {node.name.lexeme}", node.value)
        if isinstance(node, (Binary, Logical)):
            return self.parenthesize(node.op.lexeme, node.left, node.right)
        if isinstance(node, Call):
            return self.parenthesize('call', node.callee, *node.arguments)
        if isinstance(node, Get):
            return f"(. {self.show(node.obj)} {node.name.lexeme})"
        if isinstance(node, Grouping):
            return self.parenthesize('group', node.expression)
        if isinstance(node, Literal):
            if isinstance(node.value, str):
                return f'"{node.value}"'
            return to_string(node.value)
        if isinstance(node, Set):
            return f"(= {self.show(node.obj)} {node.name.lexeme} {self.show(node.value)})"
        if isinstance(node, Super):
            return f"(super {node.method.lexeme})"
        if isinstance(node, This):
            return 'this'
        if isinstance(node, Unary):
            return self.parenthesize(node.op.lexeme, node.right)
        if isinstance(node, Variable):
            return node.name.lexeme
        raise NotImplementedError(f"print: unexpected node type {type(node)}")
