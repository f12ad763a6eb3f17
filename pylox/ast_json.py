"""JSON serialization/deserialization for Lox ASTs.

This module converts between Lox AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node type and
`Token` round-trips. Deserialized nodes are fresh objects, so a program
loaded this way must be resolved again before it runs.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Token, Node, Block, ClassDecl, ExprStmt, FunctionDecl, IfStmt,
    PrintStmt, ReturnStmt, VarDecl, WhileStmt, Assign, Binary, Call, Get,
    Grouping, Literal, Logical, Set, Super, This, Unary, Variable,
)


def token_to_obj(t: Token) -> Dict[str, Any]:
    return {"type": t.type, "lexeme": t.lexeme, "literal": t.literal, "line": t.line, "column": t.column}


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(o["type"], o["lexeme"], o.get("literal"), o.get("line", 0), o.get("column", 0))


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]
    if not isinstance(node, Node):
        raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")

    # Statements
    if isinstance(node, Block):
        return {"type": "Block", "statements": ast_to_obj(node.statements)}
    if isinstance(node, ClassDecl):
        return {
            "type": "ClassDecl",
            "name": token_to_obj(node.name),
            "superclass": ast_to_obj(node.superclass),
            "methods": ast_to_obj(node.methods),
        }
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, FunctionDecl):
        return {
            "type": "FunctionDecl",
            "name": token_to_obj(node.name),
            "params": [token_to_obj(p) for p in node.params],
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, PrintStmt):
        return {"type": "PrintStmt", "value": ast_to_obj(node.value)}
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "keyword": token_to_obj(node.keyword), "value": ast_to_obj(node.value)}
    if isinstance(node, VarDecl):
        return {"type": "VarDecl", "name": token_to_obj(node.name), "initializer": ast_to_obj(node.initializer)}
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}

    # Expressions
    if isinstance(node, Assign):
        return {"type": "Assign", "name": token_to_obj(node.name), "value": ast_to_obj(node.value)}
    if isinstance(node, (Binary, Logical)):
        return {
            "type": type(node).__name__,
            "left": ast_to_obj(node.left),
            "op": token_to_obj(node.op),
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Call):
        return {
            "type": "Call",
            "callee": ast_to_obj(node.callee),
            "paren": token_to_obj(node.paren),
            "arguments": ast_to_obj(node.arguments),
        }
    if isinstance(node, Get):
        return {"type": "Get", "obj": ast_to_obj(node.obj), "name": token_to_obj(node.name)}
    if isinstance(node, Grouping):
        return {"type": "Grouping", "expression": ast_to_obj(node.expression)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": node.value}
    if isinstance(node, Set):
        return {
            "type": "Set",
            "obj": ast_to_obj(node.obj),
            "name": token_to_obj(node.name),
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, Super):
        return {"type": "Super", "keyword": token_to_obj(node.keyword), "method": token_to_obj(node.method)}
    if isinstance(node, This):
        return {"type": "This", "keyword": token_to_obj(node.keyword)}
    if isinstance(node, Unary):
        return {"type": "Unary", "op": token_to_obj(node.op), "right": ast_to_obj(node.right)}
    if isinstance(node, Variable):
        return {"type": "Variable", "name": token_to_obj(node.name)}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Block":
        return Block(statements=ast_from_obj(obj["statements"]))
    if t == "ClassDecl":
        return ClassDecl(
            name=token_from_obj(obj["name"]),
            superclass=ast_from_obj(obj.get("superclass")),
            methods=ast_from_obj(obj["methods"]),
        )
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "FunctionDecl":
        return FunctionDecl(
            name=token_from_obj(obj["name"]),
            params=[token_from_obj(p) for p in obj["params"]],
            body=ast_from_obj(obj["body"]),
        )
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
        )
    if t == "PrintStmt":
        return PrintStmt(value=ast_from_obj(obj["value"]))
    if t == "ReturnStmt":
        return ReturnStmt(keyword=token_from_obj(obj["keyword"]), value=ast_from_obj(obj.get("value")))
    if t == "VarDecl":
        return VarDecl(name=token_from_obj(obj["name"]), initializer=ast_from_obj(obj.get("initializer")))
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "Assign":
        return Assign(name=token_from_obj(obj["name"]), value=ast_from_obj(obj["value"]))
    if t == "Binary":
        return Binary(left=ast_from_obj(obj["left"]), op=token_from_obj(obj["op"]), right=ast_from_obj(obj["right"]))
    if t == "Logical":
        return Logical(left=ast_from_obj(obj["left"]), op=token_from_obj(obj["op"]), right=ast_from_obj(obj["right"]))
    if t == "Call":
        return Call(
            callee=ast_from_obj(obj["callee"]),
            paren=token_from_obj(obj["paren"]),
            arguments=ast_from_obj(obj["arguments"]),
        )
    if t == "Get":
        return Get(obj=ast_from_obj(obj["obj"]), name=token_from_obj(obj["name"]))
    if t == "Grouping":
        return Grouping(expression=ast_from_obj(obj["expression"]))
    if t == "Literal":
        value = obj["value"]
        # JSON has no float/int distinction; Lox numbers are always floats.
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        return Literal(value=value)
    if t == "Set":
        return Set(obj=ast_from_obj(obj["obj"]), name=token_from_obj(obj["name"]), value=ast_from_obj(obj["value"]))
    if t == "Super":
        return Super(keyword=token_from_obj(obj["keyword"]), method=token_from_obj(obj["method"]))
    if t == "This":
        return This(keyword=token_from_obj(obj["keyword"]))
    if t == "Unary":
        return Unary(op=token_from_obj(obj["op"]), right=ast_from_obj(obj["right"]))
    if t == "Variable":
        return Variable(name=token_from_obj(obj["name"]))

    raise ValueError(f"Unknown AST node type: {t}")
