"""Tokenizer and parser for the Lox language.

Source text is parsed by a Lark LALR parser configured with the grammar
below. The resulting parse tree is transformed into the AST defined in
`pylox.ast` by `ASTTransformer`. Syntax errors are reported through an
`ErrorReporter` instead of being raised, so the command line and REPL can
decide what to do with them.

Two pieces of Lox syntax are handled in the transformer rather than the
grammar:

* assignment targets are parsed as ordinary expressions and then checked,
  turning ``a = v`` into `Assign` and ``obj.f = v`` into `Set`;
* ``for`` loops are desugared into a ``while`` loop wrapped in blocks.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from lark import Lark, Transformer
from lark import Token as LarkToken
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from .ast import (
    Token, Stmt, Expr, Block, ClassDecl, ExprStmt, FunctionDecl, IfStmt,
    PrintStmt, ReturnStmt, VarDecl, WhileStmt, Assign, Binary, Call, Get,
    Grouping, Literal, Logical, Set, Super, This, Unary, Variable,
)
from .errors import ErrorReporter

MAX_ARGS = 255


LOX_GRAMMAR = r"""
    ?start: program
    program: declaration*

    // Declarations and statements
    ?declaration: class_decl
                | fun_decl
                | var_decl
                | statement

    class_decl: "class" IDENTIFIER ["<" IDENTIFIER] "{" function* "}"
    fun_decl: "fun" function
    function: IDENTIFIER "(" [parameters] ")" block
    parameters: IDENTIFIER ("," IDENTIFIER)*
    var_decl: "var" IDENTIFIER ["=" expression] ";"

    ?statement: expr_stmt
              | for_stmt
              | if_stmt
              | print_stmt
              | return_stmt
              | while_stmt
              | block

    expr_stmt: expression ";"
    for_stmt: "for" "(" for_init for_cond ";" for_incr ")" statement
    for_init: var_decl | expr_stmt | ";"
    for_cond: expression?
    for_incr: expression?
    if_stmt: "if" "(" expression ")" statement ["else" statement]
    print_stmt: "print" expression ";"
    return_stmt: RETURN [expression] ";"
    while_stmt: "while" "(" expression ")" statement
    block: "{" declaration* "}"

    // Expressions with precedence
    ?expression: assignment
    ?assignment: logic_or (EQUAL assignment)?
    ?logic_or: logic_and (OR logic_and)*
    ?logic_and: equality (AND equality)*
    ?equality: comparison ((BANG_EQUAL | EQUAL_EQUAL) comparison)*
    ?comparison: term ((GREATER | GREATER_EQUAL | LESS | LESS_EQUAL) term)*
    ?term: factor ((MINUS | PLUS) factor)*
    ?factor: unary ((SLASH | STAR) unary)*
    ?unary: (BANG | MINUS) unary
          | call
    ?call: primary
         | call "(" [arguments] RIGHT_PAREN  -> call_expr
         | call "." IDENTIFIER              -> get_expr
    arguments: expression ("," expression)*
    ?primary: "true"                        -> true_literal
            | "false"                       -> false_literal
            | "nil"                         -> nil_literal
            | NUMBER                        -> number
            | STRING                        -> string
            | THIS                          -> this_expr
            | SUPER "." IDENTIFIER          -> super_expr
            | IDENTIFIER                    -> variable
            | "(" expression ")"            -> grouping

    // Tokens
    RETURN: "return"
    THIS: "this"
    SUPER: "super"
    AND: "and"
    OR: "or"
    EQUAL: "="
    BANG_EQUAL: "!="
    EQUAL_EQUAL: "=="
    GREATER: ">"
    GREATER_EQUAL: ">="
    LESS: "<"
    LESS_EQUAL: "<="
    MINUS: "-"
    PLUS: "+"
    SLASH: "/"
    STAR: "*"
    BANG: "!"
    RIGHT_PAREN: ")"
    NUMBER: /[0-9]+(\.[0-9]+)?/
    STRING: /"[^"]*"/
    IDENTIFIER: /[A-Za-z_][A-Za-z0-9_]*/

    // Comments
    LINE_COMMENT: /\/\/[^\n]*/
    %ignore LINE_COMMENT
    %import common.WS
    %ignore WS
"""


LOX_PARSER = Lark(
    LOX_GRAMMAR,
    parser='lalr',
    lexer='basic',
    propagate_positions=True,
    maybe_placeholders=False,
)


def to_token(token: LarkToken) -> Token:
    """Convert a Lark token into a pylox `Token`, carrying its literal value."""
    kind = 'EOF' if token.type == '$END' else token.type
    literal: Any = None
    if kind == 'NUMBER':
        literal = float(token.value)
    elif kind == 'STRING':
        literal = token.value[1:-1]
    line = getattr(token, 'line', None) or 1
    column = getattr(token, 'column', None) or 0
    return Token(kind, str(token.value), literal, line, column)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def __init__(self, reporter: ErrorReporter):
        super().__init__()
        self.reporter = reporter
        self.had_error = False

    def error(self, token: Token, message: str):
        self.reporter.error(token, message)
        self.had_error = True

    def program(self, items):
        return list(items)

    # Declarations

    def class_decl(self, items):
        name = to_token(items[0])
        superclass: Optional[Variable] = None
        methods: List[FunctionDecl] = []
        for item in items[1:]:
            if isinstance(item, LarkToken):
                superclass = Variable(to_token(item))
            else:
                methods.append(item)
        return ClassDecl(name, superclass, methods)

    def fun_decl(self, items):
        return items[0]

    def function(self, items):
        name = to_token(items[0])
        params: List[Token] = items[1] if len(items) == 3 else []
        body: Block = items[-1]
        if len(params) > MAX_ARGS:
            self.error(params[MAX_ARGS], f"Can't have more than {MAX_ARGS} parameters.")
        return FunctionDecl(name, params, body.statements)

    def parameters(self, items):
        return [to_token(item) for item in items]

    def var_decl(self, items):
        name = to_token(items[0])
        initializer = items[1] if len(items) > 1 else None
        return VarDecl(name, initializer)

    # Statements

    def expr_stmt(self, items):
        return ExprStmt(items[0])

    def for_init(self, items):
        return items[0] if items else None

    def for_cond(self, items):
        return items[0] if items else None

    def for_incr(self, items):
        return items[0] if items else None

    def for_stmt(self, items):
        initializer, condition, increment, body = items
        if increment is not None:
            body = Block([body, ExprStmt(increment)])
        if condition is None:
            condition = Literal(True)
        body = WhileStmt(condition, body)
        if initializer is not None:
            body = Block([initializer, body])
        return body

    def if_stmt(self, items):
        condition = items[0]
        then_branch = items[1]
        else_branch = items[2] if len(items) > 2 else None
        return IfStmt(condition, then_branch, else_branch)

    def print_stmt(self, items):
        return PrintStmt(items[0])

    def return_stmt(self, items):
        keyword = to_token(items[0])
        value = items[1] if len(items) > 1 else None
        return ReturnStmt(keyword, value)

    def while_stmt(self, items):
        return WhileStmt(items[0], items[1])

    def block(self, items):
        return Block(list(items))

    # Expressions

    def assignment(self, items):
        target, equals, value = items
        if isinstance(target, Variable):
            return Assign(target.name, value)
        if isinstance(target, Get):
            return Set(target.obj, target.name, value)
        self.error(to_token(equals), 'Invalid assignment target.')
        return target

    def _fold(self, items, node_type):
        # items pattern: expr (op expr)*, folded left-associatively
        left = items[0]
        i = 1
        while i < len(items):
            op = to_token(items[i])
            right = items[i + 1]
            left = node_type(left, op, right)
            i += 2
        return left

    def logic_or(self, items):
        return self._fold(items, Logical)

    def logic_and(self, items):
        return self._fold(items, Logical)

    def equality(self, items):
        return self._fold(items, Binary)

    def comparison(self, items):
        return self._fold(items, Binary)

    def term(self, items):
        return self._fold(items, Binary)

    def factor(self, items):
        return self._fold(items, Binary)

    def unary(self, items):
        op = to_token(items[0])
        return Unary(op, items[1])

    def call_expr(self, items):
        callee = items[0]
        paren = to_token(items[-1])
        arguments: List[Expr] = items[1] if len(items) == 3 else []
        if len(arguments) > MAX_ARGS:
            self.error(paren, f"Can't have more than {MAX_ARGS} arguments.")
        return Call(callee, paren, arguments)

    def get_expr(self, items):
        return Get(items[0], to_token(items[1]))

    def arguments(self, items):
        return list(items)

    def true_literal(self, items):
        return Literal(True)

    def false_literal(self, items):
        return Literal(False)

    def nil_literal(self, items):
        return Literal(None)

    def number(self, items):
        return Literal(to_token(items[0]).literal)

    def string(self, items):
        return Literal(to_token(items[0]).literal)

    def this_expr(self, items):
        return This(to_token(items[0]))

    def super_expr(self, items):
        return Super(to_token(items[0]), to_token(items[1]))

    def variable(self, items):
        return Variable(to_token(items[0]))

    def grouping(self, items):
        return Grouping(items[0])


def _terminal_display() -> Dict[str, str]:
    display = {}
    for term in LOX_PARSER.terminals:
        if term.pattern.type == 'str':
            display[term.name] = f"'{term.pattern.value}'"
        else:
            display[term.name] = term.name.lower()
    return display


TERMINAL_DISPLAY = _terminal_display()


def describe_expected(expected) -> str:
    """Build a parse error message from the set of acceptable terminals."""
    names = set(expected)
    if 'NUMBER' in names and 'IDENTIFIER' in names:
        return 'Expect expression.'
    shown = sorted(TERMINAL_DISPLAY.get(name, name) for name in names)
    if not shown:
        return 'Unexpected token.'
    return 'Expect ' + ' or '.join(shown) + '.'


def report_lex_error(err: UnexpectedCharacters, reporter: ErrorReporter):
    if err.char == '"':
        reporter.error(err.line, 'Unterminated string.')
    else:
        reporter.error(err.line, 'Unexpected character.')


def tokenize(source: str, reporter: Optional[ErrorReporter] = None) -> List[Token]:
    """Convert source code into a list of tokens terminated by an EOF token.

    Lexical errors are reported through `reporter`; the tokens scanned up to
    the error are still returned.
    """
    if reporter is None:
        reporter = ErrorReporter()
    tokens: List[Token] = []
    try:
        for lark_token in LOX_PARSER.lex(source):
            tokens.append(to_token(lark_token))
    except UnexpectedCharacters as e:
        report_lex_error(e, reporter)
    line = tokens[-1].line if tokens else 1
    tokens.append(Token('EOF', '', None, line))
    return tokens


def parse_program(source: str, reporter: Optional[ErrorReporter] = None) -> Optional[List[Stmt]]:
    """Parse Lox source code into a list of statements.

    Returns None when a syntax error was reported; parsing stops at the
    first syntax error.
    """
    if reporter is None:
        reporter = ErrorReporter()
    try:
        tree = LOX_PARSER.parse(source)
    except UnexpectedCharacters as e:
        report_lex_error(e, reporter)
        return None
    except UnexpectedToken as e:
        reporter.error(to_token(e.token), describe_expected(e.expected))
        return None
    except UnexpectedEOF as e:
        line = source.count('\n') + 1
        reporter.error(Token('EOF', '', None, line), describe_expected(e.expected))
        return None
    transformer = ASTTransformer(reporter)
    statements = transformer.transform(tree)
    if transformer.had_error:
        return None
    return statements
