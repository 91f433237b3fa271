"""Recursive-descent parser: token list to AST.

Grammar, highest precedence first::

    factor      := NUMBER | IDENTIFIER | IDENTIFIER '(' [expr {',' expr}] ')' | '(' expr ')'
    term        := factor {('*' | '/' | '%') factor}
    expression  := term {('+' | '-') term} [('<' | '>') expression]
    assign-expr := IDENTIFIER '=' expression
    assignment  := assign-expr ';' | ';'
    if          := 'if' '(' expression ')' statement ['else' statement]
    while       := 'while' '(' expression ')' statement
    function    := 'function' IDENTIFIER '(' [IDENTIFIER {',' IDENTIFIER}] ')' complex
    return      := 'return' expression ';'
    complex     := '{' statement {statement} '}'
    toplevel    := {assignment | function} EOF

A comparison ends the additive chain and takes a full expression as its
right operand, so ``a < b < c`` parses as ``a < (b < c)``.
"""

from __future__ import annotations

import logging
from collections import deque

from .ast_types import ASTNode, NodeKind
from .errors import ErrorKind, ParseError
from .lexer import Token, TokenKind

logger = logging.getLogger(__name__)

TERM_OPERATORS: dict[TokenKind, NodeKind] = {
    TokenKind.STAR: NodeKind.MUL,
    TokenKind.SLASH: NodeKind.DIV,
    TokenKind.PERCENT: NodeKind.MOD,
}

EXPRESSION_OPERATORS: dict[TokenKind, NodeKind] = {
    TokenKind.PLUS: NodeKind.ADD,
    TokenKind.MINUS: NodeKind.SUB,
}

COMPARISON_OPERATORS: dict[TokenKind, NodeKind] = {
    TokenKind.LESS: NodeKind.LT,
    TokenKind.GREATER: NodeKind.GT,
}

STATEMENT_START_TOKENS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.LBRACE,
        TokenKind.WHILE,
        TokenKind.IF,
        TokenKind.IDENTIFIER,
        TokenKind.SEMI,
        TokenKind.FUNCTION,
        TokenKind.RETURN,
    }
)


class TokenCursor:
    """Cursor over a token list with unbounded front-of-queue pushback.

    Tokens handed back through :meth:`unget` are returned again before any
    unread token, most recently un-got first. Reading past the end keeps
    returning the terminal EOF token.
    """

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._index = 0
        self._pushback: deque[Token] = deque()
        self._eof = (
            tokens[-1] if tokens and tokens[-1].kind == TokenKind.EOF else Token(TokenKind.EOF)
        )

    def next(self) -> Token:
        if self._pushback:
            return self._pushback.popleft()
        if self._index < len(self._tokens):
            token = self._tokens[self._index]
            self._index += 1
            return token
        return self._eof

    def unget(self, token: Token):
        self._pushback.appendleft(token)

    def peek(self) -> Token:
        token = self.next()
        self.unget(token)
        return token


class Parser:
    def __init__(self, tokens: list[Token]):
        self._cursor = TokenCursor(tokens)
        self._function_level = 0

    # ── helpers ──────────────────────────────────────────────────

    def _expect(self, kind: TokenKind, error_kind: ErrorKind, context: str) -> Token:
        token = self._cursor.next()
        if token.kind != kind:
            raise ParseError(
                error_kind, f"expected '{kind.value}' {context}, got {token}"
            )
        return token

    # ── expressions ──────────────────────────────────────────────

    def parse_factor(self) -> ASTNode:
        token = self._cursor.next()
        if token.kind == TokenKind.NUMBER:
            return ASTNode(NodeKind.NUMBER, token.value)
        if token.kind == TokenKind.IDENTIFIER:
            following = self._cursor.next()
            if following.kind != TokenKind.LPAREN:
                self._cursor.unget(following)
                return ASTNode(NodeKind.IDENTIFIER, token.value)
            return ASTNode(NodeKind.CALL, token.value, self._parse_call_arguments(token.value))
        if token.kind == TokenKind.LPAREN:
            node = self.parse_expression()
            self._expect(TokenKind.RPAREN, ErrorKind.MISSING_RPAREN, "to close '('")
            return node
        raise ParseError(
            ErrorKind.EXPECTED_FACTOR, f"expected number, identifier or '(', got {token}"
        )

    def _parse_call_arguments(self, callee: str) -> list[ASTNode]:
        token = self._cursor.next()
        if token.kind == TokenKind.RPAREN:
            return []
        self._cursor.unget(token)
        arguments = [self.parse_expression()]
        while True:
            token = self._cursor.next()
            if token.kind != TokenKind.COMMA:
                self._cursor.unget(token)
                break
            arguments.append(self.parse_expression())
        self._expect(
            TokenKind.RPAREN, ErrorKind.MISSING_RPAREN, f"after arguments of call to '{callee}'"
        )
        return arguments

    def parse_term(self) -> ASTNode:
        node = self.parse_factor()
        while True:
            token = self._cursor.next()
            kind = TERM_OPERATORS.get(token.kind)
            if kind is None:
                self._cursor.unget(token)
                return node
            node = ASTNode(kind, children=[node, self.parse_factor()])

    def parse_expression(self) -> ASTNode:
        node = self.parse_term()
        while True:
            token = self._cursor.next()
            comparison = COMPARISON_OPERATORS.get(token.kind)
            if comparison is not None:
                return ASTNode(comparison, children=[node, self.parse_expression()])
            kind = EXPRESSION_OPERATORS.get(token.kind)
            if kind is None:
                self._cursor.unget(token)
                return node
            node = ASTNode(kind, children=[node, self.parse_term()])

    # ── statements ───────────────────────────────────────────────

    def parse_assignment_expression(self) -> ASTNode:
        target = self._cursor.next()
        if target.kind != TokenKind.IDENTIFIER:
            raise ParseError(
                ErrorKind.EXPECTED_IDENTIFIER,
                f"left-hand side of assignment must be a variable, got {target}",
            )
        self._expect(TokenKind.ASSIGN, ErrorKind.EXPECTED_ASSIGN, f"after '{target.value}'")
        return ASTNode(
            NodeKind.ASSIGNMENT,
            children=[ASTNode(NodeKind.IDENTIFIER, target.value), self.parse_expression()],
        )

    def parse_assignment(self) -> ASTNode:
        token = self._cursor.next()
        if token.kind == TokenKind.SEMI:
            return ASTNode(NodeKind.NOOP)
        self._cursor.unget(token)
        node = self.parse_assignment_expression()
        self._expect(TokenKind.SEMI, ErrorKind.MISSING_SEMICOLON, "at end of assignment")
        return node

    def _parse_condition(self, keyword: TokenKind) -> ASTNode:
        self._expect(keyword, ErrorKind.UNEXPECTED_TOKEN, "at start of statement")
        self._expect(TokenKind.LPAREN, ErrorKind.EXPECTED_LPAREN, f"after '{keyword.value}'")
        condition = self.parse_expression()
        self._expect(
            TokenKind.RPAREN, ErrorKind.MISSING_RPAREN, f"after '{keyword.value}' condition"
        )
        return condition

    def parse_if(self) -> ASTNode:
        condition = self._parse_condition(TokenKind.IF)
        node = ASTNode(NodeKind.IF, children=[condition, self.parse_statement()])
        token = self._cursor.next()
        if token.kind == TokenKind.ELSE:
            node.children.append(self.parse_statement())
        else:
            self._cursor.unget(token)
        return node

    def parse_while(self) -> ASTNode:
        condition = self._parse_condition(TokenKind.WHILE)
        return ASTNode(NodeKind.WHILE, children=[condition, self.parse_statement()])

    def parse_function_decl(self) -> ASTNode:
        if self._function_level > 0:
            raise ParseError(
                ErrorKind.NESTED_FUNCTION, "functions may only be declared at top level"
            )
        self._function_level += 1
        self._expect(TokenKind.FUNCTION, ErrorKind.UNEXPECTED_TOKEN, "at start of declaration")
        name = self._cursor.next()
        if name.kind != TokenKind.IDENTIFIER:
            raise ParseError(
                ErrorKind.EXPECTED_IDENTIFIER, f"expected function name, got {name}"
            )
        self._expect(TokenKind.LPAREN, ErrorKind.EXPECTED_LPAREN, f"after function name '{name.value}'")
        parameters = self._parse_parameters(name.value)
        body = self.parse_complex_statement()
        self._function_level -= 1
        logger.debug("Parsed function '%s' with %d parameters", name.value, len(parameters))
        return ASTNode(NodeKind.FUNCTION_DECL, name.value, [body, *parameters])

    def _parse_parameters(self, function_name: str) -> list[ASTNode]:
        parameters: list[ASTNode] = []
        token = self._cursor.next()
        if token.kind == TokenKind.RPAREN:
            return parameters
        while True:
            if token.kind != TokenKind.IDENTIFIER:
                raise ParseError(
                    ErrorKind.EXPECTED_IDENTIFIER,
                    f"expected parameter name in declaration of '{function_name}', got {token}",
                )
            parameters.append(ASTNode(NodeKind.PARAMETER, token.value))
            token = self._cursor.next()
            if token.kind == TokenKind.RPAREN:
                return parameters
            if token.kind != TokenKind.COMMA:
                raise ParseError(
                    ErrorKind.MISSING_RPAREN,
                    f"expected ',' or ')' in parameters of '{function_name}', got {token}",
                )
            token = self._cursor.next()

    def parse_return(self) -> ASTNode:
        if self._function_level == 0:
            raise ParseError(
                ErrorKind.RETURN_OUTSIDE_FUNCTION, "'return' is only valid inside a function"
            )
        self._expect(TokenKind.RETURN, ErrorKind.UNEXPECTED_TOKEN, "at start of return")
        node = ASTNode(NodeKind.RETURN, children=[self.parse_expression()])
        self._expect(TokenKind.SEMI, ErrorKind.MISSING_SEMICOLON, "at end of return")
        return node

    def parse_complex_statement(self) -> ASTNode:
        self._expect(TokenKind.LBRACE, ErrorKind.EXPECTED_LBRACE, "at start of block")
        node = ASTNode(NodeKind.BLOCK, children=[self.parse_statement()])
        while self._cursor.peek().kind in STATEMENT_START_TOKENS:
            node.children.append(self.parse_statement())
        self._expect(TokenKind.RBRACE, ErrorKind.MISSING_RBRACE, "at end of block")
        return node

    def parse_statement(self) -> ASTNode:
        kind = self._cursor.peek().kind
        if kind == TokenKind.LBRACE:
            return self.parse_complex_statement()
        if kind == TokenKind.WHILE:
            return self.parse_while()
        if kind == TokenKind.IF:
            return self.parse_if()
        if kind in (TokenKind.IDENTIFIER, TokenKind.SEMI):
            return self.parse_assignment()
        if kind == TokenKind.FUNCTION:
            return self.parse_function_decl()
        if kind == TokenKind.RETURN:
            return self.parse_return()
        raise ParseError(
            ErrorKind.INVALID_STATEMENT, f"a statement cannot start with {self._cursor.peek()}"
        )

    def parse_toplevel(self) -> ASTNode:
        top = ASTNode(NodeKind.TOPLEVEL)
        while True:
            token = self._cursor.peek()
            if token.kind == TokenKind.EOF:
                return top
            if token.kind in (TokenKind.IDENTIFIER, TokenKind.SEMI):
                top.children.append(self.parse_assignment())
            elif token.kind == TokenKind.FUNCTION:
                self._function_level = 0
                top.children.append(self.parse_function_decl())
            else:
                raise ParseError(ErrorKind.INVALID_TOPLEVEL, f"got {token}")


def parse(tokens: list[Token]) -> ASTNode:
    """Parse a full token list into a ``toplevel`` AST node."""
    tree = Parser(tokens).parse_toplevel()
    logger.info("Parsed %d top-level elements", len(tree.children))
    return tree
