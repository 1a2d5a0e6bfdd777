from .._errors import ParseError
from ._nodes import (
    CONSTANTS,
    FUNCTIONS,
    VARIABLES,
    BinaryOp,
    Call,
    Constant,
    UnaryOp,
    Variable,
)
from ._tokens import COMMA, END, IDENT, LPAREN, NUMBER, OP, RPAREN, tokenize

# expr    = term (('+' | '-') term)*
# term    = unary (('*' | '/') unary | <implicit> unary)*
# unary   = ('-' | '+') unary | power
# power   = primary ('^' unary)?
# primary = number | constant | variable | func '(' args ')' | '(' expr ')'


class _Parser:
    def __init__(self, text):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    @property
    def current(self):
        return self.tokens[self.pos]

    def advance(self):
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def expect(self, kind, what):
        token = self.current
        if token.kind != kind:
            raise ParseError(f"expected {what}", token.position)
        return self.advance()

    def parse(self):
        if self.current.kind == END:
            raise ParseError("empty expression", 0)
        node = self.expr()
        token = self.current
        if token.kind == RPAREN:
            raise ParseError("unmatched ')'", token.position)
        if token.kind != END:
            raise ParseError(f"unexpected token {token.value!r}", token.position)
        return node

    def expr(self):
        node = self.term()
        while self.current.kind == OP and self.current.value in "+-":
            op = self.advance().value
            node = BinaryOp(op, node, self.term())
        return node

    def _starts_primary(self):
        return self.current.kind in (NUMBER, IDENT, LPAREN)

    def term(self):
        node = self.unary()
        while True:
            token = self.current
            if token.kind == OP and token.value in "*/":
                self.advance()
                node = BinaryOp(token.value, node, self.unary())
            elif self._starts_primary():
                if token.kind == NUMBER and self.tokens[self.pos - 1].kind == NUMBER:
                    raise ParseError("missing operator between numbers", token.position)
                node = BinaryOp("*", node, self.power())
            else:
                return node

    def unary(self):
        token = self.current
        if token.kind == OP and token.value in "+-":
            self.advance()
            operand = self.unary()
            return operand if token.value == "+" else UnaryOp("-", operand)
        return self.power()

    def power(self):
        base = self.primary()
        if self.current.kind == OP and self.current.value == "^":
            self.advance()
            return BinaryOp("^", base, self.unary())
        return base

    def primary(self):
        token = self.current
        if token.kind == NUMBER:
            self.advance()
            return Constant(token.value)
        if token.kind == LPAREN:
            self.advance()
            node = self.expr()
            if self.current.kind != RPAREN:
                raise ParseError("unmatched '('", token.position)
            self.advance()
            return node
        if token.kind == IDENT:
            return self.identifier()
        if token.kind == END:
            raise ParseError("unexpected end of expression", token.position)
        if token.kind == RPAREN:
            raise ParseError("unmatched ')'", token.position)
        raise ParseError(f"unexpected token {token.value!r}", token.position)

    def identifier(self):
        token = self.advance()
        name = token.value
        if name in VARIABLES:
            return Variable(name)
        if name in CONSTANTS:
            return Constant(CONSTANTS[name])
        if name not in FUNCTIONS:
            raise ParseError(f"unknown identifier {name!r}", token.position)

        arity = FUNCTIONS[name][0]
        if self.current.kind != LPAREN:
            raise ParseError(f"function {name!r} requires '('", self.current.position)
        open_paren = self.advance()
        args = [self.expr()]
        while self.current.kind == COMMA:
            self.advance()
            args.append(self.expr())
        if self.current.kind != RPAREN:
            if self.current.kind == END:
                raise ParseError("unmatched '('", open_paren.position)
            raise ParseError(f"unexpected token {self.current.value!r}", self.current.position)
        self.advance()
        if len(args) != arity:
            raise ParseError(f"{name} takes {arity} argument(s), got {len(args)}", token.position)
        return Call(name, tuple(args))


def parse_tree(text):
    """Parse ``text`` into a node tree. Raises :class:`ParseError`."""
    if text is None or not text.strip():
        raise ParseError("empty expression", 0)
    return _Parser(text).parse()
