from typing import List, NamedTuple

from .._errors import ParseError

NUMBER = "number"
IDENT = "ident"
OP = "op"
LPAREN = "("
RPAREN = ")"
COMMA = ","
END = "end"

OPERATORS = "+-*/^"


class Token(NamedTuple):
    kind: str
    value: object
    position: int


def _read_number(text, start):
    i = start
    n = len(text)
    while i < n and text[i].isdigit():
        i += 1
    if i < n and text[i] == ".":
        i += 1
        while i < n and text[i].isdigit():
            i += 1
    if i == start or text[start:i] == ".":
        raise ParseError("malformed number", start)
    # exponent only when followed by digits, otherwise "2e" is 2*e
    if i < n and text[i] in "eE":
        j = i + 1
        if j < n and text[j] in "+-":
            j += 1
        if j < n and text[j].isdigit():
            while j < n and text[j].isdigit():
                j += 1
            i = j
    return float(text[start:i]), i


def tokenize(text: str) -> List[Token]:
    """
    Split expression text into tokens.

    Identifiers are runs of letters; a run such as ``sinx`` is kept whole and
    rejected later as an unknown identifier.

    Raises
    ------
    ParseError
        On characters outside the grammar.
    """
    tokens = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c.isspace():
            i += 1
        elif c.isdigit() or c == ".":
            value, end = _read_number(text, i)
            tokens.append(Token(NUMBER, value, i))
            i = end
        elif c.isalpha() or c == "_":
            start = i
            while i < n and (text[i].isalnum() or text[i] == "_"):
                i += 1
            tokens.append(Token(IDENT, text[start:i], start))
        elif c in OPERATORS:
            tokens.append(Token(OP, c, i))
            i += 1
        elif c == "(":
            tokens.append(Token(LPAREN, c, i))
            i += 1
        elif c == ")":
            tokens.append(Token(RPAREN, c, i))
            i += 1
        elif c == ",":
            tokens.append(Token(COMMA, c, i))
            i += 1
        else:
            raise ParseError(f"unexpected character {c!r}", i)
    tokens.append(Token(END, None, n))
    return tokens
