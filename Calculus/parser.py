import re
import logging
from typing import Iterable, List

from Calculus.expression import (
    ADD, MULTIPLY, POWER, SUBTRACT,
    Expression, Number, Operation, ParseError, Variable,
)
from Calculus.simplifier import simplify

# --- Logger Setup ---
logger = logging.getLogger(__name__)

# --- Tokenizer: Breaking the Expression into Tokens ---
TOKEN_NUMBER = 'NUMBER'
TOKEN_SYMBOL = 'SYMBOL'
TOKEN_FUNCTION = 'FUNCTION'
TOKEN_OPERATOR = 'OPERATOR'
TOKEN_LPAREN = 'LPAREN'
TOKEN_RPAREN = 'RPAREN'
TOKEN_EOF = 'EOF'


class Token:
    def __init__(self, type, value):
        self.type = type
        self.value = value

    def __repr__(self):
        return f"Token({self.type}, '{self.value}')"


class Tokenizer:
    # A keyword is a function only when a space or '(' follows, so 'lnx' and
    # 'sine' stay plain names.
    TOKEN_SPECS = [
        (r'\d+(?:\.\d*)?', TOKEN_NUMBER),
        (r'(?:ln|sin|cos)(?=[\s(])', TOKEN_FUNCTION),
        (r'[a-zA-Z_][a-zA-Z0-9_]*', TOKEN_SYMBOL),
        (r'[\+\-\*\^]', TOKEN_OPERATOR),
        (r'\(', TOKEN_LPAREN),
        (r'\)', TOKEN_RPAREN),
        (r'\s+', None),  # Skip whitespace
    ]
    _COMPILED_SPECS = [(re.compile(pattern), ttype) for pattern, ttype in TOKEN_SPECS]

    def __init__(self, text):
        self.text = text
        self.tokens = self._tokenize()
        self.index = 0

    def _tokenize(self):
        tokens = []
        pos = 0
        while pos < len(self.text):
            for regex, ttype in self._COMPILED_SPECS:
                match = regex.match(self.text, pos)
                if match:
                    if ttype:
                        tokens.append(Token(ttype, match.group(0)))
                    pos = match.end()
                    break
            else:
                raise ParseError(f"Unexpected character at position {pos}: '{self.text[pos]}'")
        tokens.append(Token(TOKEN_EOF, ""))
        return tokens

    def next(self):
        if self.index < len(self.tokens):
            token = self.tokens[self.index]
            self.index += 1
            return token
        return Token(TOKEN_EOF, "")


def _nary(op: str, operands: List[Expression]) -> Expression:
    if len(operands) == 1:
        return operands[0]
    return Operation(op, operands)


# --- Parser: Building the Expression from Tokens ---
class Parser:
    """Recursive descent over ``+ -`` < ``*`` < ``^`` < function application.

    ``+`` and ``*`` runs become one n-ary node, ``-`` nests left to right and
    ``^`` nests to the right. A function takes the single operand that
    follows it, so ``sin x^2`` is ``(sin x)^2``.
    """

    def __init__(self, tokenizer, known_variables: Iterable[str] = ()):
        self.tokenizer = tokenizer
        self.known_variables = set(known_variables)
        self.current_token = self.tokenizer.next()

    def _eat(self, token_type):
        if self.current_token.type == token_type:
            self.current_token = self.tokenizer.next()
        else:
            raise ParseError(f"Expected {token_type}, but got {self.current_token.type} ('{self.current_token.value}')")

    def _at_operator(self, *symbols):
        return self.current_token.type == TOKEN_OPERATOR and self.current_token.value in symbols

    def parse(self) -> Expression:
        result = self._expr()
        if self.current_token.type != TOKEN_EOF:
            raise ParseError(f"Unexpected token '{self.current_token.value}' at end of expression")
        return result

    def _expr(self):  # Handles Addition (+) and Subtraction (-)
        terms = [self._term()]
        while self._at_operator('+', '-'):
            op = self.current_token.value
            self._eat(TOKEN_OPERATOR)
            right = self._term()
            if op == '+':
                terms.append(right)
            else:
                terms = [Operation(SUBTRACT, (_nary(ADD, terms), right))]
        return _nary(ADD, terms)

    def _term(self):  # Handles Multiplication (*)
        factors = [self._factor()]
        while self._at_operator('*'):
            self._eat(TOKEN_OPERATOR)
            factors.append(self._factor())
        return _nary(MULTIPLY, factors)

    def _factor(self):  # Handles exponentiation (^), right associative
        node = self._unary()
        if self._at_operator('^'):
            self._eat(TOKEN_OPERATOR)
            right = self._factor()
            node = Operation(POWER, (node, right))
        return node

    def _unary(self):
        if not self._at_operator('-'):
            return self._atom()
        self._eat(TOKEN_OPERATOR)
        token = self.current_token
        if token.type == TOKEN_NUMBER:
            # A sign directly before digits belongs to the literal
            self._eat(TOKEN_NUMBER)
            return Number(-float(token.value))
        # Represent as multiplication by -1
        return Operation(MULTIPLY, (Number(-1.0), self._factor()))

    def _atom(self):
        token = self.current_token
        if token.type == TOKEN_NUMBER:
            self._eat(TOKEN_NUMBER)
            return Number(float(token.value))
        elif token.type == TOKEN_SYMBOL:
            self._eat(TOKEN_SYMBOL)
            if token.value not in self.known_variables:
                logger.debug(f"'{token.value}' is not a bound variable")
            return Variable(token.value)
        elif token.type == TOKEN_FUNCTION:
            self._eat(TOKEN_FUNCTION)
            # both "ln(x)" and "ln x"; the argument is a single operand
            return Operation(token.value, (self._unary(),))
        elif token.type == TOKEN_LPAREN:
            self._eat(TOKEN_LPAREN)
            node = self._expr()
            self._eat(TOKEN_RPAREN)
            return node

        raise ParseError(f"Unexpected token {token!r}")


def parse(text: str, known_variables: Iterable[str] = ()) -> Expression:
    """Parses ``text`` into a simplified Expression.

    Malformed input does not raise: it is logged and read as ``0``.
    """
    try:
        expression = Parser(Tokenizer(text or ''), known_variables).parse()
    except ParseError as e:
        logger.warning(f"Could not parse '{text}', using 0: {e}")
        return Number(0.0)

    result = simplify(expression)
    logger.debug(f"Parsed '{text}' as {result!r}")
    return result
