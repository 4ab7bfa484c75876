from typing import List, Optional, Tuple
from pixstack.domain.errors import ExpressionParseError
from pixstack.features.expression.models import (
    Assign,
    Binary,
    Boolean,
    Call,
    Name,
    Node,
    Number,
    Program,
    Token,
    Unary,
)

# Longest first so that "<=" wins over "<".
OPERATORS = (
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "^=",
    "||",
    "&&",
    "==",
    "!=",
    "<=",
    ">=",
    "<",
    ">",
    "+",
    "-",
    "*",
    "/",
    "%",
    "^",
    "!",
    "=",
)

SYMBOLS = {
    "(": "LPAREN",
    ")": "RPAREN",
    ",": "COMMA",
    ";": "SEMI",
}

ASSIGN_OPS = {"=", "+=", "-=", "*=", "/=", "%=", "^="}
COMPARE_OPS = {"==", "!=", "<", "<=", ">", ">="}


class Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.index = 0

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        text = self.text
        n = len(text)

        while self.index < n:
            ch = text[self.index]
            if ch.isspace():
                self.index += 1
                continue
            if ch.isdigit() or (ch == "." and self.index + 1 < n and text[self.index + 1].isdigit()):
                tokens.append(self._number())
                continue
            if ch.isalpha() or ch == "_":
                tokens.append(self._identifier())
                continue
            if ch in SYMBOLS:
                tokens.append(Token(SYMBOLS[ch], ch, self.index))
                self.index += 1
                continue
            op = self._operator()
            if op is None:
                raise ExpressionParseError(f"Unexpected character {ch!r}", self.index)
            tokens.append(Token("OP", op, self.index))
            self.index += len(op)

        tokens.append(Token("EOF", "", self.index))
        return tokens

    def _number(self) -> Token:
        start = self.index
        text = self.text
        n = len(text)
        while self.index < n and (text[self.index].isdigit() or text[self.index] == "."):
            self.index += 1
        if self.index < n and text[self.index] in "eE":
            ahead = self.index + 1
            if ahead < n and text[ahead] in "+-":
                ahead += 1
            if ahead < n and text[ahead].isdigit():
                self.index = ahead
                while self.index < n and text[self.index].isdigit():
                    self.index += 1
        literal = text[start : self.index]
        try:
            float(literal)
        except ValueError:
            raise ExpressionParseError(f"Malformed number {literal!r}", start) from None
        return Token("NUMBER", literal, start)

    def _identifier(self) -> Token:
        # "math::sqrt" lexes as a single name
        start = self.index
        text = self.text
        n = len(text)
        while self.index < n:
            ch = text[self.index]
            if ch.isalnum() or ch == "_":
                self.index += 1
            elif text.startswith("::", self.index):
                self.index += 2
            else:
                break
        return Token("IDENT", text[start : self.index], start)

    def _operator(self) -> Optional[str]:
        for op in OPERATORS:
            if self.text.startswith(op, self.index):
                return op
        return None


class Parser:
    """
    Recursive descent. Precedence, loosest first:
    ; / assignment / || / && / comparison / + - / * / % / unary - ! / ^
    """

    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def _peek(self, offset: int = 0) -> Token:
        idx = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[idx]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != "EOF":
            self.pos += 1
        return tok

    def _match_op(self, *ops: str) -> Optional[str]:
        tok = self._peek()
        if tok.type == "OP" and tok.value in ops:
            self._advance()
            return tok.value
        return None

    def _expect(self, type_: str) -> Token:
        tok = self._peek()
        if tok.type != type_:
            found = tok.value or "end of input"
            raise ExpressionParseError(f"Expected {type_}, found {found!r}", tok.position)
        return self._advance()

    def parse_program(self) -> Program:
        statements: List[Node] = []
        while self._peek().type != "EOF":
            if self._peek().type == "SEMI":
                self._advance()
                continue
            statements.append(self.parse_statement())
            if self._peek().type not in ("SEMI", "EOF"):
                tok = self._peek()
                raise ExpressionParseError(f"Unexpected {tok.value!r}", tok.position)
        return Program(tuple(statements))

    def parse_statement(self) -> Node:
        tok = self._peek()
        nxt = self._peek(1)
        if tok.type == "IDENT" and nxt.type == "OP" and nxt.value in ASSIGN_OPS:
            self._advance()
            self._advance()
            return Assign(tok.value, nxt.value, self.parse_statement())
        return self.parse_or()

    def parse_or(self) -> Node:
        node = self.parse_and()
        while self._match_op("||"):
            node = Binary("||", node, self.parse_and())
        return node

    def parse_and(self) -> Node:
        node = self.parse_comparison()
        while self._match_op("&&"):
            node = Binary("&&", node, self.parse_comparison())
        return node

    def parse_comparison(self) -> Node:
        node = self.parse_additive()
        while True:
            op = self._match_op(*COMPARE_OPS)
            if op is None:
                return node
            node = Binary(op, node, self.parse_additive())

    def parse_additive(self) -> Node:
        node = self.parse_multiplicative()
        while True:
            op = self._match_op("+", "-")
            if op is None:
                return node
            node = Binary(op, node, self.parse_multiplicative())

    def parse_multiplicative(self) -> Node:
        node = self.parse_unary()
        while True:
            op = self._match_op("*", "/", "%")
            if op is None:
                return node
            node = Binary(op, node, self.parse_unary())

    def parse_unary(self) -> Node:
        op = self._match_op("-", "!")
        if op:
            return Unary(op, self.parse_unary())
        return self.parse_power()

    def parse_power(self) -> Node:
        base = self.parse_primary()
        if self._match_op("^"):
            # right associative, binds tighter than unary minus on its left
            return Binary("^", base, self.parse_unary())
        return base

    def parse_primary(self) -> Node:
        tok = self._peek()
        if tok.type == "NUMBER":
            self._advance()
            return Number(float(tok.value))
        if tok.type == "IDENT":
            self._advance()
            if tok.value == "true":
                return Boolean(True)
            if tok.value == "false":
                return Boolean(False)
            if self._peek().type == "LPAREN":
                self._advance()
                return Call(tok.value, self._parse_args())
            return Name(tok.value)
        if tok.type == "LPAREN":
            self._advance()
            node = self.parse_statement()
            self._expect("RPAREN")
            return node
        found = tok.value or "end of input"
        raise ExpressionParseError(f"Unexpected {found!r}", tok.position)

    def _parse_args(self) -> Tuple[Node, ...]:
        args: List[Node] = []
        if self._peek().type == "RPAREN":
            self._advance()
            return tuple(args)
        while True:
            args.append(self.parse_or())
            if self._peek().type == "COMMA":
                self._advance()
                continue
            self._expect("RPAREN")
            return tuple(args)


def parse(text: str) -> Program:
    try:
        return Parser(Lexer(text).tokenize()).parse_program()
    except RecursionError:
        raise ExpressionParseError("Expression is nested too deeply") from None
