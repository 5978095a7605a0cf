"""
Statement Parser - Hand-written lexer and recursive descent parser

Parses the statement subset:
- SHOW COLUMNS FROM <locator>
- SELECT expr [AS alias], ... FROM <locator>
- WHERE predicate (comparisons, arithmetic, AND / OR, parentheses)
- GROUP BY column1, column2
- ORDER BY column1 ASC, column2 DESC
- LIMIT n [OFFSET m]

Locators (file paths, URLs) are read verbatim from the text, never
tokenized, so characters like ':', '/', '?' and '&' need no quoting.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from tabquery.core.errors import ParseError
from tabquery.sql.ast_nodes import (
    AGGREGATE_FUNCTIONS,
    AggregateCall,
    BinaryOp,
    ColumnRef,
    Expression,
    Literal,
    OrderByColumn,
    SelectItem,
    SelectStatement,
    ShowColumnsStatement,
    Statement,
)

KEYWORDS = frozenset(
    {
        "SELECT",
        "FROM",
        "WHERE",
        "GROUP",
        "ORDER",
        "BY",
        "ASC",
        "DESC",
        "LIMIT",
        "OFFSET",
        "AND",
        "OR",
        "AS",
        "TRUE",
        "FALSE",
    }
)

# Token kinds
IDENT = "IDENT"
QUOTED_IDENT = "QUOTED_IDENT"
NUMBER = "NUMBER"
STRING = "STRING"
SYMBOL = "SYMBOL"
EOF = "EOF"

_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?")
_IDENTIFIER = re.compile(r"[^\W\d]\w*")
_SYMBOLS = ("<=", ">=", "!=", "<>", "=", "<", ">", "+", "-", "*", "/", "%", "(", ")", ",", ";")
_BARE_LOCATOR = re.compile(r"[^\s;]+")


@dataclass(frozen=True)
class Token:
    """A lexed token with its position in the statement text"""

    kind: str
    text: str
    position: int
    end: int
    value: object = None

    def is_keyword(self, word: str) -> bool:
        return self.kind == IDENT and self.text.upper() == word

    def is_symbol(self, symbol: str) -> bool:
        return self.kind == SYMBOL and self.text == symbol


class Lexer:
    """
    Position-addressed lexer

    scan(pos) returns the token starting at (or after whitespace following)
    pos. It keeps no state, so the parser can peek ahead freely and switch
    to raw reading for locators.
    """

    def __init__(self, text: str):
        self.text = text

    def skip_whitespace(self, pos: int) -> int:
        match = _WHITESPACE.match(self.text, pos)
        return match.end() if match else pos

    def scan(self, pos: int) -> Token:
        text = self.text
        pos = self.skip_whitespace(pos)

        if pos >= len(text):
            return Token(EOF, "", pos, pos)

        char = text[pos]

        if char == "'":
            end, value = self._scan_quoted(pos, "'", "string literal")
            return Token(STRING, text[pos:end], pos, end, value)

        if char == '"':
            end, value = self._scan_quoted(pos, '"', "quoted identifier")
            return Token(QUOTED_IDENT, text[pos:end], pos, end, value)

        match = _NUMBER.match(text, pos)
        if match:
            raw = match.group()
            if "." in raw or "e" in raw or "E" in raw:
                value = float(raw)
            else:
                value = int(raw)
            return Token(NUMBER, raw, pos, match.end(), value)

        match = _IDENTIFIER.match(text, pos)
        if match:
            return Token(IDENT, match.group(), pos, match.end())

        for symbol in _SYMBOLS:
            if text.startswith(symbol, pos):
                return Token(SYMBOL, symbol, pos, pos + len(symbol))

        raise ParseError(f"Unrecognized character '{char}'", position=pos, token=char)

    def _scan_quoted(self, pos: int, quote: str, what: str) -> Tuple[int, str]:
        """Scan a quoted run where a doubled quote escapes itself"""
        text = self.text
        chars = []
        i = pos + 1
        while i < len(text):
            if text[i] == quote:
                if i + 1 < len(text) and text[i + 1] == quote:
                    chars.append(quote)
                    i += 2
                    continue
                return i + 1, "".join(chars)
            chars.append(text[i])
            i += 1
        raise ParseError(f"Unterminated {what}", position=pos, token=text[pos:])


class StatementParser:
    """
    Recursive descent parser for statements

    Grammar:
        STATEMENT   := SHOW COLUMNS FROM locator
                     | SELECT projection FROM locator [WHERE expr]
                       [GROUP BY names] [ORDER BY order_items]
                       [LIMIT n] [OFFSET n] [;]
        projection  := * | item [, item]*
        item        := expr [[AS] alias]
        expr        := and_expr [OR and_expr]*
        and_expr    := comparison [AND comparison]*
        comparison  := additive [cmp_op additive]
        additive    := term [(+|-) term]*
        term        := unary [(*|/|%) unary]*
        unary       := - unary | primary
        primary     := literal | column | aggregate | ( expr )
    """

    def __init__(self, sql: str):
        self.sql = sql
        self.lexer = Lexer(sql)
        self.pos = 0
        self._allow_aggregates = False

    def current(self) -> Token:
        """Get current token without advancing"""
        return self.lexer.scan(self.pos)

    def peek(self) -> Token:
        """Look at the token after the current one"""
        return self.lexer.scan(self.current().end)

    def consume(self) -> Token:
        """Consume and return the current token"""
        token = self.current()
        if token.kind == EOF:
            raise ParseError("Unexpected end of statement", position=token.position)
        self.pos = token.end
        return token

    def expect_keyword(self, word: str) -> Token:
        token = self.current()
        if not token.is_keyword(word):
            found = token.text or "end of statement"
            raise ParseError(
                f"Expected '{word}' but got '{found}'", position=token.position, token=token.text
            )
        return self.consume()

    def expect_symbol(self, symbol: str) -> Token:
        token = self.current()
        if not token.is_symbol(symbol):
            found = token.text or "end of statement"
            raise ParseError(
                f"Expected '{symbol}' but got '{found}'", position=token.position, token=token.text
            )
        return self.consume()

    def parse(self) -> Statement:
        """Parse the statement into an AST"""
        token = self.current()
        if token.is_keyword("SHOW"):
            return self._parse_show_columns()
        if token.is_keyword("SELECT"):
            return self._parse_select()
        raise ParseError(
            f"Expected SELECT or SHOW COLUMNS but got '{token.text or 'end of statement'}'",
            position=token.position,
            token=token.text,
        )

    def _parse_show_columns(self) -> ShowColumnsStatement:
        self.expect_keyword("SHOW")
        self.expect_keyword("COLUMNS")
        self.expect_keyword("FROM")

        start = self.lexer.skip_whitespace(self.pos)
        locator = self.sql[start:].strip()
        if locator.endswith(";"):
            locator = locator[:-1].rstrip()
        if len(locator) >= 2 and locator[0] == locator[-1] and locator[0] in ("'", '"'):
            locator = locator[1:-1]
        if not locator:
            raise ParseError("Missing locator after FROM", position=start)

        self.pos = len(self.sql)
        return ShowColumnsStatement(source=locator)

    def _parse_select(self) -> SelectStatement:
        self.expect_keyword("SELECT")

        items = self._parse_projection()

        self.expect_keyword("FROM")
        source = self._read_locator()

        where = None
        if self.current().is_keyword("WHERE"):
            self.consume()
            where = self._parse_expression()

        group_by = None
        if self.current().is_keyword("GROUP"):
            group_by = self._parse_group_by()

        order_by = None
        if self.current().is_keyword("ORDER"):
            order_by = self._parse_order_by()

        limit = None
        if self.current().is_keyword("LIMIT"):
            self.consume()
            limit = self._parse_count("LIMIT")

        offset = None
        if self.current().is_keyword("OFFSET"):
            self.consume()
            offset = self._parse_count("OFFSET")

        if self.current().is_symbol(";"):
            self.consume()

        token = self.current()
        if token.kind != EOF:
            raise ParseError(
                f"Unexpected token '{token.text}'", position=token.position, token=token.text
            )

        return SelectStatement(
            source=source,
            items=items,
            where=where,
            group_by=group_by,
            order_by=order_by,
            limit=limit,
            offset=offset,
        )

    def _parse_projection(self) -> Optional[Tuple[SelectItem, ...]]:
        """
        Parse the SELECT list

        Examples:
            *
            name, age
            COUNT(*), SUM(amount) AS total
            price * quantity AS revenue

        Returns:
            None for *, otherwise the tuple of items
        """
        if self.current().is_symbol("*"):
            self.consume()
            return None

        items: List[SelectItem] = []
        self._allow_aggregates = True
        try:
            while True:
                expression = self._parse_expression()
                alias = self._parse_alias()
                items.append(SelectItem(expression=expression, alias=alias))

                if self.current().is_symbol(","):
                    self.consume()
                else:
                    break
        finally:
            self._allow_aggregates = False

        return tuple(items)

    def _parse_alias(self) -> Optional[str]:
        token = self.current()
        if token.is_keyword("AS"):
            self.consume()
            return self._parse_name("alias")
        if token.kind == QUOTED_IDENT or (token.kind == IDENT and token.text.upper() not in KEYWORDS):
            return self._parse_name("alias")
        return None

    def _parse_name(self, what: str) -> str:
        """Parse a column name or alias (bare or double-quoted)"""
        token = self.current()
        if token.kind == QUOTED_IDENT:
            self.consume()
            return token.value
        if token.kind == IDENT and token.text.upper() not in KEYWORDS:
            self.consume()
            return token.text
        found = token.text or "end of statement"
        raise ParseError(f"Expected {what} but got '{found}'", position=token.position, token=token.text)

    def _read_locator(self) -> str:
        """Read the FROM locator verbatim: quoted, or a run of non-space characters"""
        start = self.lexer.skip_whitespace(self.pos)
        text = self.sql

        if start >= len(text) or text[start] == ";":
            raise ParseError("Missing locator after FROM", position=start)

        quote = text[start]
        if quote in ("'", '"'):
            close = text.find(quote, start + 1)
            if close == -1:
                raise ParseError("Unterminated locator", position=start, token=text[start:])
            locator = text[start + 1 : close]
            self.pos = close + 1
        else:
            match = _BARE_LOCATOR.match(text, start)
            locator = match.group()
            self.pos = match.end()

        if not locator.strip():
            raise ParseError("Missing locator after FROM", position=start)
        return locator

    def _parse_group_by(self) -> Tuple[str, ...]:
        """
        Parse GROUP BY clause

        Example: GROUP BY city, country
        """
        self.expect_keyword("GROUP")
        self.expect_keyword("BY")

        columns = []
        while True:
            self._reject_aggregate("GROUP BY")
            columns.append(self._parse_name("column name"))
            if self.current().is_symbol(","):
                self.consume()
            else:
                break

        return tuple(columns)

    def _parse_order_by(self) -> Tuple[OrderByColumn, ...]:
        """
        Parse ORDER BY clause

        Examples:
            ORDER BY name
            ORDER BY city ASC, age DESC
        """
        self.expect_keyword("ORDER")
        self.expect_keyword("BY")

        order_columns = []
        while True:
            self._reject_aggregate("ORDER BY")
            column = self._parse_name("column name")

            direction = "ASC"
            token = self.current()
            if token.is_keyword("ASC") or token.is_keyword("DESC"):
                direction = self.consume().text.upper()

            order_columns.append(OrderByColumn(column=column, direction=direction))

            if self.current().is_symbol(","):
                self.consume()
            else:
                break

        return tuple(order_columns)

    def _parse_count(self, clause: str) -> int:
        """Parse the non-negative integer of a LIMIT / OFFSET clause"""
        token = self.current()
        if token.is_symbol("-"):
            raise ParseError(f"{clause} must be non-negative", position=token.position, token=token.text)
        if token.kind != NUMBER or not isinstance(token.value, int):
            found = token.text or "end of statement"
            raise ParseError(
                f"{clause} must be an integer, got '{found}'", position=token.position, token=token.text
            )
        self.consume()
        return token.value

    def _reject_aggregate(self, clause: str) -> None:
        token = self.current()
        if token.kind == IDENT and token.text.upper() in AGGREGATE_FUNCTIONS and self.peek().is_symbol("("):
            raise ParseError(
                f"Aggregate functions are not allowed in {clause}",
                position=token.position,
                token=token.text,
            )

    # Expressions

    def _parse_expression(self) -> Expression:
        return self._parse_or()

    def _parse_or(self) -> Expression:
        left = self._parse_and()
        while self.current().is_keyword("OR"):
            self.consume()
            left = BinaryOp(left, "OR", self._parse_and())
        return left

    def _parse_and(self) -> Expression:
        left = self._parse_comparison()
        while self.current().is_keyword("AND"):
            self.consume()
            left = BinaryOp(left, "AND", self._parse_comparison())
        return left

    def _parse_comparison(self) -> Expression:
        left = self._parse_additive()
        token = self.current()
        if token.kind == SYMBOL and token.text in ("=", "!=", "<>", "<", "<=", ">", ">="):
            self.consume()
            operator = "!=" if token.text == "<>" else token.text
            return BinaryOp(left, operator, self._parse_additive())
        return left

    def _parse_additive(self) -> Expression:
        left = self._parse_term()
        while self.current().kind == SYMBOL and self.current().text in ("+", "-"):
            operator = self.consume().text
            left = BinaryOp(left, operator, self._parse_term())
        return left

    def _parse_term(self) -> Expression:
        left = self._parse_unary()
        while self.current().kind == SYMBOL and self.current().text in ("*", "/", "%"):
            operator = self.consume().text
            left = BinaryOp(left, operator, self._parse_unary())
        return left

    def _parse_unary(self) -> Expression:
        if self.current().is_symbol("-"):
            self.consume()
            operand = self._parse_unary()
            if (
                isinstance(operand, Literal)
                and isinstance(operand.value, (int, float))
                and not isinstance(operand.value, bool)
            ):
                return Literal(-operand.value)
            return BinaryOp(Literal(0), "-", operand)
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        token = self.current()

        if token.kind == NUMBER or token.kind == STRING:
            self.consume()
            return Literal(token.value)

        if token.kind == QUOTED_IDENT:
            self.consume()
            return ColumnRef(token.value)

        if token.is_symbol("("):
            self.consume()
            expression = self._parse_expression()
            self.expect_symbol(")")
            return expression

        if token.kind == IDENT:
            upper = token.text.upper()
            if upper in ("TRUE", "FALSE"):
                self.consume()
                return Literal(upper == "TRUE")

            if self.peek().is_symbol("("):
                if upper not in AGGREGATE_FUNCTIONS:
                    raise ParseError(
                        f"Unknown function '{token.text}'", position=token.position, token=token.text
                    )
                if not self._allow_aggregates:
                    raise ParseError(
                        f"Aggregate function {upper} is only allowed in the SELECT list",
                        position=token.position,
                        token=token.text,
                    )
                return self._parse_aggregate()

            if upper in KEYWORDS:
                raise ParseError(
                    f"Unexpected keyword '{token.text}'", position=token.position, token=token.text
                )

            self.consume()
            return ColumnRef(token.text)

        if token.kind == EOF:
            raise ParseError("Unexpected end of statement", position=token.position)

        raise ParseError(f"Unexpected token '{token.text}'", position=token.position, token=token.text)

    def _parse_aggregate(self) -> AggregateCall:
        """
        Parse aggregate function

        Examples:
            COUNT(*)
            COUNT(id)
            SUM(amount)
        """
        function = self.consume().text.upper()
        self.expect_symbol("(")

        token = self.current()
        if token.is_symbol("*"):
            if function != "COUNT":
                raise ParseError(
                    f"{function}(*) is not supported, only COUNT(*)",
                    position=token.position,
                    token=token.text,
                )
            self.consume()
            column = None
        else:
            column = self._parse_name("column name")

        self.expect_symbol(")")
        return AggregateCall(function=function, column=column)


def parse(sql: str) -> Statement:
    """
    Convenience function to parse a statement

    Args:
        sql: Statement text

    Returns:
        ShowColumnsStatement or SelectStatement

    Raises:
        ParseError: If the statement is invalid

    Examples:
        >>> ast = parse("SHOW COLUMNS FROM data.csv")
        >>> ast = parse("SELECT name, age FROM users.csv WHERE age > 25 LIMIT 10")
    """
    return StatementParser(sql).parse()
