from typing import List, Optional

from treelox.language.lox_types import LoxLiteral, lox_is_valid_identifier_name, lox_is_valid_identifier_start
from treelox.lexing.token import EQUAL_SUFFIXABLE_TOKENS, KEYWORDS, ONE_CHAR_TOKENS, Tk, Token
from treelox.utilities import dump_internal, is_arabic_numeral
from treelox.utilities.configuration import Debug
from treelox.utilities.error import LoxErrorHandler, LoxSyntaxError
from treelox.utilities.streamview import StreamView


class Scanner:
    def __init__(
            self,
            source: str,
            error_handler: LoxErrorHandler,
            *,
            debug_flags: Debug = Debug(0)
    ) -> None:
        """Split a source string into tokens.

        :param source: Lox source text
        :type source: str
        :param error_handler: receives "Unexpected character." and "Unterminated string." errors
        :type error_handler: LoxErrorHandler
        :param debug_flags: `DUMP_TOKENS` prints the result, defaults to no flags
        :type debug_flags: Debug, optional
        """
        self._sv = StreamView(source)
        self._error_handler = error_handler
        self._debug_flags = debug_flags
        self._tokens: List[Token] = list()
        self._line = 1

    def scan_tokens(self) -> List[Token]:
        while self._sv.has_next():
            self._sv.set_marker()
            self._scan_token()
        self._tokens.append(Token(Tk.EOF, "", None, self._line))

        if self._debug_flags & Debug.DUMP_TOKENS:
            if self._debug_flags & Debug.JAVA_STYLE_TOKENS:
                print(*(token.to_string() for token in self._tokens), sep="\n")
            else:
                dump_internal("Token", *self._tokens)
        return self._tokens

    def _scan_token(self) -> None:
        char = self._sv.advance()

        if char in ONE_CHAR_TOKENS:
            self._add_token(ONE_CHAR_TOKENS[char])
        elif char in EQUAL_SUFFIXABLE_TOKENS:
            alone, with_equal = EQUAL_SUFFIXABLE_TOKENS[char]
            self._add_token(with_equal if self._sv.advance_if_match("=") else alone)
        elif char == "/":
            if self._sv.advance_if_match("/"):
                self._skip_comment()
            else:
                self._add_token(Tk.SLASH)
        elif char == '"':
            self._string()
        elif char == "\n":
            self._line += 1
        elif char.isspace():
            pass
        elif is_arabic_numeral(char):
            self._number()
        elif lox_is_valid_identifier_start(char):
            self._identifier()
        else:
            self._error_handler.err(LoxSyntaxError(self._line, "Unexpected character."))

    def _add_token(self, token_type: Tk, literal: Optional[LoxLiteral] = None) -> None:
        self._tokens.append(Token(token_type, self._sv.get_slice_from_marker(), literal, self._line))

    # ~~~ Multi-character lexemes ~~~

    def _skip_comment(self) -> None:
        # Stop before the newline so that it is still counted.
        while self._sv.has_next() and self._sv.peek() != "\n":
            self._sv.advance()

    def _string(self) -> None:
        while self._sv.has_next() and self._sv.peek() != '"':
            if self._sv.advance() == "\n":
                self._line += 1
        if not self._sv.has_next():
            self._error_handler.err(LoxSyntaxError(self._line, "Unterminated string."))
            return
        self._sv.advance()
        self._add_token(Tk.STRING, self._sv.get_slice_from_marker()[1:-1])

    def _number(self) -> None:
        """Digits, then optionally a dot followed by more digits. A trailing dot
        is left alone, so `1.` scans as a number and a DOT."""
        self._consume_digits()
        if self._sv.peek() == "." and is_arabic_numeral(self._sv.peek(1)):
            self._sv.advance()
            self._consume_digits()
        self._add_token(Tk.NUMBER, float(self._sv.get_slice_from_marker()))

    def _consume_digits(self) -> None:
        while is_arabic_numeral(self._sv.peek()):
            self._sv.advance()

    def _identifier(self) -> None:
        while lox_is_valid_identifier_name(self._sv.peek()):
            self._sv.advance()
        # Exact-case lookup: `Class` is an identifier.
        self._add_token(KEYWORDS.get(self._sv.get_slice_from_marker(), Tk.IDENTIFIER))
