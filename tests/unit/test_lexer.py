"""Tests for the lexer: token kinds, payloads, EOF handling and lexical errors."""

import pytest

from stackc.errors import ErrorKind, LexError
from stackc.lexer import Token, TokenKind, tokenize


def _kinds(source: str) -> list[TokenKind]:
    return [t.kind for t in tokenize(source)]


class TestPunctuation:
    def test_every_single_character_token(self):
        assert _kinds("+ - * / % < > ( ) { } = ; ,") == [
            TokenKind.PLUS,
            TokenKind.MINUS,
            TokenKind.STAR,
            TokenKind.SLASH,
            TokenKind.PERCENT,
            TokenKind.LESS,
            TokenKind.GREATER,
            TokenKind.LPAREN,
            TokenKind.RPAREN,
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            TokenKind.ASSIGN,
            TokenKind.SEMI,
            TokenKind.COMMA,
            TokenKind.EOF,
        ]

    def test_no_whitespace_needed_between_tokens(self):
        assert _kinds("x=1+2;") == [
            TokenKind.IDENTIFIER,
            TokenKind.ASSIGN,
            TokenKind.NUMBER,
            TokenKind.PLUS,
            TokenKind.NUMBER,
            TokenKind.SEMI,
            TokenKind.EOF,
        ]

    def test_punctuation_has_no_payload(self):
        assert tokenize("+")[0] == Token(TokenKind.PLUS)


class TestIdentifiersAndReservedWords:
    @pytest.mark.parametrize(
        "word, kind",
        [
            ("if", TokenKind.IF),
            ("else", TokenKind.ELSE),
            ("while", TokenKind.WHILE),
            ("function", TokenKind.FUNCTION),
            ("return", TokenKind.RETURN),
        ],
    )
    def test_reserved_word_gets_its_own_kind(self, word, kind):
        token = tokenize(word)[0]
        assert token.kind == kind
        assert token.value is None

    def test_identifier_carries_its_text(self):
        assert tokenize("counter")[0] == Token(TokenKind.IDENTIFIER, "counter")

    def test_identifier_may_contain_digits_after_first_letter(self):
        assert tokenize("x2y3")[0] == Token(TokenKind.IDENTIFIER, "x2y3")

    def test_reserved_word_prefix_is_identifier(self):
        assert tokenize("iffy")[0] == Token(TokenKind.IDENTIFIER, "iffy")
        assert tokenize("returned")[0] == Token(TokenKind.IDENTIFIER, "returned")

    def test_reserved_words_are_case_sensitive(self):
        assert tokenize("If")[0] == Token(TokenKind.IDENTIFIER, "If")


class TestNumbers:
    def test_decimal_value(self):
        assert tokenize("1234")[0] == Token(TokenKind.NUMBER, 1234)

    def test_leading_zeros(self):
        assert tokenize("007")[0] == Token(TokenKind.NUMBER, 7)

    def test_large_values_are_not_truncated(self):
        assert tokenize("123456789012345678901234567890")[0].value == (
            123456789012345678901234567890
        )

    def test_digits_then_letters_split_into_two_tokens(self):
        tokens = tokenize("12ab")
        assert tokens[0] == Token(TokenKind.NUMBER, 12)
        assert tokens[1] == Token(TokenKind.IDENTIFIER, "ab")


class TestEndOfInput:
    def test_empty_source_yields_only_eof(self):
        assert tokenize("") == [Token(TokenKind.EOF)]

    def test_whitespace_only_yields_only_eof(self):
        assert tokenize(" \n\t  \n") == [Token(TokenKind.EOF)]

    def test_exactly_one_eof_at_end(self):
        kinds = _kinds("function main() { return 1; }\n")
        assert kinds[-1] == TokenKind.EOF
        assert kinds.count(TokenKind.EOF) == 1

    def test_trailing_token_without_newline_is_kept(self):
        assert _kinds("}") == [TokenKind.RBRACE, TokenKind.EOF]


class TestLexicalErrors:
    @pytest.mark.parametrize("source", ["x = 1 & 2;", "a!", "#", "x_y", "3.5"])
    def test_unrecognized_character_raises(self, source):
        with pytest.raises(LexError) as excinfo:
            tokenize(source)
        assert excinfo.value.kind == ErrorKind.UNRECOGNIZED_CHARACTER

    def test_error_reports_line_and_column(self):
        with pytest.raises(LexError) as excinfo:
            tokenize("x = 1;\ny = @;")
        assert "'@'" in str(excinfo.value)
        assert "line 2, column 5" in str(excinfo.value)

    def test_non_ascii_letter_is_rejected(self):
        with pytest.raises(LexError):
            tokenize("é = 1;")
