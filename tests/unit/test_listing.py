"""Tests for the text hand-off format between compiler and machine."""

import pytest

from stackc.errors import ErrorKind, ListingError
from stackc.ir import Instruction, Opcode, format_listing, parse_instruction, parse_listing

from tests.unit.conftest import make_instructions


class TestFormat:
    def test_operand_opcodes_print_their_operand(self):
        assert str(Instruction(opcode=Opcode.PUSH, operand=-1)) == "push -1"
        assert str(Instruction(opcode=Opcode.LDPC, operand=9)) == "ldpc 9"

    def test_bare_opcodes_print_mnemonic_only(self):
        assert str(Instruction(opcode=Opcode.STRARGC)) == "strargc"

    def test_listing_ends_with_sentinel(self):
        text = format_listing(make_instructions((Opcode.PUSH, 0), (Opcode.RET,)))
        assert text == "push 0\nret\nstack\n"

    def test_listing_without_sentinel(self):
        text = format_listing(make_instructions((Opcode.PUSH, 0)), sentinel=False)
        assert text == "push 0\n"


class TestParse:
    def test_reads_mnemonic_and_operand(self):
        assert parse_instruction("beq0 14") == Instruction(opcode=Opcode.BEQ0, operand=14)

    def test_negative_operand(self):
        assert parse_instruction("push -1").operand == -1

    def test_tolerates_surrounding_whitespace(self):
        instructions = parse_listing("  push 3  \n\tret\n")
        assert [str(i) for i in instructions] == ["push 3", "ret"]

    def test_blank_lines_are_skipped(self):
        assert len(parse_listing("push 1\n\n\npush 2\n")) == 2

    def test_sentinel_stops_reading(self):
        instructions = parse_listing("push 1\nstack\nnot an instruction at all\n")
        assert [str(i) for i in instructions] == ["push 1"]

    def test_missing_sentinel_reads_to_end(self):
        assert len(parse_listing("push 1\npush 2")) == 2

    def test_formatted_listing_reads_back(self):
        original = make_instructions(
            (Opcode.PUSH, 0), (Opcode.JMP, 2), (Opcode.LDSP,), (Opcode.LOADA, 1)
        )
        assert parse_listing(format_listing(original)) == original

    @pytest.mark.parametrize(
        "line",
        ["push one", "push 1 2", "push 1.5"],
    )
    def test_malformed_lines(self, line):
        with pytest.raises(ListingError) as excinfo:
            parse_listing(line)
        assert excinfo.value.kind == ErrorKind.MALFORMED_LISTING

    @pytest.mark.parametrize("text", ["push 1\nfoo\n", "pusj 1", "PUSH 1", "label 3"])
    def test_unknown_mnemonic(self, text):
        with pytest.raises(ListingError) as excinfo:
            parse_listing(text)
        assert excinfo.value.kind == ErrorKind.UNKNOWN_OPCODE

    def test_error_names_the_line(self):
        with pytest.raises(ListingError, match="line 3"):
            parse_listing("push 1\npush 2\nbogus\n")
