"""
Tests for the DIMACS CNF reader and writer.
"""

import pytest

from cnf_encoding import Formula
from coloring_errors import FormulaFormatError
from dimacs_cnf import dimacs_string, parse_dimacs, parse_dimacs_string, write_dimacs

# Sample CNF for testing
SAMPLE_CNF = """c This is a comment
c Another comment
p cnf 4 3
1 2 -3 0
-1 3 4 0
2 -4 0
"""


class TestParse:
    """Parsing well-formed input."""

    def test_parse_dimacs_string(self):
        formula = parse_dimacs_string(SAMPLE_CNF)

        assert formula.num_variables == 4
        assert formula.num_clauses == 3
        assert formula.clauses == [[1, 2, -3], [-1, 3, 4], [2, -4]]
        assert formula.comments == ["This is a comment", "Another comment"]

    def test_blank_lines_ignored(self):
        formula = parse_dimacs_string("\np cnf 2 1\n\n  1 -2 0  \n\n")
        assert formula.clauses == [[1, -2]]

    def test_parse_dimacs_file(self, tmp_path):
        path = tmp_path / "sample.cnf"
        path.write_text(SAMPLE_CNF)

        formula = parse_dimacs(path)
        assert formula.num_variables == 4
        assert formula.num_clauses == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_dimacs(tmp_path / "nope.cnf")


class TestRejections:
    """Every malformed formula is refused as a whole."""

    def test_literal_exceeds_variable_count(self):
        with pytest.raises(FormulaFormatError, match="outside 1..2"):
            parse_dimacs_string("p cnf 2 2\n1 2 0\n-1 3 0\n")

    def test_missing_terminating_zero(self):
        with pytest.raises(FormulaFormatError, match="Missing terminating 0"):
            parse_dimacs_string("p cnf 2 1\n1 2\n")

    def test_missing_header(self):
        with pytest.raises(FormulaFormatError, match="Missing problem line"):
            parse_dimacs_string("c only a comment\n")

    def test_clause_before_header(self):
        with pytest.raises(FormulaFormatError, match="before problem line"):
            parse_dimacs_string("1 2 0\np cnf 2 1\n")

    def test_invalid_header(self):
        with pytest.raises(FormulaFormatError, match="Invalid problem line"):
            parse_dimacs_string("p cnf two 1\n1 0\n")

    def test_duplicate_header(self):
        with pytest.raises(FormulaFormatError, match="Duplicate problem line"):
            parse_dimacs_string("p cnf 2 1\np cnf 2 1\n1 0\n")

    def test_clause_count_mismatch(self):
        with pytest.raises(FormulaFormatError, match="declares 3 clauses"):
            parse_dimacs_string("p cnf 2 3\n1 0\n2 0\n")

    def test_empty_clause(self):
        with pytest.raises(FormulaFormatError, match="Empty clause"):
            parse_dimacs_string("p cnf 2 1\n0\n")

    def test_two_clauses_on_one_line(self):
        with pytest.raises(FormulaFormatError, match="More than one clause"):
            parse_dimacs_string("p cnf 2 2\n1 0 2 0\n")

    def test_non_integer_literal(self):
        with pytest.raises(FormulaFormatError, match="Invalid literal at line 2"):
            parse_dimacs_string("p cnf 2 1\n1 x 0\n")


class TestWrite:
    """Writing formulas back out."""

    def test_dimacs_string(self):
        formula = Formula(num_variables=3, clauses=[[1, -2], [3]], comments=["own"])
        text = dimacs_string(formula, comments=["extra"])

        assert text == "c extra\nc own\np cnf 3 2\n1 -2 0\n3 0\n"

    def test_write_dimacs_creates_parent(self, tmp_path):
        formula = parse_dimacs_string(SAMPLE_CNF)
        path = tmp_path / "nested" / "out.cnf"
        write_dimacs(formula, path)

        again = parse_dimacs(path)
        assert again.num_variables == formula.num_variables
        assert again.clauses == formula.clauses
