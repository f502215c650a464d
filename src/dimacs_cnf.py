"""
DIMACS CNF reader and writer.

Format handled here:
- Lines starting with 'c' are comments
- Problem line: 'p cnf <num_vars> <num_clauses>', before any clause
- One clause per line: space-separated literals ending with a single 0

Unlike lenient readers, every deviation is rejected: a formula that does not
match its header is never repaired.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from cnf_encoding import Formula
from coloring_errors import FormulaFormatError

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r'p\s+cnf\s+(\d+)\s+(\d+)\s*$')


def parse_dimacs_string(content: str) -> Formula:
    """
    Parse a DIMACS CNF format string.

    Args:
        content: String containing DIMACS CNF format data

    Returns:
        Formula holding the clauses in file order

    Raises:
        FormulaFormatError: On a malformed header or clause line, a literal
            outside [1, num_vars], or a clause count that differs from the header
    """
    comments = []
    num_variables = None
    num_clauses = None
    clauses = []

    for line_num, line in enumerate(content.splitlines(), 1):
        line = line.strip()

        if not line:
            continue

        if line.startswith('c'):
            comments.append(line[1:].strip())
            continue

        if line.startswith('p'):
            if num_variables is not None:
                raise FormulaFormatError(f"Duplicate problem line at line {line_num}")
            match = HEADER_RE.match(line)
            if not match:
                raise FormulaFormatError(f"Invalid problem line at line {line_num}: {line}")
            num_variables = int(match.group(1))
            num_clauses = int(match.group(2))
            continue

        if num_variables is None:
            raise FormulaFormatError(f"Clause before problem line at line {line_num}")

        try:
            literals = [int(x) for x in line.split()]
        except ValueError as e:
            raise FormulaFormatError(f"Invalid literal at line {line_num}: {line}") from e

        if literals[-1] != 0:
            raise FormulaFormatError(f"Missing terminating 0 at line {line_num}")
        clause = literals[:-1]
        if not clause:
            raise FormulaFormatError(f"Empty clause at line {line_num}")
        if 0 in clause:
            raise FormulaFormatError(f"More than one clause at line {line_num}")
        for lit in clause:
            if abs(lit) > num_variables:
                raise FormulaFormatError(
                    f"Literal {lit} at line {line_num} is outside 1..{num_variables}"
                )
        clauses.append(clause)

    if num_variables is None:
        raise FormulaFormatError("Missing problem line (p cnf ...)")
    if len(clauses) != num_clauses:
        raise FormulaFormatError(
            f"Header declares {num_clauses} clauses but {len(clauses)} were found"
        )

    return Formula(num_variables=num_variables, clauses=clauses, comments=comments)


def parse_dimacs(filepath: Union[str, Path]) -> Formula:
    """Parse a DIMACS CNF format file."""
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"CNF file not found: {filepath}")

    with open(filepath, 'r') as f:
        return parse_dimacs_string(f.read())


def dimacs_string(formula: Formula, comments: Optional[List[str]] = None) -> str:
    lines = [f"c {comment}" for comment in (comments or []) + formula.comments]
    lines.append(f"p cnf {formula.num_variables} {formula.num_clauses}")
    for clause in formula.clauses:
        lines.append(' '.join(map(str, clause)) + ' 0')
    return '\n'.join(lines) + '\n'


def write_dimacs(formula: Formula, filepath: Union[str, Path],
                 comments: Optional[List[str]] = None) -> None:
    """
    Write a formula in DIMACS format.

    Args:
        formula: Formula to write
        filepath: Output file path, parent directories are created
        comments: Optional additional comments written before the formula's own
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        f.write(dimacs_string(formula, comments))
    logger.debug(f"Wrote {formula.num_clauses} clauses over {formula.num_variables} variables to {filepath}")
