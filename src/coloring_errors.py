class ColoringError(Exception):
    """Base class for every failure that aborts a coloring attempt."""


class GraphReadError(ColoringError, ValueError):
    # Missing file, bad vertex/edge counts or malformed edge lines
    pass


class FormulaFormatError(ColoringError, ValueError):
    # Bad DIMACS header, literal outside [1, num_variables], empty clause
    pass


class AllocationError(ColoringError, MemoryError):
    # Assignment, decision tree or recursion stack could not be grown
    pass


class SearchAbortedError(ColoringError):
    # A timeout or node budget stopped the search before it decided SAT/UNSAT
    pass


class ColoringNotFoundError(ColoringError):
    """No k in 1..n produced a valid coloring.

    For a simple graph n colors always suffice, so this points at a self-loop
    in the input or an encoding defect rather than an uncolorable graph.
    """
