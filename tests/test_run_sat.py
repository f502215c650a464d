"""
Smoke tests for the command line front end and the batch runner.
"""

import csv

import pytest

from run_sat import main
from sat_experiments import run_experiments

TRIANGLE = "3\n3\n\n1 2\n2 3\n1 3\n"


@pytest.fixture
def triangle_file(tmp_path):
    path = tmp_path / "triangle.txt"
    path.write_text(TRIANGLE)
    return str(path)


class TestCli:
    """encode, solve and color subcommands."""

    def test_encode_to_stdout(self, triangle_file, capsys):
        assert main(["encode", triangle_file, "2"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("c 2-coloring of a graph with 3 vertices and 3 edges")
        assert "p cnf 6 12\n" in out

    def test_encode_then_solve(self, triangle_file, tmp_path, capsys):
        cnf = str(tmp_path / "k2.cnf")
        assert main(["encode", triangle_file, "2", "-o", cnf]) == 0
        capsys.readouterr()

        assert main(["solve", cnf]) == 0
        assert capsys.readouterr().out.startswith("UNSAT")

    def test_solve_prints_model_and_tree(self, tmp_path, capsys):
        cnf = tmp_path / "small.cnf"
        cnf.write_text("p cnf 2 2\n1 2 0\n-1 0\n")

        assert main(["solve", str(cnf), "--tree"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "SAT"
        assert lines[1] == "-1 2 0"
        assert lines[2] == "x1 -> False"

    def test_solve_long_decision_chain(self, tmp_path, capsys):
        n = 1500
        cnf = tmp_path / "units.cnf"
        cnf.write_text(f"p cnf {n} {n}\n" + "".join(f"{v} 0\n" for v in range(1, n + 1)))

        assert main(["solve", str(cnf), "--tree"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "SAT"
        assert lines[1] == " ".join(map(str, range(1, n + 1))) + " 0"
        assert lines[-2] == "  " * (2 * n) + "(leaf)"
        assert lines[-1] == f"Decisions: {n}, backtracks: 0"

    def test_color_many_isolated_vertices(self, tmp_path, capsys):
        graph = tmp_path / "isolated.txt"
        graph.write_text("1500\n0\n")

        assert main(["color", str(graph)]) == 0
        assert "Chromatic number found: 1" in capsys.readouterr().out

    def test_color(self, triangle_file, tmp_path, capsys):
        output = tmp_path / "coloring.txt"
        assert main(["color", triangle_file, "--output", str(output)]) == 0

        out = capsys.readouterr().out
        assert "Chromatic number found: 3" in out
        assert "Coloring is valid" in out
        assert len(output.read_text().splitlines()) == 3

    def test_color_with_kmax_too_small(self, triangle_file, capsys):
        assert main(["color", triangle_file, "--kmax", "2"]) == 0
        assert "Not colorable with at most 2 colors" in capsys.readouterr().out

    def test_bad_formula_reports_error(self, tmp_path, capsys):
        cnf = tmp_path / "bad.cnf"
        cnf.write_text("p cnf 2 1\n1 3 0\n")

        assert main(["solve", str(cnf)]) == 1
        assert capsys.readouterr().out.startswith("Error:")

    def test_missing_graph_reports_error(self, tmp_path, capsys):
        assert main(["color", str(tmp_path / "missing.txt")]) == 1
        assert "does not exist" in capsys.readouterr().out


class TestExperiments:
    """One CSV row per graph file, failures recorded rather than raised."""

    def test_run_experiments(self, tmp_path):
        graphs = tmp_path / "graphs"
        graphs.mkdir()
        (graphs / "a_triangle.txt").write_text(TRIANGLE)
        (graphs / "b_broken.txt").write_text("x\n")
        (graphs / "c_square.col").write_text("p edge 4 4\ne 1 2\ne 2 3\ne 3 4\ne 4 1\n")
        output = tmp_path / "results" / "out.csv"

        rows = run_experiments(str(graphs), str(output), timeout=None)

        assert [r['status'] for r in rows] == ['ok', 'error', 'ok']
        assert rows[0]['chromatic_number'] == 3
        assert rows[2]['chromatic_number'] == 2
        with open(output, newline='') as f:
            written = list(csv.DictReader(f))
        assert [r['graph'] for r in written] == ['a_triangle.txt', 'b_broken.txt', 'c_square.col']
        assert written[0]['valid'] == 'True'

    def test_aborted_run(self, tmp_path):
        graphs = tmp_path / "graphs"
        graphs.mkdir()
        (graphs / "triangle.txt").write_text(TRIANGLE)

        rows = run_experiments(str(graphs), str(tmp_path / "out.csv"), max_nodes=1)
        assert rows[0]['status'] == 'aborted'
        assert rows[0]['decisions'] == 1
