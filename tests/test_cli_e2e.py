from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from reftype_core.cli import EXIT_DOES_NOT_HOLD, EXIT_INFRA, EXIT_OK, main


def _run(args, cwd: Path):
    env = os.environ.copy()
    # Ensure repo root is importable when running `python -m reftype_core.cli`
    env["PYTHONPATH"] = str(cwd) + (os.pathsep + env["PYTHONPATH"] if env.get("PYTHONPATH") else "")
    env["PYTHONIOENCODING"] = "utf-8"
    return subprocess.run(
        [sys.executable, "-m", "reftype_core.cli", *args],
        cwd=str(cwd),
        env=env,
        text=True,
        encoding="utf-8",
        capture_output=True,
    )


def test_cli_implies_e2e(repo_root: Path):
    p = _run(["implies", "x >= 1 AND x <= 3", "x >= 0 AND x <= 5"], cwd=repo_root)
    assert p.returncode == 0, f"implication should hold. rc={p.returncode}\nSTDOUT:\n{p.stdout}\nSTDERR:\n{p.stderr}"
    assert "Verification passed" in p.stdout


def test_cli_implies_e2e_counterexample(repo_root: Path):
    p = _run(["implies", "x >= 0 AND x <= 5", "x >= 1 AND x <= 3", "--crosscheck"], cwd=repo_root)
    assert p.returncode == 10, f"rc={p.returncode}\nSTDOUT:\n{p.stdout}\nSTDERR:\n{p.stderr}"
    assert "INVALID #1" in p.stdout
    assert "Counterexample" in p.stdout


def test_cli_file_arguments_e2e(repo_root: Path, predicates_dir: Path):
    p = _run(["subtype", f"@{predicates_dir / 'small_pos.pred'}", f"@{predicates_dir / 'bounded_nat.pred'}"],
             cwd=repo_root)
    assert p.returncode == 0, f"rc={p.returncode}\nSTDOUT:\n{p.stdout}\nSTDERR:\n{p.stderr}"
    assert "Verification passed" in p.stdout


@pytest.mark.parametrize(
    "argv, code",
    [
        (["sat", "x > 2 AND x < 3"], EXIT_DOES_NOT_HOLD),
        (["sat", "x > 2 AND x < 3", "--real", "x"], EXIT_OK),
        (["valid", "x >= 1 OR x <= 0"], EXIT_OK),
        (["valid", "x >= 1 OR x <= 0", "--real", "x"], EXIT_DOES_NOT_HOLD),
        (["implies", "x > 5 OR x < -5", "x != 0"], EXIT_OK),
        (["subtype", "#v > 0", "#v >= 1"], EXIT_OK),
        (["subtype", "#v > 0", "#v >= 1", "--sub-base", "real", "--super-base", "real"], EXIT_DOES_NOT_HOLD),
        (["sat", "x * y > 0"], EXIT_INFRA),
        (["sat", "x >"], EXIT_INFRA),
        (["valid", "x > 0 OR TRUE"], EXIT_INFRA),
        (["sat", "@does/not/exist.pred"], EXIT_INFRA),
        ([], EXIT_INFRA),
    ],
)
def test_exit_codes(argv, code):
    assert main(argv + (["--quiet"] if argv else [])) == code


def test_nonlinear_file_reports_issue(predicates_dir: Path, capsys):
    assert main(["sat", f"@{predicates_dir / 'nonlinear.pred'}"]) == EXIT_INFRA
    out = capsys.readouterr().out
    assert "NONLINEAR #1" in out
    assert "Linearize" in out


def test_parse_error_goes_to_stderr(capsys):
    assert main(["sat", "x > 0 y"]) == EXIT_INFRA
    captured = capsys.readouterr()
    assert "Predicate rejected" in captured.err
    assert "Line 1, Col 7" in captured.err


def test_simplify_prints_dnf(capsys):
    assert main(["simplify", "(x > 0 AND x < 10) OR (x > 0 AND x < 5)"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "Simplified DNF (1 clause)" in out
    assert "-x + 10 > 0" in out


def test_quiet_prints_nothing(capsys):
    assert main(["sat", "x > 2 AND x < 3", "--quiet"]) == EXIT_DOES_NOT_HOLD
    assert capsys.readouterr().out == ""


def test_debug_prints_trace(capsys):
    assert main(["sat", "x > 0", "--debug"]) == EXIT_OK
    assert "Debug Trace" in capsys.readouterr().out


def test_z3_disagreement_is_an_infrastructure_failure(monkeypatch, capsys):
    # force the FM side to call a satisfiable formula UNSAT
    monkeypatch.setattr("reftype_core.verification.verifier.is_unsat", lambda *args, **kwargs: True)
    assert main(["sat", "x > 0", "--crosscheck", "--quiet"]) == EXIT_INFRA
    assert main(["sat", "x > 0", "--crosscheck"]) == EXIT_INFRA
    assert "UNSOUND #2" in capsys.readouterr().out


def test_simplify_prints_infinite_constants(capsys):
    assert main(["simplify", "x < 1e400", "--real", "x"]) == EXIT_OK
    assert "inf" in capsys.readouterr().out
