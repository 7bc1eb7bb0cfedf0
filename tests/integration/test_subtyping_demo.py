from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path


def test_subtyping_demo_runs(repo_root: Path, examples_dir: Path):
    env = os.environ.copy()
    env["PYTHONIOENCODING"] = "utf-8"
    env["COLUMNS"] = "200"
    p = subprocess.run(
        [sys.executable, str(examples_dir / "subtyping_demo.py")],
        cwd=str(repo_root),
        env=env,
        text=True,
        encoding="utf-8",
        capture_output=True,
    )
    assert p.returncode == 0, f"rc={p.returncode}\nSTDOUT:\n{p.stdout}\nSTDERR:\n{p.stderr}"
    assert "All verdicts match." in p.stdout
    assert "{#v : Int | #v < 0 OR #v > 10}" in p.stdout
