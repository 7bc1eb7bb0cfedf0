"""
reftype-core: Refinement Subtyping Demo
=======================================

Walks through a handful of subtyping questions a type checker would ask and
shows the verdict of the Fourier-Motzkin procedure next to the expectation.

Run from the repository root:

    python examples/subtyping_demo.py
"""

import sys
from pathlib import Path
from typing import List, Tuple

current_file = Path(__file__).resolve()
project_root = current_file.parent.parent
sys.path.append(str(project_root))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from reftype_core.factory import predicate_from_file, predicate_from_string
from reftype_core.language.types import TInt, TReal, Type, format_type, pos_int, tarr, tref
from reftype_core.verification.subtype import is_subtype, join

console = Console()

PREDICATES = project_root / "examples" / "predicates"


def refined(base, text: str):
    return tref(base, predicate_from_string(text))


def scenarios() -> List[Tuple[str, Type, Type, bool]]:
    small_pos = tref(TInt, predicate_from_file(PREDICATES / "small_pos.pred"))
    bounded_nat = tref(TInt, predicate_from_file(PREDICATES / "bounded_nat.pred"))
    far = tref(TInt, predicate_from_file(PREDICATES / "far_from_zero.pred"))
    nonzero = refined(TInt, "#v > 0 OR #v < 0")

    return [
        ("Narrow range fits wide range", small_pos, bounded_nat, True),
        ("Wide range does not fit narrow range", bounded_nat, small_pos, False),
        ("Integer gap", refined(TInt, "#v > 2 AND #v < 4"), refined(TInt, "#v == 3"), True),
        ("Disjunctive premise", far, nonzero, True),
        ("Plain Int is not positive", TInt, pos_int(), False),
        ("Int refinement widens to Real", pos_int(), refined(TReal, "#v > 0"), True),
        ("Real refinement does not narrow to Int", refined(TReal, "#v > 0"), pos_int(), False),
        ("Arrow: contravariant input", tarr("x", TInt, pos_int()), tarr("x", pos_int(), TInt), True),
    ]


def main():
    console.print()
    console.print(Panel(
        "[bold cyan]Refinement Subtyping Demo[/bold cyan]\n\n"
        "{#v : B1 | P} <: {#v : B2 | Q}  iff  B1 widens to B2 and P implies Q.",
        border_style="cyan",
        width=100
    ))
    console.print()

    table = Table(title="Subtyping verdicts", box=box.ROUNDED, width=100)
    table.add_column("Case", style="white")
    table.add_column("Sub <: Super", style="cyan")
    table.add_column("Expected", justify="center")
    table.add_column("Verdict", justify="center")

    failures = 0
    for title, sub, sup, expected in scenarios():
        verdict = is_subtype(sub, sup)
        failures += int(verdict != expected)
        mark = "[green]yes[/green]" if verdict else "[red]no[/red]"
        table.add_row(title, f"{format_type(sub)}\n<: {format_type(sup)}", "yes" if expected else "no", mark)

    console.print(table)
    console.print()

    joined = join(refined(TInt, "#v < 0"), refined(TInt, "#v > 10"))
    console.print(f"[dim]join({{#v : Int | #v < 0}}, {{#v : Int | #v > 10}}) = {format_type(joined)}[/dim]")
    console.print()

    if failures:
        console.print(f"[bold red]{failures} verdict(s) differ from expectation[/bold red]")
        sys.exit(1)
    console.print("[bold green]All verdicts match.[/bold green]")


if __name__ == "__main__":
    main()
