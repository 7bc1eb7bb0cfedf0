from typing import List, Union, Dict, Any, Optional
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..fm.parser import ParseResult
from ..fm.types import format_inequality


class VerdictReporter:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def report(self, title: str, ok: bool, issues: List[Union[str, Dict[str, Any]]],
               trace: Optional[List[Dict[str, Any]]] = None):
        if ok:
            self._print_success(title)
        else:
            self._print_header(title)

        for i, issue in enumerate(issues, 1):
            self._render_issue(i, issue)

        if trace:
            self._print_trace(trace)

    def report_dnf(self, dnf: ParseResult, title: str = "DNF"):
        """One table row per clause; each clause is a conjunction."""
        table = Table(title=f"🧮 {title} ({len(dnf)} clause{'s' if len(dnf) != 1 else ''})",
                      show_header=True, header_style="bold cyan", width=96)
        table.add_column("#", style="cyan", width=6)
        table.add_column("Clause (conjunction)", style="white")
        for idx, clause in enumerate(dnf.clauses, 1):
            body = "\n".join(format_inequality(i, clause.vars) for i in clause.inequalities) or "true"
            table.add_row(str(idx), body)
        if not dnf.clauses:
            table.add_row("-", "false (no satisfiable clause)")
        self.console.print(table)
        self.console.print()

    def _render_issue(self, index: int, issue: Union[str, Dict[str, Any]]):
        if isinstance(issue, str):
            payload = {"kind": "UNKNOWN", "message": issue, "model": None, "meta": None}
        else:
            payload = issue

        kind = payload.get("kind", "UNKNOWN")
        msg = payload.get("message", "")
        locations = payload.get("locations", []) or []
        model = payload.get("model", None)
        meta = payload.get("meta", None)
        severity = payload.get("severity", "error")

        title_color = {"error": "red", "warning": "yellow"}.get(severity, "green")
        border = title_color if kind != "INTERNAL_ERROR" else "magenta"

        title = f"[bold {title_color}]{kind} #{index}[/bold {title_color}]"

        header = msg
        if locations:
            where = ", ".join(f"line {loc[0]}, col {loc[1]}" for loc in locations if loc)
            header = f"{msg}\n\nAt: {where}"

        self.console.print(Panel(Text(header, style="white"), title=title, border_style=border, width=96))

        if model:
            self._print_model_table(model, counterexample=(kind in ("INVALID", "UNSOUND")))

        if meta and meta.get("trace_tail"):
            self._print_trace(meta["trace_tail"])

        if severity != "info":
            self._print_suggestions(kind)

    def _print_model_table(self, model: Dict[str, Any], counterexample: bool):
        caption = "🧪 Counterexample" if counterexample else "🧪 Example Assignment (Model)"
        table = Table(title=caption, show_header=True, header_style="bold cyan", width=96)
        table.add_column("Variable", style="cyan", width=36)
        table.add_column("Value", style="white")
        for k in sorted(model.keys()):
            table.add_row(str(k), str(model[k]))
        self.console.print(table)
        self.console.print()

    def _print_trace(self, trace: List[Dict[str, Any]]):
        table = Table(title="🔎 Debug Trace", show_header=True, header_style="bold yellow", width=96)
        table.add_column("Event", style="cyan", width=16)
        table.add_column("Data", style="white")
        for rec in trace:
            data = ", ".join(f"{k}={v}" for k, v in rec.items() if k not in ("event", "op"))
            table.add_row(str(rec.get("event")), data)
        self.console.print(table)
        self.console.print()

    def _print_suggestions(self, kind: str):
        table = Table(title="💡 Suggestions", show_header=True, header_style="bold yellow", width=96)
        table.add_column("Strategy", style="cyan", width=26)
        table.add_column("What to do", style="white")

        if kind == "INVALID":
            table.add_row(
                "Strengthen premise",
                "Add the missing bound to the sub-type's refinement so every value it admits satisfies the goal."
            )
            table.add_row(
                "Weaken conclusion",
                "If the super-type is stricter than intended, relax its predicate."
            )
            table.add_row(
                "Check domains",
                "Variables default to integers. Mark real-valued variables explicitly (--real NAME)."
            )

        elif kind == "UNSAT":
            table.add_row(
                "Look for conflicts",
                "Two bounds exclude each other (x > 5 AND x < 3), or an integer gap (x > 2 AND x < 3)."
            )
            table.add_row(
                "Check domains",
                "Over the reals the same formula may be satisfiable. Use --real NAME if that is intended."
            )

        elif kind == "NONLINEAR":
            table.add_row(
                "Linearize",
                "Only constant * term and term / constant are supported. Replace x*y or x/y with a fresh variable."
            )
            table.add_row(
                "Division by zero",
                "Remove literal division by 0; it has no meaning in the predicate."
            )

        elif kind == "UNSUPPORTED":
            table.add_row(
                "Rewrite predicate",
                "Use numbers, variables, + - * /, comparisons and AND / OR / NOT only."
            )

        elif kind == "CAPACITY":
            table.add_row(
                "Split the query",
                "Fewer variables or disjunctions per check keep elimination within its limits."
            )
            table.add_row(
                "Raise limits",
                "SolverLimits(max_vars, max_ineqs, max_clauses, max_terms_per_ineq) can be raised per verifier."
            )

        elif kind == "INCOMPLETE":
            table.add_row(
                "Known gap",
                "Integer divisibility across several variables is not tracked; the negative verdict is conservative."
            )

        elif kind == "UNSOUND":
            table.add_row(
                "Report it",
                "An FM verdict was contradicted by z3. Keep the formula and the model above as a regression case."
            )

        else:
            table.add_row(
                "Review logic",
                "Re-run with --debug to inspect the trace of the failing operation."
            )

        self.console.print(table)
        self.console.print()

    def _print_header(self, title: str):
        self.console.print()
        self.console.print(Panel(
            f"[bold white]{title}[/bold white]",
            style="bold red",
            subtitle="[red]Verdict: does not hold[/red]",
            width=96
        ))
        self.console.print()

    def _print_success(self, title: str):
        self.console.print()
        self.console.print(Panel(
            f"[bold green]{title}[/bold green]\n"
            "Verdict: holds.",
            style="bold green",
            title="✅ Verification passed",
            width=96
        ))
        self.console.print()
