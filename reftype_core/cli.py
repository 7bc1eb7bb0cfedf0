"""
reftype command line.

    reftype sat FORMULA
    reftype valid FORMULA
    reftype implies PREMISE CONCLUSION
    reftype simplify FORMULA
    reftype subtype SUB_PRED SUPER_PRED [--sub-base int] [--super-base int]

Formulas use the predicate syntax (`x >= 0 AND x < n`, `#v != 3`). An argument
starting with '@' is read from a file. Variables are integers unless listed
with --real.

Exit codes:
    0   the verdict holds (SAT / valid / implied / subtype)
    10  the verdict does not hold
    2   unsupported input, capacity exceeded, z3 disagreement or internal error
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from rich.console import Console

from .audit.report import VerdictReporter
from .config import VerifierConfig
from .factory import predicate_from_file, predicate_from_string, vars_with_reals
from .language.ast import Expression, format_expression
from .language.parser import ParseError
from .language.types import VALUE_VAR, base_type, tref, format_type
from .language.validator import ValidationError
from .verification.verifier import RefinementVerifier

_log = logging.getLogger("reftype")

EXIT_OK: int = 0
EXIT_INFRA: int = 2
EXIT_DOES_NOT_HOLD: int = 10


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("reftype")
    root.setLevel(level)
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
                                           datefmt="%H:%M:%S"))
    root.addHandler(handler)


def _load(raw: str) -> Expression:
    if raw.startswith("@"):
        return predicate_from_file(raw[1:])
    return predicate_from_string(raw)


def _verifier(args) -> RefinementVerifier:
    return RefinementVerifier(VerifierConfig(debug=args.debug, crosscheck=args.crosscheck))


def _finish(args, title: str, ok: bool, issues: List[dict], verifier: RefinementVerifier) -> int:
    _log.info("%s: ok=%s, %d issue(s)", args.command, ok, len(issues))
    if not args.quiet:
        VerdictReporter(Console(width=100)).report(title, ok, issues, trace=verifier.trace if args.debug else None)
    if ok:
        return EXIT_OK
    if any(i.get("kind") in ("NONLINEAR", "UNSUPPORTED", "CAPACITY", "INTERNAL_ERROR", "UNSOUND") for i in issues):
        return EXIT_INFRA
    return EXIT_DOES_NOT_HOLD


# ============================================================================
# Commands
# ============================================================================

def cmd_sat(args) -> int:
    formula = _load(args.formula)
    v = _verifier(args)
    ok, issues = v.check_sat(formula, vars=vars_with_reals(args.real))
    return _finish(args, f"Satisfiable: {format_expression(formula)}", ok, issues, v)


def cmd_valid(args) -> int:
    formula = _load(args.formula)
    v = _verifier(args)
    ok, issues = v.check_valid(formula, vars=vars_with_reals(args.real))
    return _finish(args, f"Valid: {format_expression(formula)}", ok, issues, v)


def cmd_implies(args) -> int:
    premise = _load(args.premise)
    conclusion = _load(args.conclusion)
    v = _verifier(args)
    ok, issues = v.check_implication(premise, conclusion, vars=vars_with_reals(args.real))
    title = f"Implication: {format_expression(premise)}  =>  {format_expression(conclusion)}"
    return _finish(args, title, ok, issues, v)


def cmd_simplify(args) -> int:
    formula = _load(args.formula)
    v = _verifier(args)
    dnf, issues = v.simplify(formula, vars=vars_with_reals(args.real))
    if dnf is None:
        return _finish(args, f"Simplify: {format_expression(formula)}", False, issues, v)

    if not args.quiet:
        reporter = VerdictReporter(Console(width=100))
        reporter.report_dnf(dnf, title="Simplified DNF")
    return EXIT_OK


def cmd_subtype(args) -> int:
    sub = tref(base_type(args.sub_base), _load(args.sub))
    sup = tref(base_type(args.super_base), _load(args.sup))
    v = _verifier(args)
    ok, issues = v.check_subtype(sub, sup)
    return _finish(args, f"Subtype: {format_type(sub)}  <:  {format_type(sup)}", ok, issues, v)


# ============================================================================
# Parser
# ============================================================================

def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--real", action="append", default=[], metavar="NAME",
                        help="treat NAME as real-valued (repeatable)")
    common.add_argument("--debug", action="store_true", help="show the verifier trace")
    common.add_argument("--crosscheck", action="store_true", help="confirm verdicts with z3 and show models")
    common.add_argument("--quiet", "-q", action="store_true", help="no report, exit code only")

    p = argparse.ArgumentParser(prog="reftype", description="Linear-arithmetic refinement checks (Fourier-Motzkin).")
    p.add_argument("-v", "--verbose", action="count", default=0, help="log verbosity (-v info, -vv debug)")
    sub = p.add_subparsers(dest="command")

    s = sub.add_parser("sat", parents=[common], help="is the formula satisfiable?")
    s.add_argument("formula")
    s.set_defaults(func=cmd_sat)

    s = sub.add_parser("valid", parents=[common], help="does the formula hold for every assignment?")
    s.add_argument("formula")
    s.set_defaults(func=cmd_valid)

    s = sub.add_parser("implies", parents=[common], help="does PREMISE imply CONCLUSION?")
    s.add_argument("premise")
    s.add_argument("conclusion")
    s.set_defaults(func=cmd_implies)

    s = sub.add_parser("simplify", parents=[common], help="DNF without UNSAT and subsumed clauses")
    s.add_argument("formula")
    s.set_defaults(func=cmd_simplify)

    s = sub.add_parser("subtype", parents=[common],
                       help=f"is {{{VALUE_VAR} : SUB_BASE | SUB}} a subtype of {{{VALUE_VAR} : SUPER_BASE | SUPER}}?")
    s.add_argument("sub", help=f"sub-type refinement over {VALUE_VAR}")
    s.add_argument("sup", metavar="super", help=f"super-type refinement over {VALUE_VAR}")
    s.add_argument("--sub-base", default="int", choices=["int", "bool", "real"])
    s.add_argument("--super-base", default="int", choices=["int", "bool", "real"])
    s.set_defaults(func=cmd_subtype)

    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    _log.debug("command=%s args=%s", args.command, vars(args))
    try:
        return args.func(args)
    except (ParseError, ValidationError) as exc:
        Console(stderr=True).print(f"[bold red]Predicate rejected:[/bold red] {exc}")
        return EXIT_INFRA
    except FileNotFoundError as exc:
        Console(stderr=True).print(f"[bold red]{exc}[/bold red]")
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    sys.exit(main())
