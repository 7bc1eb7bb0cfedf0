"""
reftype-core - Refinement Verifier

Front door to the decision procedure for tools that want diagnostics rather
than exceptions. Every check returns

    (ok, issues)

where issues is a list of dict payloads (VerdictReporter friendly).

Issue kinds:
- INVALID:        validity / implication / subtyping does not hold (model = counterexample, if known)
- UNSAT:          a satisfiability query has no solution
- MODEL:          (info) satisfying assignment from z3 for a SAT verdict
- NONLINEAR:      formula outside the linear fragment (x*y, x/y, x/0)
- UNSUPPORTED:    text or vocabulary rejected by the predicate parser / validator
- CAPACITY:       a SolverLimits ceiling was hit
- INCOMPLETE:     (warning) z3 refutes a negative FM verdict; integer divisibility gap
- UNSOUND:        z3 finds a model for a positive FM verdict
- INTERNAL_ERROR: anything else (precondition violations included)

Design principles:
- Fail-closed: errors and UNSOUND disagreement never produce ok=True.
- The FM verdict is authoritative; z3 (opt-in) only adds models and warnings.
- Opt-in bounded debug trace, attached to INTERNAL_ERROR payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Tuple, Any, Optional

from ..config import VerifierConfig
from ..engines.z3_engine.crosscheck import Z3CrossChecker, SAT, UNSAT
from ..fm.disjunction import simplify_dnf
from ..fm.errors import FMError, NonLinearError, UnsupportedNodeError, CapacityError
from ..fm.parser import FormulaParser, ParseResult, parse_to_system
from ..fm.solver import is_unsat, is_valid, is_valid_implication
from ..fm.types import VarInfo
from ..language.ast import Expression, lnot, format_expression
from ..language.parser import ParseError
from ..language.types import RefinedType, BaseType, ArrowType, Type, format_type
from ..language.validator import PredicateValidator, ValidationError
from .subtype import is_subtype, base_compatible, value_vars


@dataclass(frozen=True)
class VerificationIssue:
    kind: str  # see module docstring
    message: str
    severity: str = "error"  # "error" | "warning"
    locations: List[Optional[tuple]] = field(default_factory=list)
    model: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None


class RefinementVerifier:
    def __init__(self, config: Optional[VerifierConfig] = None):
        self.config = config or VerifierConfig()
        self.validator = PredicateValidator()
        self.checker = Z3CrossChecker()

        self.debug: bool = self.config.debug
        self.crosscheck: bool = self.config.crosscheck
        self._trace: List[Dict[str, Any]] = []
        self._trace_max: int = self.config.trace_max
        self._active_op: Optional[str] = None

    # -----------------------------
    # Public API
    # -----------------------------
    def check_sat(self, formula: Expression, *, vars: Optional[VarInfo] = None,
                  debug: Optional[bool] = None, crosscheck: Optional[bool] = None) -> Tuple[bool, List[Dict[str, Any]]]:
        """ok iff the formula has a solution."""
        self._begin("check_sat", debug, crosscheck)

        def run() -> Tuple[bool, List[VerificationIssue]]:
            self._validate(formula)
            dnf = parse_to_system(formula, self._seed(vars))
            self._t("parse", clauses=len(dnf), vars=list(dnf.vars.names) if dnf.vars else [])
            sat = not is_unsat(dnf)
            self._t("verdict", sat=sat)

            issues: List[VerificationIssue] = []
            model = None
            if self.crosscheck:
                status, model = self.checker.check(dnf)
                self._t("crosscheck", status=status)
                if sat and status == UNSAT:
                    issues.append(self._incomplete("z3 proves the formula unsatisfiable over the integers."))
                elif not sat and status == SAT:
                    issues.append(self._unsound("z3 found a solution for a formula reported unsatisfiable.", model))

            if not sat:
                issues.insert(0, VerificationIssue(
                    kind="UNSAT",
                    message=f"No assignment satisfies: {format_expression(formula)}",
                ))
            elif model is not None:
                issues.insert(0, VerificationIssue(
                    kind="MODEL", message="Satisfying assignment found by z3.", severity="info", model=model,
                ))
            return sat, issues

        return self._run(run)

    def check_valid(self, formula: Expression, *, vars: Optional[VarInfo] = None,
                    debug: Optional[bool] = None, crosscheck: Optional[bool] = None) -> Tuple[bool, List[Dict[str, Any]]]:
        """ok iff the formula holds for every assignment."""
        self._begin("check_valid", debug, crosscheck)

        def run() -> Tuple[bool, List[VerificationIssue]]:
            self._validate(formula)
            seed = self._seed(vars)
            valid = is_valid(formula, seed)
            self._t("verdict", valid=valid)

            negated = parse_to_system(lnot(formula), seed) if self.crosscheck else None
            issues = self._crosscheck_negative(
                valid, negated,
                invalid_message=f"Formula is not valid: {format_expression(formula)}",
            )
            return valid and not self._has_errors(issues), issues

        return self._run(run)

    def check_implication(self, premise: Expression, conclusion: Expression, *, vars: Optional[VarInfo] = None,
                          debug: Optional[bool] = None, crosscheck: Optional[bool] = None) -> Tuple[bool, List[Dict[str, Any]]]:
        """ok iff premise => conclusion for every assignment."""
        self._begin("check_implication", debug, crosscheck)

        def run() -> Tuple[bool, List[VerificationIssue]]:
            self._validate(premise)
            self._validate(conclusion)
            holds, issues = self._implication(premise, conclusion, self._seed(vars))
            return holds and not self._has_errors(issues), issues

        return self._run(run)

    def check_subtype(self, sub: Type, sup: Type, *,
                      debug: Optional[bool] = None, crosscheck: Optional[bool] = None) -> Tuple[bool, List[Dict[str, Any]]]:
        """ok iff sub <: sup."""
        self._begin("check_subtype", debug, crosscheck)

        def run() -> Tuple[bool, List[VerificationIssue]]:
            for t in (sub, sup):
                self._validate_type(t)
            ok = is_subtype(sub, sup, self.config.limits)
            self._t("verdict", subtype=ok, sub=format_type(sub), sup=format_type(sup))
            if ok and not self.crosscheck:
                return True, []

            issues: List[VerificationIssue] = []
            if isinstance(sub, RefinedType) and isinstance(sup, RefinedType) and base_compatible(sub.base, sup.base):
                # the verdict came from the implication check; explain it with a model
                _, issues = self._implication(sub.predicate, sup.predicate, value_vars(sub.base, self.config.limits))
            if not ok:
                model = self._first_model(issues)
                issues = [i for i in issues if i.kind != "INVALID"]
                issues.insert(0, VerificationIssue(
                    kind="INVALID",
                    message=f"{format_type(sub)} is not a subtype of {format_type(sup)}",
                    model=model,
                ))
            return ok and not self._has_errors(issues), issues

        return self._run(run)

    def simplify(self, formula: Expression, *, vars: Optional[VarInfo] = None,
                 debug: Optional[bool] = None) -> Tuple[Optional[ParseResult], List[Dict[str, Any]]]:
        """DNF with UNSAT and subsumed clauses removed, or (None, issues) on error."""
        self._begin("simplify", debug, False)
        result: Dict[str, ParseResult] = {}

        def run() -> Tuple[bool, List[VerificationIssue]]:
            self._validate(formula)
            dnf = parse_to_system(formula, self._seed(vars))
            simplified = simplify_dnf(dnf)
            self._t("simplify", before=len(dnf), after=len(simplified))
            result["dnf"] = simplified
            return True, []

        ok, issues = self._run(run)
        return (result.get("dnf") if ok else None), issues

    @property
    def trace(self) -> List[Dict[str, Any]]:
        return list(self._trace)

    # -----------------------------
    # Internals
    # -----------------------------
    def _begin(self, op: str, debug: Optional[bool], crosscheck: Optional[bool]):
        self.debug = self.config.debug if debug is None else bool(debug)
        self.crosscheck = self.config.crosscheck if crosscheck is None else bool(crosscheck)
        self._trace = []
        self._active_op = op
        self._t("start")

    def _run(self, fn) -> Tuple[bool, List[Dict[str, Any]]]:
        try:
            ok, issues = fn()
            self._t("done", ok=ok, issues=len(issues))
            return ok, [i.__dict__ for i in issues]

        except NonLinearError as e:
            return False, [self._error_issue("NONLINEAR", e,
                                             "Formula is not expressible in the supported linear-arithmetic fragment")]
        except CapacityError as e:
            return False, [self._error_issue("CAPACITY", e, "Internal tool limit reached",
                                             meta={"resource": e.resource, "limit": e.limit})]
        except (UnsupportedNodeError, ValidationError, ParseError) as e:
            return False, [self._error_issue("UNSUPPORTED", e, "Predicate rejected")]
        except Exception as e:
            internal = VerificationIssue(
                kind="INTERNAL_ERROR",
                message=f"Critical Verification Error: {str(e)}",
                severity="error",
                meta={
                    "operation": self._active_op,
                    "error_kind": getattr(e, "kind", type(e).__name__),
                    "trace_tail": self._trace[-80:],  # last 80 events
                } if self.debug else None
            )
            return False, [internal.__dict__]

    def _error_issue(self, kind: str, e: Exception, headline: str,
                     meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self._t("error", kind=kind, error=str(e))
        detail = getattr(e, "message", str(e))
        location = getattr(e, "location", None)
        if isinstance(e, ParseError):
            location = (e.line, e.column)
        payload = dict(meta or {})
        if isinstance(e, FMError):
            payload["error_kind"] = e.kind
        return VerificationIssue(
            kind=kind,
            message=f"{headline}: {detail}",
            locations=[location] if location else [],
            meta=payload or None,
        ).__dict__

    def _t(self, event: str, **data):
        if not self.debug:
            return
        rec = {"event": event, "op": self._active_op, **data}
        self._trace.append(rec)
        if len(self._trace) > self._trace_max:
            self._trace.pop(0)

    def _seed(self, vars: Optional[VarInfo]) -> VarInfo:
        return vars.copy() if vars is not None else VarInfo(self.config.limits)

    def _validate(self, formula: Expression):
        self.validator.validate(formula)

    def _validate_type(self, t: Type):
        if isinstance(t, RefinedType):
            self._validate(t.predicate)
        elif isinstance(t, ArrowType):
            self._validate_type(t.input)
            self._validate_type(t.output)
        elif not isinstance(t, BaseType):
            raise ValidationError(f"Not a type: {t!r}")

    def _implication(self, premise: Expression, conclusion: Expression,
                     seed: VarInfo) -> Tuple[bool, List[VerificationIssue]]:
        holds = is_valid_implication(premise, conclusion, seed)
        self._t("verdict", implication=holds)

        issues: List[VerificationIssue] = []
        model = None
        if self.crosscheck or self.debug:
            parser = FormulaParser(seed.copy())
            p = parser.parse_formula(premise)
            q = parser.parse_formula(conclusion)
            final = parser.vars.copy()
            p, q = p.with_vars(final), q.with_vars(final)
            self._t("parse", premise_clauses=len(p), conclusion_clauses=len(q), vars=list(final.names))

        if self.crosscheck:
            status, model = self.checker.find_counterexample(p, q)
            self._t("crosscheck", status=status)
            if holds and status == SAT:
                issues.append(self._unsound("z3 found a counterexample to an implication reported valid.", model))
            elif not holds and status == UNSAT:
                issues.append(self._incomplete("z3 proves the implication; the FM verdict is conservative."))

        if not holds:
            issues.insert(0, VerificationIssue(
                kind="INVALID",
                message=f"{format_expression(premise)} does not imply {format_expression(conclusion)}",
                model=model,
            ))
        return holds, issues

    def _crosscheck_negative(self, valid: bool, negated: Optional[ParseResult], *, invalid_message: str) -> List[VerificationIssue]:
        issues: List[VerificationIssue] = []
        model = None
        if self.crosscheck:
            status, model = self.checker.check(negated)
            self._t("crosscheck", status=status)
            if valid and status == SAT:
                issues.append(self._unsound("z3 found a counterexample to a formula reported valid.", model))
            elif not valid and status == UNSAT:
                issues.append(self._incomplete("z3 proves the formula valid; the FM verdict is conservative."))
        if not valid:
            issues.insert(0, VerificationIssue(kind="INVALID", message=invalid_message, model=model))
        return issues

    @staticmethod
    def _incomplete(message: str) -> VerificationIssue:
        return VerificationIssue(kind="INCOMPLETE", message=message, severity="warning")

    @staticmethod
    def _unsound(message: str, model: Optional[Dict[str, Any]]) -> VerificationIssue:
        return VerificationIssue(kind="UNSOUND", message=message, severity="error", model=model)

    @staticmethod
    def _has_errors(issues: List[VerificationIssue]) -> bool:
        return any(i.kind == "UNSOUND" for i in issues)

    @staticmethod
    def _first_model(issues: List[VerificationIssue]) -> Optional[Dict[str, Any]]:
        for i in issues:
            if i.model:
                return i.model
        return None
