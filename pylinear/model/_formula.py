"""
Model formula parsing.

A Wilkinson-style formula subset, matching what R's lm() accepts for the
models this library fits:

    expression ~ treatment                 one-way, reference-group coding
    expression ~ 0 + treatment             cell-means coding
    expression ~ treatment * time          main effects + interaction
    expression ~ treatment + time + treatment:time
    scale(expression) ~ scale(age)         standardized simple regression
    expression ~ factor(dose)              numeric column used as a factor

The right-hand side is expanded by formulaic (``*``, ``:``, ``-``,
parentheses, ``0``/``1`` intercept handling). Each resulting factor must
be a column name, optionally wrapped in one of TRANSFORMS.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from formulaic import Formula as _FormulaicFormula
from formulaic.errors import FormulaicError

from pylinear.core.exceptions import FormulaError


TRANSFORMS = ('factor', 'scale', 'center')

_OPERATORS = set('~+-*:()')

_ATOM_RE = re.compile(
    r"^\s*(?:(?P<func>[A-Za-z_][A-Za-z0-9_.]*)\s*\(\s*(?P<inner>`[^`]+`|[A-Za-z_.][A-Za-z0-9_.]*)\s*\)"
    r"|(?P<name>`[^`]+`|[A-Za-z_.][A-Za-z0-9_.]*))\s*$"
)


@dataclass(frozen=True)
class Variable:
    """A column reference, optionally wrapped in a transform."""
    name: str
    transform: str | None = None

    @property
    def label(self) -> str:
        if self.transform is None:
            return self.name
        return f"{self.transform}({self.name})"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class Term:
    """A main effect (one variable) or an interaction (several)."""
    variables: tuple[Variable, ...]

    @property
    def label(self) -> str:
        return ":".join(v.label for v in self.variables)

    @property
    def order(self) -> int:
        return len(self.variables)

    def key(self) -> frozenset[Variable]:
        return frozenset(self.variables)

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class Formula:
    """Parsed model formula."""
    response: Variable | None
    terms: tuple[Term, ...]
    intercept: bool
    text: str

    @property
    def variables(self) -> tuple[Variable, ...]:
        """Every variable on the right-hand side, in order of appearance."""
        seen: dict[Variable, None] = {}
        for term in self.terms:
            for var in term.variables:
                seen.setdefault(var, None)
        return tuple(seen)

    @property
    def term_labels(self) -> tuple[str, ...]:
        return tuple(t.label for t in self.terms)

    def __str__(self) -> str:
        rhs = [t.label for t in self.terms]
        if not self.intercept:
            rhs.insert(0, "0")
        lhs = self.response.label if self.response is not None else ""
        return f"{lhs} ~ {' + '.join(rhs) if rhs else '1'}".strip()


def _error(text: str, message: str, position: int | None = None) -> FormulaError:
    where = f" at position {position}" if position is not None else ""
    return FormulaError(f"{message}{where} in formula {text!r}",
                        formula=text, position=position)


def _check_characters(text: str) -> int:
    """Reject characters outside the formula subset; return the offset of '~'."""
    tilde: int | None = None
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch == '`':
            end = text.find('`', pos + 1)
            if end < 0:
                raise _error(text, "unterminated backtick", pos)
            pos = end + 1
            continue
        if ch == '~':
            if tilde is not None:
                raise _error(text, "only one '~' is allowed", pos)
            tilde = pos
        elif not (ch.isalnum() or ch.isspace() or ch in '_.' or ch in _OPERATORS):
            raise _error(text, f"unexpected character {ch!r}", pos)
        pos += 1
    if tilde is None:
        raise _error(text, "missing '~'")
    return tilde


def _variable(text: str, expr: str) -> Variable:
    bare = expr.strip().strip("`")
    if f"`{bare}`" in text:
        return Variable(bare)
    m = _ATOM_RE.match(expr)
    if m is None:
        raise _error(text, f"unsupported term {expr.strip()!r}; expected a column name "
                           f"or one of {', '.join(TRANSFORMS)}(column)")
    if m.group('name') is not None:
        return Variable(m.group('name').strip('`'))
    func = m.group('func')
    if func not in TRANSFORMS:
        raise _error(text, f"unknown function {func!r}; supported: {', '.join(TRANSFORMS)}")
    return Variable(m.group('inner').strip('`'), func)


def _expand(text: str, rhs: str) -> tuple[list[Term], bool]:
    """Expand the right-hand side into terms in order of appearance."""
    try:
        parsed = _FormulaicFormula(rhs, _ordering='none')
    except FormulaicError as e:
        raise _error(text, f"cannot parse right-hand side ({e})") from e

    intercept = False
    terms: list[Term] = []
    for fterm in parsed:
        exprs = [factor.expr for factor in fterm.factors]
        if exprs == ['1']:
            intercept = True
            continue
        terms.append(Term(tuple(_variable(text, e) for e in exprs)))
    return terms, intercept


def _r_order(terms: list[Term]) -> tuple[Term, ...]:
    """
    Put terms in R's order.

    Variables inside an interaction follow their first appearance in the
    formula; terms are deduplicated and grouped by interaction order.
    """
    first_seen: dict[Variable, int] = {}
    for term in terms:
        for var in term.variables:
            first_seen.setdefault(var, len(first_seen))

    out: dict[frozenset[Variable], Term] = {}
    for term in terms:
        ordered = tuple(sorted(term.variables, key=first_seen.__getitem__))
        out.setdefault(frozenset(ordered), Term(ordered))
    return tuple(sorted(out.values(), key=lambda t: t.order))


def parse_formula(formula: str | Formula) -> Formula:
    """
    Parse a model formula string.

    Args:
        formula: Formula text such as ``"y ~ treatment * time"``, or an
            already-parsed Formula (returned unchanged)

    Returns:
        Formula with response, ordered terms and intercept flag

    Raises:
        FormulaError: If the formula is malformed
    """
    if isinstance(formula, Formula):
        return formula
    if not isinstance(formula, str) or not formula.strip():
        raise FormulaError(f"Formula must be a non-empty string, got {formula!r}",
                           formula=str(formula))

    tilde = _check_characters(formula)
    lhs, rhs = formula[:tilde], formula[tilde + 1:]
    if not rhs.strip():
        raise _error(formula, "missing right-hand side", len(formula))

    response = _variable(formula, lhs) if lhs.strip() else None
    terms, intercept = _expand(formula, rhs)
    return Formula(
        response=response,
        terms=_r_order(terms),
        intercept=intercept,
        text=formula,
    )
