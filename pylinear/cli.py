"""
Command-line interface.

Usage:
    pylinear fit expression.csv "expression ~ treatment * time"
    pylinear fit expression "expression ~ 0 + treatment" --contrast "B-A=-1,1"
    pylinear fit data.csv "y ~ dose" --reference dose=0 --pairwise dose
    pylinear means expression expression treatment time
    pylinear cor expression age expression

DATA is a CSV/TSV path, or the name of a bundled dataset ('expression').
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from pylinear.core.datasource import DataSource
from pylinear.core.exceptions import PyLinearError, ValidationError
from pylinear.datasets import load_expression
from pylinear.regression import lm
from pylinear.contrasts import contrasts, pairwise
from pylinear.descriptive import cor_test, group_means


_BUNDLED = {'expression': load_expression}


def load_data(source: str) -> DataSource:
    """Read DATA: a delimited file, or a bundled dataset name."""
    if not Path(source).exists() and source in _BUNDLED:
        return _BUNDLED[source]()
    return DataSource.from_file(source)


def _parse_pairs(items: Sequence[str], option: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition('=')
        if not sep or not key or not value:
            raise ValidationError(f"{option}: expected NAME=VALUE, got {item!r}")
        out[key.strip()] = value.strip()
    return out


def _parse_weights(text: str) -> dict[str, float] | list[float]:
    """'-1,1' -> [-1.0, 1.0]; 'treatmentB:1,treatmentB:timeT2:1' -> dict."""
    parts = [p.strip() for p in text.split(',') if p.strip()]
    try:
        return [float(p) for p in parts]
    except ValueError:
        pass
    weights: dict[str, float] = {}
    for part in parts:
        coef, _, w = part.rpartition(':')
        try:
            weights[coef] = float(w)
        except ValueError:
            raise ValidationError(
                f"--contrast: cannot read weight in {part!r}; use COEF:WEIGHT"
            ) from None
    return weights


def _cmd_fit(args: argparse.Namespace) -> None:
    data = load_data(args.data)
    reference = _parse_pairs(args.reference, '--reference') or None
    solution = lm(args.formula, data, coding=args.coding, reference=reference)
    print(solution.summary())

    if args.contrast:
        named = {
            name: _parse_weights(w)
            for name, w in _parse_pairs(args.contrast, '--contrast').items()
        }
        print()
        print(contrasts(solution, named, adjust=args.adjust).summary())
    for factor in args.pairwise:
        print()
        print(pairwise(solution, factor, adjust=args.adjust).summary())


def _cmd_means(args: argparse.Namespace) -> None:
    data = load_data(args.data)
    print(group_means(data, args.response, args.by).summary())


def _cmd_cor(args: argparse.Namespace) -> None:
    data = load_data(args.data)
    for col in (args.x, args.y):
        if col not in data:
            raise ValidationError(f"Unknown column {col!r}; available: {sorted(data.keys())}")
    result = cor_test(
        data[args.x], data[args.y],
        alternative=args.alternative,
        conf_level=args.conf_level,
        data_name=f"{args.x} and {args.y}",
    )
    print(result.summary())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pylinear',
        description='Fit linear models with categorical and continuous covariates',
    )
    sub = parser.add_subparsers(dest='command', required=True)

    p_fit = sub.add_parser('fit', help='Fit a linear model and print its summary')
    p_fit.add_argument('data', help='CSV/TSV file or bundled dataset name')
    p_fit.add_argument('formula', help='Model formula, e.g. "y ~ treatment * time"')
    p_fit.add_argument('--coding', choices=['treatment', 'deviation'], default='treatment')
    p_fit.add_argument(
        '--reference', action='append', default=[], metavar='FACTOR=LEVEL',
        help='Reference level of a factor (repeatable)',
    )
    p_fit.add_argument(
        '--contrast', action='append', default=[], metavar='NAME=WEIGHTS',
        help="Contrast as comma-separated weights or COEF:WEIGHT pairs (repeatable)",
    )
    p_fit.add_argument(
        '--pairwise', action='append', default=[], metavar='FACTOR',
        help='Print all pairwise level differences of a factor (repeatable)',
    )
    p_fit.add_argument(
        '--adjust', choices=['none', 'holm', 'bonferroni', 'BH'], default='none',
        help='p-value adjustment for contrasts and pairwise comparisons',
    )
    p_fit.set_defaults(func=_cmd_fit)

    p_means = sub.add_parser('means', help='Print group means of a response')
    p_means.add_argument('data')
    p_means.add_argument('response')
    p_means.add_argument('by', nargs='+', help='Grouping column(s)')
    p_means.set_defaults(func=_cmd_means)

    p_cor = sub.add_parser('cor', help="Pearson correlation test between two columns")
    p_cor.add_argument('data')
    p_cor.add_argument('x')
    p_cor.add_argument('y')
    p_cor.add_argument(
        '--alternative', choices=['two.sided', 'less', 'greater'], default='two.sided',
    )
    p_cor.add_argument('--conf-level', type=float, default=0.95)
    p_cor.set_defaults(func=_cmd_cor)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except (PyLinearError, FileNotFoundError) as e:
        print(f"pylinear: error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
