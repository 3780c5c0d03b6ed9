"""
Tolerance tiers for numerical validation.

Defines precision expectations for the CPU double-precision path and the
thresholds the QR solver uses to decide numerical rank and conditioning.

Used by the test suite and by the regression backend's diagnostics.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Well-conditioned designs: agree with closed-form answers to machine precision
CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU double precision, well-conditioned',
)

# Ill-conditioned designs (cond > CONDITION_WARNING_THRESHOLD)
CPU_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-6,
    name='cpu_fp64_ill_conditioned',
    description='CPU double precision, ill-conditioned (cond > 1e8)',
)

# Column j is aliased when |R_jj| <= RANK_TOLERANCE * ||X_j||, the threshold lm() uses
RANK_TOLERANCE = 1e-7

# cond(X) beyond this gets a warning on the result. cond(X'X) = cond(X)^2
# is then past 1e16, where double precision stops carrying digits.
CONDITION_WARNING_THRESHOLD = 1e8


def select_tolerance(is_ill_conditioned: bool = False) -> ToleranceTier:
    """Precision a fit can be trusted to, given its conditioning."""
    if is_ill_conditioned:
        return CPU_FP64_ILL_CONDITIONED
    return CPU_FP64
