"""
Result envelope shared by every PyLinear computation.

A fit, a family of contrasts and a correlation test each carry their own
payload, but they report timing, backend and non-fatal diagnostics in the
same place. Solution wrappers (LinearSolution, ContrastSolution, ...) read
from this envelope and never mutate it.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Frozen envelope around a domain payload.

    Attributes:
        params: Payload computed by the backend (LinearParams, ContrastParams, ...)
        info: Method and diagnostics, e.g. ``{'method': 'qr', 'rank': 4}``
        timing: Seconds per named section plus 'total_seconds', or None
        backend_name: Which backend produced the payload ('cpu_qr', 'cpu')
        warnings: Diagnostics that did not stop the computation

    Example:
        >>> Result(
        ...     params=LinearParams(...),
        ...     info={'method': 'qr', 'rank': 4, 'condition_number': 6.2},
        ...     timing={'total_seconds': 0.001},
        ...     backend_name='cpu_qr',
        ...     warnings=("essentially perfect fit: summary may be unreliable",),
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """True if any recorded warning mentions ``substring``."""
        return any(substring in w for w in self.warnings)
