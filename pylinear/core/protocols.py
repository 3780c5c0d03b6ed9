"""
Core protocols for PyLinear.

Structural interfaces that backends must satisfy. Protocol rather than ABC,
so a backend is anything with a ``name`` and a ``solve(design)``.
"""

from typing import Protocol, TypeVar, runtime_checkable

from pylinear.core.result import Result

P = TypeVar('P', covariant=True)  # Parameter payload type
D = TypeVar('D', contravariant=True)  # Design type


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    A backend takes a validated design and produces a Result envelope.
    Backends are stateless; all configuration is passed via the design
    or at construction time.
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}', e.g. 'cpu_qr'.
        """
        ...

    def solve(self, design: D) -> Result[P]:
        """
        Execute the computation.

        Raises:
            NumericalError: If numerical issues prevent a solution
            ValidationError: If design is invalid for this backend
        """
        ...
