"""
Universal DataSource for PyLinear.

DataSource is the "I have data" abstraction: a rectangular table of named
columns. It doesn't know which columns are responses, covariates or
factors. That is decided later by the model formula.

Usage:
    from pylinear import DataSource

    ds = DataSource.from_arrays(expression=y, treatment=labels)
    ds = DataSource.from_file("expression.csv")
    ds = DataSource.from_dataframe(df)

    ds.keys()            # frozenset({'expression', 'treatment'})
    ds['treatment']      # array(['A', 'A', 'B', ...])
    ds.is_numeric('expression')   # True
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from pylinear.core.exceptions import ValidationError, DimensionError
from pylinear.core.capabilities import (
    CAPABILITY_MATERIALIZED,
    CAPABILITY_REPEATABLE,
    CAPABILITY_FILE_BACKED,
)

if TYPE_CHECKING:
    import pandas as pd


_DELIMITERS = {'.csv': ',', '.tsv': '\t', '.txt': None}


@dataclass
class DataSource:
    """
    Rectangular, column-named dataset. Domain-agnostic.

    Construct via factory classmethods, not directly. Numeric columns are
    stored as float64, everything else as string labels.
    """
    _data: dict[str, NDArray]
    _capabilities: frozenset[str]
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Column Access ===

    def keys(self) -> frozenset[str]:
        """Return the names of all available columns."""
        return frozenset(self._data.keys())

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in their original order."""
        return tuple(self._data.keys())

    def __getitem__(self, key: str) -> NDArray:
        """
        Access a named column.

        Raises:
            KeyError: If key not found, with message listing available columns
        """
        if key not in self._data:
            available = sorted(self.keys())
            raise KeyError(
                f"DataSource has no column '{key}'. Available: {available}"
            )
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return self.n_observations

    # === Properties ===

    @property
    def n_observations(self) -> int:
        """Number of rows."""
        return self._metadata.get('n_observations', 0)

    @property
    def metadata(self) -> dict[str, Any]:
        """Domain-agnostic metadata."""
        return self._metadata.copy()

    def supports(self, capability: str) -> bool:
        """
        Check if this DataSource supports a capability.

        Unknown capabilities return False, never raise.
        """
        return capability in self._capabilities

    def is_numeric(self, key: str) -> bool:
        """True if the column holds numbers rather than labels."""
        return np.issubdtype(self[key].dtype, np.floating)

    def levels(self, key: str) -> list[str] | None:
        """Declared level order of a categorical column, if any."""
        declared = self._metadata.get('levels', {})
        if key in declared:
            return list(declared[key])
        return None

    # === Factory Methods ===

    @classmethod
    def from_arrays(
        cls,
        *,
        levels: dict[str, list[str]] | None = None,
        **columns: Any,
    ) -> DataSource:
        """
        Construct from named 1D arrays.

        Args:
            levels: Optional declared level order per categorical column
            **columns: Column name -> array-like
        """
        storage = {name: _as_column(arr, name) for name, arr in columns.items()}
        n_obs = _check_rectangular(storage)
        metadata: dict[str, Any] = {'n_observations': n_obs, 'source': 'arrays'}
        if levels:
            metadata['levels'] = {k: [str(v) for v in lv] for k, lv in levels.items()}
        return cls(
            _data=storage,
            _capabilities=frozenset({CAPABILITY_MATERIALIZED, CAPABILITY_REPEATABLE}),
            _metadata=metadata,
        )

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        columns: list[str] | None = None,
        sep: str | None = None,
    ) -> DataSource:
        """
        Construct from a delimited text file (CSV, TSV).

        Args:
            path: File to read
            columns: Subset of columns to load
            sep: Delimiter. Defaults from the suffix (',' for .csv, tab for .tsv,
                 sniffed for .txt)

        Raises:
            ValidationError: If the suffix is not a delimited text format, or
                the file is empty or malformed
            FileNotFoundError: If the file does not exist
        """
        import pandas as pd

        path = Path(path)
        suffix = path.suffix.lower()
        if suffix not in _DELIMITERS:
            raise ValidationError(
                f"Unknown file format: {suffix!r}, expected one of {sorted(_DELIMITERS)}"
            )
        if sep is None:
            sep = _DELIMITERS[suffix]

        kwargs = {'sep': None, 'engine': 'python'} if sep is None else {'sep': sep}
        try:
            df = pd.read_csv(path, usecols=columns, **kwargs)
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            raise ValidationError(f"{path}: not a readable delimited file ({e})") from e

        source = cls.from_dataframe(df, source_path=str(path))
        return cls(
            _data=source._data,
            _capabilities=source._capabilities | {CAPABILITY_FILE_BACKED},
            _metadata=source._metadata,
        )

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """
        Construct from a pandas DataFrame.

        Categorical columns keep their category order as declared levels.
        """
        import pandas as pd

        storage: dict[str, NDArray] = {}
        levels: dict[str, list[str]] = {}

        for col in df.columns:
            series = df[col]
            name = str(col)
            if isinstance(series.dtype, pd.CategoricalDtype):
                levels[name] = [str(c) for c in series.cat.categories]
                storage[name] = _as_column(series.astype(str).to_numpy(), name)
            elif pd.api.types.is_bool_dtype(series) or not pd.api.types.is_numeric_dtype(series):
                storage[name] = _as_column(series.astype(str).to_numpy(), name)
            else:
                storage[name] = series.to_numpy(dtype=np.float64)

        metadata: dict[str, Any] = {
            'n_observations': len(df),
            'source': 'dataframe',
            'columns': [str(c) for c in df.columns],
        }
        if levels:
            metadata['levels'] = levels
        if source_path:
            metadata['source_path'] = source_path

        return cls(
            _data=storage,
            _capabilities=frozenset({CAPABILITY_MATERIALIZED, CAPABILITY_REPEATABLE}),
            _metadata=metadata,
        )

    @classmethod
    def build(cls, data: Any = None, **kwargs: Any) -> DataSource:
        """
        Convenience factory that dispatches to the appropriate from_* method.

        Examples:
            DataSource.build("data.csv")            # from_file
            DataSource.build(df)                    # from_dataframe
            DataSource.build({'y': y, 'g': g})      # from_arrays
            DataSource.build(y=y, g=g)              # from_arrays
            DataSource.build(ds)                    # returned unchanged
        """
        if isinstance(data, DataSource):
            return data
        if isinstance(data, (str, Path)):
            return cls.from_file(data, **kwargs)
        if isinstance(data, dict):
            return cls.from_arrays(**data, **kwargs)
        if data is None:
            return cls.from_arrays(**kwargs)
        if hasattr(data, 'columns') and hasattr(data, 'iloc'):
            return cls.from_dataframe(data, **kwargs)
        raise ValidationError(
            f"Cannot build DataSource from {type(data).__name__}; "
            f"expected a path, DataFrame, dict of columns or DataSource"
        )


def _as_column(arr: Any, name: str) -> NDArray:
    """Store numbers as float64 and anything else as string labels."""
    col = np.asarray(arr)
    if col.ndim != 1:
        raise DimensionError(
            f"{name}: expected 1D column, got {col.ndim}D with shape {col.shape}"
        )
    if col.dtype.kind in 'iuf':
        return col.astype(np.float64)
    return np.array([str(v) for v in col], dtype=str)


def _check_rectangular(storage: dict[str, NDArray]) -> int:
    lengths = {name: len(arr) for name, arr in storage.items()}
    if len(set(lengths.values())) > 1:
        details = ", ".join(f"{name}={n}" for name, n in lengths.items())
        raise DimensionError(f"Inconsistent column lengths: {details}")
    return next(iter(lengths.values()), 0)
