"""Tests for DataSource construction and column access."""

import numpy as np
import pandas as pd
import pytest

from pylinear.core.datasource import DataSource
from pylinear.core.capabilities import (
    ALL_CAPABILITIES,
    CAPABILITY_FILE_BACKED,
    CAPABILITY_MATERIALIZED,
    CAPABILITY_REPEATABLE,
)
from pylinear.core.exceptions import DimensionError, ValidationError


class TestFromArrays:

    def test_numeric_and_label_columns(self):
        ds = DataSource.from_arrays(y=[1, 2, 3], g=['a', 'b', 'a'])
        assert ds.n_observations == 3
        assert len(ds) == 3
        assert ds['y'].dtype == np.float64
        assert ds['g'].tolist() == ['a', 'b', 'a']
        assert ds.is_numeric('y')
        assert not ds.is_numeric('g')

    def test_column_order_preserved(self):
        ds = DataSource.from_arrays(b=[1.0], a=[2.0])
        assert ds.columns == ('b', 'a')
        assert ds.keys() == frozenset({'a', 'b'})

    def test_declared_levels(self):
        ds = DataSource.from_arrays(g=['lo', 'hi'], levels={'g': ['lo', 'hi']})
        assert ds.levels('g') == ['lo', 'hi']
        assert ds.levels('missing') is None

    def test_ragged_columns_rejected(self):
        with pytest.raises(DimensionError, match="Inconsistent"):
            DataSource.from_arrays(y=[1, 2, 3], g=['a', 'b'])

    def test_2d_column_rejected(self):
        with pytest.raises(DimensionError):
            DataSource.from_arrays(y=np.zeros((3, 2)))

    def test_unknown_column_lists_available(self):
        ds = DataSource.from_arrays(y=[1.0])
        with pytest.raises(KeyError, match="Available"):
            ds['x']

    def test_capabilities(self):
        ds = DataSource.from_arrays(y=[1.0])
        assert ds.supports(CAPABILITY_MATERIALIZED)
        assert ds.supports(CAPABILITY_REPEATABLE)
        assert not ds.supports(CAPABILITY_FILE_BACKED)
        assert not ds.supports('no_such_capability')


class TestFromDataFrame:

    def test_categorical_levels_kept(self):
        df = pd.DataFrame({
            'y': [1.0, 2.0, 3.0],
            'genotype': pd.Categorical(['KO', 'WT', 'WT'], categories=['WT', 'KO']),
        })
        ds = DataSource.from_dataframe(df)
        assert ds.levels('genotype') == ['WT', 'KO']
        assert ds['genotype'].tolist() == ['KO', 'WT', 'WT']

    def test_integer_column_is_numeric(self):
        ds = DataSource.from_dataframe(pd.DataFrame({'dose': [0, 10, 20]}))
        assert ds.is_numeric('dose')
        np.testing.assert_array_equal(ds['dose'], [0.0, 10.0, 20.0])

    def test_bool_column_is_label(self):
        ds = DataSource.from_dataframe(pd.DataFrame({'flag': [True, False]}))
        assert not ds.is_numeric('flag')
        assert ds['flag'].tolist() == ['True', 'False']


class TestFromFile:

    def test_csv(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("y,g\n1.5,a\n2.5,b\n")
        ds = DataSource.from_file(path)
        assert ds.columns == ('y', 'g')
        np.testing.assert_array_equal(ds['y'], [1.5, 2.5])
        assert all(ds.supports(c) for c in ALL_CAPABILITIES)
        assert ds.metadata['source_path'] == str(path)

    def test_tsv(self, tmp_path):
        path = tmp_path / "data.tsv"
        path.write_text("y\tg\n1\ta\n2\tb\n")
        ds = DataSource.from_file(path)
        assert ds['g'].tolist() == ['a', 'b']

    def test_column_subset(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("y,g,z\n1,a,3\n2,b,4\n")
        ds = DataSource.from_file(path, columns=['y', 'g'])
        assert ds.keys() == frozenset({'y', 'g'})

    def test_unknown_suffix(self, tmp_path):
        with pytest.raises(ValidationError, match="Unknown file format"):
            DataSource.from_file(tmp_path / "data.parquet")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(ValidationError, match="not a readable delimited file"):
            DataSource.from_file(path)

    def test_ragged_rows(self, tmp_path):
        path = tmp_path / "ragged.csv"
        path.write_text("y,g\n1.5,a\n2.5,b,extra,fields\n")
        with pytest.raises(ValidationError, match="not a readable delimited file"):
            DataSource.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DataSource.from_file(tmp_path / "absent.csv")


class TestBuild:

    def test_passthrough(self):
        ds = DataSource.from_arrays(y=[1.0])
        assert DataSource.build(ds) is ds

    def test_dict(self):
        ds = DataSource.build({'y': [1.0, 2.0]})
        assert ds.n_observations == 2

    def test_kwargs(self):
        ds = DataSource.build(y=[1.0, 2.0], g=['a', 'b'])
        assert ds.keys() == frozenset({'y', 'g'})

    def test_dataframe(self):
        ds = DataSource.build(pd.DataFrame({'y': [1.0, 2.0]}))
        assert ds.metadata['source'] == 'dataframe'

    def test_unsupported_type(self):
        with pytest.raises(ValidationError, match="Cannot build DataSource"):
            DataSource.build(42)
