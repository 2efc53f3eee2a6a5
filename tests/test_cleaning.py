"""
Tests for the row filter that produces the modelling table.

Run with: pytest tests/test_cleaning.py -v
"""
import pytest
import numpy as np
import pandas as pd

from catchment_flow.exceptions import EmptyResultError
from catchment_flow.feature_pipeline.cleaning import prepare_modelling_table
from catchment_flow.feature_pipeline.schema import ColumnManifest


@pytest.fixture
def manifest():
    return ColumnManifest(key="gauge_id", response="q_mean", features=("p_mean",))


@pytest.fixture
def wide():
    return pd.DataFrame({
        "gauge_id": ["01", "02", "03", "04"],
        "q_mean": [1.0, np.nan, 2.5, 0.7],
        "p_mean": [2.0, 3.0, np.nan, 1.0],
    })


class TestPrepareModellingTable:

    def test_rows_with_missing_response_dropped(self, wide, manifest):
        table = prepare_modelling_table(wide, manifest)

        assert table["q_mean"].notna().all()
        assert len(table) == 3
        assert len(table) <= len(wide)

    def test_missing_features_are_kept(self, wide, manifest):
        table = prepare_modelling_table(wide, manifest)

        assert table["p_mean"].isna().sum() == 1

    def test_key_dropped(self, wide, manifest):
        table = prepare_modelling_table(wide, manifest)

        assert "gauge_id" not in table.columns
        assert table.columns.tolist() == ["q_mean", "p_mean"]

    def test_all_missing_response_raises(self, wide, manifest):
        wide["q_mean"] = np.nan

        with pytest.raises(EmptyResultError) as exc_info:
            prepare_modelling_table(wide, manifest)

        assert exc_info.value.stage == "filter"
        assert exc_info.value.name == "q_mean"
