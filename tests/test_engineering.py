"""
Tests for the log / squared feature transformer.

Run with: pytest tests/test_engineering.py -v
"""
import pytest
import numpy as np
import pandas as pd

from catchment_flow.exceptions import TransformError
from catchment_flow.feature_pipeline.engineering import (
    create_features,
    create_log_features,
    create_squared_features,
    log10_plus_one,
    log_eligible_columns
)
from catchment_flow.feature_pipeline.joining import join_attribute_tables
from catchment_flow.feature_pipeline.schema import ColumnManifest, build_column_manifest


@pytest.fixture
def joined(attribute_tables):
    return join_attribute_tables(attribute_tables)


@pytest.fixture
def manifest(joined):
    return build_column_manifest(joined)


def _manifest_for(df):
    return ColumnManifest(
        key="gauge_id",
        response="q_mean",
        features=tuple(c for c in df.columns if c not in ("gauge_id", "q_mean")),
    )


class TestLogBranch:
    """Log features exist only for non-negative, fully populated columns."""

    def test_negative_column_not_eligible(self, joined, manifest):
        eligible = log_eligible_columns(joined, manifest)

        assert "temp_min" not in eligible
        assert "p_mean" in eligible

    def test_zero_values_are_eligible(self, joined, manifest):
        assert "frac_forest" in log_eligible_columns(joined, manifest)

    def test_log_values(self, joined, manifest):
        logged = create_log_features(joined, manifest).set_index("gauge_id")

        assert logged.loc["01", "elev_mean_log"] == pytest.approx(2.0)
        assert logged.loc["02", "elev_mean_log"] == pytest.approx(3.0)
        assert logged.loc["01", "p_mean_log"] == pytest.approx(np.log10(2.0))
        assert logged.loc["01", "frac_forest_log"] == pytest.approx(0.0)

    def test_key_and_response_not_transformed(self, joined, manifest):
        logged = create_log_features(joined, manifest)

        assert "q_mean_log" not in logged.columns
        assert "gauge_id_log" not in logged.columns

    def test_column_with_missing_value_not_eligible(self):
        df = pd.DataFrame({
            "gauge_id": ["01", "02"],
            "q_mean": [1.0, 2.0],
            "area": [10.0, np.nan],
            "empty": [np.nan, np.nan],
        })

        assert log_eligible_columns(df, _manifest_for(df)) == []

    def test_minus_one_becomes_missing_not_infinite(self):
        logged = log10_plus_one(pd.DataFrame({"x": [-1.0, 0.0, 9.0]}))

        assert np.isnan(logged["x"].iloc[0])
        assert not np.isinf(logged.to_numpy()).any()
        assert logged["x"].iloc[1:].tolist() == pytest.approx([0.0, 1.0])


class TestSquaredBranch:
    """Squared features exist for every numeric column."""

    def test_negative_values_squared(self, joined, manifest):
        squared = create_squared_features(joined, manifest).set_index("gauge_id")

        assert squared.loc["01", "temp_min_squared"] == pytest.approx(4.0)
        assert squared.loc["02", "temp_min_squared"] == pytest.approx(1.0)

    def test_every_feature_squared_rowwise(self, joined, manifest):
        squared = create_squared_features(joined, manifest)

        for col in manifest.features:
            np.testing.assert_allclose(squared[f"{col}_squared"], joined[col] ** 2)

    def test_degenerate_columns_kept(self):
        df = pd.DataFrame({
            "gauge_id": ["01", "02"],
            "q_mean": [1.0, 2.0],
            "constant": [3.0, 3.0],
            "empty": [np.nan, np.nan],
        })

        squared = create_squared_features(df, _manifest_for(df))

        assert squared["constant_squared"].tolist() == [9.0, 9.0]
        assert squared["empty_squared"].isna().all()


class TestCreateFeatures:
    """Base, log and squared sets placed side by side per row."""

    def test_column_count(self, joined, manifest):
        wide = create_features(joined, manifest)

        n_log = len(log_eligible_columns(joined, manifest))
        n_features = len(manifest.features)
        assert wide.shape[1] == 2 + n_features + n_log + n_features
        assert wide.shape[1] == 19

    def test_rows_preserved(self, joined, manifest):
        wide = create_features(joined, manifest)

        assert sorted(wide["gauge_id"]) == ["01", "02"]
        assert wide.set_index("gauge_id").loc["02", "q_mean"] == 3.0

    def test_no_log_counterpart_for_negative_column(self, joined, manifest):
        wide = create_features(joined, manifest)

        assert "temp_min_log" not in wide.columns
        assert "temp_min_squared" in wide.columns

    def test_input_not_mutated(self, joined, manifest):
        before = joined.copy()

        create_features(joined, manifest)

        pd.testing.assert_frame_equal(joined, before)

    def test_non_numeric_feature_raises(self, joined, manifest):
        broken = joined.assign(soil_depth=["deep", "shallow"])

        with pytest.raises(TransformError) as exc_info:
            create_features(broken, manifest)

        assert exc_info.value.name == "soil_depth"
        assert exc_info.value.stage == "transform"

    def test_repeated_gauge_id_keeps_row_count(self):
        df = pd.DataFrame({
            "gauge_id": ["01", "01"],
            "q_mean": [1.0, 2.0],
            "p_mean": [3.0, 4.0],
        })

        wide = create_features(df, _manifest_for(df))

        assert len(wide) == 2
        assert wide["q_mean"].tolist() == [1.0, 2.0]
        assert wide["p_mean_squared"].tolist() == [9.0, 16.0]
        assert wide["p_mean_log"].tolist() == pytest.approx([np.log10(4.0), np.log10(5.0)])
