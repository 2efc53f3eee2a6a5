"""
Feature engineering module for the catchment attribute pipeline.

Derives log and squared variants of the numeric attributes and merges them
with the base table. Derived columns are named by suffix:
``<attribute>_log`` and ``<attribute>_squared``.
"""
import pandas as pd
import numpy as np
from typing import List
import logging

from catchment_flow import config
from catchment_flow.exceptions import TransformError
from catchment_flow.feature_pipeline.schema import ColumnManifest, is_numeric_column

logger = logging.getLogger(__name__)


def _check_numeric_features(df: pd.DataFrame, manifest: ColumnManifest) -> None:
    """Raise TransformError for the first feature column that is absent or non-numeric."""
    for col in manifest.features:
        if col not in df.columns:
            raise TransformError("feature column missing from table", name=col)
        if not is_numeric_column(df[col]):
            raise TransformError(f"expected numeric values, found dtype {df[col].dtype}", name=col)


def log_eligible_columns(df: pd.DataFrame, manifest: ColumnManifest) -> List[str]:
    """
    Select feature columns that can be log-transformed.

    A column is eligible only if every value is non-missing and >= 0.
    All-missing columns and columns with any negative value are left out.

    Args:
        df: Joined DataFrame.
        manifest: Column roles.

    Returns:
        Eligible column names, in manifest order.

    Example:
        >>> log_eligible_columns(joined, manifest)
        ['p_mean', 'pet_mean', 'aridity', ...]
    """
    eligible = [
        col for col in manifest.features
        if df[col].notna().all() and (df[col] >= 0).all()
    ]

    excluded = [col for col in manifest.features if col not in eligible]
    if excluded:
        logger.info(
            f"{len(excluded)} columns not log-eligible (negative or missing values): {excluded}"
        )

    return eligible


def log10_plus_one(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Apply log10(x + 1) elementwise; infinite results become missing.

    Args:
        frame: Numeric DataFrame.

    Returns:
        New DataFrame of the same shape. x = -1 yields NaN, never -inf.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        logged = np.log10(frame.astype(float) + 1)

    return logged.replace([np.inf, -np.inf], np.nan)


def create_log_features(df: pd.DataFrame, manifest: ColumnManifest) -> pd.DataFrame:
    """
    Create ``<column>_log`` features for every log-eligible column.

    Args:
        df: Joined DataFrame.
        manifest: Column roles.

    Returns:
        DataFrame with the key column plus one ``_log`` column per eligible
        source column.
    """
    eligible = log_eligible_columns(df, manifest)

    logged = log10_plus_one(df[eligible])
    n_infinite_replaced = int(logged.isna().sum().sum() - df[eligible].isna().sum().sum())
    if n_infinite_replaced:
        logger.info(f"Replaced {n_infinite_replaced:,} infinite log values with missing")

    logged = logged.rename(columns=lambda c: f"{c}{config.LOG_SUFFIX}")
    logged.insert(0, manifest.key, df[manifest.key].values)

    logger.info(f"Created {len(eligible)} log features")

    return logged


def create_squared_features(df: pd.DataFrame, manifest: ColumnManifest) -> pd.DataFrame:
    """
    Create ``<column>_squared`` features for every feature column.

    No eligibility filter: negative, constant and all-missing columns are
    squared too (the latter two give degenerate columns, which are kept).

    Args:
        df: Joined DataFrame.
        manifest: Column roles.

    Returns:
        DataFrame with the key column plus one ``_squared`` column per
        feature.
    """
    features = list(manifest.features)

    squared = (df[features].astype(float) ** 2).rename(
        columns=lambda c: f"{c}{config.SQUARED_SUFFIX}"
    )
    squared.insert(0, manifest.key, df[manifest.key].values)

    logger.info(f"Created {len(features)} squared features")

    return squared


def create_features(df: pd.DataFrame, manifest: ColumnManifest) -> pd.DataFrame:
    """
    Execute full feature engineering pipeline.

    Steps:
    1. Validate that every feature column is numeric
    2. Log branch (eligible columns only)
    3. Squared branch (all feature columns)
    4. Place base, log and squared columns side by side, row by row

    The key and response columns are never transformed; they come through
    unchanged from the base table. Each output row is built from one input
    row, so a repeated gauge_id keeps its row count and every derived value
    stays paired with the base values it came from.

    Args:
        df: Joined DataFrame from join_attribute_tables().
        manifest: Column roles from build_column_manifest().

    Returns:
        Wide DataFrame: key, response, base features, ``_log`` and
        ``_squared`` columns.

    Raises:
        TransformError: If a feature column is missing or non-numeric.

    Example:
        >>> features = create_features(joined, manifest)
        >>> print('p_mean_squared' in features.columns)
        True
    """
    logger.info("Starting feature engineering pipeline")

    _check_numeric_features(df, manifest)

    base = df[[manifest.key, manifest.response, *manifest.features]].copy()
    log_features = create_log_features(df, manifest)
    squared_features = create_squared_features(df, manifest)

    # All three tables share df's rows, so align on the index, not the key.
    wide = pd.concat(
        [
            base,
            log_features.drop(columns=manifest.key),
            squared_features.drop(columns=manifest.key)
        ],
        axis=1
    )

    logger.info(f"Feature engineering complete. Shape: {wide.shape}")

    return wide
