"""
Row filtering module for the catchment attribute pipeline.

Produces the final modelling table: rows without a response are dropped and
the join key is removed.
"""
import pandas as pd
import logging

from catchment_flow.exceptions import EmptyResultError
from catchment_flow.feature_pipeline.schema import ColumnManifest

logger = logging.getLogger(__name__)


def drop_missing_response(df: pd.DataFrame, manifest: ColumnManifest) -> pd.DataFrame:
    """
    Drop rows whose response value is missing.

    Args:
        df: Wide feature DataFrame.
        manifest: Column roles.

    Returns:
        DataFrame with the response guaranteed non-null.

    Example:
        >>> df_clean = drop_missing_response(features, manifest)
        >>> assert df_clean['q_mean'].notna().all()
    """
    rows_before = len(df)
    df_clean = df.dropna(subset=[manifest.response]).copy()
    rows_dropped = rows_before - len(df_clean)

    logger.info(
        f"Dropped {rows_dropped:,} rows with missing '{manifest.response}'"
    )

    return df_clean


def prepare_modelling_table(df: pd.DataFrame, manifest: ColumnManifest) -> pd.DataFrame:
    """
    Drop rows without a response and remove the key column.

    Steps:
    1. Drop rows with missing response
    2. Drop the key column
    3. Validate that rows remain

    Args:
        df: Wide feature DataFrame from create_features().
        manifest: Column roles.

    Returns:
        Final modelling table: response + all feature columns, one row per
        catchment with a known response.

    Raises:
        EmptyResultError: If no rows remain after filtering.

    Example:
        >>> table = prepare_modelling_table(features, manifest)
        >>> assert 'gauge_id' not in table.columns
    """
    df = drop_missing_response(df, manifest)
    df = df.drop(columns=[manifest.key]).reset_index(drop=True)

    if df.empty:
        logger.error(f"No rows left after dropping missing '{manifest.response}'")
        raise EmptyResultError("no rows with a known response remain", name=manifest.response)

    logger.info(f"Modelling table prepared - Shape: {df.shape}")

    return df
