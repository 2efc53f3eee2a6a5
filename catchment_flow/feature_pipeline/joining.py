"""
Table joining module for the catchment attribute pipeline.

Inner-joins the six attribute tables on gauge_id and keeps only the numeric
attribute columns.
"""
import pandas as pd
from typing import Dict, List
import logging

from catchment_flow import config
from catchment_flow.exceptions import JoinError
from catchment_flow.feature_pipeline.schema import is_numeric_column

logger = logging.getLogger(__name__)


def _warn_duplicate_keys(df: pd.DataFrame, table_name: str, key: str) -> None:
    """Log duplicated keys; the merge will cross-multiply their rows."""
    n_duplicated = df[key].duplicated(keep=False).sum()
    if n_duplicated:
        logger.warning(
            f"Table '{table_name}' has {n_duplicated:,} rows sharing a {key}; "
            f"the join will produce a cross-product for those ids"
        )


def _check_column_collisions(
    joined: pd.DataFrame,
    table: pd.DataFrame,
    table_name: str,
    key: str
) -> None:
    """Raise if a table repeats an attribute name already joined."""
    shared = sorted(set(joined.columns) & set(table.columns) - {key})
    if shared:
        raise JoinError(f"attribute columns already present in joined table: {shared}", name=table_name)


def select_numeric_columns(
    df: pd.DataFrame,
    keep: List[str]
) -> pd.DataFrame:
    """
    Keep numeric columns plus the columns named in ``keep``.

    Text and categorical attributes (e.g. dominant land cover, geological
    class) are discarded.

    Args:
        df: Joined DataFrame.
        keep: Columns retained regardless of dtype (key, response).

    Returns:
        DataFrame restricted to ``keep`` + numeric columns, order preserved.
    """
    selected = [c for c in df.columns if c in keep or is_numeric_column(df[c])]
    dropped = [c for c in df.columns if c not in selected]

    if dropped:
        logger.info(f"Dropped {len(dropped)} non-numeric columns: {dropped}")

    return df[selected].copy()


def join_attribute_tables(
    tables: Dict[str, pd.DataFrame],
    response: str = None,
    key: str = None
) -> pd.DataFrame:
    """
    Inner-join all attribute tables on the catchment key.

    Starts from the key and response columns of the hydrology table, then
    joins every other table in mapping order. Only catchments present in
    every table survive. Keys are expected to be unique within each table;
    duplicated keys produce a cross-product of matching rows.

    Args:
        tables: Dict of table name -> DataFrame from load_attribute_tables().
        response: Response column in the hydrology table. If None, uses
            config.RESPONSE_COLUMN.
        key: Join key. If None, uses config.KEY_COLUMN.

    Returns:
        Joined DataFrame with key, response and numeric attribute columns.

    Raises:
        JoinError: If a table is missing, lacks the key, the hydrology table
            lacks the response, attribute names collide, or no key is shared
            by all tables.

    Example:
        >>> joined = join_attribute_tables(load_attribute_tables())
        >>> print(joined.columns[:3].tolist())
        ['gauge_id', 'q_mean', 'p_mean']
    """
    if response is None:
        response = config.RESPONSE_COLUMN
    if key is None:
        key = config.KEY_COLUMN

    missing_tables = [name for name in config.ATTRIBUTE_FILES if name not in tables]
    if missing_tables:
        raise JoinError(f"required tables not loaded: {missing_tables}", name=missing_tables[0])

    for name, table in tables.items():
        if key not in table.columns:
            logger.error(f"Join key '{key}' not found in table '{name}'")
            raise JoinError(f"join key '{key}' not found", name=name)

    hydro = tables[config.HYDROLOGY_TABLE]
    if response not in hydro.columns:
        raise JoinError(f"response column '{response}' not found", name=config.HYDROLOGY_TABLE)

    _warn_duplicate_keys(hydro, config.HYDROLOGY_TABLE, key)
    joined = hydro[[key, response]].copy()

    for name, table in tables.items():
        if name == config.HYDROLOGY_TABLE:
            continue

        _warn_duplicate_keys(table, name, key)
        _check_column_collisions(joined, table, name, key)

        rows_before = len(joined)
        joined = joined.merge(table, on=key, how="inner")
        logger.info(
            f"Joined '{name}': {rows_before:,} → {len(joined):,} rows, "
            f"{len(joined.columns)} columns"
        )

    if joined.empty:
        logger.error("No catchment is present in every table")
        raise JoinError("no gauge_id shared by all tables", name=key)

    joined = select_numeric_columns(joined, keep=[key, response])

    logger.info(f"Joined table - Shape: {joined.shape}")

    return joined
