"""
Column-role manifest for the joined attribute table.

Schema introspection runs once after the join; later stages read column roles
from the manifest instead of re-selecting "all numeric columns" themselves.
"""
from dataclasses import dataclass
from typing import Tuple
import logging

import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from catchment_flow import config
from catchment_flow.exceptions import TransformError

logger = logging.getLogger(__name__)


def is_numeric_column(series: pd.Series) -> bool:
    """True for integer and float columns; booleans and text are excluded."""
    return is_numeric_dtype(series) and not is_bool_dtype(series)


@dataclass(frozen=True)
class ColumnManifest:
    """
    Roles of the columns in the joined table.

    Attributes:
        key: Catchment identifier column (join key).
        response: Column being predicted.
        features: Numeric attribute columns, in table order.
    """
    key: str
    response: str
    features: Tuple[str, ...]


def build_column_manifest(
    joined: pd.DataFrame,
    key: str = None,
    response: str = None
) -> ColumnManifest:
    """
    Inspect the joined table and assign a role to every column.

    Args:
        joined: Output of join_attribute_tables().
        key: Key column name. If None, uses config.KEY_COLUMN.
        response: Response column name. If None, uses config.RESPONSE_COLUMN.

    Returns:
        ColumnManifest with key, response and numeric feature columns.

    Raises:
        TransformError: If the response column is missing or not numeric.
    """
    if key is None:
        key = config.KEY_COLUMN
    if response is None:
        response = config.RESPONSE_COLUMN

    if response not in joined.columns:
        raise TransformError("response column missing from joined table", name=response)
    if not is_numeric_column(joined[response]):
        raise TransformError(
            f"response column has non-numeric dtype {joined[response].dtype}",
            name=response
        )

    features = tuple(
        col for col in joined.columns
        if col not in (key, response) and is_numeric_column(joined[col])
    )

    logger.info(
        f"Column manifest: key='{key}', response='{response}', "
        f"{len(features)} feature columns"
    )

    return ColumnManifest(key=key, response=response, features=features)
