"""
Dataset preparation for the model stage.

Train/test partitioning, quantile binning of the response, and complete-case
design matrices shared by the regression, tree and forest models.
"""
import pandas as pd
import numpy as np
import logging
from typing import List, Optional, Tuple, Union

from catchment_flow import config

logger = logging.getLogger(__name__)

RandomSource = Optional[Union[int, np.random.RandomState]]


def split_train_test(
    df: pd.DataFrame,
    train_fraction: float = None,
    random_state: RandomSource = None
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Draw a random training sample and use every other row as the test set.

    The training set is a draw of ``train_fraction`` of the rows without
    replacement. The test set holds the rows whose full content does not
    occur in the training set, so rows are matched by identity of all their
    values, not by position or key. Exact duplicate rows therefore end up
    together: if one copy is drawn for training, no copy is used for testing.

    Args:
        df: Modelling table.
        train_fraction: Share of rows drawn for training. If None, uses
            config.TRAIN_FRACTION.
        random_state: Seed or RandomState. None gives an unseeded draw.

    Returns:
        Tuple of (train, test), both keeping the original index.

    Example:
        >>> train, test = split_train_test(table, random_state=1)
        >>> print(len(train) / len(table))
        0.7
    """
    if train_fraction is None:
        train_fraction = config.TRAIN_FRACTION

    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be between 0 and 1, got {train_fraction}")

    train = df.sample(frac=train_fraction, replace=False, random_state=random_state)

    row_hashes = pd.util.hash_pandas_object(df, index=False)
    train_hashes = pd.util.hash_pandas_object(train, index=False)
    test = df[~row_hashes.isin(train_hashes)]

    logger.info(f"Train/test split complete:")
    logger.info(f"  Train: {len(train):,} rows ({len(train) / len(df) * 100:.1f}%)")
    logger.info(f"  Test: {len(test):,} rows")

    return train, test


def bin_response(y: pd.Series, n_bins: int = None) -> pd.Series:
    """
    Discretise the response into quantile bins labelled 1..n.

    Bins are equal-frequency (quartiles by default). Repeated quantile edges
    are merged, so fewer than ``n_bins`` classes can come back for heavily
    tied data; a constant response gives the single class 1.

    Args:
        y: Continuous response.
        n_bins: Number of quantile bins. If None, uses config.N_RESPONSE_BINS.

    Returns:
        Integer class labels aligned with ``y``'s index.

    Example:
        >>> bins = bin_response(table['q_mean'])
        >>> print(bins.value_counts().sort_index().tolist())
        [168, 168, 167, 168]
    """
    if n_bins is None:
        n_bins = config.N_RESPONSE_BINS

    if y.nunique() < 2:
        logger.warning(f"'{y.name}' has a single distinct value; all rows fall in class 1")
        return pd.Series(1, index=y.index, name=f"{y.name}_bin", dtype=int)

    binned = pd.qcut(y, q=n_bins, labels=False, duplicates='drop') + 1
    binned = binned.astype(int).rename(f"{y.name}_bin")

    logger.info(
        f"Binned '{y.name}' into {binned.nunique()} quantile classes: "
        f"{binned.value_counts().sort_index().to_dict()}"
    )

    return binned


def usable_predictors(df: pd.DataFrame, response: str) -> List[str]:
    """
    List predictor columns, leaving out those with no observed value.

    Degenerate all-missing columns (e.g. the squared variant of an empty
    attribute) would otherwise remove every row from a complete-case fit.
    """
    predictors = [c for c in df.columns if c != response]
    empty = [c for c in predictors if df[c].isna().all()]

    if empty:
        logger.warning(f"Ignoring {len(empty)} all-missing predictor columns: {empty}")

    return [c for c in predictors if c not in empty]


def complete_cases(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """
    Keep rows with no missing value in ``columns``.

    Args:
        df: Input DataFrame.
        columns: Columns that must be populated.

    Returns:
        Filtered copy restricted to ``columns``.
    """
    rows_before = len(df)
    df_complete = df[columns].dropna()
    rows_dropped = rows_before - len(df_complete)

    if rows_dropped:
        logger.info(f"Dropped {rows_dropped:,} incomplete rows before fitting")

    return df_complete


def split_features_target(
    df: pd.DataFrame,
    response: str,
    predictors: Optional[List[str]] = None
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Separate the complete-case feature matrix (X) and response (y).

    Args:
        df: Modelling table or one of its splits.
        response: Response column name.
        predictors: Predictor columns. If None, uses usable_predictors().

    Returns:
        Tuple of (X, y) sharing the same index.
    """
    if predictors is None:
        predictors = usable_predictors(df, response)

    data = complete_cases(df, [response, *predictors])
    X = data[predictors]
    y = data[response]

    logger.info(f"Data prepared: X shape = {X.shape}, y shape = {y.shape}")

    return X, y
