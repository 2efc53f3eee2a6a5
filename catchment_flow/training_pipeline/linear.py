"""
Linear regression of mean streamflow on catchment attributes.

Ordinary least squares via statsmodels, with forward stepwise predictor
selection by p-value.
"""
import pandas as pd
import numpy as np
import logging
from typing import Any, Dict, List, Sequence

import statsmodels.api as sm

from catchment_flow import config
from catchment_flow.training_pipeline.split import complete_cases

logger = logging.getLogger(__name__)


def _fit_ols(data: pd.DataFrame, response: str, predictors: Sequence[str]):
    X = sm.add_constant(data[list(predictors)], has_constant='add')
    return sm.OLS(data[response], X).fit()


def fit_linear_model(
    df: pd.DataFrame,
    response: str,
    predictors: Sequence[str]
):
    """
    Fit an OLS regression with an intercept.

    Rows with a missing value in the response or any predictor are dropped
    before fitting.

    Args:
        df: Training data.
        response: Response column name.
        predictors: Predictor column names.

    Returns:
        Fitted statsmodels RegressionResults.

    Example:
        >>> results = fit_linear_model(train, 'q_mean', ['p_mean', 'aridity'])
        >>> print(f"R²: {results.rsquared:.3f}")
        R²: 0.874
    """
    predictors = list(predictors)
    logger.info(f"Fitting OLS on {len(predictors)} predictors...")

    data = complete_cases(df, [response, *predictors])
    results = _fit_ols(data, response, predictors)

    logger.info(
        f"✓ OLS fitted: n = {int(results.nobs):,}, "
        f"R² = {results.rsquared:.4f}, adj. R² = {results.rsquared_adj:.4f}"
    )

    return results


def summarize_linear_model(results) -> Dict[str, Any]:
    """
    Collect coefficients, p-values and goodness of fit.

    Args:
        results: Fitted statsmodels RegressionResults.

    Returns:
        Dict with 'coefficients' and 'p_values' (Series indexed by term,
        including 'const'), 'r_squared', 'adj_r_squared' and 'n_obs'.
    """
    return {
        'coefficients': results.params,
        'p_values': results.pvalues,
        'r_squared': float(results.rsquared),
        'adj_r_squared': float(results.rsquared_adj),
        'n_obs': int(results.nobs),
    }


def forward_select_predictors(
    df: pd.DataFrame,
    response: str,
    candidates: Sequence[str],
    p_enter: float = None
) -> List[str]:
    """
    Forward stepwise selection of predictors by p-value.

    Starting from the intercept-only model, each step refits the model once
    per remaining candidate and adds the candidate with the smallest p-value,
    as long as that p-value is below ``p_enter``. All steps use the same
    complete-case rows.

    Args:
        df: Training data.
        response: Response column name.
        candidates: Full predictor set.
        p_enter: Entry threshold. If None, uses config.STEPWISE_P_ENTER.

    Returns:
        Selected predictors in order of entry (most significant first).

    Example:
        >>> forward_select_predictors(train, 'q_mean', predictors)
        ['p_mean', 'aridity_log', 'frac_snow', ...]
    """
    if p_enter is None:
        p_enter = config.STEPWISE_P_ENTER

    candidates = list(candidates)
    data = complete_cases(df, [response, *candidates])

    logger.info(
        f"Forward selection over {len(candidates)} candidates "
        f"(p_enter = {p_enter}, n = {len(data):,})"
    )

    selected: List[str] = []
    remaining = list(candidates)

    while remaining:
        p_values = {}
        for candidate in remaining:
            results = _fit_ols(data, response, [*selected, candidate])
            p_value = results.pvalues[candidate]
            if np.isfinite(p_value):
                p_values[candidate] = p_value

        if not p_values:
            break

        best = min(p_values, key=p_values.get)
        if p_values[best] >= p_enter:
            break

        selected.append(best)
        remaining.remove(best)
        logger.info(f"  Step {len(selected)}: added {best} (p = {p_values[best]:.3g})")

    logger.info(f"✓ Forward selection kept {len(selected)} of {len(candidates)} predictors")

    return selected
