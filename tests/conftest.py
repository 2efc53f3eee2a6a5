"""
Shared fixtures: small synthetic catchment attribute tables.

Three catchments ('01', '02', '03'); '03' is absent from the soil table, so
an inner join keeps only '01' and '02'.
"""
import pytest
import numpy as np
import pandas as pd

from catchment_flow import config


def write_tables(directory, tables):
    """Write each table to ``<directory>/<config file name>`` as ';'-delimited text."""
    for name, df in tables.items():
        df.to_csv(directory / config.ATTRIBUTE_FILES[name], sep=";", index=False)
    return directory


@pytest.fixture
def attribute_tables():
    """Six raw attribute tables as read from disk (gauge_id as text)."""
    return {
        "hydro": pd.DataFrame({
            "gauge_id": ["01", "02", "03"],
            "q_mean": [1.5, 3.0, 0.4],
            "runoff_ratio": [0.3, 0.5, 0.1],
        }),
        "climate": pd.DataFrame({
            "gauge_id": ["01", "02", "03"],
            "p_mean": [1.0, 3.0, 9.0],
            "temp_min": [-2.0, 1.0, 4.0],
            "high_prec_timing": ["djf", "son", "jja"],
        }),
        "soil": pd.DataFrame({
            "gauge_id": ["01", "02"],
            "soil_depth": [0.5, 1.5],
        }),
        "vege": pd.DataFrame({
            "gauge_id": ["01", "02", "03"],
            "frac_forest": [0.0, 0.9, 0.2],
            "dom_land_cover": ["Grassland", "Forest", "Shrubland"],
        }),
        "topo": pd.DataFrame({
            "gauge_id": ["01", "02", "03"],
            "elev_mean": [99.0, 999.0, 50.0],
        }),
        "geol": pd.DataFrame({
            "gauge_id": ["01", "02", "03"],
            "geol_porosity": [0.1, 0.2, 0.3],
            "geol_1st_class": ["ss", "pa", "mt"],
        }),
    }


@pytest.fixture
def data_dir(tmp_path, attribute_tables):
    """Directory holding the six synthetic attribute files."""
    return write_tables(tmp_path, attribute_tables)


@pytest.fixture
def large_data_dir(tmp_path):
    """Sixty catchments whose mean flow depends mostly on precipitation."""
    rng = np.random.RandomState(0)
    n = 60
    ids = [f"{i:08d}" for i in range(1, n + 1)]
    p_mean = rng.uniform(0.5, 8.0, n)
    temp_min = rng.normal(0.0, 4.0, n)

    tables = {
        "hydro": pd.DataFrame({
            "gauge_id": ids,
            "q_mean": 0.6 * p_mean + rng.normal(0.0, 0.2, n),
        }),
        "climate": pd.DataFrame({"gauge_id": ids, "p_mean": p_mean, "temp_min": temp_min}),
        "soil": pd.DataFrame({"gauge_id": ids, "soil_depth": rng.uniform(0.1, 2.0, n)}),
        "vege": pd.DataFrame({"gauge_id": ids, "frac_forest": rng.uniform(0.0, 1.0, n)}),
        "topo": pd.DataFrame({"gauge_id": ids, "elev_mean": rng.uniform(10.0, 3000.0, n)}),
        "geol": pd.DataFrame({"gauge_id": ids, "geol_porosity": rng.uniform(0.01, 0.3, n)}),
    }
    return write_tables(tmp_path, tables)
