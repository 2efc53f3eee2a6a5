"""
Data loading module for the catchment attribute pipeline.

Reads the six semicolon-delimited attribute tables (hydrology, climate, soil,
vegetation, topography, geology) into DataFrames keyed by gauge_id.
"""
import csv
import pandas as pd
from pathlib import Path
from typing import Dict, Optional, Union
import logging

from catchment_flow import config
from catchment_flow.exceptions import ParseError

logger = logging.getLogger(__name__)

# Upper bound on a single field while counting fields; pandas has no such limit.
CSV_FIELD_SIZE_LIMIT = 2**31 - 1


def _check_field_counts(file_path: Path, sep: str) -> None:
    """
    Verify every data row has as many fields as the header.

    pandas pads short rows with NaN without complaint, so the field counts
    are checked on the raw rows first.

    Raises:
        ParseError: If a row's field count differs from the header's.
        csv.Error: If the raw rows cannot be tokenised.
    """
    previous_limit = csv.field_size_limit(CSV_FIELD_SIZE_LIMIT)
    try:
        with open(file_path, newline='', encoding='utf-8') as f:
            reader = csv.reader(f, delimiter=sep)
            header = next(reader, None)
            if not header:
                raise ParseError("file is empty or has no header row", name=file_path.name)

            n_fields = len(header)
            for row in reader:
                if not row:
                    continue
                if len(row) != n_fields:
                    raise ParseError(
                        f"line {reader.line_num} has {len(row)} fields, header has {n_fields}",
                        name=file_path.name
                    )
    finally:
        csv.field_size_limit(previous_limit)


def load_attribute_table(
    file_path: Union[str, Path],
    sep: str = None
) -> pd.DataFrame:
    """
    Load one attribute table from a delimited text file.

    The gauge_id column is read as text so identifiers with leading zeros
    join exactly across tables.

    Args:
        file_path: Path to the delimited file (header row required).
        sep: Field separator. If None, uses config.FIELD_SEPARATOR.

    Returns:
        DataFrame with one row per line of the file.

    Raises:
        ParseError: If the file is missing, empty, unparseable, or has rows
            whose field count differs from the header.

    Example:
        >>> soil = load_attribute_table("data/raw/soil.txt")
        >>> print(soil.columns[:3].tolist())
        ['gauge_id', 'soil_depth_pelletier', 'soil_depth_statsgo']
    """
    if sep is None:
        sep = config.FIELD_SEPARATOR
    file_path = Path(file_path)

    logger.info(f"Loading attribute table from: {file_path}")

    if not file_path.is_file():
        logger.error(f"File not found: {file_path}")
        raise ParseError("file not found", name=str(file_path))

    try:
        _check_field_counts(file_path, sep)
        df = pd.read_csv(
            file_path,
            sep=sep,
            dtype={config.KEY_COLUMN: str},
            skipinitialspace=True
        )
    except ParseError:
        logger.error(f"Inconsistent rows in: {file_path}")
        raise
    except (csv.Error, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.error(f"Could not parse {file_path}: {e}")
        raise ParseError(str(e), name=file_path.name) from e

    logger.info(f"Loaded {len(df):,} rows × {len(df.columns)} columns from {file_path.name}")

    return df


def load_attribute_tables(
    data_dir: Optional[Union[str, Path]] = None,
    file_names: Optional[Dict[str, str]] = None
) -> Dict[str, pd.DataFrame]:
    """
    Load all six catchment attribute tables.

    Args:
        data_dir: Directory containing the attribute files. If None, uses
            config.DATA_DIR.
        file_names: Mapping of table name -> file name. If None, uses
            config.ATTRIBUTE_FILES.

    Returns:
        Dict of table name -> DataFrame, in join order (hydro first).

    Raises:
        ParseError: If any file is missing or malformed.

    Example:
        >>> tables = load_attribute_tables("data/raw")
        >>> print(list(tables))
        ['hydro', 'climate', 'soil', 'vege', 'topo', 'geol']
    """
    if data_dir is None:
        data_dir = config.DATA_DIR
    if file_names is None:
        file_names = config.ATTRIBUTE_FILES
    data_dir = Path(data_dir)

    logger.info(f"Loading {len(file_names)} attribute tables from: {data_dir}")

    tables = {
        name: load_attribute_table(data_dir / file_name)
        for name, file_name in file_names.items()
    }

    logger.info(f"Loaded tables: {list(tables)}")

    return tables
