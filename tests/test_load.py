"""
Tests for the attribute table loader.

Run with: pytest tests/test_load.py -v
"""
import pytest

from catchment_flow import config
from catchment_flow.exceptions import ParseError
from catchment_flow.feature_pipeline import load
from catchment_flow.feature_pipeline.load import load_attribute_table, load_attribute_tables


class TestLoadAttributeTables:
    """Loading the six semicolon-delimited files."""

    def test_loads_six_named_tables(self, data_dir):
        tables = load_attribute_tables(data_dir)

        assert list(tables) == list(config.ATTRIBUTE_FILES)
        assert len(tables) == 6

    def test_gauge_id_keeps_leading_zeros(self, data_dir):
        tables = load_attribute_tables(data_dir)

        assert tables["hydro"]["gauge_id"].tolist() == ["01", "02", "03"]

    def test_numeric_columns_parsed_as_numbers(self, data_dir):
        soil = load_attribute_table(data_dir / "soil.txt")

        assert soil["soil_depth"].tolist() == [0.5, 1.5]

    def test_missing_file_raises_parse_error(self, data_dir):
        (data_dir / "geol.txt").unlink()

        with pytest.raises(ParseError) as exc_info:
            load_attribute_tables(data_dir)

        assert "geol.txt" in str(exc_info.value)
        assert exc_info.value.stage == "load"


class TestMalformedFiles:
    """Malformed input is rejected instead of silently padded."""

    def test_row_with_extra_field(self, tmp_path):
        path = tmp_path / "soil.txt"
        path.write_text("gauge_id;soil_depth\n01;0.5\n02;1.5;9\n")

        with pytest.raises(ParseError, match="line 3 has 3 fields"):
            load_attribute_table(path)

    def test_row_with_missing_field(self, tmp_path):
        path = tmp_path / "soil.txt"
        path.write_text("gauge_id;soil_depth;soil_porosity\n01;0.5;0.4\n02;1.5\n")

        with pytest.raises(ParseError) as exc_info:
            load_attribute_table(path)

        assert exc_info.value.name == "soil.txt"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "topo.txt"
        path.write_text("")

        with pytest.raises(ParseError, match="empty"):
            load_attribute_table(path)

    def test_blank_lines_are_ignored(self, tmp_path):
        path = tmp_path / "topo.txt"
        path.write_text("gauge_id;elev_mean\n01;100\n\n02;200\n")

        df = load_attribute_table(path)

        assert len(df) == 2

    def test_long_text_field_loads(self, tmp_path):
        path = tmp_path / "geol.txt"
        path.write_text(f"gauge_id;geol_notes;geol_porosity\n01;{'x' * 200_000};0.1\n")

        df = load_attribute_table(path)

        assert len(df["geol_notes"].iloc[0]) == 200_000
        assert df["geol_porosity"].tolist() == [0.1]

    def test_tokenizer_error_raises_parse_error(self, tmp_path, monkeypatch):
        monkeypatch.setattr(load, "CSV_FIELD_SIZE_LIMIT", 10)
        path = tmp_path / "geol.txt"
        path.write_text(f"gauge_id;geol_notes\n01;{'x' * 50}\n")

        with pytest.raises(ParseError) as exc_info:
            load_attribute_table(path)

        assert exc_info.value.stage == "load"
        assert exc_info.value.name == "geol.txt"
