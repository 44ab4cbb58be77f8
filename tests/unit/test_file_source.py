"""Tests for the file-backed row source."""
import pytest

from payroll_sync.errors import SourceFormatError, SourceNotFoundError, SourceUnavailableError
from payroll_sync.models.sync import EntityKind
from payroll_sync.sources.files import FileRowSource, read_rows


def csv_source(fixtures_dir):
    return FileRowSource(
        fixtures_dir,
        {EntityKind.EMPLOYEE: "employees.csv", EntityKind.SHIFT: "shifts.csv"},
    )


class TestFileRowSource:
    @pytest.mark.asyncio
    async def test_reads_csv_rows_in_order(self, fixtures_dir):
        rows = await csv_source(fixtures_dir).fetch_rows(EntityKind.EMPLOYEE)
        assert len(rows) == 6
        assert rows[0]["external_id"] == "E-1001"
        assert rows[4]["external_id"] == ""
        assert rows[-1]["external_id"] == "E-1005"

    @pytest.mark.asyncio
    async def test_csv_values_are_strings(self, fixtures_dir):
        rows = await csv_source(fixtures_dir).fetch_rows(EntityKind.EMPLOYEE)
        assert rows[0]["hourly_rate"] == "25.00"
        assert rows[0]["active"] == "true"
        assert rows[1]["email"] == ""

    @pytest.mark.asyncio
    async def test_reads_shift_file_for_shift_kind(self, fixtures_dir):
        rows = await csv_source(fixtures_dir).fetch_rows(EntityKind.SHIFT)
        assert rows[0]["external_id"] == "S-5001"
        assert set(rows[0]) == {
            "external_id", "employee_external_id", "start_at", "end_at", "break_minutes",
        }

    @pytest.mark.asyncio
    async def test_reads_json_rows(self, fixtures_dir):
        source = FileRowSource(fixtures_dir, {EntityKind.EMPLOYEE: "employees.json"})
        rows = await source.fetch_rows(EntityKind.EMPLOYEE)
        assert rows[0]["hourly_rate"] == 20.5
        assert rows[1]["external_id"] == 3002
        assert rows[1]["first_name"] is None

    @pytest.mark.asyncio
    async def test_missing_file_raises_not_found(self, tmp_path):
        source = FileRowSource(tmp_path, {EntityKind.EMPLOYEE: "employees.csv"})
        with pytest.raises(SourceNotFoundError, match="File not found"):
            await source.fetch_rows(EntityKind.EMPLOYEE)

    @pytest.mark.asyncio
    async def test_not_found_is_source_unavailable(self, tmp_path):
        source = FileRowSource(tmp_path, {EntityKind.SHIFT: "shifts.csv"})
        with pytest.raises(SourceUnavailableError):
            await source.fetch_rows(EntityKind.SHIFT)


class TestReadRows:
    def test_json_object_rejected(self, fixtures_dir):
        with pytest.raises(SourceFormatError, match="JSON array"):
            read_rows(fixtures_dir / "not_a_list.json")

    def test_invalid_json_rejected(self, tmp_path):
        path = tmp_path / "rows.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(SourceFormatError):
            read_rows(path)

    def test_bom_stripped_from_header(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_bytes("\ufeffexternal_id,first_name\nE-1,Ana\n".encode("utf-8"))
        assert read_rows(path) == [{"external_id": "E-1", "first_name": "Ana"}]

    def test_short_and_long_rows(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_text("a,b\n1\n2,3,4\n", encoding="utf-8")
        assert read_rows(path) == [{"a": "1", "b": None}, {"a": "2", "b": "3"}]

    def test_empty_csv_has_no_rows(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_text("external_id,first_name\n", encoding="utf-8")
        assert read_rows(path) == []

    def test_undecodable_file_rejected(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_bytes(b"external_id\n\xff\xfe\xfa\n")
        with pytest.raises(SourceFormatError):
            read_rows(path)
