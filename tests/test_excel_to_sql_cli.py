"""Tests for the Excel to SQL command line and HTTP interfaces."""

import base64
import io

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient
from openpyxl import Workbook

from tools.excel_to_sql.cli import main
from tools.excel_to_sql.converter import ScriptGenerator
from tools.excel_to_sql.server import app


def workbook_bytes(*rows) -> bytes:
    """Build an xlsx workbook in memory."""
    workbook = Workbook()
    for row in rows:
        workbook.active.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def people_xlsx(tmp_path):
    """Workbook file with an id and a name column."""
    path = tmp_path / "people.xlsx"
    path.write_bytes(workbook_bytes(("id", "name"), (1, "Alice"), (2, "O'Brien")))
    return path


@pytest.fixture
def client():
    return TestClient(app)


class TestCli:
    """Test the excel2sql command."""

    def test_convert_to_stdout(self, people_xlsx):
        """Test single-line script on stdout."""
        result = CliRunner().invoke(main, [str(people_xlsx)])

        assert result.exit_code == 0
        assert "CREATE TABLE ExcelTable (    id INT,    name VARCHAR(512));" in result.output
        assert "VALUES ('2', 'O''Brien');" in result.output

    def test_convert_to_file(self, people_xlsx, tmp_path):
        """Test writing the script to a file."""
        output = tmp_path / "people.sql"

        result = CliRunner().invoke(main, [str(people_xlsx), "--table", "people", "--output", str(output)])

        assert result.exit_code == 0
        sql = output.read_text(encoding="utf-8")
        assert sql.count("\n") == 1
        assert sql.startswith("CREATE TABLE people (")

    def test_multiline(self, people_xlsx, tmp_path):
        """Test one statement per line."""
        output = tmp_path / "people.sql"

        result = CliRunner().invoke(main, [str(people_xlsx), "--multiline", "-o", str(output)])

        assert result.exit_code == 0
        lines = output.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        assert lines[1] == "INSERT INTO ExcelTable (id, name) VALUES ('1', 'Alice');"

    def test_show_schema(self, people_xlsx, tmp_path):
        """Test that schema display does not change the script."""
        output = tmp_path / "people.sql"

        result = CliRunner().invoke(main, [str(people_xlsx), "--show-schema", "-o", str(output)])

        assert result.exit_code == 0
        assert "id INT" in output.read_text(encoding="utf-8")

    def test_show_schema_infers_once(self, people_xlsx, tmp_path, monkeypatch):
        """Test that the displayed schema is reused for the script."""
        calls = []
        original = ScriptGenerator.infer_schema

        def counting_infer_schema(self, table):
            calls.append(table)
            return original(self, table)

        monkeypatch.setattr(ScriptGenerator, "infer_schema", counting_infer_schema)
        output = tmp_path / "people.sql"

        result = CliRunner().invoke(main, [str(people_xlsx), "--show-schema", "-o", str(output)])

        assert result.exit_code == 0
        assert len(calls) == 1

    def test_csv_input(self, tmp_path):
        """Test CSV file input."""
        path = tmp_path / "prices.csv"
        path.write_text("sku,price\nA1,9.99\nB2,\n", encoding="utf-8")

        result = CliRunner().invoke(main, [str(path)])

        assert result.exit_code == 0
        assert "price VARCHAR(512)" in result.output
        assert "VALUES ('B2', NULL);" in result.output

    def test_empty_workbook_fails(self, tmp_path):
        """Test that a workbook without columns exits with status 1."""
        path = tmp_path / "empty.xlsx"
        path.write_bytes(workbook_bytes())

        result = CliRunner().invoke(main, [str(path)])

        assert result.exit_code == 1
        assert "CREATE TABLE" not in result.output

    def test_unsupported_file_fails(self, tmp_path):
        """Test that unknown extensions exit with status 1."""
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")

        result = CliRunner().invoke(main, [str(path)])

        assert result.exit_code == 1


class TestServer:
    """Test the /UploadExcel endpoint."""

    def test_root(self, client):
        """Test status endpoint."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_upload_excel(self, client):
        """Test successful conversion."""
        content = base64.b64encode(workbook_bytes(("id", "name"), (1, "Alice"))).decode()

        response = client.post("/UploadExcel", json={"File": content, "FileExtension": "xlsx"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == (
            "CREATE TABLE ExcelTable (    id INT,    name VARCHAR(512)); "
            "INSERT INTO ExcelTable (id, name) VALUES ('1', 'Alice');"
        )

    def test_upload_snake_case_and_table_name(self, client):
        """Test alternative field names and custom table."""
        content = base64.b64encode(b"a\n1\n").decode()

        response = client.post(
            "/UploadExcel",
            json={"file": content, "file_extension": "csv", "table_name": "t"},
        )

        assert response.status_code == 200
        assert response.text == "CREATE TABLE t (    a INT); INSERT INTO t (a) VALUES ('1');"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"File": "", "FileExtension": "xlsx"},
            {"File": "abcd", "FileExtension": ""},
        ],
    )
    def test_upload_invalid_file(self, client, body):
        """Test missing file content or extension."""
        response = client.post("/UploadExcel", json=body)

        assert response.status_code == 400
        assert response.text == "Invalid File"

    def test_upload_bad_base64(self, client):
        """Test undecodable content."""
        response = client.post("/UploadExcel", json={"File": "***", "FileExtension": "xlsx"})

        assert response.status_code == 400
        assert "base64" in response.text

    def test_upload_zero_columns(self, client):
        """Test that an empty sheet is reported, not converted."""
        content = base64.b64encode(workbook_bytes()).decode()

        response = client.post("/UploadExcel", json={"File": content, "FileExtension": "xlsx"})

        assert response.status_code == 400
        assert "no columns" in response.text

    def test_upload_unexpected_error(self, client, monkeypatch):
        """Test that unexpected failures map to 500."""

        def boom(data, extension):
            raise RuntimeError("boom")

        monkeypatch.setattr("tools.excel_to_sql.server.load_table", boom)
        content = base64.b64encode(b"a\n1\n").decode()

        response = client.post("/UploadExcel", json={"File": content, "FileExtension": "csv"})

        assert response.status_code == 500
        assert response.text == "Error processing the file"

    def test_upload_long_numeric_value(self, client):
        """Test that a huge digit string converts instead of being rejected."""
        value = "7" * 5000
        content = base64.b64encode(f"code\n{value}\n".encode()).decode()

        response = client.post("/UploadExcel", json={"File": content, "FileExtension": "csv"})

        assert response.status_code == 200
        assert response.text.startswith("CREATE TABLE ExcelTable (    code VARCHAR(10));")
