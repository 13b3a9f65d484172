"""HTTP upload service for Excel to SQL Converter."""

import sys
from typing import Optional

import click
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from shared.cli import error, info
from shared.logger import get_logger, setup_logger

from .converter import DEFAULT_TABLE_NAME, ScriptGenerator
from .reader import decode_upload, load_table
from .table import ExcelToSQLError

logger = get_logger(__name__)

VERSION = "0.1.0"


class UploadRequest(BaseModel):
    """Upload body: base64 file content and its extension."""

    model_config = ConfigDict(populate_by_name=True)

    file: Optional[str] = Field(default=None, alias="File")
    file_extension: Optional[str] = Field(default=None, alias="FileExtension")
    table_name: Optional[str] = Field(default=None, alias="TableName")


app = FastAPI(
    title="Excel to SQL",
    description="Convert spreadsheet uploads to CREATE TABLE + INSERT scripts",
    version=VERSION,
)


@app.get("/")
async def root():
    """Service status."""
    return JSONResponse(content={"status": "running", "service": "excel2sql", "version": VERSION})


@app.post("/UploadExcel")
def upload_excel(model: UploadRequest):
    """Convert an uploaded workbook to a single-line SQL script."""
    if not model.file or not model.file_extension:
        return PlainTextResponse("Invalid File", status_code=400)

    try:
        data = decode_upload(model.file)
        table = load_table(data, model.file_extension)
        generator = ScriptGenerator(table_name=model.table_name or DEFAULT_TABLE_NAME)
        sql = generator.render(table)

    except (ExcelToSQLError, ValueError) as e:
        logger.warning(f"Rejected upload: {e}")
        return PlainTextResponse(str(e), status_code=400)

    except Exception:
        logger.exception("Error processing the Excel file")
        return PlainTextResponse("Error processing the file", status_code=500)

    logger.info(f"Converted {model.file_extension} upload ({table.row_count} rows)")
    return PlainTextResponse(sql)


@click.command()
@click.option(
    "--port",
    "-p",
    type=int,
    default=8000,
    show_default=True,
    help="Port to run server on",
)
@click.option(
    "--host",
    default="0.0.0.0",
    show_default=True,
    help="Host to bind to",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(port: int, host: str, verbose: bool):
    """
    Excel to SQL Server - HTTP endpoint for spreadsheet conversion.

    Examples:

        \b
        # Start on default port (8000)
        excel2sql-server

        \b
        # Start on custom port
        excel2sql-server --port 8080

    Endpoints:
        GET  /            - Status
        POST /UploadExcel - Convert {"File": <base64>, "FileExtension": "xlsx"}
    """
    # Setup logging
    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(__name__, level=log_level)

    info(f"Starting Excel to SQL server on http://{host}:{port}")
    info("Press CTRL+C to stop")

    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="error" if not verbose else "info",
        )
    except OSError as e:
        error(f"Server failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
