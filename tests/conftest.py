# Shared pytest fixtures
from __future__ import annotations
import base64
from io import BytesIO
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from inventory_grouper.logging.init import reset_logging

BOUNDARY = "----WebKitFormBoundary7MA4YWxkTrZu0gW"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER = ["Model", "Processor", "Storage", "Memory", "Color", "Condition", "Sub-Category", "Price"]


@pytest.fixture(autouse=True)
def _fresh_logging():
    # 各テストで stdout (capsys) に新しいハンドラを張り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch, tmp_path: Path) -> Path:
    (tmp_path / "data").mkdir()
    (tmp_path / "config").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("INVENTORY_GROUPER_CONFIG", raising=False)
    return tmp_path


def make_workbook_bytes(sheets: dict[str, list[list[Any]]]) -> bytes:
    """Build an .xlsx in memory; each sheet is written without pandas header/index."""
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return buf.getvalue()


def build_multipart(file_bytes: bytes, boundary: str = BOUNDARY, filename: str = "stock.xlsx") -> bytes:
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
        f"Content-Type: {XLSX_CONTENT_TYPE}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("latin-1")
    return head + file_bytes + tail


def upload_event(file_bytes: bytes, boundary: str = BOUNDARY, filename: str = "stock.xlsx") -> dict[str, Any]:
    body = build_multipart(file_bytes, boundary, filename)
    return {
        "httpMethod": "POST",
        "headers": {"content-type": f"multipart/form-data; boundary={boundary}"},
        "body": base64.b64encode(body).decode("ascii"),
        "isBase64Encoded": True,
    }


@pytest.fixture()
def inventory_rows() -> list[list[Any]]:
    return [
        HEADER,
        ["MacBook Pro 16", "Apple M2 Pro", "512GB SSD", "16GB", "Silver", "Used", "Laptops", "1200"],
        ["Apple MacBook Pro 16-inch", "M2 Pro 12-core", "512gb", "16gb RAM", "Space Gray", "Used", "Laptops", 1150],
        ["MacBook Pro 16", "Apple M2 Pro", "512GB SSD", "16GB", "Silver", "Used", "laptop", 1100],
        ["MacBook Air 13", "M1", "256GB", "8GB", "Gold", "New", "Laptops", 899.5],
        ["Dell UltraSharp 27", None, None, None, "Black", "New", "Monitor", 300],
        ["ThinkPad X1", "Ryzen 7", "1TB", "32GB", None, None, "Laptop Accessories", None],
    ]


@pytest.fixture()
def inventory_xlsx(inventory_rows) -> bytes:
    return make_workbook_bytes({"Inventory": inventory_rows})


@pytest.fixture()
def make_workbook():
    return make_workbook_bytes


@pytest.fixture()
def make_upload_event():
    return upload_event
