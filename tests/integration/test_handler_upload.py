from __future__ import annotations

import base64
import json

import pytest

from inventory_grouper.api.handler import handle
from inventory_grouper.config.loader import GrouperConfig
from inventory_grouper.excel.reader import DecodeError

CFG = GrouperConfig()

EXPECTED_CORS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def test_upload_success(inventory_xlsx, make_upload_event):
    resp = handle(make_upload_event(inventory_xlsx), config=CFG)
    assert resp["statusCode"] == 200
    assert resp["headers"] == EXPECTED_CORS
    payload = json.loads(resp["body"])
    assert payload["totalItems"] == 5
    assert payload["groupCount"] == 3
    assert len(payload["rawData"]) == 5

    group = payload["productGroups"]["MacBook Pro_M2_512GB_16GB"]
    assert group["basePrice"] == 1200
    assert group["variants"]["Silver_Used"]["quantity"] == 2
    assert group["variants"]["Space Gray_Used"]["quantity"] == 1
    assert len(group["items"]) == 3

    air = payload["productGroups"]["MacBook Air_M1_256GB_8GB"]
    assert air["basePrice"] == 899.5

    thinkpad = payload["productGroups"]["ThinkPad X1_Ryzen 7_1TB_32GB"]
    assert thinkpad["processor"] == "Ryzen 7"
    assert thinkpad["basePrice"] == 0
    assert thinkpad["variants"]["Default_Unknown"] == {
        "color": "Default",
        "condition": "Unknown",
        "quantity": 1,
        "items": [{"Model": "ThinkPad X1", "Processor": "Ryzen 7", "Storage": "1TB",
                   "Memory": "32GB", "Sub-Category": "Laptop Accessories"}],
    }

    assert all(r["Sub-Category"] != "Monitor" for r in payload["rawData"])


def test_upload_invariants(inventory_xlsx, make_upload_event):
    payload = json.loads(handle(make_upload_event(inventory_xlsx), config=CFG)["body"])
    groups = payload["productGroups"].values()
    assert sum(len(g["items"]) for g in groups) == payload["totalItems"] == len(payload["rawData"])
    for g in groups:
        assert sum(v["quantity"] for v in g["variants"].values()) == len(g["items"])
        for v in g["variants"].values():
            assert v["quantity"] == len(v["items"])


def test_upload_repeat_is_byte_identical(inventory_xlsx, make_upload_event):
    event = make_upload_event(inventory_xlsx)
    assert handle(event, config=CFG)["body"] == handle(event, config=CFG)["body"]


def test_options_preflight():
    resp = handle({"httpMethod": "OPTIONS"}, config=CFG)
    assert resp == {"statusCode": 200, "headers": EXPECTED_CORS, "body": ""}


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", None, "post", "options"])
def test_method_not_allowed(method):
    resp = handle({"httpMethod": method}, config=CFG)
    assert resp["statusCode"] == 405
    assert json.loads(resp["body"]) == {"error": "Method not allowed"}


def test_missing_boundary():
    event = {"httpMethod": "POST", "headers": {"Content-Type": "application/json"}, "body": "e30="}
    resp = handle(event, config=CFG)
    assert resp["statusCode"] == 400
    assert json.loads(resp["body"]) == {"error": "No file uploaded"}


def test_missing_headers_and_body():
    resp = handle({"httpMethod": "POST"}, config=CFG)
    assert resp["statusCode"] == 400
    assert json.loads(resp["body"]) == {"error": "No file uploaded"}


def test_no_file_part():
    body = b'--b1\r\nContent-Disposition: form-data; name="note"\r\n\r\nhi\r\n--b1--\r\n'
    event = {
        "httpMethod": "POST",
        "headers": {"Content-Type": "multipart/form-data; boundary=b1"},
        "body": base64.b64encode(body).decode("ascii"),
    }
    resp = handle(event, config=CFG)
    assert resp["statusCode"] == 400
    assert json.loads(resp["body"]) == {"error": "Could not extract file data"}


def test_plain_body_when_not_base64(inventory_xlsx, make_upload_event):
    event = make_upload_event(inventory_xlsx)
    event["body"] = base64.b64decode(event["body"]).decode("latin-1")
    event["isBase64Encoded"] = False
    resp = handle(event, config=CFG)
    assert resp["statusCode"] == 200


def test_invalid_workbook_is_server_error(make_upload_event, capsys):
    resp = handle(make_upload_event(b"PK\x03\x04 broken zip"), config=CFG)
    assert resp["statusCode"] == 500
    assert json.loads(resp["body"])["error"].startswith("Error processing Excel file: ")


def test_decoder_failure_message_propagates(make_upload_event):
    def failing_decoder(data: bytes):
        raise DecodeError("first sheet is empty")

    resp = handle(make_upload_event(b"anything"), config=CFG, decoder=failing_decoder)
    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "Error processing Excel file: first sheet is empty"}


def test_injected_decoder_records(make_upload_event):
    from inventory_grouper.models.record import RawRecord

    def decoder(data: bytes):
        return [RawRecord({"Model": "MacBook Pro 16", "Sub-Category": "Laptops", "Price": "1200"})]

    resp = handle(make_upload_event(b"ignored"), config=CFG, decoder=decoder)
    payload = json.loads(resp["body"])
    assert list(payload["productGroups"]) == ["MacBook Pro_Unknown_Unknown_Unknown"]


def test_configured_cors_origin(make_upload_event):
    resp = handle({"httpMethod": "OPTIONS"}, config=GrouperConfig(allow_origin="https://shop.example"))
    assert resp["headers"]["Access-Control-Allow-Origin"] == "https://shop.example"


def test_config_error_returns_500(temp_workdir, monkeypatch):
    monkeypatch.setenv("INVENTORY_GROUPER_CONFIG", str(temp_workdir / "config" / "missing.yml"))
    resp = handle({"httpMethod": "POST"})
    assert resp["statusCode"] == 500
    assert "config file not found" in json.loads(resp["body"])["error"]


def test_lowercase_options_is_not_preflight():
    resp = handle({"httpMethod": "options"}, config=CFG)
    assert resp["statusCode"] == 405


def _records_decoder(data: bytes):
    from inventory_grouper.models.record import RawRecord

    return [RawRecord({"Model": "MacBook Air 13", "Sub-Category": "Laptops", "Price": 899})]


def test_plain_body_with_non_latin1_filename(make_upload_event):
    # ゲートウェイが UTF-8 としてデコード済みのテキストボディ
    event = make_upload_event(b"workbook-bytes", filename="在庫.xlsx")
    event["body"] = base64.b64decode(event["body"]).decode("utf-8")
    event["isBase64Encoded"] = False
    resp = handle(event, config=CFG, decoder=_records_decoder)
    assert resp["statusCode"] == 200
    assert resp["headers"] == EXPECTED_CORS
    assert json.loads(resp["body"])["totalItems"] == 1


def test_unexpected_extraction_error_is_server_error(make_upload_event, monkeypatch):
    def broken_decode(body, is_base64=True):
        raise UnicodeEncodeError("latin-1", "在", 0, 1, "ordinal not in range(256)")

    monkeypatch.setattr("inventory_grouper.api.handler.decode_body", broken_decode)
    resp = handle(make_upload_event(b"x"), config=CFG)
    assert resp["statusCode"] == 500
    assert resp["headers"] == EXPECTED_CORS
    assert json.loads(resp["body"])["error"].startswith("Error processing Excel file: ")


def test_infinite_price_serializes_as_null(make_upload_event):
    from inventory_grouper.models.record import RawRecord

    def decoder(data: bytes):
        return [RawRecord({"Model": "MacBook Pro 16", "Sub-Category": "Laptops", "Price": "1e999"})]

    resp = handle(make_upload_event(b"x"), config=CFG, decoder=decoder)
    assert resp["statusCode"] == 200
    assert "Infinity" not in resp["body"]

    def reject_constant(name):
        raise ValueError(name)

    payload = json.loads(resp["body"], parse_constant=reject_constant)
    (group,) = payload["productGroups"].values()
    assert group["basePrice"] is None
