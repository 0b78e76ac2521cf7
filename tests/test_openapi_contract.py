import json
from pathlib import Path

from profitpulse.main import app


def test_openapi_paths_snapshot():
    snapshot_path = Path(__file__).parent / "snapshots" / "openapi_paths_snapshot.json"
    expected_paths = json.loads(snapshot_path.read_text(encoding="utf-8"))
    actual_paths = sorted(app.openapi()["paths"].keys())
    assert actual_paths == expected_paths


def test_list_endpoints_document_camel_case_params():
    paths = app.openapi()["paths"]
    item_params = {param["name"] for param in paths["/items"]["get"]["parameters"]}
    assert {"page", "limit", "search", "status", "lowStock", "sortBy", "sortOrder"} <= item_params

    audit_params = {param["name"] for param in paths["/audits"]["get"]["parameters"]}
    assert {"action", "resource", "adminId"} <= audit_params

    sale_params = {param["name"] for param in paths["/sales"]["get"]["parameters"]}
    assert {"startDate", "endDate"} <= sale_params
