"""Test suite for the Flask application"""

import io

from openpyxl import load_workbook


def answer(client, slug, section, field, value):
    return client.post(f"/api/assessments/{slug}/answers",
                       json={"section": section, "field": field, "value": value})


def fill_context(client, value="yes"):
    for key in ["section1", "section2", "section3", "section4"]:
        answer(client, "context-of-organization", key, "reqsMet", value)


def test_root_renders_dashboard(client):
    """Test the landing location shows the dashboard"""
    response = client.get("/")
    data = response.get_json()

    assert response.status_code == 200
    assert data["success"] is True
    assert data["view"] == "dashboard"
    assert data["page"]["type"] == "dashboard"


def test_location_renders_view(client):
    """Test each location renders its view"""
    data = client.get("/context-organization-reports").get_json()

    assert data["view"] == "context-organization-reports"
    assert data["location"] == "/context-organization-reports"
    assert data["page"]["type"] == "assessment-reports"


def test_unknown_location_falls_back(client):
    """Test an unknown path renders the dashboard without error"""
    response = client.get("/unknown-path")

    assert response.status_code == 200
    assert response.get_json()["view"] == "dashboard"


def test_security_headers(client):
    """Test security headers are added"""
    response = client.get("/dashboard")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_submit_flow(client):
    """Test answering and submitting the context questionnaire"""
    client.get("/context-org")
    fill_context(client)
    response = answer(client, "context-of-organization", "section2", "actionOwner", "J. Smith")
    assert response.get_json()["current"]["section2"]["actionOwner"] == "J. Smith"

    response = client.post("/api/assessments/context-of-organization/submit",
                           json={"view_reports": True})
    data = response.get_json()

    assert response.status_code == 200
    assert data["record"]["sections"]["section2"]["actionOwner"] == "J. Smith"
    assert data["redirect"] == "/context-organization-reports"
    assert any("Assessment Saved" in n["message"] for n in data["notifications"])

    records = client.get("/api/assessments/context-of-organization/records").get_json()
    assert len(records["records"]) == 1


def test_submit_validation_error(client):
    """Test an incomplete record is rejected with the offending section"""
    client.get("/context-org")
    for key in ["section1", "section2", "section3"]:
        answer(client, "context-of-organization", key, "reqsMet", "yes")

    response = client.post("/api/assessments/context-of-organization/submit", json={})
    data = response.get_json()

    assert response.status_code == 400
    assert data["success"] is False
    assert data["section"] == "section4"
    assert "4.4 Information security management system" in data["error"]

    records = client.get("/api/assessments/context-of-organization/records").get_json()
    assert records["records"] == []


def test_update_rejects_non_section(client):
    """Test the API cannot set store-managed attributes"""
    response = answer(client, "context-of-organization", "id", "comments", "x")
    assert response.status_code == 400

    response = answer(client, "context-of-organization", "section1", "colour", "x")
    assert response.status_code == 400


def test_evidence_upload_replaces_files(client):
    """Test uploading evidence twice keeps only the second selection"""
    url = "/api/assessments/context-of-organization/evidence/section1"
    client.get("/context-org")
    client.post(url, data={"files": [(io.BytesIO(b"a"), "a.pdf")]},
                content_type="multipart/form-data")
    response = client.post(url, data={"files": [(io.BytesIO(b"b"), "b.pdf"),
                                                (io.BytesIO(b"c"), "c.pdf")]},
                           content_type="multipart/form-data")

    assert response.get_json()["files"] == ["b.pdf", "c.pdf"]
    page = client.get("/context-org").get_json()["page"]
    # Same view, so the in-progress record is kept
    assert [f["name"] for f in page["sections"][0]["answer"]["evidenceFiles"]] == ["b.pdf", "c.pdf"]


def test_navigate_api(client):
    """Test switching view from an in-app action"""
    response = client.post("/api/navigate", json={"view": "leadership"})
    data = response.get_json()

    assert data["view"] == "leadership"
    assert data["location"] == "/leadership"

    response = client.post("/api/navigate", json={"view": "nowhere"})
    assert response.status_code == 400


def test_history_api(client):
    """Test back navigation through the API"""
    client.get("/planning")
    client.get("/support")

    data = client.post("/api/history/back").get_json()
    assert data["moved"] is True
    assert data["view"] == "planning"

    assert client.post("/api/history/sideways").status_code == 400


def test_unknown_domain_is_404(client):
    """Test API calls for an unknown domain"""
    response = client.post("/api/assessments/finance/submit", json={})
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_export(client):
    """Test the Excel export download"""
    fill_context(client, "no")
    client.post("/api/assessments/context-of-organization/submit", json={})

    response = client.get("/api/assessments/context-of-organization/export")

    assert response.status_code == 200
    assert "spreadsheetml" in response.mimetype
    ws = load_workbook(io.BytesIO(response.data)).active
    assert ws.max_row == 2


def test_views_api(client):
    """Test the view list exposes every location"""
    views = client.get("/api/views").get_json()["views"]
    assert {"view": "context-org", "location": "/context-org"} in views
    assert all(v["location"] for v in views)


def test_non_text_answer_is_rejected(client):
    """Test a numeric comment is refused and search keeps working"""
    client.get("/context-org")
    response = answer(client, "context-of-organization", "section1", "comments", 123)
    assert response.status_code == 400
    assert response.get_json()["success"] is False

    fill_context(client)
    answer(client, "context-of-organization", "section1", "comments", "Scope agreed")
    client.post("/api/assessments/context-of-organization/submit", json={})

    response = client.get("/api/assessments/context-of-organization/records?search=scope")
    assert response.status_code == 200
    assert len(response.get_json()["records"]) == 1


def test_evidence_cannot_be_set_as_answer(client):
    """Test evidence files are only taken from uploads"""
    response = answer(client, "context-of-organization", "section1", "evidenceFiles", ["a.pdf"])
    assert response.status_code == 400
    assert "evidence endpoint" in response.get_json()["error"]


def test_non_string_section_is_rejected(client):
    """Test a list section key gives a client error"""
    response = answer(client, "context-of-organization", ["section1"], "comments", "x")
    assert response.status_code == 400


def test_non_object_body_is_ignored(client):
    """Test a JSON array body is treated as empty"""
    response = client.post("/api/assessments/context-of-organization/answers", json=["x"])
    assert response.status_code == 400

    response = client.post("/api/navigate", json="leadership")
    assert response.status_code == 400


def test_invalid_records_filter(client):
    """Test an unknown REQS MET filter is a client error"""
    response = client.get("/api/assessments/context-of-organization/records?filter=maybe")
    assert response.status_code == 400


RISK = {
    "riskOwner": "CISO",
    "assetGroup": "Infrastructure",
    "asset": "Mail server",
    "threat": "Phishing",
    "vulnerability": "No MFA",
    "riskType": "Technology",
}


def test_register_flow(client):
    """Test filling, saving, listing and deleting a risk description"""
    client.get("/risk-analysis")
    response = client.post("/api/registers/risk-descriptions/fields",
                           json={"field": "riskOwner", "value": "CISO"})
    assert response.get_json()["draft"]["riskOwner"] == "CISO"

    response = client.post("/api/registers/risk-descriptions/submit")
    data = response.get_json()
    assert response.status_code == 400
    assert data["field"] == "assetGroup"
    assert data["error"] == "Asset Group is required"

    client.post("/api/registers/risk-descriptions/fields", json={"values": RISK})
    response = client.post("/api/registers/risk-descriptions/submit")
    entry = response.get_json()["entry"]
    assert response.status_code == 200
    assert entry["threat"] == "Phishing"

    records = client.get("/api/registers/risk-descriptions/records?search=phish").get_json()
    assert records["total"] == 1
    assert [r["id"] for r in records["records"]] == [entry["id"]]

    assert client.delete("/api/registers/risk-descriptions/records/nope").status_code == 404
    response = client.delete(f"/api/registers/risk-descriptions/records/{entry['id']}")
    assert response.get_json()["deleted"] == entry["id"]
    records = client.get("/api/registers/risk-descriptions/records").get_json()
    assert records["total"] == 0


def test_register_rejects_bad_values(client):
    """Test wrong types and unknown fields are client errors"""
    url = "/api/registers/treatment-plans/fields"
    assert client.post(url, json={"field": "actionOwner", "value": 42}).status_code == 400
    assert client.post(url, json={"field": "treatmentCost", "value": "lots"}).status_code == 400
    assert client.post(url, json={"field": "colour", "value": "red"}).status_code == 400
    assert client.post(url, json={"values": ["actionOwner"]}).status_code == 400

    response = client.get("/api/registers/treatment-plans/records?field=colour&value=red")
    assert response.status_code == 400


def test_register_evidence_upload(client):
    """Test uploads to registers with and without evidence"""
    response = client.post("/api/registers/treatment-plans/evidence",
                           data={"files": [(io.BytesIO(b"a"), "plan.pdf"),
                                           (io.BytesIO(b"b"), "tool.exe")]},
                           content_type="multipart/form-data")
    assert response.get_json()["files"] == ["plan.pdf"]

    response = client.post("/api/registers/organizations/evidence",
                           data={"files": [(io.BytesIO(b"a"), "a.pdf")]},
                           content_type="multipart/form-data")
    assert response.status_code == 400


def test_unknown_register_is_404(client):
    """Test API calls for an unknown register"""
    response = client.post("/api/registers/assets/submit")
    assert response.status_code == 404
    assert response.get_json()["error"] == "Unknown register: assets"


def test_register_export(client):
    """Test the register Excel download"""
    client.post("/api/registers/organizations/fields",
                json={"values": {"organizationName": "Acme", "organizationSize": "250"}})
    client.post("/api/registers/organizations/submit")

    response = client.get("/api/registers/organizations/export")

    assert response.status_code == 200
    ws = load_workbook(io.BytesIO(response.data)).active
    assert ws.max_row == 2
    assert ws.cell(row=2, column=3).value == "Acme"
