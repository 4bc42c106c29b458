"""Test suite for the dashboard workspace"""

import pytest

from certify_grc.models import (
    EvidenceFile, RequirementsMet, UnknownDomainError, UnknownRegisterError, ValidationError,
)
from certify_grc.navigation import View


def fill(manager, value="yes"):
    for key in manager.domain.section_keys:
        manager.update_field(key, "reqsMet", value)


def test_workspace_starts_on_dashboard(workspace):
    """Test a new session shows the dashboard"""
    assert workspace.active_view is View.DASHBOARD
    page = workspace.render()
    assert page["type"] == "dashboard"
    assert page["kpis"]["total_submissions"] == 0
    assert page["kpis"]["domains_total"] == 11


def test_location_change_renders_matching_view(workspace):
    """Test a location change selects the collaborator"""
    workspace.location.visit("/leadership")

    page = workspace.render()
    assert page["type"] == "assessment-form"
    assert page["domain"] == "leadership"
    assert len(page["sections"]) == 6


def test_entering_form_starts_blank_record(workspace):
    """Test opening a form view starts from a blank record"""
    manager = workspace.manager("planning")
    workspace.location.visit("/planning")
    manager.update_field("section1", "comments", "draft")

    workspace.location.visit("/planning")
    assert manager.current.answer("section1").comments == "draft"

    workspace.location.visit("/dashboard")
    workspace.location.visit("/planning")
    assert manager.current.is_blank()


def test_submit_and_view_reports(workspace):
    """Test the view-reports action switches view and location"""
    workspace.open_form("support")
    fill(workspace.manager("support"))

    record = workspace.submit("support", view_reports=True)

    assert workspace.active_view is View.SUPPORT_REPORTS
    assert workspace.location.current_location() == "/support-reports"
    page = workspace.render()
    assert [r["id"] for r in page["records"]] == [record.id]
    assert page["summary"]["total_submissions"] == 1


def test_submit_stays_on_form(workspace):
    """Test submitting without the reports action keeps the form open"""
    workspace.open_form("improvement")
    fill(workspace.manager("improvement"), "no")

    workspace.submit("improvement")

    assert workspace.active_view is View.IMPROVEMENT
    assert workspace.manager("improvement").current.is_blank()


def test_failed_submit_does_not_navigate(workspace):
    """Test validation failure leaves view and store unchanged"""
    workspace.open_form("operation")

    with pytest.raises(ValidationError):
        workspace.submit("operation", view_reports=True)

    assert workspace.active_view is View.OPERATION
    assert workspace.manager("operation").list_submissions() == []


def test_dashboard_kpis(workspace, clock):
    """Test KPIs aggregate the latest submission of each domain"""
    context = workspace.manager("context-of-organization")
    fill(context, "yes")
    context.update_field("section4", "reqsMet", "no")
    context.submit()
    clock.advance(30)
    people = workspace.manager("people-controls")
    fill(people, "yes")
    people.submit()

    page = workspace.render()
    kpis = page["kpis"]
    assert kpis["total_submissions"] == 2
    assert kpis["domains_assessed"] == 2
    assert kpis["open_actions"] == 1
    assert kpis["compliance_rate"] == pytest.approx(11 / 12 * 100)
    assert [item["domain"] for item in page["recent_activity"]] == [
        "A.6 People Controls", "4. Context of Organization"
    ]


def test_domain_index_lists_all_domains(workspace):
    """Test the gap view links every domain"""
    workspace.navigation.request_view(View.ASSESSMENT_GAP)
    page = workspace.render()

    assert page["type"] == "assessment-gap"
    assert [d["domain"] for d in page["domains"]][:2] == ["context-of-organization", "leadership"]
    assert sum(d["sections"] for d in page["domains"]) == 138


def test_unknown_domain(workspace):
    """Test looking up a domain that does not exist"""
    with pytest.raises(UnknownDomainError):
        workspace.manager("finance")


def test_form_render_shows_answers(workspace):
    """Test the form view reflects in-progress answers"""
    workspace.open_form("context-of-organization")
    workspace.manager("context-of-organization").update_field("section2", "reqsMet", "no")

    page = workspace.render()
    section = page["sections"][1]
    assert section["title"] == "4.2 Understanding the needs and expectations of interested parties"
    assert section["answer"]["reqsMet"] == RequirementsMet.NO.value


def test_risk_analysis_tabs(workspace):
    """Test the risk analysis view shows one tab per risk register"""
    risks = workspace.register("risk-descriptions")
    risks.update({"riskOwner": "CISO", "assetGroup": "People", "asset": "Staff",
                  "threat": "Social engineering", "vulnerability": "No training",
                  "riskType": "Operational"})
    risks.submit()

    workspace.navigation.request_view(View.RISK_ANALYSIS)
    page = workspace.render()

    assert page["type"] == "risk-analysis"
    assert [tab["register"] for tab in page["tabs"]] == [
        "risk-descriptions", "pre-treatment", "post-treatment", "treatment-plans"
    ]
    assert page["tabs"][0]["total"] == 1
    assert page["risk_types"] == {"Operational": 1}


def test_entering_risk_analysis_resets_drafts(workspace):
    """Test register drafts start blank when their view is entered"""
    plans = workspace.register("treatment-plans")
    plans.update_field("proposedAction", "Patch servers")

    workspace.navigation.request_view(View.RISK_ANALYSIS)

    assert plans.draft["proposedAction"] == ""


def test_treatment_dashboard(workspace, clock):
    """Test risk levels and costs are summarized"""
    pre = workspace.register("pre-treatment")
    pre.update({"existingControls": "None", "likelihoodPreTreatment": "high",
                "impactPreTreatment": "low"})
    pre.submit()
    post = workspace.register("post-treatment")
    post.update({"existingControls": "MFA", "likelihoodPostTreatment": "low",
                 "impactPostTreatment": "medium"})
    post.submit()
    plans = workspace.register("treatment-plans")
    for cost, status in (("1000", "completed"), ("250.5", "in-progress"), ("", "completed")):
        clock.advance()
        plans.update({"treatmentOption": "modify", "proposedAction": "Enable MFA",
                      "actionOwner": "IT", "actionStatus": status, "treatmentCost": cost})
        plans.submit()

    workspace.navigation.request_view(View.TREATMENT_DASHBOARD)
    page = workspace.render()

    assert page["pre_treatment_levels"] == {"low": 0, "medium": 0, "high": 1}
    assert page["post_treatment_levels"] == {"low": 0, "medium": 1, "high": 0}
    assert page["plans_by_status"] == {"completed": 2, "in-progress": 1}
    assert page["cost_by_status"]["completed"] == 1000.0
    assert page["total_cost"] == 1250.5


def test_company_details(workspace):
    """Test the company view lists organizations and stats"""
    orgs = workspace.register("organizations")
    orgs.update({"organizationName": "Acme", "riskOwner": "CISO", "asset": "HQ"})
    orgs.submit()
    orgs.update({"organizationName": "Globex", "riskOwner": "CISO"})
    orgs.submit()
    fill(workspace.manager("context-of-organization"), "yes")
    workspace.manager("context-of-organization").submit()

    workspace.navigation.request_view(View.COMPANY_DETAILS)
    page = workspace.render()

    assert page["type"] == "company-details"
    assert page["form"]["accepts_evidence"] is False
    assert [o["organizationName"] for o in page["recent"]] == ["Globex", "Acme"]
    assert page["stats"] == {
        "total_organizations": 2, "risk_owners": 1, "assets": 1, "compliance_rate": 100.0,
    }


def test_evidence_view_collects_submission_files(workspace):
    """Test the evidence view lists files from saved assessments"""
    manager = workspace.manager("context-of-organization")
    fill(manager)
    manager.set_evidence_files("section2", [EvidenceFile("policy.pdf", b"%PDF")])
    manager.submit()

    workspace.navigation.request_view(View.ASSESSMENT_EVIDENCE)
    page = workspace.render()

    assert page["type"] == "assessment-evidence"
    assert [(f["name"], f["section"]) for f in page["files"]] == [
        ("policy.pdf", "4.2 Understanding the needs and expectations of interested parties")
    ]
    assert page["by_domain"] == {"context-of-organization": 1}


def test_unknown_register(workspace):
    """Test looking up a register that does not exist"""
    with pytest.raises(UnknownRegisterError):
        workspace.register("assets")
