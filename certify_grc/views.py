"""View collaborators rendered by the dispatcher.

Each collaborator has ``render(request_view) -> dict`` and reads its own data
from the managers it was built with.
"""

from collections import Counter
from typing import Callable, List, Optional, Sequence

from .assessment_manager import AssessmentManager
from .models import AssessmentSubmission, RegisterEntry, RequirementsMet, SectionAnswer
from .navigation import View
from .registers import ACTION_STATUSES, RISK_LEVELS, RegisterManager, risk_level
from .reports import filter_submissions, search_submissions, summarize

RequestView = Callable[[View], View]


def evidence_for_display(files) -> List[dict]:
    return [{"name": f.name, "size": f.size, "contentType": f.content_type} for f in files]


def answer_for_display(answer: SectionAnswer) -> dict:
    """Answer as shown on screen: evidence by name and size, no payload"""
    data = answer.to_dict()
    data["evidenceFiles"] = evidence_for_display(answer.evidence_files)
    return data


def submission_for_display(record: AssessmentSubmission) -> dict:
    return {
        "id": record.id,
        "submittedAt": record.submitted_at.isoformat(),
        "domain": record.domain,
        "sections": {key: answer_for_display(a) for key, a in record.answers.items()},
    }


class DashboardView:
    """KPI cards and recent activity across all assessment domains"""

    def __init__(self, managers: Sequence[AssessmentManager]):
        self.managers = list(managers)

    def render(self, request_view: RequestView) -> dict:
        assessed = [m for m in self.managers if m.latest_submission() is not None]
        total_submissions = sum(len(m.list_submissions()) for m in self.managers)
        open_actions = sum(
            m.latest_submission().count(RequirementsMet.NO) for m in assessed
        )
        answered = sum(m.compliance_status()["total"] for m in assessed)
        compliant = sum(m.compliance_status()["compliant"] for m in assessed)

        recent = []
        for manager in self.managers:
            for record in manager.list_submissions()[-5:]:
                recent.append({
                    "domain": manager.domain.title,
                    "id": record.id,
                    "submittedAt": record.submitted_at.isoformat(),
                    "view": manager.domain.reports_view,
                })
        # Sort by date, take latest 5
        recent.sort(key=lambda x: x["submittedAt"], reverse=True)

        return {
            "type": "dashboard",
            "title": "Home",
            "kpis": {
                "total_submissions": total_submissions,
                "domains_assessed": len(assessed),
                "domains_total": len(self.managers),
                "open_actions": open_actions,
                "compliance_rate": (compliant / answered * 100) if answered > 0 else 0,
            },
            "recent_activity": recent[:5],
        }


class AssessmentFormView:
    """Questionnaire of one domain bound to its in-progress record"""

    def __init__(self, manager: AssessmentManager):
        self.manager = manager

    def render(self, request_view: RequestView) -> dict:
        domain = self.manager.domain
        current = self.manager.current
        return {
            "type": "assessment-form",
            "domain": domain.slug,
            "title": domain.title,
            "reports_view": domain.reports_view,
            "sections": [
                {
                    "key": section.key,
                    "title": section.title,
                    "question": section.question,
                    "answer": answer_for_display(current.answer(section.key)),
                }
                for section in domain.sections
            ],
        }

    def submit(self, request_view: RequestView, view_reports: bool = False) -> AssessmentSubmission:
        """Submit the record; optionally switch to the reports view afterwards"""
        record = self.manager.submit()
        if view_reports:
            request_view(View(self.manager.domain.reports_view))
        return record


class AssessmentReportsView:
    """Submission history of one domain"""

    def __init__(self, manager: AssessmentManager):
        self.manager = manager

    def records(self, search: Optional[str] = None,
                requirements_met=None) -> List[AssessmentSubmission]:
        records = self.manager.list_submissions()
        return filter_submissions(search_submissions(records, search), requirements_met)

    def render(self, request_view: RequestView, search: Optional[str] = None,
               requirements_met=None) -> dict:
        domain = self.manager.domain
        return {
            "type": "assessment-reports",
            "domain": domain.slug,
            "title": f"{domain.title} Reports",
            "form_view": domain.form_view,
            "summary": summarize(domain, self.manager.list_submissions()),
            "records": [submission_for_display(r)
                        for r in self.records(search, requirements_met)],
        }

    def back_to_form(self, request_view: RequestView) -> View:
        return request_view(View(self.manager.domain.form_view))


class DomainIndexView:
    """List of assessment domains with their form and report pages"""

    def __init__(self, title: str, managers: Sequence[AssessmentManager],
                 kind: str = "assessment-gap"):
        self.title = title
        self.managers = list(managers)
        self.kind = kind

    def render(self, request_view: RequestView) -> dict:
        return {
            "type": self.kind,
            "title": self.title,
            "domains": [
                {
                    "domain": m.domain.slug,
                    "title": m.domain.title,
                    "form_view": m.domain.form_view,
                    "reports_view": m.domain.reports_view,
                    "sections": len(m.domain.sections),
                    "submissions": len(m.list_submissions()),
                }
                for m in self.managers
            ],
        }


def entry_for_display(entry: RegisterEntry) -> dict:
    data = {"id": entry.id}
    data.update(entry.values)
    data["evidenceFiles"] = evidence_for_display(entry.evidence_files)
    data["createdAt"] = entry.created_at.isoformat()
    data["updatedAt"] = entry.updated_at.isoformat()
    return data


def register_panel(manager: RegisterManager, search: Optional[str] = None) -> dict:
    """A register's form (with the current draft) and its saved entries"""
    register = manager.register
    return {
        "register": register.slug,
        "title": register.title,
        "fields": [
            {
                "name": f.name,
                "label": f.label,
                "required": f.required,
                "choices": list(f.choices),
                "kind": f.kind.value,
                "value": manager.draft.get(f.name),
            }
            for f in register.fields
        ],
        "accepts_evidence": register.accepts_evidence,
        "evidence": evidence_for_display(manager.evidence),
        "entries": [entry_for_display(e) for e in manager.search(search)],
        "total": len(manager.list_entries()),
    }


class RiskAnalysisView:
    """Risk descriptions, pre/post-treatment assessments and treatment plans as tabs"""

    def __init__(self, registers: Sequence[RegisterManager]):
        self.registers = list(registers)

    def render(self, request_view: RequestView) -> dict:
        descriptions = next(
            (m for m in self.registers if m.register.slug == "risk-descriptions"), None
        )
        return {
            "type": "risk-analysis",
            "title": "Risk Analysis",
            "tabs": [register_panel(m) for m in self.registers],
            "risk_types": descriptions.counts_by("riskType") if descriptions else {},
        }


class TreatmentDashboardView:
    """Risk levels before and after treatment, and treatment plan costs"""

    def __init__(self, pre_treatment: RegisterManager, post_treatment: RegisterManager,
                 plans: RegisterManager):
        self.pre_treatment = pre_treatment
        self.post_treatment = post_treatment
        self.plans = plans

    @staticmethod
    def _levels(manager: RegisterManager, likelihood: str, impact: str) -> dict:
        levels = {level: 0 for level in RISK_LEVELS}
        for entry in manager.list_entries():
            level = risk_level(entry.value(likelihood), entry.value(impact))
            if level is not None:
                levels[level] += 1
        return levels

    def render(self, request_view: RequestView) -> dict:
        plans = self.plans.list_entries()
        cost_by_status = {status: 0.0 for status in ACTION_STATUSES}
        for plan in plans:
            status = plan.value("actionStatus")
            if status in cost_by_status:
                cost_by_status[status] += plan.value("treatmentCost") or 0.0
        return {
            "type": "treatment-dashboard",
            "title": "Treatment Dashboard",
            "pre_treatment_levels": self._levels(
                self.pre_treatment, "likelihoodPreTreatment", "impactPreTreatment"),
            "post_treatment_levels": self._levels(
                self.post_treatment, "likelihoodPostTreatment", "impactPostTreatment"),
            "plans_by_status": self.plans.counts_by("actionStatus"),
            "plans_by_option": self.plans.counts_by("treatmentOption"),
            "cost_by_status": cost_by_status,
            "total_cost": sum(cost_by_status.values()),
        }


class CompanyDetailsView:
    """Organization registration form, recent organizations and stats"""

    def __init__(self, organizations: RegisterManager,
                 managers: Sequence[AssessmentManager] = ()):
        self.organizations = organizations
        self.managers = list(managers)

    def render(self, request_view: RequestView) -> dict:
        entries = self.organizations.list_entries()
        answered = compliant = 0
        for manager in self.managers:
            status = manager.compliance_status()
            answered += status["total"]
            compliant += status["compliant"]
        return {
            "type": "company-details",
            "title": "Company Details",
            "form": register_panel(self.organizations),
            "recent": [entry_for_display(e) for e in reversed(entries[-3:])],
            "stats": {
                "total_organizations": len(entries),
                "risk_owners": len({e.value("riskOwner") for e in entries if e.value("riskOwner")}),
                "assets": len({e.value("asset") for e in entries if e.value("asset")}),
                "compliance_rate": (compliant / answered * 100) if answered > 0 else 0,
            },
        }


class EvidenceView:
    """Every evidence file attached to assessment submissions"""

    def __init__(self, managers: Sequence[AssessmentManager]):
        self.managers = list(managers)

    def render(self, request_view: RequestView, search: Optional[str] = None) -> dict:
        term = (search or "").strip().lower()
        files = []
        for manager in self.managers:
            domain = manager.domain
            for record in manager.list_submissions():
                for section in domain.sections:
                    answer = record.answers.get(section.key)
                    if answer is None:
                        continue
                    for f in answer.evidence_files:
                        if term and term not in f.name.lower():
                            continue
                        files.append({
                            "domain": domain.slug,
                            "title": domain.title,
                            "record": record.id,
                            "submittedAt": record.submitted_at.isoformat(),
                            "section": section.title,
                            "reqsMet": answer.requirements_met.value,
                            "name": f.name,
                            "size": f.size,
                            "contentType": f.content_type,
                        })
        return {
            "type": "assessment-evidence",
            "title": "Assessment Evidence",
            "files": files,
            "by_domain": dict(Counter(f["domain"] for f in files)),
        }
