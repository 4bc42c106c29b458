"""Workspace - one dashboard session: location, navigation, records, views"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

from .assessment_manager import AssessmentManager
from .catalog import DOMAINS, get_domain
from .dispatcher import ViewDispatcher
from .models import AssessmentSubmission
from .navigation import DEFAULT_TABLE, HistoryLocation, LocationTable, NavigationController, View
from .registers import REGISTERS, RegisterManager, get_register
from .storage import SubmissionStorage
from .views import (
    AssessmentFormView, AssessmentReportsView, CompanyDetailsView, DashboardView,
    DomainIndexView, EvidenceView, RiskAnalysisView, TreatmentDashboardView,
)


class Workspace:
    """Wires the navigation controller, record managers and views"""

    def __init__(self, storage: SubmissionStorage, location=None,
                 table: LocationTable = DEFAULT_TABLE,
                 clock: Optional[Callable[[], datetime]] = None,
                 notify: Optional[Callable[[str, str, str], None]] = None):
        self.storage = storage
        self.location = location if location is not None else HistoryLocation("/")
        self.navigation = NavigationController(self.location, table)
        self.managers: Dict[str, AssessmentManager] = {
            domain.slug: AssessmentManager(domain, storage, clock=clock, notify=notify)
            for domain in DOMAINS
        }
        self.registers: Dict[str, RegisterManager] = {
            register.slug: RegisterManager(register, storage, clock=clock, notify=notify)
            for register in REGISTERS
        }
        # Forms that start blank when their view is entered
        self._forms: Dict[View, List] = {
            View(m.domain.form_view): [m] for m in self.managers.values()
        }
        self._forms[View.RISK_ANALYSIS] = [
            self.registers[slug]
            for slug in ("risk-descriptions", "pre-treatment", "post-treatment", "treatment-plans")
        ]
        self._forms[View.COMPANY_DETAILS] = [self.registers["organizations"]]
        self.navigation.on_view_change(self._on_view_change)
        self.dispatcher = ViewDispatcher(self._build_collaborators())

    def _on_view_change(self, previous: View, current: View) -> None:
        for manager in self._forms.get(current, []):
            manager.reset()

    def _build_collaborators(self) -> dict:
        managers = list(self.managers.values())
        collaborators = {
            View.DASHBOARD: DashboardView(managers),
            View.ASSESSMENT_GAP: DomainIndexView("Assessment Gap", managers),
            View.ASSESSMENT_EVIDENCE: EvidenceView(managers),
            View.RISK_ANALYSIS: RiskAnalysisView(self._forms[View.RISK_ANALYSIS]),
            View.TREATMENT_DASHBOARD: TreatmentDashboardView(
                self.registers["pre-treatment"],
                self.registers["post-treatment"],
                self.registers["treatment-plans"],
            ),
            View.COMPANY_DETAILS: CompanyDetailsView(self.registers["organizations"], managers),
        }
        for manager in managers:
            collaborators[View(manager.domain.form_view)] = AssessmentFormView(manager)
            collaborators[View(manager.domain.reports_view)] = AssessmentReportsView(manager)
        return collaborators

    @property
    def active_view(self) -> View:
        return self.navigation.active_view

    def manager(self, slug: str) -> AssessmentManager:
        """Get the manager of a domain; raises UnknownDomainError"""
        return self.managers[get_domain(slug).slug]

    def register(self, slug: str) -> RegisterManager:
        """Get the manager of a register; raises UnknownRegisterError"""
        return self.registers[get_register(slug).slug]

    def render(self) -> dict:
        """Render the active view"""
        return self.dispatcher.dispatch(self.active_view, self.navigation.request_view)

    def open_form(self, slug: str) -> View:
        """Show a domain's form with a blank record"""
        manager = self.manager(slug)
        view = self.navigation.request_view(View(manager.domain.form_view))
        manager.reset()
        return view

    def submit(self, slug: str, view_reports: bool = False) -> AssessmentSubmission:
        """Submit a domain's in-progress record"""
        form_view = View(self.manager(slug).domain.form_view)
        form = self.dispatcher.collaborator_for(form_view)
        return form.submit(self.navigation.request_view, view_reports=view_reports)

    def reports(self, slug: str) -> AssessmentReportsView:
        reports_view = View(self.manager(slug).domain.reports_view)
        return self.dispatcher.collaborator_for(reports_view)
