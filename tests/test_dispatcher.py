"""Test suite for the view dispatcher"""

import pytest

from certify_grc.dispatcher import ViewDispatcher
from certify_grc.navigation import View
from certify_grc.views import AssessmentFormView, AssessmentReportsView, DashboardView


class Page:
    def __init__(self, name):
        self.name = name
        self.calls = []

    def render(self, request_view):
        self.calls.append(request_view)
        return {"type": self.name}


def test_every_view_has_a_collaborator(workspace):
    """Test the workspace dispatcher is total over the view set"""
    assert set(workspace.dispatcher.collaborators) == set(View)


def test_form_and_report_views_bind_their_domain(workspace):
    """Test domain views are bound to the right manager"""
    form = workspace.dispatcher.collaborator_for(View.CONTEXT_ORG)
    reports = workspace.dispatcher.collaborator_for(View.CONTEXT_ORG_REPORTS)

    assert isinstance(form, AssessmentFormView)
    assert isinstance(reports, AssessmentReportsView)
    assert form.manager is workspace.manager("context-of-organization")
    assert reports.manager is form.manager
    assert isinstance(workspace.dispatcher.collaborator_for(View.DASHBOARD), DashboardView)


def test_unmatched_view_uses_default():
    """Test a view without collaborator renders the default"""
    dashboard = Page("dashboard")
    dispatcher = ViewDispatcher({View.DASHBOARD: dashboard, View.PLANNING: Page("planning")})

    assert dispatcher.collaborator_for(View.SUPPORT) is dashboard
    assert dispatcher.dispatch(View.SUPPORT, lambda view: view) == {"type": "dashboard"}
    assert dispatcher.dispatch(View.PLANNING, lambda view: view) == {"type": "planning"}


def test_default_collaborator_required():
    """Test the dispatcher refuses a mapping without the default view"""
    with pytest.raises(ValueError):
        ViewDispatcher({View.PLANNING: Page("planning")})


def test_dispatch_passes_request_view():
    """Test the collaborator receives only the request_view callback"""
    page = Page("dashboard")

    def request_view(view):
        return view

    ViewDispatcher({View.DASHBOARD: page}).dispatch(View.DASHBOARD, request_view)
    assert page.calls == [request_view]
