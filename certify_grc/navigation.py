"""Navigation between dashboard views.

The active :class:`View` is kept consistent with an externally observed
location (a URL path). Locations come from a collaborator exposing
``current_location()``, ``on_change(callback)`` and ``navigate_to(location)``;
:class:`HistoryLocation` is the in-process implementation.
"""

import warnings
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .logger import get_logger
from .models import UnknownLocationWarning

logger = get_logger(__name__)


class View(Enum):
    """Pages of the dashboard"""
    DASHBOARD = "dashboard"
    RISK_ANALYSIS = "risk-analysis"
    ASSESSMENT_GAP = "assessment-gap"
    ASSESSMENT_EVIDENCE = "assessment-evidence"
    TREATMENT_DASHBOARD = "treatment-dashboard"
    COMPANY_DETAILS = "company-details"
    CONTEXT_ORG = "context-org"
    CONTEXT_ORG_REPORTS = "context-organization-reports"
    LEADERSHIP = "leadership"
    LEADERSHIP_REPORTS = "leadership-reports"
    PLANNING = "planning"
    PLANNING_REPORTS = "planning-reports"
    SUPPORT = "support"
    SUPPORT_REPORTS = "support-reports"
    OPERATION = "operation"
    OPERATION_REPORTS = "operation-reports"
    PERFORMANCE_EVALUATION = "performance-evaluation"
    PERFORMANCE_EVALUATION_REPORTS = "performance-evaluation-reports"
    IMPROVEMENT = "improvement"
    IMPROVEMENT_REPORTS = "improvement-reports"
    ORGANIZATIONAL_CONTROLS = "organizational-controls"
    ORGANIZATIONAL_CONTROLS_REPORTS = "organizational-controls-reports"
    PEOPLE_CONTROLS = "people-controls"
    PEOPLE_CONTROLS_REPORTS = "people-controls-reports"
    PHYSICAL_CONTROLS = "physical-controls"
    PHYSICAL_CONTROLS_REPORTS = "physical-controls-reports"
    TECHNOLOGICAL_CONTROLS = "technological-controls"
    TECHNOLOGICAL_CONTROLS_REPORTS = "technological-controls-reports"


def normalize_location(location: Optional[str]) -> str:
    """Strip query, fragment and trailing slash: '/planning/?a=1' -> '/planning'"""
    path = (location or "/").split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


class LocationTable:
    """Location <-> View mapping.

    ``entries`` are the canonical pairs and must be one-to-one. ``aliases``
    are extra inbound locations that resolve to a view but are never
    navigated to.
    """

    def __init__(self, entries: Iterable[Tuple[str, View]],
                 aliases: Optional[Dict[str, View]] = None):
        self._views: Dict[str, View] = {}
        self._locations: Dict[View, str] = {}
        for location, view in entries:
            location = normalize_location(location)
            if location in self._views or view in self._locations:
                raise ValueError(f"Duplicate navigation entry: {location} -> {view.value}")
            self._views[location] = view
            self._locations[view] = location
        self._aliases = {normalize_location(k): v for k, v in (aliases or {}).items()}

    def view_for(self, location: str) -> Optional[View]:
        location = normalize_location(location)
        return self._views.get(location) or self._aliases.get(location)

    def location_for(self, view: View) -> Optional[str]:
        return self._locations.get(view)

    def missing_views(self) -> List[View]:
        """Views that can only be reached through request_view"""
        return [view for view in View if view not in self._locations]

    def __iter__(self):
        return iter(self._locations.items())

    def __len__(self):
        return len(self._locations)


DEFAULT_TABLE = LocationTable(
    ((f"/{view.value}", view) for view in View),
    aliases={"/": View.DASHBOARD},
)


class HistoryLocation:
    """Browser-like location with a back/forward history"""

    def __init__(self, initial: str = "/"):
        self._entries: List[str] = [normalize_location(initial)]
        self._index = 0
        self._listeners: List[Callable[[str], None]] = []

    def current_location(self) -> str:
        return self._entries[self._index]

    def on_change(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to location changes; returns an unsubscribe function"""
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    def navigate_to(self, location: str) -> None:
        """Push ``location`` (dropping forward entries) and notify"""
        location = normalize_location(location)
        if location != self.current_location():
            del self._entries[self._index + 1:]
            self._entries.append(location)
            self._index += 1
        self._emit()

    def visit(self, location: str) -> None:
        """Record a change made outside the app (typed URL, followed link)"""
        self.navigate_to(location)

    def back(self) -> bool:
        if self._index == 0:
            return False
        self._index -= 1
        self._emit()
        return True

    def forward(self) -> bool:
        if self._index >= len(self._entries) - 1:
            return False
        self._index += 1
        self._emit()
        return True

    @property
    def history(self) -> List[str]:
        return list(self._entries)

    def _emit(self) -> None:
        location = self.current_location()
        for listener in list(self._listeners):
            listener(location)


class NavigationController:
    """Owns the active view and keeps it in sync with the location"""

    def __init__(self, location, table: LocationTable = DEFAULT_TABLE,
                 default_view: View = View.DASHBOARD):
        self.location = location
        self.table = table
        self.default_view = default_view
        self.active_view: View = default_view
        self._view_listeners: List[Callable[[View, View], None]] = []
        self._unsubscribe = location.on_change(self.on_location_changed)
        self.on_location_changed(location.current_location())

    def on_location_changed(self, location: str) -> View:
        """Resolve ``location`` to a view, falling back to the default"""
        view = self.table.view_for(location)
        if view is None:
            message = f"Unknown location {location!r}, showing {self.default_view.value}"
            logger.warning(message)
            warnings.warn(message, UnknownLocationWarning, stacklevel=2)
            view = self.default_view
        self._set_active(view)
        return view

    def request_view(self, view) -> View:
        """Switch view now, then update the location if it differs"""
        view = View(view)
        self._set_active(view)
        target = self.table.location_for(view)
        if target is not None and target != normalize_location(self.location.current_location()):
            self.location.navigate_to(target)
        return view

    def on_view_change(self, callback: Callable[[View, View], None]) -> None:
        """Call ``callback(previous, current)`` whenever the active view changes"""
        self._view_listeners.append(callback)

    def _set_active(self, view: View) -> None:
        previous, self.active_view = self.active_view, view
        if previous is not view:
            for listener in list(self._view_listeners):
                listener(previous, view)

    def location_for(self, view: View) -> Optional[str]:
        return self.table.location_for(view)

    def view_for(self, location: str) -> Optional[View]:
        return self.table.view_for(location)

    def close(self) -> None:
        """Stop listening to location changes"""
        self._unsubscribe()
