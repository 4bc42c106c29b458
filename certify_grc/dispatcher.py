"""View Dispatcher - maps the active view to the collaborator that renders it"""

from typing import Callable, Mapping

from .logger import get_logger
from .navigation import View

logger = get_logger(__name__)


class ViewDispatcher:
    """Total mapping from View to a collaborator with ``render(request_view)``"""

    def __init__(self, collaborators: Mapping[View, object],
                 default_view: View = View.DASHBOARD):
        if default_view not in collaborators:
            raise ValueError(f"No collaborator for default view {default_view.value}")
        self.collaborators = dict(collaborators)
        self.default_view = default_view
        missing = [view.value for view in View if view not in self.collaborators]
        if missing:
            logger.warning("Views without a collaborator fall back to %s: %s",
                           default_view.value, ", ".join(missing))

    def collaborator_for(self, view: View):
        collaborator = self.collaborators.get(view)
        if collaborator is None:
            return self.collaborators[self.default_view]
        return collaborator

    def dispatch(self, view: View, request_view: Callable[[View], View]) -> dict:
        """Render ``view``; the collaborator receives only ``request_view``"""
        return self.collaborator_for(view).render(request_view)
