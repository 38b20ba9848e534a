"""Title and gameplay views plus the manager that switches between them."""

from lanefall.views.base import View, ViewAction, ViewContext, ViewManager

__all__ = ["View", "ViewAction", "ViewContext", "ViewManager"]
