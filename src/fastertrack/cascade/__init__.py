"""
Selection cascade.

Holds the dashboard selection state and propagates changes through
experiments -> runs -> metrics -> plots.
"""

from .controller import CascadeController, CascadeEvent, RequestSequencer
from .filters import build_run_filter
from .state import SelectionState, default_experiment_selection

__all__ = [
    "CascadeController",
    "CascadeEvent",
    "RequestSequencer",
    "SelectionState",
    "build_run_filter",
    "default_experiment_selection",
]
