"""
Category selection engine.

SelectionState is an immutable value; every operation here returns a new
state and never raises for an unknown path, because the tree index and the
selection may be transiently out of sync.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from pricewatch.core.category_tree import CategoryNode, descendants_of


class ViewMode(str, Enum):
    """Which part of the state drives the product query."""
    ACTIVE = "active"
    SELECTED = "selected"


class CheckState(str, Enum):
    """Tri-state checkbox value."""
    CHECKED = "checked"
    INDETERMINATE = "indeterminate"
    UNCHECKED = "unchecked"


EVENT_TYPES = ("toggle", "activate", "set_mode", "clear")


@dataclass(frozen=True)
class SelectionState:
    """
    Selection of one console view.

    Attributes:
        selected: Selected category paths (membership only)
        active: Drill-in category path, "" when none
        mode: Query mode
    """
    selected: frozenset = field(default_factory=frozenset)
    active: str = ""
    mode: ViewMode = ViewMode.ACTIVE


def _closure(index: Mapping[str, CategoryNode], path: str) -> list:
    return [path] + descendants_of(index, path)


def toggle_subtree(
    state: SelectionState,
    index: Mapping[str, CategoryNode],
    path: str
) -> SelectionState:
    """
    Toggle a node together with all of its descendants.

    If `path` itself is selected, the whole subtree is removed; otherwise it
    is added. The decision looks only at the node's own membership, not at
    its tri-state. Toggling twice restores the original selection when the
    subtree was entirely selected or entirely unselected. A partially
    selected subtree comes back fully selected if `path` was a member, and
    empty otherwise.
    """
    closure = _closure(index, path)
    if path in state.selected:
        selected = state.selected.difference(closure)
    else:
        selected = state.selected.union(closure)
    return replace(state, selected=frozenset(selected))


def state_of(
    index: Mapping[str, CategoryNode],
    selected: Iterable[str],
    path: str
) -> CheckState:
    """Tri-state of a node given the current selection."""
    if path not in index:
        return CheckState.UNCHECKED

    if not isinstance(selected, (set, frozenset)):
        selected = frozenset(selected)

    closure = _closure(index, path)
    have = sum(1 for p in closure if p in selected)
    if have == 0:
        return CheckState.UNCHECKED
    if have == len(closure):
        return CheckState.CHECKED
    return CheckState.INDETERMINATE


def set_active(state: SelectionState, path: str) -> SelectionState:
    """Replace the active path. Not validated against the index."""
    return replace(state, active=path or "")


def clear_selection(state: SelectionState) -> SelectionState:
    """Drop every selected path; the active path stays."""
    return replace(state, selected=frozenset())


def set_mode(state: SelectionState, mode: Union[ViewMode, str]) -> SelectionState:
    """Switch between active and selected mode."""
    return replace(state, mode=ViewMode(mode))


def apply_event(
    state: SelectionState,
    index: Mapping[str, CategoryNode],
    event_type: str,
    path: Optional[str] = None,
    mode: Optional[Union[ViewMode, str]] = None
) -> SelectionState:
    """
    Dispatch one input event from the tree view.

    Raises:
        ValueError: Unknown event type or a missing argument
    """
    if event_type == "toggle":
        if not path:
            raise ValueError("toggle requires a path")
        return toggle_subtree(state, index, path)
    if event_type == "activate":
        if path is None:
            raise ValueError("activate requires a path")
        return set_active(state, path)
    if event_type == "set_mode":
        if mode is None:
            raise ValueError("set_mode requires a mode")
        return set_mode(state, mode)
    if event_type == "clear":
        return clear_selection(state)
    raise ValueError(f"Unknown selection event: {event_type}")


def state_to_dict(state: SelectionState) -> Dict[str, Any]:
    return {
        "selected": sorted(state.selected),
        "active": state.active,
        "mode": state.mode.value,
    }


def state_from_dict(data: Mapping[str, Any]) -> SelectionState:
    mode = data.get("mode") or ViewMode.ACTIVE.value
    try:
        view_mode = ViewMode(mode)
    except ValueError:
        view_mode = ViewMode.ACTIVE
    return SelectionState(
        selected=frozenset(data.get("selected") or []),
        active=data.get("active") or "",
        mode=view_mode,
    )
