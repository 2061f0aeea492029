"""
Football formations by number of starters.

Coordinates are normalized (0..1) relative to the field:
x is horizontal (0 = left, 1 = right), y is vertical
(0 = own goal line, 1 = opponent goal line).
Slot index is the position in the list.
"""
from typing import Any, Dict, List, Optional, Tuple, Union

ROLES = ("GK", "DEF", "MID", "ATT")


def _slots(layout: List[Tuple[str, float, float]]) -> List[Dict[str, Any]]:
    return [
        {"index": index, "role": role, "x": x, "y": y}
        for index, (role, x, y) in enumerate(layout)
    ]


FOOTBALL_FORMATIONS_BY_COUNT: Dict[int, Dict[str, Dict[str, Any]]] = {
    11: {
        "4-4-2": {
            "starters": 11,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.15, 0.25), ("DEF", 0.35, 0.25), ("DEF", 0.65, 0.25), ("DEF", 0.85, 0.25),
                ("MID", 0.15, 0.45), ("MID", 0.35, 0.45), ("MID", 0.65, 0.45), ("MID", 0.85, 0.45),
                ("ATT", 0.4, 0.7), ("ATT", 0.6, 0.7),
            ]),
        },
        "4-3-3": {
            "starters": 11,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.15, 0.22), ("DEF", 0.35, 0.22), ("DEF", 0.65, 0.22), ("DEF", 0.85, 0.22),
                ("MID", 0.25, 0.45), ("MID", 0.5, 0.48), ("MID", 0.75, 0.45),
                ("ATT", 0.2, 0.72), ("ATT", 0.5, 0.75), ("ATT", 0.8, 0.72),
            ]),
        },
        "3-5-2": {
            "starters": 11,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.25, 0.22), ("DEF", 0.5, 0.2), ("DEF", 0.75, 0.22),
                ("MID", 0.15, 0.42), ("MID", 0.35, 0.47), ("MID", 0.5, 0.5), ("MID", 0.65, 0.47), ("MID", 0.85, 0.42),
                ("ATT", 0.4, 0.72), ("ATT", 0.6, 0.72),
            ]),
        },
        "3-4-3": {
            "starters": 11,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.25, 0.22), ("DEF", 0.5, 0.2), ("DEF", 0.75, 0.22),
                ("MID", 0.2, 0.45), ("MID", 0.4, 0.48), ("MID", 0.6, 0.48), ("MID", 0.8, 0.45),
                ("ATT", 0.2, 0.72), ("ATT", 0.5, 0.76), ("ATT", 0.8, 0.72),
            ]),
        },
    },
    7: {
        "2-3-1": {
            "starters": 7,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.35, 0.25), ("DEF", 0.65, 0.25),
                ("MID", 0.2, 0.5), ("MID", 0.5, 0.52), ("MID", 0.8, 0.5),
                ("ATT", 0.5, 0.78),
            ]),
        },
        "3-2-1": {
            "starters": 7,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.3, 0.25), ("DEF", 0.5, 0.28), ("DEF", 0.7, 0.25),
                ("MID", 0.35, 0.5), ("MID", 0.65, 0.5),
                ("ATT", 0.5, 0.78),
            ]),
        },
        "2-2-2": {
            "starters": 7,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.35, 0.25), ("DEF", 0.65, 0.25),
                ("MID", 0.35, 0.5), ("MID", 0.65, 0.5),
                ("ATT", 0.35, 0.78), ("ATT", 0.65, 0.78),
            ]),
        },
    },
    5: {
        "2-2": {
            "starters": 5,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.35, 0.3), ("DEF", 0.65, 0.3),
                ("ATT", 0.35, 0.7), ("ATT", 0.65, 0.7),
            ]),
        },
        "1-2-1": {
            "starters": 5,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.5, 0.25),
                ("MID", 0.35, 0.5), ("MID", 0.65, 0.5),
                ("ATT", 0.5, 0.78),
            ]),
        },
        "3-1": {
            "starters": 5,
            "slots": _slots([
                ("GK", 0.5, 0.05),
                ("DEF", 0.3, 0.3), ("DEF", 0.5, 0.32), ("DEF", 0.7, 0.3),
                ("ATT", 0.5, 0.75),
            ]),
        },
    },
}


def formations_for_count(starters_count: Union[int, str, None]) -> Dict[str, Dict[str, Any]]:
    """Formations available for a player count; {} when there are none."""
    try:
        count = int(starters_count)
    except (TypeError, ValueError):
        return {}
    return FOOTBALL_FORMATIONS_BY_COUNT.get(count, {})


def get_formation(starters_count: Union[int, str, None], name: str) -> Optional[Dict[str, Any]]:
    return formations_for_count(starters_count).get(name)
