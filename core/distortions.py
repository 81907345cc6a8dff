"""
Catalogue of cognitive distortions a thought can be tagged with.

Slugs are stable and stored with each thought; labels and emoji are for display.
"""
from typing import Dict, List, Optional, Tuple

from core.thoughts import CognitiveDistortion

# (slug, label, emoji)
DISTORTIONS: List[Tuple[str, str, str]] = [
    ("all-or-nothing", "All or Nothing Thinking", "🌓"),
    ("overgeneralization", "Over-Generalization", "👯"),
    ("filtering", "Mental Filter", "🤔"),
    ("disqualifying-the-positive", "Disqualifying the Positive", "🔍"),
    ("mind-reading", "Mind Reading", "🧠"),
    ("fortune-telling", "Fortune Telling", "🔮"),
    ("magnification-of-the-negative", "Magnification of the Negative", "👺"),
    ("minimization-of-the-positive", "Minimization of the Positive", "🐜"),
    ("catastrophizing", "Catastrophizing", "🤯"),
    ("emotional-reasoning", "Emotional Reasoning", "🎭"),
    ("should-statements", "Should Statements", "✨"),
    ("labeling", "Labeling", "🏷"),
    ("blaming-self", "Self-Blaming", "👁"),
    ("blaming-others", "Other-Blaming", "🧛"),
]

_BY_SLUG: Dict[str, Tuple[str, str, str]] = {row[0]: row for row in DISTORTIONS}

DISTORTION_SLUGS = [slug for slug, _, _ in DISTORTIONS]


def label_for_slug(slug: str) -> str:
    row = _BY_SLUG.get(slug)
    return row[1] if row else slug


def emoji_for_slug(slug: str) -> Optional[str]:
    row = _BY_SLUG.get(slug)
    return row[2] if row else None


def new_distortion_list() -> List[CognitiveDistortion]:
    """Every known distortion, none selected; the starting point for a new thought."""
    return [
        CognitiveDistortion(slug=slug, label=label, selected=False)
        for slug, label, _ in DISTORTIONS
    ]


def toggle_distortion(distortions: List[CognitiveDistortion], slug: str) -> bool:
    """Flip ``selected`` on the distortion with this slug. Returns False if absent."""
    for distortion in distortions:
        if distortion.slug == slug:
            distortion.selected = not distortion.selected
            return True
    return False
