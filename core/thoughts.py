"""
Thought records and their JSON encoding.

Stored documents use the camelCase field names of the mobile app the journal
format comes from, so existing exports load unchanged:

    {"uuid": "@Quirk:thoughts:<id>", "automaticThought": "...",
     "challenge": "...", "alternativeThought": "...",
     "cognitiveDistortions": [{"slug": "labeling", "label": "...", "selected": true}],
     "createdAt": "2023-01-01T10:00:00.000Z", "updatedAt": "..."}

Fields this version doesn't model are kept in ``extra`` and written back.
"""
import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

KNOWN_FIELDS = (
    "uuid",
    "automaticThought",
    "challenge",
    "alternativeThought",
    "cognitiveDistortions",
    "createdAt",
    "updatedAt",
)


class ThoughtDecodeError(ValueError):
    """A stored value could not be turned into a SavedThought."""


@dataclass
class CognitiveDistortion:
    slug: str
    selected: bool = False
    label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"slug": self.slug, "selected": self.selected}
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CognitiveDistortion"]:
        """Build from stored data; returns None for null or malformed entries."""
        if not isinstance(data, dict):
            return None
        slug = data.get("slug")
        if not isinstance(slug, str) or not slug:
            return None
        label = data.get("label")
        return cls(
            slug=slug,
            selected=data.get("selected") is True,
            label=label if isinstance(label, str) else None,
        )


@dataclass
class Thought:
    """A thought record as entered, before it has been saved."""
    automatic_thought: str = ""
    challenge: str = ""
    alternative_thought: str = ""
    cognitive_distortions: List[CognitiveDistortion] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def selected_distortions(self) -> List[CognitiveDistortion]:
        return [d for d in self.cognitive_distortions if d is not None and d.selected]


@dataclass
class SavedThought(Thought):
    """A persisted thought. ``uuid`` is also its storage key."""
    uuid: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class ThoughtGroup:
    """Thoughts created on the same calendar day."""
    date: date
    thoughts: List[SavedThought] = field(default_factory=list)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (a trailing "Z" included) and datetime objects.
    Naive values are taken to be UTC.

    Raises:
        ThoughtDecodeError: value is missing or not a timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ThoughtDecodeError(f"Bad timestamp {value!r}") from e
    else:
        raise ThoughtDecodeError(f"Bad timestamp {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError) as e:
        # Offsets near year 1 or 9999 can push the UTC instant off the calendar
        raise ThoughtDecodeError(f"Timestamp out of range {value!r}") from e


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def thought_to_dict(thought: SavedThought) -> Dict[str, Any]:
    """Stored representation. Known fields win over anything in ``extra``."""
    data = dict(thought.extra)
    data.update({
        "uuid": thought.uuid,
        "automaticThought": thought.automatic_thought,
        "challenge": thought.challenge,
        "alternativeThought": thought.alternative_thought,
        "cognitiveDistortions": [
            d.to_dict() for d in thought.cognitive_distortions if d is not None
        ],
        "createdAt": format_timestamp(thought.created_at) if thought.created_at else None,
        "updatedAt": format_timestamp(thought.updated_at) if thought.updated_at else None,
    })
    return data


def thought_to_json(thought: SavedThought) -> str:
    """
    Serialize a saved thought.

    Raises:
        ValueError: circular reference or non-finite float in the payload
        TypeError: a value that has no JSON form
        RecursionError: payload nested too deeply to encode
    """
    return json.dumps(thought_to_dict(thought), allow_nan=False)


def thought_from_dict(data: Any, key: Optional[str] = None) -> SavedThought:
    """
    Build a SavedThought from decoded JSON.

    ``key`` is the storage key the document was read from; when given it is
    the record's uuid regardless of what the body says.

    Raises:
        ThoughtDecodeError: the document is not a usable thought
    """
    if not isinstance(data, dict):
        raise ThoughtDecodeError(f"Expected an object, got {type(data).__name__}")

    uuid = key if key is not None else data.get("uuid")
    if not isinstance(uuid, str) or not uuid.strip():
        raise ThoughtDecodeError("Thought has no uuid")

    created_at = parse_timestamp(data.get("createdAt"))
    raw_updated = data.get("updatedAt")
    updated_at = parse_timestamp(raw_updated) if raw_updated is not None else created_at

    raw_distortions = data.get("cognitiveDistortions")
    if not isinstance(raw_distortions, list):
        raw_distortions = []
    distortions = [CognitiveDistortion.from_dict(d) for d in raw_distortions]

    return SavedThought(
        uuid=uuid,
        automatic_thought=_text(data.get("automaticThought")),
        challenge=_text(data.get("challenge")),
        alternative_thought=_text(data.get("alternativeThought")),
        cognitive_distortions=[d for d in distortions if d is not None],
        extra={k: v for k, v in data.items() if k not in KNOWN_FIELDS},
        created_at=created_at,
        updated_at=updated_at,
    )


def thought_from_json(raw: Any, key: Optional[str] = None) -> SavedThought:
    """
    Parse a stored value.

    Raises:
        ThoughtDecodeError: value is null, empty, not JSON or not a thought
    """
    if raw is None:
        raise ThoughtDecodeError("No value stored")
    if not isinstance(raw, str) or not raw.strip():
        raise ThoughtDecodeError("Stored value is empty or not text")
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise ThoughtDecodeError(f"Stored value is not JSON: {e}") from e
    return thought_from_dict(data, key=key)
