"""Unit Tests: display formatting, keyboards and callback patterns."""

import re
from datetime import date, datetime, timezone

from core.distortions import new_distortion_list, toggle_distortion
from core.thoughts import SavedThought
from utils.formatters import (
    HISTORY_LABEL_AUTOMATIC,
    format_thought_detail,
    format_thought_item,
    group_label,
    thought_headline,
    truncate,
)
from utils.keyboards import (
    ARCHIVE_THOUGHT,
    DISTORTION_TOGGLE,
    generate_distortion_keyboard,
    generate_thought_actions_keyboard,
)
from utils.patterns import (
    ARCHIVE_THOUGHT_PATTERN,
    DISTORTION_TOGGLE_PATTERN,
    HISTORY_LABEL_PATTERN,
    extract_callback_value,
)

UUID = "0f8fad5b-d9cb-469f-a165-70867728950e"


def _thought(**kwargs):
    moment = datetime(2023, 1, 1, 9, 0, tzinfo=timezone.utc)
    fields = dict(
        uuid=f"@Quirk:thoughts:{UUID}",
        automatic_thought="I <always> fail",
        alternative_thought="Sometimes I succeed",
        cognitive_distortions=new_distortion_list(),
        created_at=moment,
        updated_at=moment,
    )
    fields.update(kwargs)
    return SavedThought(**fields)


def test_group_label():
    today = date(2023, 1, 2)
    assert group_label(today, today) == "Today"
    assert group_label(date(2023, 1, 1), today) == "01 Jan"
    assert group_label(date(2022, 12, 31), today) == "31 Dec 2022"


def test_headline_follows_history_label():
    thought = _thought()
    assert thought_headline(thought) == "Sometimes I succeed"
    assert thought_headline(thought, HISTORY_LABEL_AUTOMATIC) == "I <always> fail"
    assert thought_headline(_thought(alternative_thought="")) == "I <always> fail"
    assert thought_headline(_thought(automatic_thought="", alternative_thought="")) == "(empty)"


def test_truncate():
    assert truncate("abc", 5) == "abc"
    assert truncate("abcdef", 3) == "abc..."


def test_detail_is_html_escaped_and_lists_distortions():
    thought = _thought()
    toggle_distortion(thought.cognitive_distortions, "labeling")

    detail = format_thought_detail(thought)

    assert "I &lt;always&gt; fail" in detail
    assert "<b>Distortions:</b> Labeling" in detail
    assert "Challenge" not in detail


def test_item_shows_emoji_for_selected_distortions():
    thought = _thought()
    toggle_distortion(thought.cognitive_distortions, "labeling")

    item = format_thought_item(2, thought, HISTORY_LABEL_AUTOMATIC, prefix="(archived)")

    assert item.startswith("2. (archived) I &lt;always&gt; fail")
    assert "🏷" in item


def test_distortion_keyboard_round_trips_through_pattern():
    distortions = new_distortion_list()
    keyboard = generate_distortion_keyboard(distortions)

    data = [b.callback_data for row in keyboard for b in row]
    toggles = [d for d in data if d.startswith(DISTORTION_TOGGLE)]
    assert len(toggles) == len(distortions)
    for value in toggles:
        assert re.match(DISTORTION_TOGGLE_PATTERN, value)
        assert len(value.encode("utf-8")) <= 64


def test_action_keyboard_carries_only_the_suffix():
    thought = _thought()
    keyboard = generate_thought_actions_keyboard([(1, thought, UUID)], archived=False)

    data = [b.callback_data for row in keyboard for b in row]
    archive = [d for d in data if d.startswith(ARCHIVE_THOUGHT)]
    assert archive == [f"{ARCHIVE_THOUGHT}{UUID}"]
    assert re.match(ARCHIVE_THOUGHT_PATTERN, archive[0])
    assert extract_callback_value(archive[0], ARCHIVE_THOUGHT) == UUID
    assert all(len(d.encode("utf-8")) <= 64 for d in data)


def test_patterns_reject_unknown_values():
    assert not re.match(HISTORY_LABEL_PATTERN, "label:bogus")
    assert not re.match(ARCHIVE_THOUGHT_PATTERN, f"{ARCHIVE_THOUGHT}@Quirk:thoughts:{UUID}")
    assert extract_callback_value("other", ARCHIVE_THOUGHT) is None
    assert extract_callback_value(ARCHIVE_THOUGHT, ARCHIVE_THOUGHT) is None
