from utils.logger import get_logger
from utils.keyboards import (
    generate_distortion_keyboard,
    generate_history_label_keyboard,
    generate_options_keyboard,
    generate_thought_actions_keyboard,
    make_markup,
)
from utils.formatters import (
    readable_datetime,
    readable_date,
    group_label,
    format_thought_detail,
    format_thought_item,
)
from utils.validators import (
    is_valid_saved_thought,
    is_valid_thought_group,
    validate_text_length,
)
