import pytest

from cinema_booking.platform.logging.loguru_io_utils import (
    MAX_CONTENT_LENGTH,
    mask_sensitive,
    should_mask_keyword,
    truncate_content,
)


pytestmark = pytest.mark.unit


class TestMaskSensitive:
    def test_masks_quoted_dict_values(self):
        masked = mask_sensitive({'guest_phone': '+92 300 1234567', 'guest_name': 'Ayesha'})

        assert '1234567' not in masked
        assert "'guest_phone': '********'" in masked
        assert 'Ayesha' in masked

    def test_masks_keyword_arguments(self):
        assert mask_sensitive('token=abc.def.ghi') == "token='********'"

    def test_leaves_other_data_untouched(self):
        data = {'seat_ids': ['A1']}
        assert mask_sensitive(data) is data

    def test_should_mask_keyword(self):
        assert should_mask_keyword('password', 'hunter2') == '********'
        assert should_mask_keyword('seat_ids', [1]) == [1]


class TestTruncateContent:
    def test_long_strings_are_cut(self):
        truncated = truncate_content('x' * (MAX_CONTENT_LENGTH + 20))

        assert truncated.startswith('x' * MAX_CONTENT_LENGTH)
        assert truncated.endswith('...(+20 chars)')

    def test_short_values_pass_through(self):
        assert truncate_content('short') == 'short'
        assert truncate_content(42) == 42
