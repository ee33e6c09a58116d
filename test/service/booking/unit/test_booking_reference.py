from datetime import datetime, timezone

import pytest

from cinema_booking.service.booking.domain.value_object.booking_reference import (
    generate_booking_reference,
    is_valid_booking_reference,
    normalize_booking_reference,
)


pytestmark = pytest.mark.unit

NOW = datetime(2025, 1, 14, 9, 0, tzinfo=timezone.utc)


class TestBookingReference:
    def test_generated_reference_matches_public_format(self):
        reference = generate_booking_reference(now=NOW)

        assert reference.startswith('BK20250114-')
        assert is_valid_booking_reference(reference)

    def test_prefix_is_uppercased(self):
        assert generate_booking_reference(now=NOW, prefix='cin').startswith('CIN20250114-')

    def test_suffixes_differ_between_calls(self):
        references = {generate_booking_reference(now=NOW) for _ in range(50)}
        assert len(references) > 1

    def test_normalize_is_case_and_whitespace_insensitive(self):
        assert normalize_booking_reference('  bk20250114-7qk2zd ') == 'BK20250114-7QK2ZD'

    @pytest.mark.parametrize(
        'code',
        ['bk20250114-7qk2zd', 'BK2025011-7QK2ZD', 'BK20250114-7QK2Z', 'BK20250114_7QK2ZD', ''],
    )
    def test_rejects_malformed_codes(self, code):
        assert not is_valid_booking_reference(code)
