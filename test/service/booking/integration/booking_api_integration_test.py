"""
HTTP integration tests for the booking API

Test Coverage:
1. Availability and hold endpoints (members and guest sessions)
2. Finalize: member, guest, idempotent replay, seat conflicts
3. Cancel with refund quote, ownership and double-cancel guards
4. Lookup by reference and idempotency key
5. Admin history and stats, health and metrics
"""

from datetime import date, time
from decimal import Decimal

import pytest

from cinema_booking.platform.constant.route_constant import (
    ADMIN_BOOKING_HISTORY,
    ADMIN_BOOKING_STATS,
    BOOKING_BASE,
    BOOKING_BY_IDEMPOTENCY_KEY,
    BOOKING_BY_REFERENCE,
    BOOKING_CANCEL,
    BOOKING_MY_BOOKINGS,
    GUEST_SESSION_HEADER,
    IDEMPOTENCY_KEY_HEADER,
    SHOWING_AVAILABILITY,
    SHOWING_HOLD,
)
from test.shared.given import auth_headers, given_profile, given_showing


GUEST_HEADERS = {GUEST_SESSION_HEADER: 'guest-session-1'}
GUEST_DETAILS = {
    'guest_name': 'Ayesha Khan',
    'guest_email': 'ayesha@example.com',
    'guest_phone': '+92 300 1234567',
}


def _finalize_body(showing, labels, total, **extra):
    return {
        'showing_id': str(showing.showing_id),
        'seat_ids': [str(showing.seat(label)) for label in labels],
        'total_amount': total,
        **extra,
    }


async def _book(client, showing, labels, total, headers, **extra):
    response = await client.post(
        BOOKING_BASE, json=_finalize_body(showing, labels, total, **extra), headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestShowingApi:
    @pytest.mark.asyncio
    async def test_availability_lists_every_seat_with_price(self, client):
        showing = await given_showing(rows='AB', seats_per_row=2)

        response = await client.get(SHOWING_AVAILABILITY.format(showing_id=showing.showing_id))

        assert response.status_code == 200
        body = response.json()
        assert body['available_count'] == 4
        assert body['show_date'] == '2025-01-14'
        prices = {seat['label']: Decimal(seat['price']) for seat in body['seats']}
        assert prices == {
            'A1': Decimal('800.00'),
            'A2': Decimal('800.00'),
            'B1': Decimal('1000.00'),
            'B2': Decimal('1000.00'),
        }

    @pytest.mark.asyncio
    async def test_unknown_showing_is_not_found(self, client):
        response = await client.get(
            SHOWING_AVAILABILITY.format(showing_id='01936d8f-5e73-7c4e-a9c5-123456789abc')
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_guest_hold_blocks_other_guest(self, client):
        showing = await given_showing()
        a1 = str(showing.seat('A1'))
        url = SHOWING_HOLD.format(showing_id=showing.showing_id)

        first = await client.post(url, json={'seat_ids': [a1]}, headers=GUEST_HEADERS)
        second = await client.post(
            url, json={'seat_ids': [a1]}, headers={GUEST_SESSION_HEADER: 'guest-session-2'}
        )

        assert first.status_code == 201
        assert first.json()['accepted'] is True
        assert second.status_code == 409
        assert second.json()['code'] == 'seats_unavailable'
        assert second.json()['conflicting_seats'] == [a1]

        availability = await client.get(
            SHOWING_AVAILABILITY.format(showing_id=showing.showing_id), headers=GUEST_HEADERS
        )
        seat = next(s for s in availability.json()['seats'] if s['seat_id'] == a1)
        assert seat['status'] == 'held'
        assert seat['held_by_viewer'] is True

    @pytest.mark.asyncio
    async def test_hold_requires_member_or_guest_session(self, client):
        showing = await given_showing()

        response = await client.post(
            SHOWING_HOLD.format(showing_id=showing.showing_id),
            json={'seat_ids': [str(showing.seat('A1'))]},
        )

        assert response.status_code == 401
        assert response.json()['code'] == 'not_authenticated'

    @pytest.mark.asyncio
    async def test_overlong_guest_session_is_rejected(self, client):
        showing = await given_showing()

        response = await client.post(
            SHOWING_HOLD.format(showing_id=showing.showing_id),
            json={'seat_ids': [str(showing.seat('A1'))]},
            headers={GUEST_SESSION_HEADER: 's' * 65},
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'validation_error'
        assert response.json()['field'] == GUEST_SESSION_HEADER

    @pytest.mark.asyncio
    async def test_release_hold_frees_seat(self, client, customer):
        showing = await given_showing()
        url = SHOWING_HOLD.format(showing_id=showing.showing_id)
        headers = auth_headers(customer)
        await client.post(url, json={'seat_ids': [str(showing.seat('A1'))]}, headers=headers)

        response = await client.delete(url, headers=headers)

        assert response.status_code == 200
        assert response.json() == {'released': 1}
        availability = await client.get(SHOWING_AVAILABILITY.format(showing_id=showing.showing_id))
        assert availability.json()['available_count'] == 2


class TestFinalizeApi:
    @pytest.mark.asyncio
    async def test_member_books_held_seat_while_others_are_rejected(
        self, client, customer, another_customer
    ):
        showing = await given_showing()
        await client.post(
            SHOWING_HOLD.format(showing_id=showing.showing_id),
            json={'seat_ids': [str(showing.seat('A1'))]},
            headers=auth_headers(customer),
        )

        rejected = await client.post(
            BOOKING_BASE,
            json=_finalize_body(showing, ['A1'], '800.00'),
            headers=auth_headers(another_customer),
        )
        body = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))

        assert rejected.status_code == 409
        assert rejected.json()['conflicting_seats'] == [str(showing.seat('A1'))]
        assert body['status'] == 'confirmed'
        assert body['replayed'] is False
        assert Decimal(body['total_amount']) == Decimal('800.00')
        assert [seat['seat_label'] for seat in body['seats']] == ['A1']

    @pytest.mark.asyncio
    async def test_replay_returns_200_with_original_booking(self, client, customer):
        showing = await given_showing()
        headers = auth_headers(customer) | {IDEMPOTENCY_KEY_HEADER: 'order-1001'}

        first = await client.post(
            BOOKING_BASE, json=_finalize_body(showing, ['A1'], '800.00'), headers=headers
        )
        second = await client.post(
            BOOKING_BASE, json=_finalize_body(showing, ['A1'], '800.00'), headers=headers
        )
        lookup = await client.get(
            BOOKING_BY_IDEMPOTENCY_KEY.format(idempotency_key='order-1001'),
            headers=auth_headers(customer),
        )

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()['replayed'] is True
        assert second.json()['booking_id'] == first.json()['booking_id']
        assert lookup.status_code == 200
        assert lookup.json()['id'] == first.json()['booking_id']

    @pytest.mark.asyncio
    async def test_idempotency_lookup_hides_other_members_booking(
        self, client, customer, another_customer
    ):
        showing = await given_showing()
        await _book(
            client,
            showing,
            ['A1'],
            '800.00',
            auth_headers(customer) | {IDEMPOTENCY_KEY_HEADER: 'order-2002'},
        )

        response = await client.get(
            BOOKING_BY_IDEMPOTENCY_KEY.format(idempotency_key='order-2002'),
            headers=auth_headers(another_customer),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_guest_books_with_contact_details(self, client):
        showing = await given_showing()

        body = await _book(client, showing, ['A2'], '800.00', GUEST_HEADERS, **GUEST_DETAILS)
        lookup = await client.get(
            BOOKING_BY_REFERENCE.format(reference=body['booking_reference'])
        )

        assert lookup.status_code == 200
        assert lookup.json()['customer_name'] == 'Ayesha Khan'
        assert lookup.json()['guest_email'] == 'ayesha@example.com'

    @pytest.mark.asyncio
    async def test_guest_without_contact_details_is_rejected(self, client):
        showing = await given_showing()

        response = await client.post(
            BOOKING_BASE, json=_finalize_body(showing, ['A1'], '800.00'), headers=GUEST_HEADERS
        )

        assert response.status_code == 401
        assert response.json()['code'] == 'not_authenticated'

    @pytest.mark.asyncio
    async def test_guest_idempotency_lookup_requires_same_session(self, client):
        showing = await given_showing()
        body = await _book(
            client,
            showing,
            ['A1'],
            '800.00',
            GUEST_HEADERS | {IDEMPOTENCY_KEY_HEADER: 'guest-order-1'},
            **GUEST_DETAILS,
        )
        url = BOOKING_BY_IDEMPOTENCY_KEY.format(idempotency_key='guest-order-1')

        own = await client.get(url, headers=GUEST_HEADERS)
        anonymous = await client.get(url)
        other_session = await client.get(url, headers={GUEST_SESSION_HEADER: 'guest-session-2'})

        assert own.status_code == 200
        assert own.json()['id'] == body['booking_id']
        assert own.json()['guest_email'] == 'ayesha@example.com'
        for response in (anonymous, other_session):
            assert response.status_code == 404
            assert response.json()['code'] == 'booking_not_found'
            assert 'ayesha' not in response.text

    @pytest.mark.asyncio
    async def test_guest_key_reused_from_other_session_conflicts(self, client):
        showing = await given_showing()
        payload = _finalize_body(showing, ['A1'], '800.00', **GUEST_DETAILS)
        first = await client.post(
            BOOKING_BASE,
            json=payload,
            headers=GUEST_HEADERS | {IDEMPOTENCY_KEY_HEADER: 'guest-order-2'},
        )

        second = await client.post(
            BOOKING_BASE,
            json=payload,
            headers={
                GUEST_SESSION_HEADER: 'guest-session-2',
                IDEMPOTENCY_KEY_HEADER: 'guest-order-2',
            },
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()['code'] == 'idempotency_key_conflict'
        assert first.json()['booking_reference'] not in second.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'field,value',
        [('guest_name', 'A' * 256), ('guest_phone', '9' * 51)],
    )
    async def test_overlong_guest_details_are_rejected(self, client, field, value):
        showing = await given_showing()

        response = await client.post(
            BOOKING_BASE,
            json=_finalize_body(showing, ['A1'], '800.00', **(GUEST_DETAILS | {field: value})),
            headers=GUEST_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'validation_error'
        assert response.json()['field'] == field

    @pytest.mark.asyncio
    async def test_empty_seat_list_is_rejected(self, client, customer):
        showing = await given_showing()

        response = await client.post(
            BOOKING_BASE,
            json={'showing_id': str(showing.showing_id), 'seat_ids': [], 'total_amount': '0'},
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'no_seats_selected'

    @pytest.mark.asyncio
    async def test_wrong_total_is_rejected(self, client, customer):
        showing = await given_showing()

        response = await client.post(
            BOOKING_BASE,
            json=_finalize_body(showing, ['A1', 'A2'], '800.00'),
            headers=auth_headers(customer),
        )

        assert response.status_code == 400
        assert response.json()['field'] == 'total_amount'


class TestCancelApi:
    @pytest.mark.asyncio
    async def test_owner_cancels_with_full_refund(self, client, customer):
        showing = await given_showing()
        booking = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))

        response = await client.patch(
            BOOKING_CANCEL.format(booking_id=booking['booking_id']),
            headers=auth_headers(customer),
        )

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'cancelled'
        assert Decimal(body['refund_amount']) == Decimal('800.00')
        assert body['message'] == 'Booking cancelled. Full refund will be processed.'

    @pytest.mark.asyncio
    async def test_late_cancel_refunds_nothing_and_second_cancel_conflicts(
        self, client, customer
    ):
        # 18 hours before the show
        showing = await given_showing(show_date=date(2025, 1, 11), show_time=time(6, 0))
        booking = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))
        url = BOOKING_CANCEL.format(booking_id=booking['booking_id'])

        first = await client.patch(url, headers=auth_headers(customer))
        second = await client.patch(url, headers=auth_headers(customer))
        lookup = await client.get(
            BOOKING_BY_REFERENCE.format(reference=booking['booking_reference'])
        )

        assert first.status_code == 200
        assert Decimal(first.json()['refund_amount']) == Decimal('0.00')
        assert second.status_code == 409
        assert second.json()['code'] == 'already_cancelled'
        assert lookup.json()['status'] == 'cancelled'
        assert Decimal(lookup.json()['refund_amount']) == Decimal('0.00')

    @pytest.mark.asyncio
    async def test_other_customer_cannot_cancel(self, client, customer, another_customer):
        showing = await given_showing()
        booking = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))

        response = await client.patch(
            BOOKING_CANCEL.format(booking_id=booking['booking_id']),
            headers=auth_headers(another_customer),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_cancels_any_booking(self, client, customer, admin):
        showing = await given_showing()
        booking = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))

        response = await client.patch(
            BOOKING_CANCEL.format(booking_id=booking['booking_id']), headers=auth_headers(admin)
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_cancel_requires_authentication(self, client, customer):
        showing = await given_showing()
        booking = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))

        response = await client.patch(BOOKING_CANCEL.format(booking_id=booking['booking_id']))

        assert response.status_code == 401


class TestLookupApi:
    @pytest.mark.asyncio
    async def test_reference_lookup_is_case_insensitive_and_uses_profile_name(
        self, client, customer
    ):
        await given_profile(user_id=customer.user_id, full_name='Bilal Ahmed')
        showing = await given_showing()
        booking = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))

        response = await client.get(
            BOOKING_BY_REFERENCE.format(reference=booking['booking_reference'].lower())
        )

        assert response.status_code == 200
        assert response.json()['id'] == booking['booking_id']
        assert response.json()['customer_name'] == 'Bilal Ahmed'

    @pytest.mark.asyncio
    async def test_malformed_reference_is_not_found(self, client):
        response = await client.get(BOOKING_BY_REFERENCE.format(reference='not-a-reference'))

        assert response.status_code == 404
        assert response.json()['code'] == 'booking_not_found'

    @pytest.mark.asyncio
    async def test_my_bookings_lists_only_callers_bookings(
        self, client, customer, another_customer
    ):
        showing = await given_showing()
        mine = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))
        await _book(client, showing, ['A2'], '800.00', auth_headers(another_customer))

        response = await client.get(BOOKING_MY_BOOKINGS, headers=auth_headers(customer))

        assert response.status_code == 200
        assert [booking['id'] for booking in response.json()] == [mine['booking_id']]


class TestAdminApi:
    @pytest.mark.asyncio
    async def test_stats_and_history(self, client, customer, another_customer, admin):
        showing = await given_showing()
        kept = await _book(client, showing, ['A1'], '800.00', auth_headers(customer))
        cancelled = await _book(client, showing, ['A2'], '800.00', auth_headers(another_customer))
        await client.patch(
            BOOKING_CANCEL.format(booking_id=cancelled['booking_id']),
            headers=auth_headers(another_customer),
        )

        stats = await client.get(ADMIN_BOOKING_STATS, headers=auth_headers(admin))
        history = await client.get(
            ADMIN_BOOKING_HISTORY,
            params={'booking_status': 'confirmed', 'showing_id': str(showing.showing_id)},
            headers=auth_headers(admin),
        )

        assert stats.status_code == 200
        body = stats.json()
        assert body['total_bookings'] == 2
        assert body['confirmed_bookings'] == 1
        assert body['cancelled_bookings'] == 1
        assert Decimal(body['total_revenue']) == Decimal('800.00')
        assert Decimal(body['total_refunded']) == Decimal('800.00')
        assert body['today_bookings'] == 2
        assert Decimal(body['today_revenue']) == Decimal('800.00')
        assert history.status_code == 200
        assert [booking['id'] for booking in history.json()] == [kept['booking_id']]

    @pytest.mark.asyncio
    async def test_customer_cannot_read_admin_endpoints(self, client, customer):
        stats = await client.get(ADMIN_BOOKING_STATS, headers=auth_headers(customer))
        history = await client.get(ADMIN_BOOKING_HISTORY, headers=auth_headers(customer))

        assert stats.status_code == 403
        assert history.status_code == 403


class TestCommonEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    @pytest.mark.asyncio
    async def test_metrics_exposes_booking_counters(self, client, customer):
        showing = await given_showing()
        await _book(client, showing, ['A1'], '800.00', auth_headers(customer))

        response = await client.get('/metrics')

        assert response.status_code == 200
        assert 'booking_finalize_requests_total' in response.text
