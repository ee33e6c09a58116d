API_PREFIX = '/api'

# Showing
SHOWING_BASE = f'{API_PREFIX}/showing'
SHOWING_AVAILABILITY = f'{SHOWING_BASE}/{{showing_id}}/availability'
SHOWING_HOLD = f'{SHOWING_BASE}/{{showing_id}}/hold'

# Booking
BOOKING_BASE = f'{API_PREFIX}/booking'
BOOKING_CANCEL = f'{BOOKING_BASE}/{{booking_id}}/cancel'
BOOKING_BY_REFERENCE = f'{BOOKING_BASE}/reference/{{reference}}'
BOOKING_BY_IDEMPOTENCY_KEY = f'{BOOKING_BASE}/idempotency/{{idempotency_key}}'
BOOKING_MY_BOOKINGS = f'{BOOKING_BASE}/my_booking'

# Admin
ADMIN_BASE = f'{API_PREFIX}/admin'
ADMIN_BOOKING_HISTORY = f'{ADMIN_BASE}/booking'
ADMIN_BOOKING_STATS = f'{ADMIN_BASE}/booking/stats'

# Headers
IDEMPOTENCY_KEY_HEADER = 'Idempotency-Key'
GUEST_SESSION_HEADER = 'X-Guest-Session'
