from prometheus_client import Counter, Histogram


class BookingMetrics:
    """
    Booking core metrics collector

    Tracks hold and finalize outcomes and cancellations.
    """

    def __init__(self) -> None:
        # ========== Hold Metrics ==========
        self.hold_requests = Counter(
            'seat_hold_requests_total',
            'Total seat hold requests',
            ['result'],  # result: accepted/conflict/invalid
        )

        self.holds_swept = Counter(
            'seat_holds_swept_total',
            'Expired seat holds removed by sweeps',
        )

        # ========== Finalize Metrics ==========
        self.finalize_requests = Counter(
            'booking_finalize_requests_total',
            'Total booking finalize requests',
            ['result'],  # result: confirmed/replayed/seats_unavailable/invalid/failed/timeout
        )

        self.finalize_duration = Histogram(
            'booking_finalize_duration_seconds',
            'Booking finalize duration including lock wait',
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
        )

        # ========== Cancellation Metrics ==========
        self.cancellations = Counter(
            'booking_cancellations_total',
            'Total booking cancellations',
            ['refund'],  # refund: full/partial/none
        )

    def record_hold(self, *, result: str) -> None:
        self.hold_requests.labels(result=result).inc()

    def record_finalize(self, *, result: str, duration: float | None = None) -> None:
        self.finalize_requests.labels(result=result).inc()
        if duration is not None:
            self.finalize_duration.observe(duration)

    def record_cancellation(self, *, refund: str) -> None:
        self.cancellations.labels(refund=refund).inc()


# Global metrics instance (prometheus collectors register once per process)
metrics = BookingMetrics()
