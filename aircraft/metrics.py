"""
Prometheus metrics for the aircraft simulator.
"""

from prometheus_client import Counter, Gauge, Histogram

TICKS_TOTAL = Counter(
    'aircraft_ticks_total',
    'Total simulation ticks executed'
)

TICK_LATENCY = Histogram(
    'aircraft_tick_latency_seconds',
    'Wall time spent inside one tick, including network calls',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

TOKEN_ACQUISITIONS = Counter(
    'aircraft_token_acquisitions_total',
    'Token acquisition attempts',
    ['status']  # success, failed
)

TOKEN_INVALIDATIONS = Counter(
    'aircraft_token_invalidations_total',
    'Tokens discarded after a failed dependent call',
    ['reason']  # unauthorized, transient
)

BROADCASTS_TOTAL = Counter(
    'aircraft_broadcasts_total',
    'Remote ID broadcasts',
    ['kind', 'status']  # kind: identity, position
)

ORDER_POLLS = Counter(
    'aircraft_order_polls_total',
    'Order service polls',
    ['status']
)

ORDERS_RECEIVED = Counter(
    'aircraft_orders_received_total',
    'Flight plans received from the order service',
    ['outcome']  # inserted, updated, ignored, invalid
)

PLANS_ACTIVATED = Counter(
    'aircraft_plans_activated_total',
    'Flight plans promoted to current plan'
)

PLANS_COMPLETED = Counter(
    'aircraft_plans_completed_total',
    'Flight plans completed'
)

PENDING_PLANS = Gauge(
    'aircraft_pending_plans',
    'Flight plans waiting for their origin window'
)

PARCEL_SCANS = Counter(
    'aircraft_parcel_scans_total',
    'Parcel scans reported to the cargo service',
    ['stage', 'status']  # stage: acquire, deliver
)

GROUND_SPEED = Gauge(
    'aircraft_ground_speed_mps',
    'Current ground speed'
)

ALTITUDE = Gauge(
    'aircraft_altitude_meters',
    'Current altitude'
)
