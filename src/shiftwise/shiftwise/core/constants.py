"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CLOCK_IN_WINDOW_MINUTES = 15
DEFAULT_CLOCK_OUT_GRACE_MINUTES = 30
DEFAULT_CLOCK_IN_RADIUS_METRES = 100

EARTH_RADIUS_METRES = 6_371_000

# Organization default: 4h -> 15m, 6h -> 30m, 8h -> 60m.
DEFAULT_BREAK_RULES_JSON = (
    '[{"minHours":4,"breakMinutes":15},{"minHours":6,"breakMinutes":30},{"minHours":8,"breakMinutes":60}]'
)

HOLIDAY_ACCRUAL_RATE = 0.1207

# Forecast fallbacks.
DEFAULT_HOURLY_RATE = 10.0
WEEKS_PER_MONTH = 4.33
