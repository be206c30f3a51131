"""Internal constants shared across the library."""

BASE_URL = "https://app.candyhouse.co/api/sesame2"
USER_AGENT = "pysesame"

#: Seconds between the Unix epoch and 2001-01-01T00:00:00Z, the clock base
#: used by the accessory history format.
HISTORY_EPOCH_OFFSET = 978307200

#: Wait after a command before re-polling, so the bolt can finish moving.
SETTLE_DELAY_SECONDS = 2.5

#: Interval of unconditional history entries.
HEARTBEAT_INTERVAL_SECONDS = 600.0

DEFAULT_UPDATE_INTERVAL_SECONDS = 60.0

#: Below this percentage the REST shadow is treated as battery-critical
#: (the REST endpoint does not report the flag itself).
LOW_BATTERY_PERCENTAGE = 20

PUSH_TOPIC_TEMPLATE = "$aws/things/sesame2/shadow/name/{uuid}/update/accepted"

# ------------------------------------------------------------------
# Battery voltage → percentage table (Sesame 3, 2x CR123A)
# ------------------------------------------------------------------

_BATTERY_VOLTAGES: tuple[float, ...] = (6.0, 5.8, 5.7, 5.6, 5.4, 5.2, 5.1, 5.0, 4.8, 4.6)
_BATTERY_PERCENTAGES: tuple[float, ...] = (100.0, 50.0, 40.0, 32.0, 21.0, 13.0, 10.0, 7.0, 3.0, 0.0)


def voltage_to_percentage(voltage: float) -> int:
    """Interpolate a battery voltage to a 0-100 percentage."""
    if voltage >= _BATTERY_VOLTAGES[0]:
        return 100
    if voltage <= _BATTERY_VOLTAGES[-1]:
        return 0
    for i in range(len(_BATTERY_VOLTAGES) - 1):
        upper, lower = _BATTERY_VOLTAGES[i], _BATTERY_VOLTAGES[i + 1]
        if lower < voltage <= upper:
            upper_pct, lower_pct = _BATTERY_PERCENTAGES[i], _BATTERY_PERCENTAGES[i + 1]
            ratio = (voltage - lower) / (upper - lower)
            return int(round(lower_pct + ratio * (upper_pct - lower_pct)))
    return 0
