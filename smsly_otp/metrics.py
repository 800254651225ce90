"""
OTP Metrics
===========
In-memory counters and histograms with Prometheus text export.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass


@dataclass
class MetricLabels:
    """Common labels for metrics."""
    service: str = "smsly-otp"
    environment: str = "production"


# Metric label for channel names that are not registered
UNKNOWN_CHANNEL = "unknown"


class MetricNames:
    SESSIONS_CREATED = "otp_sessions_created"
    VERIFICATIONS = "otp_verifications"
    DELIVERIES = "otp_deliveries"
    DELIVERY_SECONDS = "otp_delivery_seconds"
    SESSIONS_CLEANED = "otp_sessions_cleaned"


class OTPMetrics:
    """
    Simple in-memory metrics collector for the session manager.

    Labels are folded into the key, e.g. `otp_deliveries{channel=sms,success=true}`.
    """

    def __init__(self, labels: Optional[MetricLabels] = None):
        self.labels = labels or MetricLabels()
        self._counters: Dict[str, int] = {}
        # key -> [count, sum]
        self._histograms: Dict[str, List[float]] = {}

    def increment(self, name: str, value: int = 1, labels: Optional[Dict] = None) -> None:
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def observe(self, name: str, value: float, labels: Optional[Dict] = None) -> None:
        key = self._make_key(name, labels)
        stats = self._histograms.setdefault(key, [0, 0.0])
        stats[0] += 1
        stats[1] += value

    def _make_key(self, name: str, labels: Optional[Dict] = None) -> str:
        if labels:
            label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
            return f"{name}{{{label_str}}}"
        return name

    def get_counter(self, name: str, labels: Optional[Dict] = None) -> int:
        return self._counters.get(self._make_key(name, labels), 0)

    def get_histogram_stats(self, name: str, labels: Optional[Dict] = None) -> Dict:
        count, total = self._histograms.get(self._make_key(name, labels), (0, 0.0))
        if not count:
            return {"count": 0, "sum": 0, "avg": 0}
        return {"count": count, "sum": total, "avg": total / count}

    # Session manager hooks

    def session_created(self) -> None:
        self.increment(MetricNames.SESSIONS_CREATED)

    def verification(self, outcome: str) -> None:
        self.increment(MetricNames.VERIFICATIONS, labels={"outcome": outcome})

    def delivery(self, channel: str, success: bool, duration: float) -> None:
        """Record one delivery. Pass UNKNOWN_CHANNEL for unregistered names."""
        self.increment(
            MetricNames.DELIVERIES,
            labels={"channel": channel, "success": str(success).lower()},
        )
        self.observe(MetricNames.DELIVERY_SECONDS, duration, labels={"channel": channel})

    def sessions_cleaned(self, count: int) -> None:
        self.increment(MetricNames.SESSIONS_CLEANED, count)

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        lines = []
        base_labels = f'service="{self.labels.service}",env="{self.labels.environment}"'

        for key, value in sorted(self._counters.items()):
            name, extra = self._split_key(key)
            lines.append(f'{name}_total{{{base_labels}{extra}}} {value}')

        for key, (count, total) in sorted(self._histograms.items()):
            name, extra = self._split_key(key)
            lines.append(f'{name}_count{{{base_labels}{extra}}} {count}')
            lines.append(f'{name}_sum{{{base_labels}{extra}}} {total}')

        return '\n'.join(lines)

    @staticmethod
    def _split_key(key: str):
        if '{' not in key:
            return key, ''
        name, _, rest = key.partition('{')
        pairs = [p.split('=', 1) for p in rest.rstrip('}').split(',')]
        return name, ''.join(f',{k}="{v}"' for k, v in pairs)
