"""
Prometheus-compatible counters for booking activity.

Tracks:
- Appointments created (by initial status)
- Appointments updated and deleted
- Booking attempts rejected because the slot was taken

Usage:
    from barbershop.lib.metrics import get_metrics_collector

    metrics = get_metrics_collector()
    metrics.increment_created(status="scheduled")
    metrics.increment_conflicts(operation="create")

    prometheus_output = metrics.export_prometheus()
"""
from typing import Dict, Tuple
from threading import Lock


HELP_TEXTS = {
    "appointments_created_total": "Total number of appointments booked",
    "appointments_updated_total": "Total number of appointment updates",
    "appointments_deleted_total": "Total number of appointments deleted",
    "slot_conflicts_total": "Total number of booking attempts rejected for an occupied slot",
}

CounterKey = Tuple[str, Tuple[Tuple[str, str], ...]]


class MetricsCollector:
    """
    Prometheus-style counter registry.

    Thread-safe for concurrent increments from request handlers.
    """

    def __init__(self):
        self._lock = Lock()
        self._counters: Dict[CounterKey, int] = {}

    def _get_counter_key(self, metric_name: str, labels: Dict[str, str]) -> CounterKey:
        """Generate unique key for counter with sorted labels."""
        return (metric_name, tuple(sorted(labels.items())))

    def _increment(self, metric_name: str, labels: Dict[str, str], amount: int = 1):
        key = self._get_counter_key(metric_name, labels)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def increment_created(self, status: str, amount: int = 1):
        self._increment("appointments_created_total", {"status": status.lower()}, amount)

    def increment_updated(self, amount: int = 1):
        self._increment("appointments_updated_total", {}, amount)

    def increment_deleted(self, amount: int = 1):
        self._increment("appointments_deleted_total", {}, amount)

    def increment_conflicts(self, operation: str, amount: int = 1):
        """
        Count a rejected booking.

        Args:
            operation: Lifecycle operation that hit the conflict (create, update)
            amount: Increment amount
        """
        self._increment("slot_conflicts_total", {"operation": operation.lower()}, amount)

    def export_prometheus(self) -> str:
        """
        Export all counters in Prometheus text format.

        Returns:
            Prometheus-compatible text output
        """
        output_lines = []

        metrics_by_name: Dict[str, list] = {}
        with self._lock:
            for (metric_name, labels_tuple), value in self._counters.items():
                metrics_by_name.setdefault(metric_name, []).append((dict(labels_tuple), value))

        for metric_name in sorted(metrics_by_name.keys()):
            help_text = HELP_TEXTS.get(metric_name, "Counter metric")
            output_lines.append(f"# HELP {metric_name} {help_text}")
            output_lines.append(f"# TYPE {metric_name} counter")

            for labels_dict, value in sorted(metrics_by_name[metric_name], key=lambda x: str(x[0])):
                if labels_dict:
                    labels_str = ",".join(f'{k}="{v}"' for k, v in sorted(labels_dict.items()))
                    output_lines.append(f"{metric_name}{{{labels_str}}} {value}")
                else:
                    output_lines.append(f"{metric_name} {value}")

            output_lines.append("")

        return "\n".join(output_lines)

    def get_counter_value(self, metric_name: str, labels: Dict[str, str]) -> int:
        key = self._get_counter_key(metric_name, labels)
        with self._lock:
            return self._counters.get(key, 0)

    def reset_all(self):
        """Reset all counters (for testing)."""
        with self._lock:
            self._counters.clear()


# Global singleton instance
_metrics_collector: MetricsCollector | None = None
_metrics_lock = Lock()


def get_metrics_collector() -> MetricsCollector:
    """Get global metrics collector singleton."""
    global _metrics_collector
    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def reset_metrics():
    """Reset global metrics collector (for testing)."""
    with _metrics_lock:
        if _metrics_collector is not None:
            _metrics_collector.reset_all()
