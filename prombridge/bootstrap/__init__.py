"""Bootstrap wiring: the MetricsRuntime composition root."""

from prombridge.bootstrap.metrics import MetricsRuntime

__all__ = ["MetricsRuntime"]
