"""
prombridge - metric export pipeline

Serves a process's Prometheus registry over HTTP on demand (pull) and
forwards it periodically to a Nightingale-style collector as JSON (push).

Both delivery paths share the same name filters and the same snapshot
source, and are otherwise independent.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
