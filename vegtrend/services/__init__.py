"""Lightweight service-layer helpers used by the CLI and tests."""

from importlib import import_module

__all__ = [
    "ZonalStatsService",
    "compute_site_timeseries",
]


def __getattr__(name):
    if name in __all__:
        return getattr(import_module(".zonal", __name__), name)
    raise AttributeError(name)
