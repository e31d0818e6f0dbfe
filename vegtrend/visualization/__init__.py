"""Static charts for index time series."""

from .static_viz import plot_time_series

__all__ = ["plot_time_series"]
