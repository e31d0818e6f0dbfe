"""vegtrend: seasonal vegetation-index trends for study sites."""

__version__ = "0.1.0"
