"""In-memory analytics: spectral indices, zonal statistics, time series."""
