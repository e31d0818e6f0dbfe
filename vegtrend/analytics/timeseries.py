"""
Module `analytics.timeseries` provides the TimeSeries class, which wraps
the long per-site index table and supports aggregation and grouping.
"""

from dataclasses import dataclass
from typing import Literal

import pandas as pd

from vegtrend.core.config import ConfigManager
from vegtrend.core.logger import Logger

log = Logger.get_logger(__name__)


@dataclass
class TimeSeries:
    """Pandas DataFrame wrapper for a single index time series per site."""

    df: pd.DataFrame
    index: str
    id_col: str = "id"
    value_column: str | None = None

    @property
    def value_col(self) -> str:
        return self.value_column or f"mean_{self.index}"

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        index: str = ConfigManager.DEFAULT_INDEX,
        id_col: str = "id",
        value_col: str | None = None,
    ) -> "TimeSeries":
        """
        Create a TimeSeries from a DataFrame with columns [id_col, 'date', value_col];
        value_col defaults to f'mean_{index}'.
        Ensures 'date' column is parsed as datetime.
        """
        df_copy = df.copy()
        df_copy["date"] = pd.to_datetime(df_copy["date"])
        return cls(df_copy, index, id_col, value_col)

    def aggregate(self, freq: Literal["D", "ME", "YE"]) -> "TimeSeries":
        """
        Aggregate the time series per site to the given frequency:
          'D' = daily, 'ME' = monthly mean, 'YE' = yearly mean.
        Per-site attribute columns (e.g. ``veg_type``) are carried over.
        Returns a new TimeSeries.
        """
        log.debug("Aggregating TimeSeries to freq %s", freq)
        df_indexed = self.df.set_index([self.id_col, "date"])
        aggregated = (
            df_indexed[self.value_col]
            .groupby(level=0)
            .resample(freq, level=1)
            .mean()
            .reset_index()
        )
        site_cols = [
            c
            for c in self.df.columns
            if c not in (self.id_col, "date", self.value_col, "gapfilled")
        ]
        if site_cols:
            site_attrs = (
                self.df.groupby(self.id_col, sort=False)[site_cols]
                .first()
                .reset_index()
            )
            aggregated = aggregated.merge(site_attrs, on=self.id_col, how="left")
            aggregated = aggregated[[self.id_col, *site_cols, "date", self.value_col]]
        return TimeSeries(aggregated, self.index, self.id_col, self.value_column)

    def fill_gaps(self, method: Literal["linear", "time"] = "time") -> "TimeSeries":
        """Interpolate missing values per site, flagging them in ``gapfilled``."""
        value_col = self.value_col
        filled_parts = []
        for pid, grp in self.df.groupby(self.id_col, sort=False):
            grp = grp.sort_values("date").set_index("date")
            original_missing = grp[value_col].isna()
            grp[value_col] = grp[value_col].interpolate(method=method).ffill().bfill()
            grp["gapfilled"] = original_missing
            grp = grp.reset_index()
            grp[self.id_col] = pid
            filled_parts.append(grp)

        filled_df = pd.concat(filled_parts, ignore_index=True)
        return TimeSeries(filled_df, self.index, self.id_col, self.value_column)

    def by_group(self, group_col: str = "veg_type") -> pd.DataFrame:
        """Mean over the sites of each group for every date (NaN skipped)."""
        return (
            self.df.groupby([group_col, "date"])[self.value_col]
            .mean()
            .reset_index()
            .sort_values([group_col, "date"], kind="stable")
            .reset_index(drop=True)
        )

    def seasonal_profile(self, group_col: str = "veg_type") -> pd.DataFrame:
        """Mean per group per calendar month, pooling all years."""
        df = self.df.assign(month=self.df["date"].dt.month)
        return (
            df.groupby([group_col, "month"])[self.value_col]
            .agg(["mean", "std", "count"])
            .reset_index()
        )

    def to_csv(self, path: str) -> None:
        """Write the underlying DataFrame to CSV."""
        self.df.to_csv(path, index=False)
