import os
import matplotlib.pyplot as plt
import pandas as pd


def plot_time_series(
    df: pd.DataFrame,
    value_col: str,
    output_path: str,
    group_col: str = "veg_type",
    agg_freq: str = "D",
    title: str | None = None,
) -> str:
    """
    Plot the mean index value over time, one line per group, and save as PNG.

    Args:
        df: long table with columns [group_col, 'date', value_col]
        value_col: name of the column to plot (e.g., 'mean_ndvi')
        output_path: file path for the output PNG
        group_col: column whose categories get one line each (vegetation type)
        agg_freq: aggregation frequency: 'D', 'ME', or 'YE'
        title: chart title; defaults to "<value_col> by <group_col>"
    """
    df = df.assign(date=pd.to_datetime(df["date"]))
    if agg_freq and agg_freq != "D":
        grouped = (
            df.set_index("date")
            .groupby(group_col)[value_col]
            .resample(agg_freq)
            .mean()
            .reset_index()
        )
    else:
        grouped = df.groupby([group_col, "date"])[value_col].mean().reset_index()

    fig, ax = plt.subplots(figsize=(10, 5))
    for name, group in grouped.groupby(group_col):
        group = group.sort_values("date")
        ax.plot(group["date"], group[value_col], marker="o", label=str(name))
    ax.set_xlabel("Date")
    ax.set_ylabel(value_col)
    ax.set_title(title or f"{value_col} by {group_col} ({agg_freq})")
    ax.legend(title=group_col)
    ax.grid(True)
    fig.autofmt_xdate()

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path)
    plt.close(fig)
    return output_path
