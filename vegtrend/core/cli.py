"""
vegtrend CLI entrypoint - commands for deriving index layers, computing
per-site zonal time series and plotting the seasonal trend per vegetation type.
"""

import os
import sys

import pandas as pd
import click  # type: ignore
from click import echo

from vegtrend.analytics.indices import INDEX_REGISTRY
from vegtrend.analytics.timeseries import TimeSeries
from vegtrend.core.config import ConfigManager
from vegtrend.core.logger import Logger
from vegtrend.services.zonal import ZonalStatsService, compute_site_timeseries
from vegtrend.visualization.static_viz import plot_time_series

logger = Logger.get_logger(__name__)

INDEX_CHOICE = click.Choice(list(INDEX_REGISTRY.keys()))


def _fail(what: str, err: Exception) -> None:
    logger.error("%s failed", what, exc_info=True)
    echo(f"❌  {what} failed: {err}", err=True)
    sys.exit(1)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML/TOML/JSON file overriding default settings.",
)
@click.option("--sensor", default=None, help="Sensor band layout (see sensor_specs.json).")
@click.pass_context
def cli(ctx, config_path, sensor):
    """vegtrend: seasonal vegetation-index trends for study sites."""
    Logger.setup()
    try:
        cfg = ConfigManager(config_path)
    # pylint: disable=broad-exception-caught
    except Exception as e:
        _fail("Loading configuration", e)
    if sensor:
        cfg.config["sensor"] = sensor
    ctx.obj = cfg


@cli.command()
@click.argument("scene_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("out_dir", type=click.Path(file_okay=False))
@click.option("--index", "-i", type=INDEX_CHOICE, default=None, help="Spectral index.")
@click.pass_obj
def indices(cfg, scene_dir, out_dir, index):
    """Write one derived index GeoTIFF per scene in SCENE_DIR to OUT_DIR."""
    idx = index or cfg.get("default_index")
    try:
        svc = ZonalStatsService(config=cfg, logger=logger)
        paths = svc.export_layers(scene_dir, out_dir, idx)
        echo(f"✅  {len(paths)} {idx} layers written to {out_dir}/")
    # pylint: disable=broad-exception-caught
    except Exception as e:
        _fail("Index computation", e)


@cli.command()
@click.argument("scene_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("sites", type=click.Path(exists=True, dir_okay=False))
@click.option("--index", "-i", type=INDEX_CHOICE, default=None, help="Spectral index.")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output CSV path (defaults to <index>_timeseries.csv)",
)
@click.pass_obj
def zonal(cfg, scene_dir, sites, index, output):
    """Compute the per-site mean index for every scene in SCENE_DIR."""
    idx = index or cfg.get("default_index")
    output = output or f"{idx}_timeseries.csv"
    try:
        df = compute_site_timeseries(
            scene_dir, sites, index=idx, config=cfg, logger=logger, output=output
        )
        echo(f"✅  {len(df)} site observations saved to {output}")
    # pylint: disable=broad-exception-caught
    except Exception as e:
        _fail("Zonal statistics", e)


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_png", type=click.Path())
@click.option("--index", "-i", type=INDEX_CHOICE, default=None, help="Spectral index.")
@click.option(
    "--group-col", default=None, help="Column holding the vegetation type."
)
@click.option(
    "--agg",
    "-a",
    type=click.Choice(["D", "ME", "YE"]),
    default="D",
    help="Temporal aggregation: D, ME, YE",
)
@click.pass_obj
def plot(cfg, csv_path, output_png, index, group_col, agg):
    """Plot the time series in CSV_PATH, one line per vegetation type."""
    idx = index or cfg.get("default_index")
    group_col = group_col or cfg.get("site_label_col")
    try:
        df = pd.read_csv(csv_path, parse_dates=["date"])
        plot_time_series(
            df,
            cfg.get_value_col(idx),
            output_png,
            group_col=group_col,
            agg_freq=agg,
            title=cfg.get_plot_title(idx),
        )
        echo(f"✅  Chart written to {output_png}")
    # pylint: disable=broad-exception-caught
    except Exception as e:
        _fail("Plotting", e)


@cli.command()
@click.argument("scene_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("sites", type=click.Path(exists=True, dir_okay=False))
@click.argument("out_dir", type=click.Path(file_okay=False))
@click.option("--index", "-i", type=INDEX_CHOICE, default=None, help="Spectral index.")
@click.option(
    "--agg",
    "-a",
    type=click.Choice(["D", "ME", "YE"]),
    default="D",
    help="Temporal aggregation for the chart: D, ME, YE",
)
@click.pass_obj
def run(cfg, scene_dir, sites, out_dir, index, agg):
    """Full analysis: site time series CSV, seasonal profile CSV and chart."""
    idx = index or cfg.get("default_index")
    group_col = cfg.get("site_label_col")
    id_col = cfg.get("site_id_col")
    value_col = cfg.get_value_col(idx)
    csv_path = os.path.join(out_dir, f"{idx}_timeseries.csv")
    profile_path = os.path.join(out_dir, f"{idx}_seasonal_profile.csv")
    png_path = os.path.join(out_dir, f"{idx}_by_{group_col}.png")
    try:
        os.makedirs(out_dir, exist_ok=True)
        df = compute_site_timeseries(
            scene_dir, sites, index=idx, config=cfg, logger=logger, output=csv_path
        )
        ts = TimeSeries.from_dataframe(
            df, index=idx, id_col=id_col, value_col=value_col
        )
        ts.seasonal_profile(group_col).to_csv(profile_path, index=False)
        plot_time_series(
            df,
            value_col,
            png_path,
            group_col=group_col,
            agg_freq=agg,
            title=cfg.get_plot_title(idx),
        )
        echo(f"✅  Results saved under {out_dir}/")
    # pylint: disable=broad-exception-caught
    except Exception as e:
        _fail("Analysis", e)


if __name__ == "__main__":
    cli()  # pylint: disable=no-value-for-parameter
