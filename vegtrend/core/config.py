"""core.config
---------------

Configuration loader for vegtrend. Settings come from class defaults and can
be overridden from a YAML/TOML/JSON file; values are retrieved via
:py:meth:`ConfigManager.get`.
"""

import os
import json
import yaml
import toml


class ConfigValidationError(Exception):
    """Raised when configuration loading or validation fails."""


class ConfigManager:
    """
    Loads and manages run configuration: file layout conventions, sensor
    band order, site attribute names and output naming.
    """

    # Vector formats accepted for study-site polygons
    SUPPORTED_INPUT_FORMATS: tuple[str, ...] = (
        ".shp",
        ".geojson",
        ".gpkg",
        ".json",
        ".kml",
        ".gml",
    )

    # Scene raster file extensions picked up from the scene directory
    RASTER_EXTENSIONS: tuple[str, ...] = (".tif", ".tiff")

    DEFAULT_INDEX: str = "ndvi"
    VALUE_COL_TEMPLATE: str = "mean_{index}"
    DEFAULT_SENSOR: str = "generic_6band"
    DEFAULT_PLOT_TITLE: str = "Seasonal {index} by vegetation type"

    def __init__(self, config_path=None):
        self.config = {
            "default_index": self.DEFAULT_INDEX,
            "value_col_template": self.VALUE_COL_TEMPLATE,
            "sensor": self.DEFAULT_SENSOR,
            "site_id_col": "id",
            "site_label_col": "veg_type",
            "date_token_position": 0,
            "nodata": None,
            "plot_title": self.DEFAULT_PLOT_TITLE,
        }
        self.supported_input_formats = list(self.SUPPORTED_INPUT_FORMATS)
        self.raster_extensions = list(self.RASTER_EXTENSIONS)
        if config_path:
            self.load(config_path)

    def load(self, path: str) -> None:
        """
        Load configuration from a file (YAML, TOML, or JSON).
        Overwrites existing keys in self.config.
        """
        ext = os.path.splitext(path)[1].lower()
        try:
            with open(path, "r", encoding="utf-8") as f:
                if ext in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                elif ext == ".toml":
                    data = toml.load(f)
                elif ext == ".json":
                    data = json.load(f)
                else:
                    raise ConfigValidationError(f"Unsupported config format: {ext}")
        except Exception as e:
            raise ConfigValidationError(
                f"Failed to load config from {path}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigValidationError(f"Config file {path} did not produce a dict")
        if "raster_extensions" in data:
            self.raster_extensions = [
                e.lower() for e in data.pop("raster_extensions")
            ]
        self.config.update(data)

    def get(self, key, default=None):
        """
        Retrieve a configuration value by key, or return `default` if not present.
        Also exposes the list attributes `supported_input_formats` and
        `raster_extensions`.

        Args:
            key (str): The configuration parameter to look up.
            default:  The value to return if `key` is not found.
        """
        if key in self.config:
            return self.config.get(key, default)
        elif hasattr(self, key):
            return getattr(self, key)
        else:
            return default

    def merge(self, other: "ConfigManager") -> None:
        """
        Merge another ConfigManager into this one.
        Values in other.config override this.config; extension lists are
        unioned preserving order.
        """
        if not isinstance(other, ConfigManager):
            raise TypeError("Can only merge ConfigManager instances")
        self.config.update(other.config)
        self.supported_input_formats = list(
            dict.fromkeys(self.supported_input_formats + other.supported_input_formats)
        )
        self.raster_extensions = list(
            dict.fromkeys(self.raster_extensions + other.raster_extensions)
        )

    def get_value_col(self, index: str | None = None) -> str:
        """Return the value column name for a given index."""
        idx = index or self.get("default_index", self.DEFAULT_INDEX)
        template = self.get("value_col_template", self.VALUE_COL_TEMPLATE)
        return template.format(index=idx)

    def get_plot_title(self, index: str | None = None) -> str:
        """Return the chart title for *index*."""
        idx = index or self.get("default_index", self.DEFAULT_INDEX)
        template = self.get("plot_title", self.DEFAULT_PLOT_TITLE)
        return template.format(index=idx.upper())
