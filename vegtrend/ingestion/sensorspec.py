"""
Module `ingestion.sensorspec` defines the SensorSpec class, which encapsulates
sensor metadata (band ordering inside a scene file, nodata marker and
reflectance scaling).
"""

import json
from pathlib import Path
from typing import Optional


class SensorSpec:
    """
    Holds metadata for a sensor: band alias -> 1-based band index, etc.
    """

    _registry: Optional[dict] = None

    def __init__(
        self,
        name: str,
        bands: dict,
        nodata: float | None = None,
        scale_factor: float = 1.0,
        offset: float = 0.0,
    ):
        self.name = name
        self.bands = bands
        self.nodata = nodata
        self.scale_factor = scale_factor
        self.offset = offset

    def band_index(self, alias: str) -> int:
        """Return the 1-based band index of *alias* inside the scene file."""
        key = alias.lower()
        if key not in self.bands:
            raise ValueError(
                f"Band '{alias}' not defined for sensor '{self.name}'. "
                f"Available: {list(self.bands)}"
            )
        return int(self.bands[key])

    @property
    def band_count(self) -> int:
        """Minimum number of bands a scene file must carry."""
        return max(int(i) for i in self.bands.values())

    @classmethod
    def _load_registry(cls) -> dict:
        """Load sensor specs from resources/sensor_specs.json."""
        if cls._registry is None:
            base = Path(__file__).resolve().parent.parent
            spec_file = base / "resources" / "sensor_specs.json"
            with open(spec_file, "r", encoding="utf-8") as f:
                cls._registry = json.load(f)
        return cls._registry

    @classmethod
    def from_name(cls, name: str) -> "SensorSpec":
        """
        Factory method: create a SensorSpec by name from the registry.
        """
        registry = cls._load_registry()
        spec = registry.get(name)
        if spec is None:
            raise ValueError(
                f"Sensor '{name}' not found in sensor_specs.json. "
                f"Choose from: {list(registry)}"
            )
        return cls(
            name=name,
            bands=spec["bands"],
            nodata=spec.get("nodata"),
            scale_factor=spec.get("scale_factor", 1.0),
            offset=spec.get("offset", 0.0),
        )
