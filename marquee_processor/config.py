"""
Configuration schema for the occupancy service.

Zones, the OSC endpoint and the stationary timeout are all supplied here so a
venue can be re-mapped without touching code.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from marquee_zone.geometry.shapes import Rect


@dataclass(frozen=True)
class ZoneConfig:
    """One rectangular zone in display space. Position in the list = zone id."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        """Validate zone configuration."""
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Zone width/height must be >= 0, got {self.width}x{self.height}"
            )

    def to_rect(self) -> Rect:
        return Rect(x=self.x, y=self.y, width=self.width, height=self.height)


@dataclass(frozen=True)
class OSCConfig:
    """OSC broadcast endpoint."""

    ip: str = "127.0.0.1"
    port: int = 5005
    address: str = "/test"
    send_timeout: float = 0.25  # seconds, per datagram

    def __post_init__(self):
        """Validate OSC configuration."""
        if not self.ip:
            raise ValueError("OSC ip cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ValueError(
                f"OSC port must be in [1, 65535], got {self.port}"
            )

        if not self.address.startswith("/"):
            raise ValueError(
                f"OSC address must start with '/', got {self.address!r}"
            )

        if self.send_timeout <= 0:
            raise ValueError(
                f"send_timeout must be > 0, got {self.send_timeout}"
            )


@dataclass(frozen=True)
class PresenceConfig:
    """
    Main configuration for the occupancy service.

    Loaded from YAML and validated at startup. Immutable after construction.
    """

    service_id: str = "stage_01"

    # Detector input resolution (model space)
    model_resolution_wh: Tuple[int, int] = (416, 416)

    qualifying_label: str = "person"
    time_to_stationary_ms: int = 8000

    zones: List[ZoneConfig] = field(default_factory=list)

    osc_config: OSCConfig = field(default_factory=OSCConfig)

    log_level: str = "INFO"

    def __post_init__(self):
        """Validate presence configuration."""
        if not self.service_id:
            raise ValueError("service_id cannot be empty")

        width, height = self.model_resolution_wh
        if width <= 0 or height <= 0:
            raise ValueError(
                f"model_resolution_wh must have positive dimensions, got {self.model_resolution_wh}"
            )

        if not self.qualifying_label:
            raise ValueError("qualifying_label cannot be empty")

        if self.time_to_stationary_ms <= 0:
            raise ValueError(
                f"time_to_stationary_ms must be > 0, got {self.time_to_stationary_ms}"
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Invalid log_level: {self.log_level}")

    @property
    def zone_rects(self) -> List[Rect]:
        return [zone.to_rect() for zone in self.zones]

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PresenceConfig":
        """
        Build configuration from a parsed mapping.

        Raises:
            ValueError: If a section is malformed
        """
        data = data or {}

        try:
            zones = [ZoneConfig(**z) for z in data.get("zones", [])]
            osc_config = OSCConfig(**(data.get("osc_config") or {}))
        except TypeError as e:
            raise ValueError(f"Invalid configuration section: {e}")

        model_resolution_wh = tuple(data.get("model_resolution_wh", [416, 416]))
        if len(model_resolution_wh) != 2:
            raise ValueError(
                f"model_resolution_wh must be [width, height], got {list(model_resolution_wh)}"
            )

        return cls(
            service_id=data.get("service_id", "stage_01"),
            model_resolution_wh=model_resolution_wh,
            qualifying_label=data.get("qualifying_label", "person"),
            time_to_stationary_ms=int(data.get("time_to_stationary_ms", 8000)),
            zones=zones,
            osc_config=osc_config,
            log_level=data.get("log_level", "INFO"),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "PresenceConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            service_id: "stage_01"
            model_resolution_wh: [416, 416]
            qualifying_label: "person"
            time_to_stationary_ms: 8000

            zones:
              - {x: 0, y: 0, width: 250, height: 1000}
              - {x: 0, y: 0, width: 1000, height: 1000}

            osc_config:
              ip: "127.0.0.1"
              port: 5005
              address: "/test"

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If YAML is invalid or fails validation
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

        return cls.from_dict(data)
