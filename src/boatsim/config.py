"""
Simulation Configuration
========================

Dataclass configuration for voyage simulations, loadable from JSON.

Example file:

    {
        "start_lat": 49.2, "start_lon": -123.9,
        "boat_type": 1, "desired_course": 270,
        "dt": 1.0, "duration": 7200, "seed": 42,
        "environment": {"wind_direction": 315, "wind_speed": 8.0,
                        "land_mask_file": "data/strait_mask.npz"},
        "commands": [{"at": 0, "action": "start"},
                     {"at": 3600, "action": "course", "value": 200}]
    }

Relative file paths are resolved against the directory of the JSON file.
"""

import json
import math
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from .geo import GeoVec
from .environment.ocean import GridOceanProvider, NoOceanData, OceanProvider, UniformOcean
from .environment.terrain import GridWaterMap, OpenWaterMap, WaterMap
from .environment.weather import GridWindProvider, UniformWindProvider, WindProvider

logger = logging.getLogger(__name__)


PILOT_ACTIONS = ('start', 'stop', 'course', 'sails_down', 'sails_up')


@dataclass
class PilotCommand:
    """A pilot action applied at an elapsed simulation time."""
    at: float                       # Elapsed time (seconds)
    action: str                     # One of PILOT_ACTIONS
    value: Optional[float] = None   # Course (degrees) for 'course'

    def __post_init__(self):
        if self.action not in PILOT_ACTIONS:
            raise ValueError(f"Unknown pilot action '{self.action}' "
                             f"(expected one of {', '.join(PILOT_ACTIONS)})")
        if self.at < 0:
            raise ValueError(f"Pilot command time must be non-negative, got {self.at}")
        if self.action == 'course':
            if self.value is None or not math.isfinite(self.value):
                raise ValueError("Pilot 'course' command needs a numeric value")


@dataclass
class EnvironmentConfig:
    """Where wind, ocean and land data come from."""
    # Wind (uniform unless a grid file is given)
    wind_direction: float = 180.0           # Direction wind blows from (degrees)
    wind_speed: float = 7.0                 # m/s
    wind_file: Optional[str] = None         # .npz with lats, lons, u, v
    live_wind_file: Optional[str] = None    # Optional live observations, same layout

    # Ocean (none unless a grid file or uniform current/ice is given)
    ocean_file: Optional[str] = None        # .npz with lats, lons, u, v[, ice]
    current_direction: Optional[float] = None   # Direction current flows to (degrees)
    current_speed: float = 0.0              # m/s
    ice: float = 0.0                        # Ice cover (percent)

    # Terrain
    land_mask_file: Optional[str] = None    # .npz with lats, lons, water

    def build_wind(self) -> WindProvider:
        if self.wind_file:
            return GridWindProvider.from_npz(self.wind_file, self.live_wind_file)
        return UniformWindProvider(self.wind_direction, self.wind_speed)

    def build_ocean(self) -> OceanProvider:
        if self.ocean_file:
            return GridOceanProvider.from_npz(self.ocean_file)
        if self.current_direction is not None or self.ice > 0:
            current = GeoVec(self.current_direction or 0.0, self.current_speed)
            return UniformOcean(current, self.ice)
        return NoOceanData()

    def build_water_map(self) -> WaterMap:
        if self.land_mask_file:
            return GridWaterMap.from_npz(self.land_mask_file)
        return OpenWaterMap()

    def resolve_paths(self, base_dir: Path):
        """Make relative data file paths relative to base_dir."""
        for name in ('wind_file', 'live_wind_file', 'ocean_file', 'land_mask_file'):
            value = getattr(self, name)
            if value and not Path(value).is_absolute():
                setattr(self, name, str(base_dir / value))


@dataclass
class SimulationConfig:
    """Configuration for a voyage simulation."""
    # Boat
    start_lat: float = 0.0
    start_lon: float = 0.0
    boat_type: int = 0
    desired_course: float = 0.0
    sails_down: bool = False
    boat_profiles: Dict[int, str] = field(default_factory=dict)   # Extra type id -> profile JSON

    # Timing
    dt: float = 1.0                    # Tick duration (seconds)
    duration: float = 3600.0           # Simulated time (seconds)
    sample_interval: float = 60.0      # Track recording interval (seconds)

    # Behaviour
    seed: Optional[int] = None         # Course tie-break seed (None = nondeterministic)
    prefer_live_weather: bool = True

    environment: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    commands: List[PilotCommand] = field(
        default_factory=lambda: [PilotCommand(at=0.0, action='start')]
    )

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise ValueError on settings the simulator cannot run with."""
        if not self.dt > 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.duration < 0:
            raise ValueError(f"duration must be non-negative, got {self.duration}")
        if not self.sample_interval > 0:
            raise ValueError(f"sample_interval must be positive, got {self.sample_interval}")
        if not -90.0 <= self.start_lat <= 90.0:
            raise ValueError(f"start_lat must be within [-90, 90], got {self.start_lat}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """Build a configuration from a parsed JSON object."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        kwargs = dict(data)
        if 'environment' in kwargs:
            env = kwargs['environment'] or {}
            env_known = {f.name for f in fields(EnvironmentConfig)}
            env_unknown = set(env) - env_known
            if env_unknown:
                raise ValueError(f"Unknown environment keys: {', '.join(sorted(env_unknown))}")
            kwargs['environment'] = EnvironmentConfig(**env)
        if 'commands' in kwargs:
            try:
                kwargs['commands'] = [PilotCommand(**cmd) for cmd in kwargs['commands']]
            except TypeError as e:
                raise ValueError(f"Invalid pilot command: {e}") from e
        if 'boat_profiles' in kwargs:
            kwargs['boat_profiles'] = {int(k): v for k, v in kwargs['boat_profiles'].items()}

        return cls(**kwargs)

    @classmethod
    def from_json(cls, filepath: str) -> 'SimulationConfig':
        """Load configuration from a JSON file."""
        path = Path(filepath)
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls.from_dict(data)
        config.environment.resolve_paths(path.parent)
        config.boat_profiles = {
            type_id: str(path.parent / p) if not Path(p).is_absolute() else p
            for type_id, p in config.boat_profiles.items()
        }
        logger.info(f"Loaded configuration from {path}")
        return config
