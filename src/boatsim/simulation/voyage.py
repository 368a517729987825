"""
Voyage Simulator
================

Drives a single boat through a timed sequence of pilot commands,
advancing it in fixed ticks and recording its track.
"""

import csv
import json
import random
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from ..config import PilotCommand, SimulationConfig
from ..geo import GeoPos, distance
from ..performance.boat_types import BoatWindResponse
from .boat import Boat, BoatDynamics, BoatState

logger = logging.getLogger(__name__)


@dataclass
class TrackPoint:
    """A single recorded point of the track."""
    timestamp: float           # Elapsed time in seconds
    latitude: float
    longitude: float
    heading: float             # degrees
    desired_course: float      # degrees
    speed: float               # m/s over water
    distance_travelled: float  # m
    state: str
    twd: float                 # Wind direction (degrees, from)
    tws: float                 # Wind speed (m/s)


class VoyageSimulator:
    """
    Simulates one boat following timed pilot commands.

    Features:
    - Builds the environment from SimulationConfig
    - Applies start/stop/course/sails commands at their scheduled times
    - Records a track point every sample_interval seconds
    - Ends at the configured duration, or early once the boat is
      stopped with no commands left to restart it
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 dynamics: Optional[BoatDynamics] = None):
        """
        Initialize voyage simulator.

        Args:
            config: Simulation configuration
            dynamics: Prebuilt dynamics (overrides the environment in config)
        """
        self.config = config or SimulationConfig()

        if dynamics is None:
            dynamics = self._build_dynamics()
        self.dynamics = dynamics

        self.boat: Boat = self.dynamics.create_boat(
            self.config.start_lat, self.config.start_lon, self.config.boat_type
        )
        self.boat.set_desired_course(self.config.desired_course)
        self.boat.set_sails_down(self.config.sails_down)
        self._start_pos = self.boat.position.copy()

        self._pending: List[PilotCommand] = sorted(self.config.commands, key=lambda c: c.at)
        self.track: List[TrackPoint] = []
        self.elapsed_time = 0.0
        self._next_sample_time = 0.0

    def _build_dynamics(self) -> BoatDynamics:
        env = self.config.environment

        response = BoatWindResponse()
        for type_id, profile_file in self.config.boat_profiles.items():
            response.load_profile(type_id, profile_file)

        if self.config.seed is None:
            logger.debug("No seed configured; course tie-breaks are nondeterministic")

        return BoatDynamics(
            water_map=env.build_water_map(),
            ocean=env.build_ocean(),
            wind=env.build_wind(),
            response=response,
            rng=random.Random(self.config.seed),
            prefer_live_weather=self.config.prefer_live_weather,
        )

    def run(self) -> Dict[str, Any]:
        """
        Run the complete voyage.

        Returns:
            Dictionary with simulation results
        """
        logger.info(f"Starting voyage: type {self.boat.boat_type} at "
                    f"{self.boat.position.lat:.4f}, {self.boat.position.lon:.4f}, "
                    f"{self.config.duration:.0f}s in {self.config.dt:g}s ticks")

        while self.elapsed_time < self.config.duration:
            self._apply_due_commands()

            if self.boat.stopped and not self._pending:
                logger.info(f"Boat stopped with no further commands at t={self.elapsed_time:.0f}s")
                break

            self._maybe_record()
            self.step()

        self._record()
        return self.summary()

    def step(self) -> BoatState:
        """Advance the boat by one tick."""
        state = self.dynamics.advance(self.boat, self.config.dt)
        self.elapsed_time += self.config.dt
        return state

    def _apply_due_commands(self):
        while self._pending and self._pending[0].at <= self.elapsed_time:
            self.apply_command(self._pending.pop(0))

    def apply_command(self, command: PilotCommand):
        """Apply one pilot command to the boat."""
        logger.debug(f"t={self.elapsed_time:.0f}s pilot: {command.action}"
                     + (f" {command.value:g}" if command.value is not None else ""))

        if command.action == 'start':
            self.boat.start()
        elif command.action == 'stop':
            self.boat.stop()
        elif command.action == 'course':
            self.boat.set_desired_course(command.value)
            if self.boat.moving_to_sea and not self.dynamics.is_heading_toward_water(self.boat):
                logger.warning(f"No water within reach on course {self.boat.desired_course:.0f}")
        elif command.action == 'sails_down':
            self.boat.set_sails_down(True)
        elif command.action == 'sails_up':
            self.boat.set_sails_down(False)

    def _maybe_record(self):
        if self.elapsed_time >= self._next_sample_time:
            self._record()
            self._next_sample_time += self.config.sample_interval

    def _record(self):
        if self.track and self.track[-1].timestamp == self.elapsed_time:
            return

        wx = self.dynamics.wind.get_weather(self.boat.position, self.dynamics.prefer_live_weather)
        self.track.append(TrackPoint(
            timestamp=self.elapsed_time,
            latitude=self.boat.position.lat,
            longitude=self.boat.position.lon,
            heading=self.boat.heading,
            desired_course=self.boat.desired_course,
            speed=self.boat.speed,
            distance_travelled=self.boat.distance_travelled,
            state=self.boat.state.name,
            twd=wx.wind.angle,
            tws=wx.wind.mag,
        ))

    def summary(self) -> Dict[str, Any]:
        """Summary statistics of the voyage so far."""
        pos = self.boat.position
        elapsed = self.elapsed_time
        return {
            'elapsed_time': elapsed,
            'final_state': self.boat.state.name,
            'final_lat': pos.lat,
            'final_lon': pos.lon,
            'distance_travelled_m': self.boat.distance_travelled,
            'displacement_m': distance(self._start_pos, GeoPos(pos.lat, pos.lon)),
            'mean_speed_mps': self.boat.distance_travelled / elapsed if elapsed > 0 else 0.0,
            'track_points': len(self.track),
        }

    def save_results(self, output_dir: str):
        """
        Save track and summary to files.

        Creates:
        - summary.json: Summary statistics
        - track.csv: Recorded track points
        """
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        summary_file = output_path / 'summary.json'
        with open(summary_file, 'w') as f:
            json.dump(self.summary(), f, indent=2)
        logger.info(f"Saved summary to {summary_file}")

        track_file = output_path / 'track.csv'
        save_track_csv(self.track, track_file)
        logger.info(f"Saved track to {track_file}")


TRACK_FIELDS = list(TrackPoint.__dataclass_fields__)


def save_track_csv(track: List[TrackPoint], filepath: Path):
    """Write track points to CSV."""
    with open(filepath, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=TRACK_FIELDS)
        writer.writeheader()
        for point in track:
            writer.writerow(asdict(point))


def load_track_csv(filepath: Path) -> List[TrackPoint]:
    """Read track points written by save_track_csv."""
    points = []
    with open(filepath, 'r', newline='') as f:
        for row in csv.DictReader(f):
            points.append(TrackPoint(
                timestamp=float(row['timestamp']),
                latitude=float(row['latitude']),
                longitude=float(row['longitude']),
                heading=float(row['heading']),
                desired_course=float(row['desired_course']),
                speed=float(row['speed']),
                distance_travelled=float(row['distance_travelled']),
                state=row['state'],
                twd=float(row['twd']),
                tws=float(row['tws']),
            ))
    return points
