"""
Track Exporter
==============

Exports a recorded voyage track to GPX format for use with
OpenSeaMap and other mapping applications.

Usage:
    python -m boatsim.simulation.export_track results/track.csv

    # With custom output path and start time
    python -m boatsim.simulation.export_track results/track.csv \\
        -o voyage.gpx --start 2026-06-01T08:00:00
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional
import xml.etree.ElementTree as ET
from xml.dom import minidom

from .voyage import TrackPoint, load_track_csv

logger = logging.getLogger(__name__)


GPX_NS = 'http://www.topografix.com/GPX/1/1'


def create_gpx(
    points: List[TrackPoint],
    track_name: str = "Simulated Voyage",
    start_time: Optional[datetime] = None,
) -> str:
    """
    Create GPX XML from track points.

    Args:
        points: Recorded track points
        track_name: Name for the track
        start_time: Wall-clock time of elapsed 0 (defaults to now). Naive
                    times are taken as UTC; aware times are converted to UTC.

    Returns:
        GPX XML string
    """
    if start_time is None:
        start_time = datetime.now(timezone.utc)
    elif start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=timezone.utc)
    else:
        start_time = start_time.astimezone(timezone.utc)

    gpx = ET.Element('gpx')
    gpx.set('version', '1.1')
    gpx.set('creator', 'boatsim')
    gpx.set('xmlns', GPX_NS)
    gpx.set('xmlns:xsi', 'http://www.w3.org/2001/XMLSchema-instance')
    gpx.set('xsi:schemaLocation',
            f'{GPX_NS} http://www.topografix.com/GPX/1/1/gpx.xsd')

    metadata = ET.SubElement(gpx, 'metadata')
    ET.SubElement(metadata, 'name').text = track_name
    ET.SubElement(metadata, 'time').text = start_time.strftime('%Y-%m-%dT%H:%M:%SZ')

    trk = ET.SubElement(gpx, 'trk')
    ET.SubElement(trk, 'name').text = track_name
    trkseg = ET.SubElement(trk, 'trkseg')

    for point in points:
        trkpt = ET.SubElement(trkseg, 'trkpt')
        trkpt.set('lat', f'{point.latitude:.6f}')
        trkpt.set('lon', f'{point.longitude:.6f}')

        point_time = start_time + timedelta(seconds=point.timestamp)
        ET.SubElement(trkpt, 'time').text = point_time.strftime('%Y-%m-%dT%H:%M:%SZ')

        # Course and speed (m/s) only while moving
        if point.speed > 0:
            extensions = ET.SubElement(trkpt, 'extensions')
            ET.SubElement(extensions, 'course').text = f'{point.heading:.1f}'
            ET.SubElement(extensions, 'speed').text = f'{point.speed:.2f}'

    xml_str = ET.tostring(gpx, encoding='unicode')
    dom = minidom.parseString(xml_str)
    return dom.toprettyxml(indent='  ')


def main(argv=None):
    """Main entry point for track export."""
    parser = argparse.ArgumentParser(description='Export a voyage track CSV to GPX')
    parser.add_argument('track', type=str, help='Path to track.csv')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Output GPX path (default: track path with .gpx suffix)')
    parser.add_argument('--name', type=str, default='Simulated Voyage',
                        help='Track name')
    parser.add_argument('--start', type=str, default=None,
                        help='Start time, ISO 8601; UTC unless an offset is given (default: now)')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    track_path = Path(args.track)
    if not track_path.exists():
        logger.error(f"Track file not found: {track_path}")
        sys.exit(1)

    start_time = None
    if args.start:
        try:
            start_time = datetime.fromisoformat(args.start)
        except ValueError:
            logger.error(f"Invalid start time: {args.start}")
            sys.exit(1)

    points = load_track_csv(track_path)
    output_path = Path(args.output) if args.output else track_path.with_suffix('.gpx')
    output_path.write_text(create_gpx(points, args.name, start_time))
    logger.info(f"Wrote {len(points)} points to {output_path}")


if __name__ == '__main__':
    main()
