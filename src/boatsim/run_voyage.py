"""
Voyage Runner
=============

CLI entry point for simulating a single boat voyage.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import SimulationConfig
from .simulation.export_track import create_gpx
from .simulation.voyage import VoyageSimulator


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    format_str = '%(levelname)s: %(message)s' if not verbose else \
                 '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Simulate a wind-powered boat voyage',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run a voyage described in a config file
  boatsim --config voyages/strait.json --output results/strait/

  # Reproducible run with a shorter tick and a GPX track
  boatsim --config voyages/strait.json --dt 0.5 --seed 7 --gpx
"""
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='Path to voyage configuration JSON (default: built-in defaults)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default='results/voyage',
        help='Output directory for results (default: results/voyage)'
    )

    parser.add_argument(
        '--dt',
        type=float,
        default=None,
        help='Tick duration in seconds (overrides config)'
    )

    parser.add_argument(
        '--duration',
        type=float,
        default=None,
        help='Simulated duration in seconds (overrides config)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for course tie-breaks (overrides config)'
    )

    parser.add_argument(
        '--gpx',
        action='store_true',
        help='Also write track.gpx'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    return parser


def main(argv=None):
    """Main entry point for voyage runner."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                logger.error(f"Config file not found: {config_path}")
                sys.exit(1)
            config = SimulationConfig.from_json(str(config_path))
        else:
            config = SimulationConfig()

        if args.dt is not None:
            config.dt = args.dt
        if args.duration is not None:
            config.duration = args.duration
        if args.seed is not None:
            config.seed = args.seed
        config.validate()

        simulator = VoyageSimulator(config)
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("VOYAGE SIMULATION")
    logger.info("=" * 60)
    logger.info(f"Config: {args.config or 'defaults'}")
    logger.info(f"Start: {config.start_lat:.4f}, {config.start_lon:.4f}  type {config.boat_type}")
    logger.info(f"Duration: {config.duration:.0f}s, dt {config.dt:g}s, seed {config.seed}")
    logger.info(f"Output: {args.output}")
    logger.info("=" * 60)

    try:
        results = simulator.run()

        output_path = Path(args.output)
        simulator.save_results(str(output_path))
        if args.gpx:
            gpx_file = output_path / 'track.gpx'
            gpx_file.write_text(create_gpx(simulator.track))
            logger.info(f"Saved GPX track to {gpx_file}")

    except Exception as e:
        logger.error(f"Simulation failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(2)

    logger.info(f"Final state {results['final_state']} at "
                f"{results['final_lat']:.4f}, {results['final_lon']:.4f}; "
                f"travelled {results['distance_travelled_m']:.0f} m")
    return results


if __name__ == '__main__':
    main()
