#!/usr/bin/env python
"""
WBAN Jamming Experiment Script
==============================

Main entry point for a two-phase jamming run and optional position sweep.

Usage:
    # Single run with default positions (implant at origin, hub at 0.3 m)
    python run_jamming.py

    # Move the jammer closer and boost it
    python run_jamming.py --jamX 0.35 --jamBoost 10

    # Sweep the receiver 0.1..2.0 m and write a CSV trace
    python run_jamming.py --scanCsv rx_scan.csv

    # Find the minimum safe jammer distance
    python run_jamming.py --scanTarget jam --scanStart 10 --scanStop 20 \\
        --scanStep 1 --scanCsv jam_scan.csv --preset quick

Author: WBAN Jamming Team
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

# Relative --scanCsv paths land under <project>/output/scan
SCAN_DIR = Path(__file__).resolve().parent / "output" / "scan"

from wban_jamming.logging_config import setup_logging
from wban_jamming.physics.tissue import available_organs, organ_name, parse_organ


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="WBAN implant link jamming resistance experiment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_jamming.py                              # Single run, defaults
  python run_jamming.py --preset quick --scanCsv s.csv   # Receiver sweep
  python run_jamming.py --scanTarget jam --scanStart 10 --scanStop 20 --scanStep 1 --scanCsv j.csv
  python run_jamming.py --config my_config.json      # Custom configuration
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a config JSON file"
    )

    parser.add_argument(
        "--preset",
        type=str,
        choices=["default", "quick", "debug"],
        default="default",
        help="Configuration preset when no --config is given (default: default)"
    )

    # Positions (m)
    parser.add_argument("--txX", type=float, default=None, help="Implant x (default 0)")
    parser.add_argument("--txY", type=float, default=None, help="Implant y (default 0)")
    parser.add_argument("--rxX", type=float, default=None, help="Hub x (default 0.3)")
    parser.add_argument("--rxY", type=float, default=None, help="Hub y (default 0)")
    parser.add_argument("--jamX", type=float, default=None, help="Jammer x (default 43)")
    parser.add_argument("--jamY", type=float, default=None, help="Jammer y (default 0)")

    # Traffic and tissue
    parser.add_argument("--noJamPackets", type=int, default=None, help="Phase 1 packets")
    parser.add_argument("--jamPackets", type=int, default=None, help="Phase 2 packets per stream")
    parser.add_argument(
        "--bodyOrgan",
        type=str,
        default=None,
        help="Tissue profile, one of: " + ", ".join(available_organs())
    )
    parser.add_argument("--fatLayer", type=int, default=None, help="Fat layer override")
    parser.add_argument("--muscleLayer", type=int, default=None, help="Muscle layer override")

    # Radio
    parser.add_argument("--txPower", type=float, default=None, help="Transmit power (dBm)")
    parser.add_argument("--jamBoost", type=float, default=None, help="Jammer power above tx (dB)")

    # Sweep
    parser.add_argument(
        "--scanCsv",
        type=str,
        default=None,
        help="Sweep CSV path, absolute or relative to output/scan (empty: no sweep)"
    )
    parser.add_argument("--scanStart", type=float, default=None, help="Sweep start (m)")
    parser.add_argument("--scanStop", type=float, default=None, help="Sweep stop (m)")
    parser.add_argument("--scanStep", type=float, default=None, help="Sweep step (m)")
    parser.add_argument(
        "--jamThreshold",
        type=float,
        default=None,
        help="Jammed iff jam-phase success rate <= threshold (clamped to [0, 1])"
    )
    parser.add_argument("--scanTarget", type=str, default=None, help="rx or jam")

    # Output
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=str, default=None, help="Also log to this file")
    parser.add_argument("--save-config", type=str, default=None, help="Write the final config JSON")

    return parser.parse_args(argv)


def get_config(args):
    """Get experiment configuration from args."""
    from wban_jamming.experiment.config import ExperimentConfig, PRESETS

    # Load from file or preset
    if args.config:
        config = ExperimentConfig.load(args.config)
        print(f"Loaded config from: {args.config}")
    else:
        config = PRESETS[args.preset]()
        print(f"Using preset: {args.preset}")

    # Apply overrides
    overrides = {
        "scenario": {
            "tx_x": args.txX,
            "tx_y": args.txY,
            "rx_x": args.rxX,
            "rx_y": args.rxY,
            "jam_x": args.jamX,
            "jam_y": args.jamY,
            "no_jam_packets": args.noJamPackets,
            "with_jam_packets": args.jamPackets,
            "fat_layer": args.fatLayer,
            "muscle_layer": args.muscleLayer,
        },
        "radio": {
            "tx_power_dbm": args.txPower,
            "jam_boost_db": args.jamBoost,
        },
        "sweep": {
            "start": args.scanStart,
            "stop": args.scanStop,
            "step": args.scanStep,
            "threshold": args.jamThreshold,
            "axis": args.scanTarget,
            "csv_path": args.scanCsv,
        },
    }
    for section, values in overrides.items():
        target = getattr(config, section)
        for name, value in values.items():
            if value is not None:
                setattr(target, name, value)

    if args.bodyOrgan is not None:
        config.scenario.organ = parse_organ(args.bodyOrgan)

    return config


def main(argv=None):
    """Main experiment entry point."""
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.INFO
    # Console only until the configuration is accepted
    setup_logging(level)

    print("=" * 70)
    print("WBAN JAMMING RESISTANCE EXPERIMENT")
    print("Implant-to-hub link against an external jammer")
    print("=" * 70)
    print()

    try:
        config = get_config(args)
        config.clamp_threshold()
        config.validate()
    except (OSError, ValueError) as e:
        print(f"ERROR: invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        if args.log_file:
            setup_logging(level, args.log_file)
        if args.save_config:
            config.save(args.save_config)
            print(f"Saved config to: {args.save_config}")
    except OSError as e:
        print(f"ERROR: cannot write output: {e}", file=sys.stderr)
        return 1

    from wban_jamming.experiment.context import create_simulation_context
    from wban_jamming.experiment.jamming import JammingExperiment
    from wban_jamming.experiment.sweep import (
        ScanCsvWriter,
        SweepRunner,
        parse_axis,
        resolve_csv_path,
    )

    scenario = config.scenario
    sweep = config.sweep
    axis = parse_axis(sweep.axis)

    print(f"Organ profile: {organ_name(scenario.organ)}")
    print(f"TX ({scenario.tx_x}, {scenario.tx_y})  RX ({scenario.rx_x}, {scenario.rx_y})  "
          f"JAM ({scenario.jam_x}, {scenario.jam_y})")
    print()

    context = create_simulation_context(config.radio, scenario.organ)
    experiment = JammingExperiment(context, config.timing)

    try:
        result = experiment.run(scenario, enable_logs=True)

        print("\nBaseline Results:")
        print(f"  Body loss:               {result.body_loss_db:.4f} dB")
        print(f"  Jammer rx power:         {result.jam_rx_power_dbm:.4f} dBm")
        print(f"  Success without jammer:  {result.no_jam_success_rate:.3f}")
        print(f"  Success with jammer:     {result.jam_success_rate:.3f}")

        csv_path = resolve_csv_path(sweep.csv_path, SCAN_DIR)
        if csv_path is None or sweep.stop < sweep.start:
            return 0

        try:
            writer = ScanCsvWriter(csv_path)
        except OSError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

        print(f"\nSweeping {axis.value} x from {sweep.start} to {sweep.stop} "
              f"step {sweep.step} -> {csv_path}")
        runner = SweepRunner(experiment, threshold=sweep.threshold, axis=axis)
        with writer:
            sweep_result = runner.run(scenario, sweep.start, sweep.stop, sweep.step, writer=writer)

        print(f"  Points written: {writer.rows_written}")
        print(sweep_result.summary())
        return 0

    except KeyboardInterrupt:
        print("\n\nExperiment interrupted by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
