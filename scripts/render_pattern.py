#!/usr/bin/env python3
"""Render a multislit configuration to an image file.

CLI host for the renderer: loads a multislit.v1 YAML configuration, renders
it (standard or high-res), and saves the result as PNG (or any format
Pillow infers from the extension).

Usage:
    # Shipped double-slit preset, standard quality
    python scripts/render_pattern.py --output outputs/double_slit.png

    # Custom config, anti-aliased
    python scripts/render_pattern.py --config configs/white_light_grating_v1.yaml \
        --width 1920 --height 1080 --quality 8 --output outputs/grating.png

    # High-res render (quality 250) with progress logging
    python scripts/render_pattern.py --highres --width 3840 --height 2160 \
        --output outputs/grating_4k.png

Outputs:
    - The rendered image at --output
    - Optionally the effective configuration at --dump_config
"""

import argparse
import logging
import sys
from pathlib import Path

from src.multislit_simulator import config_loader
from src.multislit_simulator.errors import MultislitError
from src.multislit_simulator.renderer import (
    ProgressProvider,
    render,
    render_highres,
    save_image,
)
from src.utils import logging_config, profiler


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render an N-slit diffraction pattern",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to multislit.v1 YAML (default: configs/double_slit_v1.yaml)'
    )
    parser.add_argument('--width', type=int, default=1280, help='Image width (px)')
    parser.add_argument('--height', type=int, default=720, help='Image height (px)')
    parser.add_argument('--quality', type=int, default=1, help='Kernel samples per column')
    parser.add_argument(
        '--highres',
        action='store_true',
        help='High-res render (quality 250, progress logging); ignores --quality'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='outputs/multislit.png',
        help='Output image path'
    )
    parser.add_argument(
        '--dump_config',
        type=str,
        default=None,
        help='Also write the effective configuration to this YAML path'
    )

    parser.add_argument('--log_level', type=str, default='INFO', help='Logging level')
    parser.add_argument('--log_file', type=str, default=None, help='Optional log file')
    parser.add_argument('--log_json', action='store_true', help='JSON-line log format')

    return parser.parse_args(argv)


def _progress_logger(logger: logging.Logger, step: float = 0.1):
    """Build a progress callback logging every ``step`` of completion."""
    state = {'next': step}

    def callback(value: float) -> None:
        if value >= state['next'] or value >= 1.0:
            logger.info("High-res render %.0f%% complete", value * 100.0)
            while state['next'] <= value:
                state['next'] += step

    return callback


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging_config.setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        json=args.log_json,
        quiet_libs=['PIL'],
        context={'app': 'render'},
    )
    logging_config.install_excepthook()
    logger = logging_config.get_logger(__name__)

    try:
        cfg = config_loader.load_configuration(args.config)
        config_name = Path(args.config).stem if args.config else 'default'
        logging_config.push_context(config=config_name)

        timings = {}
        size = f"{args.width}x{args.height}"
        with logging_config.render_context(size=size), \
                profiler.timer("total", sink=timings.__setitem__):
            if args.highres:
                progress = ProgressProvider(callback=_progress_logger(logger))
                buffer = render_highres(cfg, args.width, args.height, progress)
            else:
                buffer = render(cfg, args.width, args.height, quality=args.quality)
            save_image(buffer, Path(args.output))
        if args.dump_config:
            config_loader.dump_configuration(cfg, args.dump_config)
            logger.info("Wrote configuration to %s", args.dump_config)

        logger.info("Done in %.2f s", timings['total'])
        return 0
    except (MultislitError, FileNotFoundError, ValueError) as e:
        logger.error("Render failed: %s", e)
        return 1
    finally:
        logging_config.pop_context()
        logging_config.shutdown()


if __name__ == '__main__':
    sys.exit(main())
