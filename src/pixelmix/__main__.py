import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional

import attrs

from pixelmix.compositor import render
from pixelmix.config import RenderConfig, read_record
from pixelmix.pil_io import load_image, save_image
from pixelmix.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="pixelmix command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Composite two images")
    render_parser.add_argument(
        "paths",
        nargs="+",
        metavar="IMAGE",
        help="IMAGE1 [IMAGE2] OUTPUT; images may come from the settings file",
    )
    render_parser.add_argument("-c", "--config", help="JSON settings file")
    render_parser.add_argument("--combine", help="Combine strategy, e.g. Mix")
    render_parser.add_argument("--mode", help="Blend mode, e.g. SoftLight")
    render_parser.add_argument("--width", type=int, help="Output width")
    render_parser.add_argument("--height", type=int, help="Output height")
    render_parser.add_argument("--seed", type=int, help="Noise seed")
    render_parser.add_argument(
        "-j", "--workers", type=int, default=None, help="Worker threads"
    )

    config_parser = subparsers.add_parser(
        "config", help="Write the default settings file"
    )
    config_parser.add_argument("-o", "--output", help="Output file, default stdout")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, record: Dict[str, Any]) -> RenderConfig:
    config = RenderConfig.from_dict(record)
    if args.combine is not None and args.mode is None:
        config = config.with_combine(args.combine)
    overrides = {
        name: getattr(args, name)
        for name in ("combine", "mode", "width", "height", "seed")
        if getattr(args, name) is not None
    }
    if overrides:
        config = attrs.evolve(config, **overrides)
    return config


def run_render(args: argparse.Namespace) -> int:
    record = read_record(args.config) if args.config else {}
    config = build_config(args, record)

    *inputs, output = args.paths
    if not inputs:
        inputs = [record[key] for key in ("img_path_1", "img_path_2") if record.get(key)]
    if not inputs:
        logger.error("No input images given")
        return 1
    if len(inputs) > 2:
        logger.error("At most two input images, got %d" % len(inputs))
        return 1

    images = [load_image(path) for path in inputs]
    image1 = images[0]
    image2 = images[1] if len(images) > 1 else None

    image = render(image1, image2, config, workers=args.workers, progress=logger.info)
    save_image(image, output)
    return 0


def run_config(args: argparse.Namespace) -> int:
    text = json.dumps(RenderConfig().to_dict(), indent=2)
    if args.output:
        with open(args.output, "w") as f:
            f.write(text + "\n")
    else:
        sys.stdout.write(text + "\n")
    return 0


def main(argv: Optional[list] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    package_logger = logging.getLogger("pixelmix")
    if args.verbose:
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(logging.INFO)

    if args.command == "render":
        try:
            return run_render(args)
        except (OSError, ValueError) as e:
            logger.error(str(e))
            return 1

    elif args.command == "config":
        return run_config(args)

    return None


if __name__ == "__main__":
    sys.exit(main())
