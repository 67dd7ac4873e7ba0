"""
CLI for compose2podman - Docker Compose to Podman converter.

Output types:
    kube        Single Pod manifest for podman play kube
    quadlet     Quadlet unit files (.container, .volume, .network)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConverterConfig, load_converter_config
from .errors import ComposeError
from .kube import generate_kube_yaml
from .parser import load_compose_file
from .quadlet import QuadletGenerator


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="compose2podman",
        description="Convert Docker Compose files to Podman Kubernetes YAML or Quadlet files",
    )
    parser.add_argument(
        "-i", "--input",
        default="docker-compose.yaml",
        help="Compose file or directory (default: docker-compose.yaml)",
    )
    parser.add_argument(
        "-t", "--type",
        choices=["kube", "quadlet"],
        default="kube",
        help="Output type (default: kube)",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file for kube (default: stdout), output directory for quadlet (default: quadlet)",
    )
    parser.add_argument(
        "--pod-name",
        help="Pod name for kube output (default: compose-pod)",
    )
    parser.add_argument(
        "-c", "--config",
        help="Converter config file (YAML)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    return parser


def cmd_kube(args: argparse.Namespace, config: ConverterConfig) -> int:
    """Handle kube output."""
    compose = load_compose_file(args.input)
    content = generate_kube_yaml(compose, args.pod_name, config)

    if args.output:
        out_file = Path(args.output)
        if out_file.parent != Path(""):
            out_file.parent.mkdir(parents=True, exist_ok=True)
        out_file.write_text(content)
        print(f"Written: {out_file}", file=sys.stderr)
    else:
        print(content, end="")

    return 0


def cmd_quadlet(args: argparse.Namespace, config: ConverterConfig) -> int:
    """Handle quadlet output."""
    compose = load_compose_file(args.input)
    output_dir = args.output or "quadlet"

    written = QuadletGenerator(compose, output_dir, config=config).generate()

    for path in written:
        print(f"Written: {path}", file=sys.stderr)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_converter_config(args.config) if args.config else ConverterConfig()
    except (OSError, ComposeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    commands = {
        "kube": cmd_kube,
        "quadlet": cmd_quadlet,
    }

    try:
        return commands[args.type](args, config)
    except (OSError, ComposeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
