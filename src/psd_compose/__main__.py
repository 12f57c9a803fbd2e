import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from psd_compose import (
    Document,
    RenderOptions,
    extract_regions,
    flatten,
    list_templates,
    render_template,
    render_to_file,
)
from psd_compose.api.render import write_atomic
from psd_compose.errors import PSDComposeError
from psd_compose.version import __version__

logger = logging.getLogger(__name__)


def _key_value(value: str) -> tuple:
    key, sep, text = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError("expected KEY=VALUE, got %r" % value)
    return key, text


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="psd-compose command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render a PSD template as PNG")
    render_parser.add_argument("input_file", help="Input PSD file")
    render_parser.add_argument("output_file", help="Output PNG file")
    render_parser.add_argument(
        "--background",
        help="Background image, defaults to the composite preview of the PSD",
    )
    render_parser.add_argument(
        "-s",
        "--set",
        dest="replacements",
        action="append",
        type=_key_value,
        default=[],
        metavar="KEY=VALUE",
        help="Replacement text for a {{KEY}} layer",
    )
    render_parser.add_argument(
        "--font-dir",
        dest="font_dirs",
        action="append",
        default=[],
        help="Directory searched for font files",
    )

    regions_parser = subparsers.add_parser("regions", help="Print [NAME] regions as JSON")
    regions_parser.add_argument("input_file", help="Input PSD file")

    layers_parser = subparsers.add_parser("layers", help="Print the flattened layer list")
    layers_parser.add_argument("input_file", help="Input PSD file")

    template_parser = subparsers.add_parser("template", help="Render a template as PNG")
    template_parser.add_argument("root", help="Templates directory")
    template_parser.add_argument("name", help="Template name")
    template_parser.add_argument("output_file", help="Output PNG file")
    template_parser.add_argument(
        "-d",
        "--data",
        action="append",
        type=_key_value,
        default=[],
        metavar="KEY=VALUE",
        help="Render data entry",
    )

    templates_parser = subparsers.add_parser("templates", help="List templates")
    templates_parser.add_argument("root", help="Templates directory")

    return parser.parse_args(argv)


def _options(args: argparse.Namespace) -> RenderOptions:
    if getattr(args, "font_dirs", None):
        return RenderOptions(font_dirs=args.font_dirs)
    return RenderOptions()


def main(argv: Optional[List[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "render":
            replacements: Dict[str, str] = dict(args.replacements)
            render_to_file(
                args.input_file,
                args.background,
                args.output_file,
                replacements,
                _options(args),
            )

        elif args.command == "regions":
            regions = extract_regions(args.input_file)
            data = {name: region.asdict() for name, region in regions.items()}
            print(json.dumps(data, indent=2, sort_keys=True))

        elif args.command == "layers":
            document = Document.open(args.input_file)
            print("%dx%d" % document.size)
            for node in flatten(document):
                print("%s\t%r\t%s" % (node.kind.value, node.name, node.bounds))

        elif args.command == "template":
            data = render_template(args.root, args.name, dict(args.data))
            write_atomic(args.output_file, data)

        elif args.command == "templates":
            for name in list_templates(args.root):
                print(name)

    except PSDComposeError as e:
        logger.debug("command failed", exc_info=True)
        print("%s: %s" % (e.kind, e), file=sys.stderr)
        return 1

    return None


if __name__ == "__main__":
    sys.exit(main())
