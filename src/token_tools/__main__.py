import argparse
import asyncio
import logging
import os
from pprint import pprint
from typing import Optional

from token_tools.api.document import Document
from token_tools.api.pil_io import get_format
from token_tools.api.templates import TEMPLATES, template_document
from token_tools.composite.renderer import Renderer
from token_tools.constants import DEFAULT_CANVAS_SIZE, EXPORT_SIZES, ExportFormat
from token_tools.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="token-tools command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render a document")
    render_parser.add_argument("input_file", help="Input document JSON file")
    render_parser.add_argument("output_file", help="Output image file")
    render_parser.add_argument(
        "--size",
        type=int,
        help="Square output size in pixels, typically one of: %s"
        % ", ".join(str(x) for x in EXPORT_SIZES),
    )
    render_parser.add_argument(
        "--format",
        choices=[x.value.lower() for x in ExportFormat],
        help="Output format (default: from the output file extension)",
    )

    show_parser = subparsers.add_parser("show", help="Show the document content")
    show_parser.add_argument("input_file", help="Input document JSON file")

    template_parser = subparsers.add_parser(
        "template", help="Write a document seeded from a starter template"
    )
    template_parser.add_argument(
        "name", help="Template id or name, one of: %s" % _template_names()
    )
    template_parser.add_argument("output_file", help="Output document JSON file")
    template_parser.add_argument(
        "--size", type=int, default=DEFAULT_CANVAS_SIZE, help="Canvas size in pixels"
    )

    return parser.parse_args(argv)


def _template_names() -> str:
    return ", ".join(template.slug for template in TEMPLATES)


def _guess_format(path: str, value: Optional[str]) -> ExportFormat:
    if value:
        return get_format(value)
    extension = os.path.splitext(path)[1].lstrip(".")
    try:
        return get_format(extension)
    except ValueError:
        return ExportFormat.PNG


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    package_logger = logging.getLogger("token_tools")
    if args.verbose:
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(logging.INFO)

    if args.command == "render":
        document = Document.load(args.input_file)
        renderer = Renderer()
        try:
            asyncio.run(renderer.render(document))
        except ImportError as e:
            logger.error(str(e))
            return 1
        data = renderer.export(
            _guess_format(args.output_file, args.format), size=args.size
        )
        with open(args.output_file, "wb") as f:
            f.write(data)
        logger.info("Wrote %s (%d bytes)" % (args.output_file, len(data)))

    elif args.command == "show":
        document = Document.load(args.input_file)
        pprint(document)

    elif args.command == "template":
        try:
            document = template_document(args.name, canvas_size=args.size)
        except KeyError:
            logger.error(
                "Unknown template %r, choose from: %s" % (args.name, _template_names())
            )
            return 1
        except ImportError as e:
            logger.error(str(e))
            return 1
        document.save(args.output_file)

    return None


if __name__ == "__main__":
    main()
