import argparse
import logging
import sys
from pathlib import Path

from .core.ast_parser import HtmlAnalyzer
from .core.converter import ModuleConverter, ReferenceIndex
from .core.settings import load_settings


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


logger = logging.getLogger(__name__)


def main():
    """Main entry point for modulizer."""
    parser = argparse.ArgumentParser(description="modulizer - HTML imports to ES modules")
    parser.add_argument(
        "entry",
        type=str,
        help="Entry HTML document, relative to --root"
    )
    parser.add_argument(
        "--root",
        type=str,
        default=".",
        help="Directory document URLs are resolved against"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML conversion settings (default: config/modulizer.yaml)"
    )
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="Write modules under this directory instead of printing them"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    args = parser.parse_args()

    setup_logging(args.log_level)
    settings = load_settings(args.config)

    document = HtmlAnalyzer.from_directory(args.root).analyze(args.entry)
    if document is None:
        logger.error(f"Could not read {args.entry} under {args.root}")
        return 1

    index = ReferenceIndex()
    ModuleConverter(index, settings).convert(document)

    for url, record in index.modules.items():
        if not record.converted:
            continue
        if args.out:
            path = Path(args.out) / url
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(record.source, encoding="utf-8")
            logger.info(f"Wrote {path}")
        else:
            print(f"// {url}")
            print(record.source)

    for diagnostic in index.diagnostics:
        print(f"{diagnostic.severity}: {diagnostic.url}: {diagnostic.message}", file=sys.stderr)

    return 1 if any(d.severity == "error" for d in index.diagnostics) else 0


if __name__ == "__main__":
    sys.exit(main())
