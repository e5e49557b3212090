"""
Paginate résumé JSON files and write one PDF per input.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from tqdm import tqdm

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_pages.errors import ConfigurationError
from resume_pages.ingest import load_document
from resume_pages.pdf.builder import LayoutResult, build_pdf, paginate_document
from resume_pages.pdf.pdf_measure import ESTIMATED, MEASURED
from resume_pages.pdf.pdf_settings import (
    TypographyContext,
    available_template_ids,
    build_typography,
    get_template_config,
)

logger = logging.getLogger("build_pdf")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return CLI arguments for the build script."""

    parser = argparse.ArgumentParser(
        description="Paginate résumé JSON onto A4 pages and write PDF files."
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        metavar="JSON",
        help="Résumé JSON file(s) to paginate.",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=Path("output"),
        help="Directory into which one PDF per input is written.",
    )
    parser.add_argument(
        "--template",
        "-t",
        default="document",
        choices=available_template_ids(),
        help="Built-in template id.",
    )
    parser.add_argument(
        "--strategy",
        default=MEASURED,
        choices=(MEASURED, ESTIMATED),
        help="Height strategy. Estimated heights only print a report; no PDF is written.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output (set DEBUG_PAGINATION=1 for the per-block trace).",
    )
    return parser.parse_args(argv)


def _output_path(*, source: Path, output_dir: Path) -> Path:
    """Return the PDF path for an input file.

    Example:
        >>> _output_path(source=Path("in/jane.json"), output_dir=Path("out"))
        PosixPath('out/jane.pdf')
    """

    return output_dir / f"{source.stem}.pdf"


def _print_report(*, source: Path, result: LayoutResult) -> None:
    """Print page count and validator messages for one input."""

    status = "ok" if result.report.valid else "errors"
    print(f"{source}: {result.page_count} page(s), {status}")
    for error in result.report.errors:
        print(f"  error: {error}")
    for warning in result.report.warnings:
        print(f"  warning: {warning}")


def _build_one(
    *, source: Path, typography: TypographyContext, output_dir: Path, strategy: str
) -> LayoutResult:
    """Paginate one input and write its PDF when heights are measured."""

    document = load_document(source)
    if strategy == ESTIMATED:
        return paginate_document(document, typography.config, strategy=ESTIMATED)
    output_path = _output_path(source=source, output_dir=output_dir)
    return build_pdf(document, output_path, typography=typography)


def main(argv: Sequence[str] | None = None) -> int:
    """Build PDFs for every input and print validation reports.

    Returns:
        0 when every input rendered without layout errors, else 1.

    Example:
        >>> main(["examples/resume.json", "-o", "output"])  # doctest: +SKIP
    """

    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        typography = build_typography(get_template_config(args.template))
    except ConfigurationError as exc:
        logger.error("template %s is unusable: %s", args.template, exc)
        return 2

    results: List[LayoutResult] = []
    inputs = tqdm(args.inputs, desc="Paginating", unit="doc", disable=len(args.inputs) < 2)
    for source in inputs:
        result = _build_one(
            source=source,
            typography=typography,
            output_dir=args.output_dir,
            strategy=args.strategy,
        )
        results.append(result)
    for source, result in zip(args.inputs, results):
        _print_report(source=source, result=result)
    return 0 if all(result.report.valid for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
