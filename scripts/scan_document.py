"""
Command line document scanner.

Detects the document in a photo, flattens it and applies an enhancement
filter.

Usage:
    # Scan with the default "auto" filter
    python scripts/scan_document.py --input photo.jpg --output scan.png

    # Pick a filter explicitly
    python scripts/scan_document.py --input photo.jpg --output scan.png --filter blackAndWhite

    # Let the advisor choose (needs GEMINI_API_KEY)
    python scripts/scan_document.py --input photo.jpg --output scan.png --advisor

    # Every document in the frame, one output file each
    python scripts/scan_document.py --input desk.jpg --output scans/ --multi
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError  # noqa: E402

from src.common.exceptions import ScanPipelineError  # noqa: E402
from src.enhancement.presets import PRESETS  # noqa: E402
from src.pipeline import DocumentPipeline, ScanResult, load_config  # noqa: E402
from src.utils import load_raster, save_raster, setup_logging  # noqa: E402

logger = logging.getLogger(__name__)


def _report(result: ScanResult, output_path: Path) -> None:
    print(f"Saved {output_path}")
    print(f"  Filter: {result.filter_name} ({result.confidence:.2f})")
    if result.detection_confidence is not None:
        print(f"  Boundary confidence: {result.detection_confidence:.2f}")
    if result.rationale:
        print(f"  Rationale: {result.rationale}")
    if result.document_type:
        print(f"  Document type: {result.document_type}")
    if result.warning:
        print(f"  Warning: {result.warning}")


def main():
    """Main entry point for the document scanner."""
    parser = argparse.ArgumentParser(
        description="Detect, rectify and enhance a document photo",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--input", type=str, required=True, help="Input image")
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output image (directory when --multi is set)",
    )
    parser.add_argument(
        "--filter",
        type=str,
        default=None,
        choices=list(PRESETS),
        help="Enhancement preset (default: advisor or configured default)",
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Pipeline configuration YAML"
    )
    parser.add_argument(
        "--no-crop", action="store_true", help="Enhance the full frame without detection"
    )
    parser.add_argument(
        "--advisor", action="store_true", help="Ask the filter advisor for a preset"
    )
    parser.add_argument(
        "--multi", action="store_true", help="Scan every document in the frame"
    )
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    args = parser.parse_args()

    setup_logging(args.log_level)

    try:
        config = load_config(Path(args.config)) if args.config else None
        use_advisor = True if args.advisor else None
        pipeline = DocumentPipeline.from_config(config, use_advisor=use_advisor)
        raster = load_raster(Path(args.input))

        if args.multi:
            results = pipeline.process_multiple(
                raster, filter_name=args.filter, use_advisor=use_advisor
            )
            if not results:
                print("No documents found")
                raise SystemExit(2)

            output_dir = Path(args.output)
            for index, result in enumerate(results, start=1):
                output_path = output_dir / f"{Path(args.input).stem}_{index:02d}.png"
                save_raster(result.raster, output_path)
                _report(result, output_path)
        else:
            result = pipeline.process(
                raster,
                filter_name=args.filter,
                crop=False if args.no_crop else None,
                use_advisor=use_advisor,
            )
            output_path = Path(args.output)
            save_raster(result.raster, output_path)
            _report(result, output_path)
    except (FileNotFoundError, ValidationError, ScanPipelineError) as e:
        logger.error(f"Scan failed: {e}")
        print(f"\n❌ Scan failed: {e}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
