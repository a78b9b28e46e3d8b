"""
Generate one report from the dataset without running the API.

    python scripts/generate_report.py --kind styled-pdf --output out/
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apps.worker.steps.export_render.orchestrator import build_report_service  # noqa: E402
from packages.shared.errors import ReportError  # noqa: E402
from packages.shared.models import ReportKind  # noqa: E402

logger = logging.getLogger("generate_report")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a test-case report to a local file.")
    parser.add_argument(
        "--kind",
        choices=[k.value for k in ReportKind],
        default=ReportKind.PDF.value,
        help="Report variant to produce",
    )
    parser.add_argument("--dataset", type=Path, default=None, help="JSON dataset (defaults to DATASET_PATH)")
    parser.add_argument("--output", type=Path, default=Path("."), help="Directory for the generated file")
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    service = build_report_service(args.dataset)
    try:
        artifact = service.generate(ReportKind(args.kind))
    except ReportError as exc:
        logger.error(f"Report generation failed: {exc}")
        return 1
    finally:
        service.close()

    args.output.mkdir(parents=True, exist_ok=True)
    path = args.output / artifact.filename
    path.write_bytes(artifact.content)
    print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
