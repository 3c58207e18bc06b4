"""Command line entry point: ``process`` a text zone or build ``training`` files."""
from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from medreport.config import get_settings, load_settings
from medreport.core.labels import MODELS
from medreport.exceptions import MedicalReportException

log = logging.getLogger(__name__)


def read_anonymize_map(path: Path) -> tuple[list[str], list[str]]:
    """CSV with ``original,anonymized`` rows, applied in file order."""
    original, anonymized = [], []
    with open(path, "r", encoding="utf-8", newline="") as f:
        for row in csv.reader(f):
            if len(row) < 2 or not row[0]:
                continue
            original.append(row[0])
            anonymized.append(row[1])
    return original, anonymized


def process_main(args, parsers) -> int:
    if args.text is not None:
        text = args.text
    else:
        text = Path(args.input).read_text(encoding="utf-8")
    parser = parsers.get(args.entity)
    try:
        result = parser.process(text)
    except MedicalReportException as e:
        log.error("%s (%s)", e.message, e.cause)
        return 1
    if result is None:
        print("null")
        return 0
    records = result if isinstance(result, list) else [result]
    unique = list({id(r): r for r in records}.values())
    print(json.dumps([r.to_dict() for r in unique], ensure_ascii=False, indent=2))
    return 0


def training_file(parser, entity: str, path: Path, out_dir: Path,
                  anonymize: Optional[tuple[list[str], list[str]]] = None) -> Optional[Path]:
    """Write the training fragment of one file, one input unit per non-empty line."""
    units = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    if anonymize:
        xml = parser.training_extraction_anonym(units, *anonymize)
    else:
        xml = parser.training_extraction(units)
    if xml is None:
        log.debug("No training data for %s", path)
        return None
    out_path = out_dir / f"{path.stem}.training.{entity}.xml"
    out_path.write_text(xml, encoding="utf-8")
    return out_path


def training_main(args, parsers) -> int:
    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    anonymize = read_anonymize_map(Path(args.anonymize_map)) if args.anonymize_map else None
    parser = parsers.get(args.entity)

    written = failed = 0
    for name in tqdm(args.files, desc=f"training {args.entity}"):
        try:
            if training_file(parser, args.entity, Path(name), out_dir, anonymize) is not None:
                written += 1
        except Exception:
            log.exception("Training extraction failed for %s", name)
            failed += 1
    log.info("Training extraction complete: %d written, %d failed, %d files",
             written, failed, len(args.files))
    return 1 if failed and not written else 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="medreport")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # process
    p1 = subparsers.add_parser("process", help="Extract records from a text zone")
    p1.add_argument("--entity", required=True, choices=MODELS)
    src = p1.add_mutually_exclusive_group(required=True)
    src.add_argument("--text")
    src.add_argument("--input")

    # training
    p2 = subparsers.add_parser("training", help="Write inline-tagged training files")
    p2.add_argument("--entity", required=True, choices=MODELS)
    p2.add_argument("--output-dir", required=True)
    p2.add_argument("--anonymize-map", help="CSV of original,anonymized values")
    p2.add_argument("files", nargs="+")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    settings = load_settings(Path(args.config)) if args.config else get_settings()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    from medreport.engine import MedicalParsers
    parsers = MedicalParsers(settings)

    if args.command == "process":
        return process_main(args, parsers)
    return training_main(args, parsers)


if __name__ == "__main__":
    sys.exit(main())
