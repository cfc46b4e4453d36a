from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

from inventory_grouper.config.loader import ConfigError, GrouperConfig, resolve_config
from inventory_grouper.excel.reader import DecodeError, read_workbook_file
from inventory_grouper.logging.init import log_summary, setup_logging
from inventory_grouper.models.processing_result import BatchResult, FileStat
from inventory_grouper.services.processor import process_records, to_json
from inventory_grouper.services.progress import BatchProgress
from inventory_grouper.services.summary import render_batch_summary

"""CLI entrypoint: group local workbook files into JSON payloads.

Flow:
- Resolve config (--config > INVENTORY_GROUPER_CONFIG > defaults)
- For each input workbook: decode first sheet, filter + group, write
  ``<output-dir>/<stem>.groups.json``
- Print a SUMMARY line and exit with the batch exit code
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

OUTPUT_SUFFIX = ".groups.json"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Spreadsheet -> laptop product groups")
    p.add_argument("files", nargs="*", type=Path, help="Workbook files (.xlsx)")
    p.add_argument("--output-dir", type=Path, default=Path("output"), help="Where to write <stem>.groups.json")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    return p.parse_args(argv)


def _inspect_data(files: list[Path]) -> int:
    for f in files:
        print(f"FILE: {f.name}")
        try:
            sheet = read_workbook_file(f)
        except (OSError, DecodeError) as e:
            print(f"  read_error: {e}")
            continue
        print(f"  SHEET: {sheet.sheet_name} cols={sheet.columns}")
        sample = [r.to_dict() for r in sheet.rows[:3]]
        print("    sample_rows=", json.dumps(sample, ensure_ascii=False, default=str))
    return EXIT_SUCCESS_ALL


def _process_file(path: Path, cfg: GrouperConfig, output_dir: Path) -> FileStat:
    t0 = time.perf_counter()
    sheet = read_workbook_file(path)
    result = process_records(sheet.rows, cfg)
    out = output_dir / f"{path.stem}{OUTPUT_SUFFIX}"
    out.write_text(to_json(result), encoding="utf-8")
    return FileStat(
        file_name=path.name,
        status="success",
        items=result.aggregate.total_items,
        groups=result.aggregate.group_count,
        elapsed_seconds=time.perf_counter() - t0,
    )


def process_files(files: list[Path], cfg: GrouperConfig, output_dir: Path) -> BatchResult:
    logger = setup_logging()
    output_dir.mkdir(parents=True, exist_ok=True)
    with BatchProgress(files) as progress:
        for path in progress:
            logger.info(f"processing {path}")
            try:
                stat = _process_file(path, cfg, output_dir)
            except (OSError, DecodeError) as e:
                logger.error(f"{path.name}: {e}")
                stat = FileStat(path.name, "failed", 0, 0, 0.0, error=str(e))
            progress.record(stat)
    return progress.result()


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストで [] を渡すケース)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    try:
        cfg = resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if not args.files:
        logger.error("no input files")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.files)

    result = process_files(args.files, cfg, args.output_dir)
    log_summary(render_batch_summary(len(args.files), result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
