from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from byte_salvage.adapters.persistence import append_evidence_report
from byte_salvage.contracts import VerdictStatus
from byte_salvage.decoder import ByteEvidence
from byte_salvage.errors import HexParseError
from byte_salvage.hexcodec import from_hex

logger = logging.getLogger(__name__)

# "The quick brown fox jumps over the lazy dog" followed by three bytes that
# never form a character.
QUICK_BROWN_FOX = b"The quick brown fox jumps over the lazy dog\xf4\xf1\xf3"


def salvage(raw: bytes, *, chunk_size: int | None = None) -> ByteEvidence:
    if chunk_size is None:
        return ByteEvidence.new(raw)
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    evidence = ByteEvidence.empty()
    for offset in range(0, len(raw), chunk_size):
        evidence.extend(raw[offset : offset + chunk_size])
    evidence.finish()
    return evidence


def inspect_bytes(raw: bytes, *, chunk_size: int | None = None) -> dict[str, Any]:
    return salvage(raw, chunk_size=chunk_size).report().to_canonical_payload()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sanitation-inspect",
        description="Salvage UTF-8 text from untrusted bytes and print the forensic evidence report.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--hex", help="Input bytes as hex text (optional 0x prefix).")
    source.add_argument("--file", type=Path, help="Read input bytes from this file.")
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Feed the input incrementally in chunks of this many bytes.",
    )
    parser.add_argument("--log", type=Path, default=None, help="Append the report to this JSONL evidence log.")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 unless the whole input is valid UTF-8.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every garbage run at DEBUG level.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.hex is not None:
        try:
            raw = from_hex(args.hex)
        except HexParseError as exc:
            logger.error("bad --hex value: %s", exc)
            return 2
    elif args.file is not None:
        try:
            raw = args.file.read_bytes()
        except OSError as exc:
            logger.error("cannot read --file: %s", exc)
            return 2
    else:
        raw = QUICK_BROWN_FOX

    try:
        evidence = salvage(raw, chunk_size=args.chunk_size)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    report = evidence.report()
    payload = report.to_canonical_payload()
    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")

    if args.log is not None:
        ref = append_evidence_report(args.log, report)
        logger.info("appended evidence report %s", ref["ref"])

    if args.strict and report.verdict is not VerdictStatus.SAFE:
        logger.warning("verdict %s: %s", report.verdict, report.message)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
