# byte_salvage/adapters/persistence.py
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple, Union

from pydantic import BaseModel

from byte_salvage.contracts import EvidenceReport, ReportPayloadValidationError
from byte_salvage.decoder import ByteEvidence
from byte_salvage.hexcodec import to_hex

JsonObj = Dict[str, Any]
PathLike = Union[str, Path]

EVIDENCE_LOG_PATH = Path("artifacts/byte_evidence.jsonl")


def _to_jsonable(x: Any) -> Any:
    if x is None:
        return None
    if isinstance(x, BaseModel):
        return x.model_dump(mode="json")
    if is_dataclass(x) and not isinstance(x, type):
        return _to_jsonable(asdict(x))
    if isinstance(x, Enum):
        return x.value
    if isinstance(x, (bytes, bytearray, memoryview)):
        return to_hex(x)
    if isinstance(x, dict):
        return {str(k): _to_jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_to_jsonable(v) for v in x]
    return x


def append_jsonl(path: PathLike, record: Any) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    obj = _to_jsonable(record)

    # enforce "one JSON object per line"
    line = json.dumps(obj, ensure_ascii=False)
    with p.open("a", encoding="utf-8") as f:
        f.write(line + "\n")


def read_jsonl(path: PathLike) -> Iterator[Tuple[JsonObj, JsonObj]]:
    """
    Yields (meta, obj) for each JSON object line.
    - meta includes line number and source path.
    - obj is the parsed dict.
    """
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            s = line.strip()
            if not s:
                continue
            obj = json.loads(s)
            if not isinstance(obj, dict):
                raise ValueError(f"Expected JSON object on line {lineno}, got {type(obj).__name__}")
            meta: JsonObj = {"path": str(p), "lineno": lineno}
            yield meta, obj


def _canonicalize_report_payload(record: Any) -> JsonObj:
    if isinstance(record, ByteEvidence):
        return record.report().to_canonical_payload()
    if isinstance(record, EvidenceReport):
        return record.to_canonical_payload()
    if isinstance(record, dict):
        return EvidenceReport.from_payload(record).to_canonical_payload()
    raise TypeError(f"cannot persist {type(record).__name__} as an evidence report")


def append_evidence_report(path: PathLike, record: Any) -> JsonObj:
    """Append one forensic report; returns a ``file@line`` reference to it."""
    p = Path(path)
    next_offset = 1
    if p.exists():
        next_offset = len(p.read_text(encoding="utf-8").splitlines()) + 1

    payload = _canonicalize_report_payload(record)

    # Validate persistence/reload parity before writing.
    EvidenceReport.from_payload(payload)
    append_jsonl(p, {"event_kind": "evidence_report", **payload})
    return {"kind": "jsonl", "ref": f"{p.name}@{next_offset}"}


def read_evidence_report(record: JsonObj) -> EvidenceReport:
    """Rehydrate a persisted report row into a validated EvidenceReport."""
    return EvidenceReport.from_payload(record)


def iter_evidence_reports(path: PathLike = EVIDENCE_LOG_PATH) -> Iterator[EvidenceReport]:
    """Yield every report row that still validates; other rows are skipped."""
    for _, raw in read_jsonl(path):
        if raw.get("event_kind") != "evidence_report":
            continue
        try:
            yield EvidenceReport.from_payload(raw)
        except ReportPayloadValidationError:
            continue
