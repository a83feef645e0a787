from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional

from kenyaprop.core.jsonl import append_jsonl, write_json
from .base import Sink


class JsonlSink(Sink):
    """
    Listings are appended to `out_path` (one JSON object per line); the run
    summary goes to `summary_path` (default: <out_path stem>.summary.json).
    """

    def __init__(self, out_path: str, summary_path: Optional[str] = None):
        self.out_path = out_path
        p = Path(out_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.touch(exist_ok=True)
        self.summary_path = summary_path or str(p.with_suffix(".summary.json"))
        self.written = 0

    def write(self, record: Dict[str, Any]) -> None:
        self.written += append_jsonl(self.out_path, [record])

    def write_summary(self, summary: Dict[str, Any]) -> None:
        write_json(self.summary_path, summary)

    def close(self) -> None:
        pass
