from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable

import orjson


def write_json(path: str | Path, data: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))


def append_jsonl(path: str | Path, rows: Iterable[Dict[str, Any]]) -> int:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with p.open("ab") as f:
        for row in rows:
            f.write(orjson.dumps(row))
            f.write(b"\n")
            n += 1
    return n


def read_jsonl(path: str | Path) -> list[Dict[str, Any]]:
    with Path(path).open("rb") as f:
        return [orjson.loads(line) for line in f if line.strip()]
