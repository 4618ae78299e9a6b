from __future__ import annotations

import json
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class OpsLogger:
    """Append-only JSONL log of pipeline events.

    - One JSON object per line (UTF-8), each tagged with "dml_ops": 1
    - Thread-safe (coarse lock); workers share one instance
    - Best-effort: never raises to caller
    """

    def __init__(self, file_path: Optional[Path] = None, also_stdout: bool = False) -> None:
        self.file_path = Path(file_path) if file_path else None
        self.also_stdout = bool(also_stdout)
        self._lock = threading.Lock()
        if self.file_path is not None:
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError:
                pass

    def emit(self, record: Dict[str, Any]) -> None:
        try:
            line = json.dumps(record, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            line = json.dumps({"dml_ops": 1, "_serialization_error": True, "record_str": str(record)})
        with self._lock:
            if self.file_path is not None:
                try:
                    with self.file_path.open("a", encoding="utf-8") as f:
                        f.write(line)
                        f.write("\n")
                except OSError:
                    pass
            if self.also_stdout:
                try:
                    print(line)
                except (OSError, ValueError):
                    pass

    def event(self, name: str, **fields: Any) -> None:
        record: Dict[str, Any] = {
            "dml_ops": 1,
            "event": name,
            "ts": datetime.now(timezone.utc).isoformat(),
        }
        record.update(fields)
        self.emit(record)


def log_error(ops: Optional[OpsLogger], context: str, exc: BaseException, event: str = "error", **fields: Any) -> None:
    """Print a one-line warning to stderr and mirror it to the ops log if there is one."""
    where = fields.get("source_url") or fields.get("url") or fields.get("company") or ""
    try:
        print(f"  ⚠️  {context}: {type(exc).__name__}: {exc}" + (f" @ {where}" if where else ""), file=sys.stderr)
    except (OSError, ValueError):
        pass
    if ops is not None:
        ops.event(event, context=context, error=f"{type(exc).__name__}: {exc}", **fields)
