import json, os
from typing import Any, Dict, List, Optional

from .time_utils import get_current_utc_time, to_iso_format


def append_jsonl(filepath: str, data: Dict[str, Any]):
    """
    Append JSON object to JSONL file with timestamp.

    Args:
        filepath: Path to JSONL file
        data: Dictionary to log
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    now = get_current_utc_time()
    log_entry = {
        **data,
        "_timestamp": now.timestamp(),
        "_iso_time": to_iso_format(now),
    }

    with open(filepath, "a", encoding="utf-8") as f:
        f.write(json.dumps(log_entry, separators=(",", ":")) + "\n")


def read_jsonl(filepath: str, event: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Read journal entries back, oldest first.

    Lines that are not JSON objects are skipped. With `event` set, only
    entries whose "event" field matches are returned.
    """
    if not os.path.exists(filepath):
        return []

    entries: List[Dict[str, Any]] = []
    with open(filepath, "r", encoding="utf-8") as f:
        for raw in f:
            raw = raw.strip()
            if not raw:
                continue
            try:
                entry = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(entry, dict):
                continue
            if event is None or entry.get("event") == event:
                entries.append(entry)
    return entries
