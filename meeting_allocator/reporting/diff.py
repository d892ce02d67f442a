from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from meeting_allocator.domain.timegrid import parse_instant
from meeting_allocator.io_layer.json_store import read_result_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotChange:
    name: str
    label: str
    new_slot: str
    previous_slot: str

    def to_dict(self) -> Dict[str, str]:
        d = asdict(self)
        return dict(name=d["name"], cname=d["label"], newSlot=d["new_slot"], previousSlot=d["previous_slot"])


def _same_instant(a: str, b: str) -> bool:
    if a == b:
        return True
    try:
        return parse_instant(a) == parse_instant(b)
    except ValueError:
        return False


def diff_records(current: Sequence[Dict[str, Any]], previous: Sequence[Dict[str, Any]]) -> List[SlotChange]:
    """Meetings present in both results whose slot changed, in current order."""
    previous_by_name = {r.get("name"): r for r in previous}
    out = []
    for r in current:
        old = previous_by_name.get(r.get("name"))
        if old is None:
            continue
        if not _same_instant(str(r.get("slot", "")), str(old.get("slot", ""))):
            out.append(SlotChange(
                name=r["name"],
                label=r.get("cname", ""),
                new_slot=str(r.get("slot", "")),
                previous_slot=str(old.get("slot", "")),
            ))
    return out


def find_diffs(current: Sequence[Dict[str, Any]], previous_path: Optional[Union[str, Path]]) -> List[SlotChange]:
    """A missing or unreadable previous result yields no diffs."""
    if previous_path is None or not Path(previous_path).exists():
        return []
    try:
        previous = read_result_json(previous_path)
    except (OSError, ValueError) as e:
        logger.error("Error finding diffs: %s", e)
        return []
    return diff_records(current, previous)
