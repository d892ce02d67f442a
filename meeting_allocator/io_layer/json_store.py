from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from meeting_allocator.domain.models import Assignment


def assignment_to_dict(a: Assignment) -> Dict[str, Any]:
    m = a.meeting
    return dict(
        name=m.name,
        cname=m.label,
        slot=a.slot.isoformat(),
        duration=m.duration,
        location=a.location or "",
        members=list(m.members),
        principals=list(m.principals),
        pics=list(m.pics),
        participants=list(m.participants),
        remark=m.remark,
    )


def write_result_json(
    path: Union[str, Path],
    version: str,
    title: str,
    timestamp: str,
    updated_meetings: Sequence[Dict[str, Any]],
    assignments: Sequence[Assignment],
) -> str:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    payload = dict(
        version=version,
        title=title,
        timestamp=timestamp,
        updatedMeetings=list(updated_meetings),
        data=[assignment_to_dict(a) for a in assignments],
    )
    out.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return str(out)


def read_result_json(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """The `data` list of a previously written result."""
    content = json.loads(Path(path).read_text(encoding="utf-8"))
    return list(content.get("data", []))
