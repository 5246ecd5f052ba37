# strike_annote/export.py
from __future__ import annotations

import json
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from .domain import DEFAULT_ANNOTATOR, Action, ActionCatalog, Segment
from .segment_store import SegmentStore, SortKey


logger = logging.getLogger(__name__)

UNKNOWN_ACTION_LABEL = "UNKNOWN"


def action_export_label(action: Optional[Action]) -> str:
    """JAB-H -> JAB_H, L-HOOK-H -> L_HOOK_H."""
    if action is None:
        return UNKNOWN_ACTION_LABEL
    return action.short_name.replace("-", "_").upper()


def segment_to_export_dict(segment: Segment, catalog: ActionCatalog) -> Dict:
    return {
        "id": int(segment.id),
        "action": action_export_label(catalog.lookup(segment.action_id)),
        "action_id": int(segment.action_id),
        "start_time": round(float(segment.start_time), 3),
        "end_time": round(float(segment.end_time), 3),
        "start_frame": int(segment.start_frame),
        "end_frame": int(segment.end_frame),
    }


def build_export_document(
    video_file: str,
    store: SegmentStore,
    catalog: ActionCatalog,
    labeled_by: str = DEFAULT_ANNOTATOR,
    export_date: Optional[date] = None,
) -> Dict:
    """
    One JSON-compatible document per video.

    Segments are written in ascending start time so repeated exports of the
    same store are identical. Frames are the ones stored at commit time.
    """
    d = export_date or date.today()
    return {
        "video_file": video_file,
        "labeled_by": labeled_by,
        "date": d.isoformat(),
        "segments": [segment_to_export_dict(s, catalog) for s in store.list(SortKey.BY_TIME)],
    }


def export_json_text(doc: Dict) -> str:
    return json.dumps(doc, indent=2, ensure_ascii=False)


def segments_from_export(doc: Dict) -> List[Segment]:
    """
    Rebuild segments from a saved export document.
    Malformed rows are skipped; rows with end_time <= start_time are dropped.
    """
    out: List[Segment] = []
    rows: Iterable = doc.get("segments") or []
    for row in rows:
        try:
            seg = Segment(
                id=int(row["id"]),
                action_id=int(row["action_id"]),
                start_time=float(row["start_time"]),
                end_time=float(row["end_time"]),
                start_frame=int(row["start_frame"]),
                end_frame=int(row["end_frame"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed segment row %r: %s", row, e)
            continue
        if seg.end_time <= seg.start_time or seg.start_time < 0:
            logger.warning("Skipping segment %s with invalid interval", seg.id)
            continue
        out.append(seg)
    return out
