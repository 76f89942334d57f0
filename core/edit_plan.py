"""Compile project descriptions into validated edit plans.

A project description is the JSON document the editor front end keeps::

    {
      "id": "proj-1",
      "assets": {"a1": {"id": "a1", "kind": "video", "name": "x.mp4",
                        "src": "file:///media/x.mp4", "durationMs": 9000}},
      "clips":  {"c1": {"id": "c1", "assetId": "a1", "trackId": "t1",
                        "startMs": 0, "endMs": 1000, "inMs": 0, "outMs": 1000}},
      "tracks": {"t1": {"id": "t1", "role": "main", "clipOrder": ["c1"]}}
    }

Tracks are visited in the order they appear in the document, so the
overlay track reflects authoring order.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from models.edit_plan import EditPlan, SeqClip

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"
ROLE_MAIN = "main"

_REQUIRED_KEYS = ("id", "assets", "clips", "tracks")
_CLIP_TIME_KEYS = ("startMs", "endMs", "inMs", "outMs")


class PlanError(Exception):
    """Raised when a project description cannot become an edit plan."""
    pass


def _normalize_src(src: str) -> Path:
    """Strip a ``file://`` scheme, leaving a bare filesystem path."""
    if src.startswith(FILE_SCHEME):
        src = src[len(FILE_SCHEME):]
    return Path(src)


def _parse(project_json: Union[str, bytes, dict]) -> dict:
    if isinstance(project_json, dict):
        data = project_json
    else:
        try:
            data = json.loads(project_json)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise PlanError(f"invalid project json: {e}")

    if not isinstance(data, dict):
        raise PlanError("invalid project json: top level must be an object")
    for key in _REQUIRED_KEYS:
        if key not in data:
            raise PlanError(f"invalid project json: missing field '{key}'")
    for key in ("assets", "clips", "tracks"):
        if not isinstance(data[key], dict):
            raise PlanError(f"invalid project json: '{key}' must be an object")
    return data


def _clip_times(clip_id: str, clip: dict) -> dict[str, int]:
    times = {}
    for key in _CLIP_TIME_KEYS:
        value = clip.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise PlanError(f"clip {clip_id}: '{key}' must be a non-negative number")
        times[key] = int(value)
    return times


def _resolve_clip(clip_id: str, clips: dict, assets: dict) -> Optional[SeqClip]:
    """Resolve one clip id to a SeqClip, or None when it dangles."""
    if not isinstance(clip_id, str):
        raise PlanError(f"invalid project json: clip id {clip_id!r} must be a string")
    clip = clips.get(clip_id)
    if not isinstance(clip, dict):
        logger.debug(f"Skipping unknown clip {clip_id}")
        return None
    asset_id = clip.get("assetId")
    if asset_id is not None and not isinstance(asset_id, str):
        raise PlanError(f"invalid project json: clip {clip_id} assetId must be a string")
    asset = assets.get(asset_id)
    if not isinstance(asset, dict) or not isinstance(asset.get("src"), str):
        logger.debug(f"Skipping clip {clip_id}: asset {asset_id} not found")
        return None

    times = _clip_times(clip_id, clip)
    if times["outMs"] <= times["inMs"]:
        raise PlanError(f"clip {clip_id} out <= in ({times['outMs']} <= {times['inMs']})")
    if times["endMs"] <= times["startMs"]:
        raise PlanError(
            f"clip {clip_id} end <= start ({times['endMs']} <= {times['startMs']})"
        )

    return SeqClip(
        src_path=_normalize_src(asset["src"]),
        in_ms=times["inMs"],
        out_ms=times["outMs"],
        start_ms=times["startMs"],
        end_ms=times["endMs"],
    )


def _plan_id(value) -> str:
    """The id names output files, so it must be a plain file stem."""
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise PlanError("invalid project json: 'id' must be a string")
    plan_id = str(value)
    if not plan_id or plan_id in (".", "..") or any(sep in plan_id for sep in ("/", "\\")):
        raise PlanError(f"invalid project id {plan_id!r}: must be a plain name")
    return plan_id


def _check_no_overlap(main: list[SeqClip]) -> None:
    for prev, cur in zip(main, main[1:]):
        if prev.end_ms > cur.start_ms:
            raise PlanError(
                "overlapping clips on main track: "
                f"[{prev.start_ms}, {prev.end_ms}) overlaps [{cur.start_ms}, {cur.end_ms})"
            )


def build_plan(project_json: Union[str, bytes, dict]) -> EditPlan:
    """Build a validated EditPlan from a project description.

    Args:
        project_json: JSON text (or an already-decoded dict)

    Returns:
        EditPlan with a sorted, non-overlapping main track

    Raises:
        PlanError: On malformed input, an invalid trim window, or
            overlapping main-track clips
    """
    data = _parse(project_json)
    plan_id = _plan_id(data["id"])
    assets = data["assets"]
    clips = data["clips"]

    main: list[SeqClip] = []
    overlay: list[SeqClip] = []

    for track_id, track in data["tracks"].items():
        if not isinstance(track, dict):
            raise PlanError(f"invalid project json: track {track_id} must be an object")
        clip_order = track.get("clipOrder", [])
        if not isinstance(clip_order, list):
            raise PlanError(f"invalid project json: track {track_id} clipOrder must be a list")

        target = main if track.get("role") == ROLE_MAIN else overlay
        for clip_id in clip_order:
            seq_clip = _resolve_clip(clip_id, clips, assets)
            if seq_clip is not None:
                target.append(seq_clip)

    # Stable sort: equal starts keep authoring order
    main.sort(key=lambda c: c.start_ms)
    _check_no_overlap(main)

    plan = EditPlan(
        id=plan_id,
        main_track=tuple(main),
        overlay_track=tuple(overlay),
    )
    logger.debug(
        f"Built plan {plan.id}: {len(plan.main_track)} main, "
        f"{len(plan.overlay_track)} overlay clips"
    )
    return plan


def persist_plan(plan: EditPlan) -> None:
    """Persist a plan to disk.

    Projects are not stored yet; the front end owns the source of truth.
    """
    logger.debug(f"persist_plan({plan.id}) is a no-op")


def apply_edits(project_json: Union[str, bytes, dict]) -> EditPlan:
    """Validate a project description and hand the plan to persistence."""
    plan = build_plan(project_json)
    persist_plan(plan)
    return plan
