"""Tests for compiling project descriptions into edit plans."""

import json
from pathlib import Path

import pytest

from core.edit_plan import PlanError, apply_edits, build_plan
from models.edit_plan import EditPlan, SeqClip
from tests.conftest import make_project, make_project_json


class TestBuildPlanValid:
    """Well-formed projects."""

    def test_three_adjacent_clips(self):
        project = make_project_json([
            (0, 1000, 0, 1000),
            (1000, 2500, 2000, 3500),
            (2500, 4000, 500, 2000),
        ])
        plan = build_plan(project)

        assert plan.id == "proj-1"
        assert [c.start_ms for c in plan.main_track] == [0, 1000, 2500]
        assert plan.overlay_track == ()
        assert plan.planned_duration_ms == 1000 + 1500 + 1500

    def test_main_track_sorted_by_start(self):
        project = make_project_json([
            (2500, 4000, 0, 1500),
            (0, 1000, 0, 1000),
            (1000, 2500, 0, 1500),
        ])
        plan = build_plan(project)

        starts = [c.start_ms for c in plan.main_track]
        assert starts == sorted(starts)
        for prev, cur in zip(plan.main_track, plan.main_track[1:]):
            assert prev.end_ms <= cur.start_ms

    def test_file_scheme_is_stripped(self):
        plan = build_plan(make_project_json([(0, 1000, 0, 1000)], src="file:///media/a b.mp4"))
        assert plan.main_track[0].src_path == Path("/media/a b.mp4")

    def test_plain_path_kept(self):
        plan = build_plan(make_project_json([(0, 1000, 0, 1000)], src="/media/raw.mov"))
        assert plan.main_track[0].src_path == Path("/media/raw.mov")

    def test_overlay_keeps_discovery_order_and_may_overlap(self):
        project = make_project_json(
            [(0, 1000, 0, 1000)],
            overlay_clips=[(500, 1500, 0, 1000), (0, 800, 0, 800)],
        )
        plan = build_plan(project)

        assert [c.start_ms for c in plan.overlay_track] == [500, 0]

    def test_overlay_order_follows_track_order_in_document(self):
        data = make_project([], overlay_clips=[(0, 100, 0, 100)])
        data["clips"]["late"] = {
            "id": "late", "assetId": "a1", "trackId": "t-late",
            "startMs": 900, "endMs": 1000, "inMs": 0, "outMs": 100,
        }
        # Track inserted before t-over in the document
        data["tracks"] = {
            "t-late": {"id": "t-late", "role": "overlay", "clipOrder": ["late"]},
            **data["tracks"],
        }
        plan = build_plan(json.dumps(data))

        assert [c.start_ms for c in plan.overlay_track] == [900, 0]

    def test_unknown_role_routes_to_overlay(self):
        data = make_project([], overlay_clips=[(0, 100, 0, 100)])
        data["tracks"]["t-over"]["role"] = "picture-in-picture"
        plan = build_plan(data)
        assert len(plan.overlay_track) == 1
        assert plan.main_track == ()

    def test_dangling_references_skipped(self):
        data = make_project([(0, 1000, 0, 1000)])
        data["tracks"]["t-main"]["clipOrder"].append("missing-clip")
        data["clips"]["orphan"] = {
            "id": "orphan", "assetId": "no-such-asset", "trackId": "t-main",
            "startMs": 2000, "endMs": 3000, "inMs": 0, "outMs": 1000,
        }
        data["tracks"]["t-main"]["clipOrder"].append("orphan")

        plan = build_plan(json.dumps(data))
        assert len(plan.main_track) == 1

    def test_clip_without_asset_is_skipped(self):
        data = make_project([(0, 1000, 0, 1000), (1000, 2000, 0, 1000)])
        del data["clips"]["m1"]["assetId"]
        plan = build_plan(data)
        assert len(plan.main_track) == 1

    def test_touching_clips_allowed(self):
        plan = build_plan(make_project_json([(0, 1000, 0, 1000), (1000, 2000, 0, 1000)]))
        assert len(plan.main_track) == 2

    def test_accepts_decoded_dict_and_bytes(self):
        data = make_project([(0, 1000, 0, 1000)])
        assert build_plan(data).id == "proj-1"
        assert build_plan(json.dumps(data).encode("utf-8")).id == "proj-1"

    def test_empty_project(self):
        plan = build_plan(make_project_json([]))
        assert plan.main_track == ()
        assert plan.planned_duration_ms == 0


class TestBuildPlanRejects:
    """Projects that must fail before reaching export."""

    def test_overlapping_main_clips(self):
        project = make_project_json([(0, 1000, 0, 1000), (500, 1500, 0, 1000)])
        with pytest.raises(PlanError, match="overlapping"):
            build_plan(project)

    def test_overlap_detected_after_sorting(self):
        project = make_project_json([(500, 1500, 0, 1000), (0, 1000, 0, 1000)])
        with pytest.raises(PlanError, match="overlapping"):
            build_plan(project)

    @pytest.mark.parametrize("in_ms,out_ms", [(1000, 1000), (2000, 1000)])
    def test_invalid_trim_window_names_clip(self, in_ms, out_ms):
        project = make_project_json([(0, 1000, 0, 1000), (1000, 2000, in_ms, out_ms)])
        with pytest.raises(PlanError, match="clip m1"):
            build_plan(project)

    def test_invalid_trim_on_overlay_also_rejected(self):
        project = make_project_json([], overlay_clips=[(0, 1000, 500, 500)])
        with pytest.raises(PlanError, match="clip o0"):
            build_plan(project)

    @pytest.mark.parametrize("text", ["", "not json", "[1, 2]", "{\"id\": \"x\"}"])
    def test_malformed_description(self, text):
        with pytest.raises(PlanError, match="invalid project json"):
            build_plan(text)

    def test_clip_ending_before_it_starts(self):
        project = make_project_json([(2000, 1000, 0, 1000)])
        with pytest.raises(PlanError, match="clip m0 end <= start"):
            build_plan(project)

    def test_zero_length_placement(self):
        project = make_project_json([(1000, 1000, 0, 1000)])
        with pytest.raises(PlanError, match="end <= start"):
            build_plan(project)

    @pytest.mark.parametrize("project_id", ["../../escaped", "team/proj", "a\\b", "..", ""])
    def test_project_id_must_be_plain_name(self, project_id):
        project = make_project_json([(0, 1000, 0, 1000)], project_id=project_id)
        with pytest.raises(PlanError, match="invalid project id"):
            build_plan(project)

    def test_project_id_wrong_type(self):
        data = make_project([(0, 1000, 0, 1000)])
        data["id"] = {"nested": True}
        with pytest.raises(PlanError, match="'id' must be a string"):
            build_plan(data)

    @pytest.mark.parametrize("bad_ref", [["m0"], {"id": "m0"}, 7])
    def test_non_string_clip_reference(self, bad_ref):
        data = make_project([(0, 1000, 0, 1000)])
        data["tracks"]["t-main"]["clipOrder"] = [bad_ref]
        with pytest.raises(PlanError, match="clip id"):
            build_plan(data)

    @pytest.mark.parametrize("bad_asset", [["a1"], {"id": "a1"}, 3])
    def test_non_string_asset_reference(self, bad_asset):
        data = make_project([(0, 1000, 0, 1000)])
        data["clips"]["m0"]["assetId"] = bad_asset
        with pytest.raises(PlanError, match="assetId must be a string"):
            build_plan(data)

    def test_non_numeric_time(self):
        data = make_project([(0, 1000, 0, 1000)])
        data["clips"]["m0"]["outMs"] = "1000"
        with pytest.raises(PlanError, match="outMs"):
            build_plan(data)


class TestEditPlanModel:
    """EditPlan / SeqClip behavior."""

    def _clip(self, start, end, in_ms=0):
        return SeqClip(Path("/v.mp4"), in_ms, in_ms + (end - start), start, end)

    def test_plan_is_immutable(self):
        plan = build_plan(make_project_json([(0, 1000, 0, 1000)]))
        with pytest.raises(AttributeError):
            plan.id = "other"
        with pytest.raises(AttributeError):
            plan.main_track[0].in_ms = 5

    def test_top_visible_clip(self):
        plan = EditPlan(id="p", main_track=(self._clip(0, 1000), self._clip(1000, 2000)))
        assert plan.top_visible_clip(0) is plan.main_track[0]
        assert plan.top_visible_clip(999) is plan.main_track[0]
        assert plan.top_visible_clip(1000) is plan.main_track[1]
        assert plan.top_visible_clip(2000) is None


class TestApplyEdits:
    def test_returns_validated_plan(self):
        plan = apply_edits(make_project_json([(0, 1000, 0, 1000)]))
        assert len(plan.main_track) == 1

    def test_propagates_plan_error(self):
        with pytest.raises(PlanError):
            apply_edits("{")
