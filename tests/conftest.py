"""Shared test fixtures and helpers for all tests."""

import json
import subprocess
from pathlib import Path
from typing import Callable, Optional

import pytest

from core.cache import CacheDirs


@pytest.fixture
def cache(tmp_path) -> CacheDirs:
    """Cache layout rooted in a temp directory."""
    return CacheDirs.create(tmp_path / "appdata")


def make_project(
    main_clips: list[tuple[int, int, int, int]],
    overlay_clips: Optional[list[tuple[int, int, int, int]]] = None,
    project_id: str = "proj-1",
    src: str = "file:///media/source.mp4",
) -> dict:
    """Build a project description.

    Each clip tuple is ``(start_ms, end_ms, in_ms, out_ms)``. Main clips
    go on track ``t-main`` in the given order, overlay clips on ``t-over``.

    This is a factory function (not a fixture) so tests can build
    several projects with different layouts.
    """
    assets = {"a1": {"id": "a1", "kind": "video", "name": "source.mp4", "src": src}}
    clips = {}
    main_order = []
    overlay_order = []

    for i, (start, end, in_ms, out_ms) in enumerate(main_clips):
        clip_id = f"m{i}"
        clips[clip_id] = {
            "id": clip_id, "assetId": "a1", "trackId": "t-main",
            "startMs": start, "endMs": end, "inMs": in_ms, "outMs": out_ms,
        }
        main_order.append(clip_id)

    for i, (start, end, in_ms, out_ms) in enumerate(overlay_clips or []):
        clip_id = f"o{i}"
        clips[clip_id] = {
            "id": clip_id, "assetId": "a1", "trackId": "t-over",
            "startMs": start, "endMs": end, "inMs": in_ms, "outMs": out_ms,
        }
        overlay_order.append(clip_id)

    return {
        "id": project_id,
        "assets": assets,
        "clips": clips,
        "tracks": {
            "t-main": {"id": "t-main", "role": "main", "clipOrder": main_order},
            "t-over": {"id": "t-over", "role": "overlay", "clipOrder": overlay_order},
        },
    }


def make_project_json(*args, **kwargs) -> str:
    return json.dumps(make_project(*args, **kwargs))


class FakeFFmpeg:
    """Stand-in for ``subprocess.run`` that records ffmpeg invocations.

    ``fails`` decides, per command, whether the invocation exits non-zero.
    Successful invocations write ``output_bytes`` to the output path
    (the last argument), like ffmpeg would. Failing ones write
    ``partial_bytes`` first when given, like a crash mid-write.

    Concat manifests are read when they are used, since the export
    removes its working files afterwards.
    """

    def __init__(
        self,
        fails: Optional[Callable[[list[str]], bool]] = None,
        output_bytes: bytes = b"\x00" * 64,
        stderr: str = "simulated ffmpeg failure",
        partial_bytes: Optional[bytes] = None,
    ):
        self.fails = fails or (lambda cmd: False)
        self.output_bytes = output_bytes
        self.stderr = stderr
        self.partial_bytes = partial_bytes
        self.calls: list[list[str]] = []
        self.manifests: list[str] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        if is_concat(cmd):
            self.manifests.append(Path(cmd[cmd.index("-i") + 1]).read_text())
        if self.fails(cmd):
            if self.partial_bytes is not None:
                Path(cmd[-1]).write_bytes(self.partial_bytes)
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr=self.stderr)
        Path(cmd[-1]).write_bytes(self.output_bytes)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


def is_stream_copy(cmd: list[str]) -> bool:
    return "-c" in cmd and cmd[cmd.index("-c") + 1] == "copy"


def is_concat(cmd: list[str]) -> bool:
    return "concat" in cmd
