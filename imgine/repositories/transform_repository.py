# repositories/transform_repository.py
"""
Data-driven route table for colorspace conversion.

• _EDGES lists every pair of *adjacent* spaces with the typed steps that
  convert one into the other.
• Routes for every ordered pair are composed once at import by walking
  the edges breadth-first, so the hub (CIE-XYZ, anchored on BGR/RGB)
  falls out of the table instead of being hard-coded per function.
"""
from __future__ import annotations
from collections import deque
from typing import Dict, List, Tuple
import cv2

from ..exceptions import NoRouteError
from ..models import color_matrices as cm
from ..models.colorspace import Colorspace
from ..models.transform_step import CvtColorStep, DirectionStep, TransformStep

Route = Tuple[TransformStep, ...]
S = Colorspace

_EDGES: Dict[Tuple[Colorspace, Colorspace], Route] = {
    # ── direct set (OpenCV) ─────────────────────────────────────────
    (S.BGR, S.RGB): (CvtColorStep(cv2.COLOR_BGR2RGB, "BGR2RGB"),),
    (S.RGB, S.BGR): (CvtColorStep(cv2.COLOR_RGB2BGR, "RGB2BGR"),),
    (S.BGR, S.HSV): (CvtColorStep(cv2.COLOR_BGR2HSV, "BGR2HSV"),),
    (S.HSV, S.BGR): (CvtColorStep(cv2.COLOR_HSV2BGR, "HSV2BGR"),),
    (S.RGB, S.HSV): (CvtColorStep(cv2.COLOR_RGB2HSV, "RGB2HSV"),),
    (S.HSV, S.RGB): (CvtColorStep(cv2.COLOR_HSV2RGB, "HSV2RGB"),),
    (S.BGR, S.HLS): (CvtColorStep(cv2.COLOR_BGR2HLS, "BGR2HLS"),),
    (S.HLS, S.BGR): (CvtColorStep(cv2.COLOR_HLS2BGR, "HLS2BGR"),),
    (S.RGB, S.HLS): (CvtColorStep(cv2.COLOR_RGB2HLS, "RGB2HLS"),),
    (S.HLS, S.RGB): (CvtColorStep(cv2.COLOR_HLS2RGB, "HLS2RGB"),),
    (S.BGR, S.YCrCb): (CvtColorStep(cv2.COLOR_BGR2YCrCb, "BGR2YCrCb"),),
    (S.YCrCb, S.BGR): (CvtColorStep(cv2.COLOR_YCrCb2BGR, "YCrCb2BGR"),),
    (S.RGB, S.YCrCb): (CvtColorStep(cv2.COLOR_RGB2YCrCb, "RGB2YCrCb"),),
    (S.YCrCb, S.RGB): (CvtColorStep(cv2.COLOR_YCrCb2RGB, "YCrCb2RGB"),),
    # ── CIELAB: closed-form sRGB Lab ────────────────────────────────
    (S.BGR, S.CIELAB): (DirectionStep(cm.bgr_lab, False, "BGR2Lab"),),
    (S.CIELAB, S.BGR): (DirectionStep(cm.bgr_lab, True, "Lab2BGR"),),
    (S.RGB, S.CIELAB): (DirectionStep(cm.rgb_lab, False, "RGB2Lab"),),
    (S.CIELAB, S.RGB): (DirectionStep(cm.rgb_lab, True, "Lab2RGB"),),
    # ── hub: anchor ─► CIE-XYZ ──────────────────────────────────────
    (S.BGR, S.CIEXYZ): (DirectionStep(cm.bgr_xyz, False, "BGR2XYZ"),),
    (S.CIEXYZ, S.BGR): (DirectionStep(cm.bgr_xyz, True, "XYZ2BGR"),),
    (S.RGB, S.CIEXYZ): (DirectionStep(cm.rgb_xyz, False, "RGB2XYZ"),),
    (S.CIEXYZ, S.RGB): (DirectionStep(cm.rgb_xyz, True, "XYZ2RGB"),),
    # ── CIE-XYZ ─► LMS ─► lαβ ───────────────────────────────────────
    (S.CIEXYZ, S.LMS): (DirectionStep(cm.xyz_lms, False, "XYZ2LMS"),),
    (S.LMS, S.CIEXYZ): (DirectionStep(cm.xyz_lms, True, "LMS2XYZ"),),
    (S.LMS, S.Ruderman_lab): (DirectionStep(cm.lms_lalphabeta, False, "LMS2lab"),),
    (S.Ruderman_lab, S.LMS): (DirectionStep(cm.lms_lalphabeta, True, "lab2LMS"),),
}


def _shortest_paths(source: Colorspace) -> Dict[Colorspace, List[Colorspace]]:
    paths = {source: [source]}
    queue = deque([source])
    while queue:
        here = queue.popleft()
        for (a, b) in _EDGES:
            if a is here and b not in paths:
                paths[b] = paths[here] + [b]
                queue.append(b)
    return paths


def _build_routes():
    paths: Dict[Tuple[Colorspace, Colorspace], Tuple[Colorspace, ...]] = {}
    routes: Dict[Tuple[Colorspace, Colorspace], Route] = {}
    for src in Colorspace:
        for dst, hops in _shortest_paths(src).items():
            steps: List[TransformStep] = []
            for a, b in zip(hops, hops[1:]):
                steps.extend(_EDGES[(a, b)])
            paths[(src, dst)] = tuple(hops)
            routes[(src, dst)] = tuple(steps)
    return paths, routes


_PATHS, _ROUTES = _build_routes()


class TransformRepository:
    """
    Read-only lookups into the precomputed route table.
    """

    @staticmethod
    def retrieve_route(src: Colorspace, dst: Colorspace) -> Route:
        """Ordered steps converting `src` into `dst` (empty when equal)."""
        try:
            return _ROUTES[(src, dst)]
        except KeyError:
            raise NoRouteError(f"No conversion route from {src} to {dst}") from None

    @staticmethod
    def retrieve_path(src: Colorspace, dst: Colorspace) -> Tuple[Colorspace, ...]:
        """The spaces a conversion passes through, endpoints included."""
        try:
            return _PATHS[(src, dst)]
        except KeyError:
            raise NoRouteError(f"No conversion route from {src} to {dst}") from None

