"""
Fixed 3x3 colorspace matrices and the primitives that apply them.

All matrix math is float32 and per pixel: for an (H, W, 3) matrix every
3-vector v is replaced by m·v. Inverses are computed once at import.

  BGR/RGB ─► CIE-XYZ   sRGB primaries, D65 white
  CIE-XYZ ─► LMS       von Kries cone response (Reinhard et al. 2001)
  LMS ─► lαβ           log, then D·C (Ruderman et al. 1998)
  BGR/RGB ─► CIELAB    sRGB decode, XYZ, then the CIE f(t) against D65 white
"""
from __future__ import annotations
import numpy as np
import cv2

# Samples entering the log domain are raised to this floor so log(0) never happens.
LOG_FLOOR = 1e-6

# ── RGB family ─► CIE-XYZ ──────────────────────────────────────────
RGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float32)
XYZ_TO_RGB = np.linalg.inv(RGB_TO_XYZ.astype(np.float64)).astype(np.float32)

# Same transform with the input columns in B, G, R order.
BGR_TO_XYZ = np.ascontiguousarray(RGB_TO_XYZ[:, ::-1])
# Output rows in B, G, R order.
XYZ_TO_BGR = np.ascontiguousarray(XYZ_TO_RGB[::-1, :])

# ── CIE-XYZ ─► LMS ─────────────────────────────────────────────────
XYZ_TO_LMS = np.array([
    [0.3897, 0.6890, -0.0787],
    [-0.2298, 1.1834, 0.0464],
    [0.0000, 0.0000, 1.0000],
], dtype=np.float32)
LMS_TO_XYZ = np.linalg.inv(XYZ_TO_LMS.astype(np.float64)).astype(np.float32)

# ── log LMS ─► lαβ ─────────────────────────────────────────────────
OPPONENT = np.array([
    [1.0, 1.0, 1.0],
    [1.0, 1.0, -2.0],
    [1.0, -1.0, 0.0],
])
_SCALE = np.diag([1.0 / np.sqrt(3.0), 1.0 / np.sqrt(6.0), 1.0 / np.sqrt(2.0)])

LMS_TO_LALPHABETA = (_SCALE @ OPPONENT).astype(np.float32)
# The opponent rows are orthogonal, so C⁻¹·D⁻¹ = Cᵀ·diag(√3/3, √6/6, √2/2).
LALPHABETA_TO_LMS = (
    OPPONENT.T @ np.diag([np.sqrt(3.0) / 3.0, np.sqrt(6.0) / 6.0, np.sqrt(2.0) / 2.0])
).astype(np.float32)

# ── CIE-XYZ ─► CIELAB ──────────────────────────────────────────────
# XYZ of RGB white (1, 1, 1), so white maps to L=100, a=b=0.
D65_WHITE = RGB_TO_XYZ.astype(np.float64).sum(axis=1).astype(np.float32)
LAB_DELTA = 6.0 / 29.0


# ── Primitives ─────────────────────────────────────────────────────
def _as_float32(mat: np.ndarray) -> np.ndarray:
    mat = np.asarray(mat, dtype=np.float32)
    if not mat.flags['C_CONTIGUOUS']:
        mat = np.ascontiguousarray(mat)
    return mat


def apply_matrix(mat: np.ndarray, m: np.ndarray) -> np.ndarray:
    """Return a new (H, W, 3) float32 matrix with m·v applied to every pixel."""
    return cv2.transform(_as_float32(mat), m)


def log_domain(mat: np.ndarray, floor: float = LOG_FLOOR) -> np.ndarray:
    """Natural log of every sample, after raising samples below `floor` to it."""
    return cv2.log(np.maximum(_as_float32(mat), np.float32(floor)))


def exp_domain(mat: np.ndarray) -> np.ndarray:
    return cv2.exp(_as_float32(mat))


def srgb_to_linear(mat: np.ndarray) -> np.ndarray:
    """Undo the sRGB transfer curve (piecewise, gamma 2.4)."""
    mat = _as_float32(mat)
    curve = ((np.maximum(mat, 0.04045) + 0.055) / 1.055) ** 2.4
    return np.where(mat <= 0.04045, mat / 12.92, curve).astype(np.float32)


def linear_to_srgb(mat: np.ndarray) -> np.ndarray:
    mat = _as_float32(mat)
    curve = 1.055 * np.maximum(mat, 0.0031308) ** (1.0 / 2.4) - 0.055
    return np.where(mat <= 0.0031308, mat * 12.92, curve).astype(np.float32)


def _f_lab(t: np.ndarray) -> np.ndarray:
    return np.where(t > LAB_DELTA ** 3,
                    np.cbrt(t),
                    t / (3.0 * LAB_DELTA ** 2) + 4.0 / 29.0)


def _f_lab_inv(t: np.ndarray) -> np.ndarray:
    return np.where(t > LAB_DELTA,
                    t ** 3,
                    3.0 * LAB_DELTA ** 2 * (t - 4.0 / 29.0))


# ── Direction-flag transforms ──────────────────────────────────────
def bgr_xyz(mat: np.ndarray, inverse: bool = False) -> np.ndarray:
    """BGR ─► CIE-XYZ, or CIE-XYZ ─► BGR with inverse=True."""
    return apply_matrix(mat, XYZ_TO_BGR if inverse else BGR_TO_XYZ)


def rgb_xyz(mat: np.ndarray, inverse: bool = False) -> np.ndarray:
    return apply_matrix(mat, XYZ_TO_RGB if inverse else RGB_TO_XYZ)


def xyz_lms(mat: np.ndarray, inverse: bool = False) -> np.ndarray:
    return apply_matrix(mat, LMS_TO_XYZ if inverse else XYZ_TO_LMS)


def lms_lalphabeta(mat: np.ndarray, inverse: bool = False,
                   floor: float = LOG_FLOOR) -> np.ndarray:
    """
    LMS ─► Ruderman lαβ (log, then matrix), or the reverse
    (matrix, then exp) with inverse=True.
    """
    if inverse:
        return exp_domain(apply_matrix(mat, LALPHABETA_TO_LMS))
    return apply_matrix(log_domain(mat, floor), LMS_TO_LALPHABETA)


def rgb_lab(mat: np.ndarray, inverse: bool = False) -> np.ndarray:
    """
    sRGB ─► CIELAB (L in [0, 100]), or CIELAB ─► sRGB with inverse=True.
    Closed form in both directions, so a round trip is exact up to float32.
    """
    mat = _as_float32(mat)
    if inverse:
        fy = (mat[..., 0] + 16.0) / 116.0
        f = np.stack([fy + mat[..., 1] / 500.0, fy, fy - mat[..., 2] / 200.0], axis=-1)
        xyz = _f_lab_inv(f) * D65_WHITE
        return linear_to_srgb(apply_matrix(xyz, XYZ_TO_RGB))

    xyz = apply_matrix(srgb_to_linear(mat), RGB_TO_XYZ) / D65_WHITE
    f = _f_lab(xyz)
    lab = np.stack([116.0 * f[..., 1] - 16.0,
                    500.0 * (f[..., 0] - f[..., 1]),
                    200.0 * (f[..., 1] - f[..., 2])], axis=-1)
    return lab.astype(np.float32)


def bgr_lab(mat: np.ndarray, inverse: bool = False) -> np.ndarray:
    if inverse:
        return np.ascontiguousarray(rgb_lab(mat, inverse=True)[..., ::-1])
    return rgb_lab(_as_float32(mat)[..., ::-1], inverse=False)
