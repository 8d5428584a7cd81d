#!/usr/bin/env python3
"""
imgine command line.
Each subcommand loads its inputs into a fresh Workspace, runs one
procedure and exports the resulting canvas.
"""

import os
import sys
import logging
import argparse
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from .. import __version__
from ..exceptions import ImgineError
from ..models.colorspace import COLORSPACE_STRINGS, Colorspace
from ..models.roi import Roi
from ..pipeline.batch_transfer import transfer_gallery
from ..pipeline.procedures import convert_colorspace, region_statistics
from ..services.color_transfer_service import ColorTransferService, ZERO_VARIANCE_POLICIES
from ..services.image_service import ImageService
from ..services.workspace_service import Workspace

logger = logging.getLogger("imgine")


def _configure_logging(verbosity: int) -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    if verbosity:
        level = "DEBUG"
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def _select(ws: Workspace, canvas, roi_text):
    if roi_text:
        ws.select(canvas.name, Roi.parse(roi_text))


# ─── subcommands ──────────────────────────────────────────────────
def cmd_transfer(args) -> int:
    ws = Workspace(color_transfer_service=ColorTransferService(
        zero_variance_policy=args.zero_variance))
    src = ws.import_image(args.source, name="source")
    ref = ws.import_image(args.reference, name="reference")
    _select(ws, src, args.src_roi)
    _select(ws, ref, args.ref_roi)
    result = ws.run_color_transfer(src.name, ref.name, args.space)
    print(f"Saved {ws.export(result.name, args.output)}")
    return 0


def cmd_equalize(args) -> int:
    ws = Workspace()
    canvas = ws.import_image(args.image)
    result = ws.run_equalize(canvas.name, args.space)
    print(f"Saved {ws.export(result.name, args.output)}")
    return 0


def cmd_grayscale(args) -> int:
    ws = Workspace()
    canvas = ws.import_image(args.image)
    result = ws.run_grayscale(canvas.name)
    print(f"Saved {ws.export(result.name, args.output)}")
    return 0


def cmd_histogram(args) -> int:
    ws = Workspace()
    canvas = ws.import_image(args.image)
    result = ws.run_histogram(canvas.name)
    print(f"Saved {ws.export(result.name, args.output)}")
    return 0


def cmd_stats(args) -> int:
    ws = Workspace()
    canvas = ws.import_image(args.image)
    _select(ws, canvas, args.roi)
    if args.space:
        mat = convert_colorspace(ImageService.to_float(canvas.image), Colorspace.BGR, args.space)
        means, stddevs = region_statistics(mat, canvas.roi)
        label = Colorspace.from_name(args.space).value
    else:
        means, stddevs = ws.statistics(canvas.name)
        label = "stored channels"
    print(f"ROI {canvas.roi.as_tuple()} ({label})")
    for i, (m, s) in enumerate(zip(means, stddevs)):
        print(f"  channel {i}: mean={m:.6f}  stddev={s:.6f}")
    return 0


def cmd_inspect(args) -> int:
    ws = Workspace()
    canvas = ws.import_image(args.image)
    info = ws.inspect(canvas.name, args.x, args.y)
    line = f"({info['x']}, {info['y']}) values={info['values']} {info['hex']}"
    if "opacity" in info:
        line += f" opacity={info['opacity']:.3f}"
    print(line)
    return 0


def cmd_batch(args) -> int:
    image_service = ImageService()
    reference = image_service.load(args.reference)
    roi = Roi.parse(args.ref_roi) if args.ref_roi else None
    saved = transfer_gallery(
        args.folder, reference, roi, args.space,
        recursive=args.recursive,
        image_service=image_service,
        color_transfer_service=ColorTransferService(zero_variance_policy=args.zero_variance),
        out_dir=args.out_dir,
    )
    print(f"Saved {len(saved)} image(s) to {args.out_dir}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    spaces = ", ".join(COLORSPACE_STRINGS)
    ap = argparse.ArgumentParser(prog="imgine", description="Color-science image workbench")
    ap.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("transfer", help="statistical color transfer")
    p.add_argument("source")
    p.add_argument("reference")
    p.add_argument("-o", "--output", required=True)
    p.add_argument("--src-roi", help="source swatch x,y,width,height")
    p.add_argument("--ref-roi", help="reference swatch x,y,width,height")
    p.add_argument("--space", help=f"one of: {spaces}")
    p.add_argument("--zero-variance", choices=ZERO_VARIANCE_POLICIES)
    p.set_defaults(func=cmd_transfer)

    p = sub.add_parser("equalize", help="histogram equalization")
    p.add_argument("image")
    p.add_argument("-o", "--output", required=True)
    p.add_argument("--space", help="CIELAB, HSV, HLS, YCrCb, CIEXYZ, BGR or RGB")
    p.set_defaults(func=cmd_equalize)

    p = sub.add_parser("grayscale", help="luma conversion")
    p.add_argument("image")
    p.add_argument("-o", "--output", required=True)
    p.set_defaults(func=cmd_grayscale)

    p = sub.add_parser("histogram", help="render channel histograms")
    p.add_argument("image")
    p.add_argument("-o", "--output", required=True)
    p.set_defaults(func=cmd_histogram)

    p = sub.add_parser("stats", help="ROI mean and standard deviation")
    p.add_argument("image")
    p.add_argument("--roi", help="x,y,width,height")
    p.add_argument("--space", help=f"measure in one of: {spaces}")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("inspect", help="print one pixel")
    p.add_argument("image")
    p.add_argument("x", type=int)
    p.add_argument("y", type=int)
    p.set_defaults(func=cmd_inspect)

    p = sub.add_parser("batch", help="color transfer over a folder")
    p.add_argument("folder")
    p.add_argument("reference")
    p.add_argument("--ref-roi", help="reference swatch x,y,width,height")
    p.add_argument("--space", help=f"one of: {spaces}")
    p.add_argument("--out-dir", default=os.getenv("TRANSFER_DIR_PATH", "data/transferred"))
    p.add_argument("--recursive", action="store_true")
    p.add_argument("--zero-variance", choices=ZERO_VARIANCE_POLICIES)
    p.set_defaults(func=cmd_batch)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except (ImgineError, ValueError, IndexError) as err:
        logger.error(str(err))
        return 1


if __name__ == "__main__":
    sys.exit(main())
