from __future__ import annotations

import io
from typing import Any, Dict

from flask import send_file

from ..processing.buffer import PixelBuffer
from ..processing.coherence import CoherenceResult
from ..processing.difference import DifferenceMap
from ..processing.entropy import EntropyGrid
from ..processing.harmony import HarmonyResult
from ..processing.palette import DominantColor
from ..processing.pipeline import ImageReport, PairReport


def png_bytes(buf: PixelBuffer) -> bytes:
    out = io.BytesIO()
    buf.to_image().save(out, "PNG", optimize=True)
    return out.getvalue()


def send_png(buf: PixelBuffer):
    return send_file(io.BytesIO(png_bytes(buf)), mimetype="image/png")


def dominant_color_json(entry: DominantColor) -> Dict[str, Any]:
    color = entry.color
    return {
        "rgb": list(color),
        "hex": color.hex,
        "hsl": list(color.hsl),
        "weight": entry.weight,
    }


def harmony_json(result: HarmonyResult) -> Dict[str, Any]:
    return {
        "score": result.score,
        "tier": result.tier,
        "explanation": result.explanation,
        "complementary_balance": result.complementary_balance,
        "warm_count": result.warm_count,
        "cool_count": result.cool_count,
        "warm_cool_ratio": result.warm_cool_ratio,
        "saturation_variance": result.saturation_variance,
        "palette": [color.hex for color in result.palette],
    }


def entropy_json(grid: EntropyGrid) -> Dict[str, Any]:
    return {
        "rows": grid.rows,
        "cols": grid.cols,
        "cells": [list(row) for row in grid.cells],
        "average": grid.average,
        "percent": grid.percent,
    }


def difference_json(diff: DifferenceMap) -> Dict[str, Any]:
    return {
        "width": diff.width,
        "height": diff.height,
        "sensitivity": diff.sensitivity,
        "mismatch_count": diff.mismatch_count,
        "match_ratio": diff.match_ratio,
    }


def coherence_json(result: CoherenceResult) -> Dict[str, Any]:
    return {
        "per_scale": [
            {"label": entry.label, "scale_factor": entry.scale_factor, "score": entry.score}
            for entry in result.per_scale
        ],
        "average": result.average,
    }


def image_report_json(report: ImageReport) -> Dict[str, Any]:
    return {
        "width": report.width,
        "height": report.height,
        "palette": [dominant_color_json(entry) for entry in report.palette],
        "harmony": harmony_json(report.harmony),
        "entropy": entropy_json(report.entropy),
        "values": {
            "mean": round(report.values.mean, 2),
            "low": report.values.low,
            "high": report.values.high,
        },
        "notan": {
            "threshold": report.notan_threshold,
            "white_ratio": round(report.notan_white_ratio, 4),
        },
    }


def report_json(report: PairReport) -> Dict[str, Any]:
    return {
        "reference": image_report_json(report.reference),
        "artwork": image_report_json(report.artwork),
        "accuracy": difference_json(report.accuracy),
        "coherence": coherence_json(report.coherence),
    }
