from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Tuple

from flask import Flask, jsonify, request

from .config import SETTINGS, SINGLE_BOUNDS, clamp_param, configure_logging
from .errors import DecodeError, InvalidImageError
from .infrastructure.cache import CACHE, digest
from .infrastructure.network import decode_image, get_fetcher
from .infrastructure.responses import report_json, send_png
from .processing.buffer import PixelBuffer, resize
from .processing.coherence import coherence_display_maps
from .processing.composition import GRID_KINDS, contour_overlay, grid_guides, sample_color, squint
from .processing.difference import accuracy_heatmap, render_heatmap
from .processing.entropy import entropy_grid, render_entropy_map
from .processing.pipeline import analyze_pair
from .processing.values import grayscale, notan

APP_VERSION = "1.0.0"

RENDER_VIEWS = ("grayscale", "notan", "edges", "heatmap", "entropy", "squint")

logger = logging.getLogger(__name__)


def _load_pair() -> Tuple[PixelBuffer, PixelBuffer]:
    files = request.files
    if "reference" in files and "artwork" in files:
        return decode_image(files["reference"].read()), decode_image(files["artwork"].read())

    payload = request.get_json(silent=True) or request.form
    reference_url = payload.get("reference_url")
    artwork_url = payload.get("artwork_url")
    if reference_url and artwork_url:
        return get_fetcher().fetch_pair(reference_url, artwork_url)

    raise ValueError("Provide 'reference' and 'artwork' files or 'reference_url' and 'artwork_url'")


def _int_arg(name: str, default: int) -> int:
    return request.args.get(name, default, type=int)


def create_app() -> Flask:
    configure_logging()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = SETTINGS.max_upload_mb * 1024 * 1024

    @app.errorhandler(DecodeError)
    def decode_failed(exc: DecodeError):
        logger.error("Decode error: %s", exc)
        return jsonify(error=str(exc), kind="decode"), 422

    @app.errorhandler(InvalidImageError)
    def invalid_image(exc: InvalidImageError):
        logger.warning("Invalid image: %s", exc)
        return jsonify(error=str(exc), kind="invalid_image"), 400

    @app.errorhandler(ValueError)
    def bad_request(exc: ValueError):
        logger.warning("Bad request: %s", exc)
        return jsonify(error=str(exc), kind="bad_request"), 400

    @app.route("/health")
    def health():
        return jsonify(ok=True, version=APP_VERSION)

    @app.route("/settings")
    def settings_view():
        return jsonify(asdict(SETTINGS))

    @app.route("/analyze", methods=["POST"])
    def analyze():
        reference, artwork = _load_pair()
        sensitivity = clamp_param("sensitivity", _int_arg("sensitivity", SETTINGS.sensitivity))
        grid = clamp_param("grid", _int_arg("grid", SETTINGS.grid_size))
        cutoff = clamp_param("threshold", _int_arg("threshold", SETTINGS.threshold))

        key = (digest(reference.pixels), digest(artwork.pixels), sensitivity, grid, cutoff)
        cached = CACHE.get(key)
        if cached is not None:
            return jsonify(cached)

        body = report_json(analyze_pair(reference, artwork, sensitivity=sensitivity, grid=grid, threshold=cutoff))
        CACHE.put(key, body)
        return jsonify(body)

    @app.route("/render/<view>", methods=["POST"])
    def render(view: str):
        if view not in RENDER_VIEWS:
            raise ValueError(f"Unknown view {view!r}; expected one of {', '.join(RENDER_VIEWS)}")
        reference, artwork = _load_pair()

        if view == "heatmap":
            sensitivity = clamp_param("sensitivity", _int_arg("sensitivity", SETTINGS.sensitivity))
            return send_png(render_heatmap(accuracy_heatmap(reference, artwork, sensitivity)))

        use_artwork = request.args.get("image") == "artwork"
        source = artwork if use_artwork else reference
        if view == "edges" and request.args.get("pass") == "coherence":
            ref_map, art_map = coherence_display_maps(reference, artwork)
            return send_png(art_map if use_artwork else ref_map)
        if view == "edges":
            return send_png(contour_overlay(source))

        working = resize(source, *SINGLE_BOUNDS)
        if view == "grayscale":
            out = grayscale(working)
        elif view == "notan":
            out = notan(working, clamp_param("threshold", _int_arg("threshold", SETTINGS.threshold)))
        elif view == "entropy":
            grid = clamp_param("grid", _int_arg("grid", SETTINGS.grid_size))
            out = render_entropy_map(entropy_grid(working, grid), working.width, working.height)
        else:
            out = squint(working, _int_arg("radius", 5))
        return send_png(out)

    @app.route("/guides/<kind>")
    def guides(kind: str):
        if kind not in GRID_KINDS:
            raise ValueError(f"Unknown grid kind {kind!r}")
        lines = grid_guides(kind, _int_arg("rows", 3), _int_arg("cols", 3))
        return jsonify(kind=kind, lines=[line._asdict() for line in lines])

    @app.route("/sample", methods=["POST"])
    def sample():
        reference, artwork = _load_pair()
        source = artwork if request.args.get("image") == "artwork" else reference
        working = resize(source, *SINGLE_BOUNDS)
        picked = sample_color(working, _int_arg("x", 0), _int_arg("y", 0))
        return jsonify(
            rgb=[picked.r, picked.g, picked.b],
            hex=picked.hex,
            hsl=list(picked.hsl),
            brightness=picked.brightness,
        )

    return app


app = create_app()
