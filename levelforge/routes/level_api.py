"""
project: Levelforge
module: level_api.py
License: MIT

HTTP routes for level generation, repair, validation and cache admin.

All payloads use the integer tile codes of ``levelforge.level.tiles``
(0=floor, 1=wall, 2=door, 3=stairs up, 4=stairs down, 5=special).
"""

from flask import Blueprint, current_app, jsonify, request

from levelforge.level import InvalidGenerationKey, TileGrid, check_invariants, heal, level_stats

bp_level = Blueprint("level", __name__)


def _synthesizer():
    return current_app.extensions["levelforge"]


def _bad_request(message: str, code: str):
    return jsonify({"error": message, "code": code}), 400


def _grid_from_body():
    """Parse ``{"grid": [[int]]}`` from the request body; raise ValueError on bad input."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    rows = data.get("grid")
    if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
        raise ValueError("'grid' must be a list of rows")
    return TileGrid.from_rows(rows)


@bp_level.route("/api/level", methods=["GET"])
def get_level():
    """Generate (or fetch from cache) the level for type/depth/seed.

    Query: type (name or 1-4), depth (int >= 0), seed (optional int or string)
    Response: { key, source, grid, rooms, entities, metrics, heal }
    """
    level_type = request.args.get("type", "Cathedral")
    raw_depth = request.args.get("depth", "1")
    try:
        depth = int(raw_depth)
    except ValueError:
        return _bad_request(f"depth must be an integer, got {raw_depth!r}", "invalid_key")
    try:
        result = _synthesizer().generate(level_type, depth, request.args.get("seed"))
    except InvalidGenerationKey as e:
        return _bad_request(str(e), "invalid_key")
    return jsonify(result.to_dict())


@bp_level.route("/api/level/heal", methods=["POST"])
def heal_level():
    try:
        grid = _grid_from_body()
    except ValueError as e:
        return _bad_request(str(e), "invalid_grid")
    cfg = _synthesizer().config
    report = heal(grid, max_iterations=cfg.max_heal_iterations, corridor_width=cfg.corridor_width)
    body = report.to_dict()
    body["grid"] = report.grid.to_rows()
    return jsonify(body)


@bp_level.route("/api/level/validate", methods=["POST"])
def validate_level():
    try:
        grid = _grid_from_body()
    except ValueError as e:
        return _bad_request(str(e), "invalid_grid")
    violations = check_invariants(grid)
    return jsonify({"valid": not violations, "violations": violations, "stats": level_stats(grid)})


@bp_level.route("/api/level/cache", methods=["GET"])
def cache_info():
    cache = _synthesizer().cache
    return jsonify({"size": len(cache), "capacity": cache.capacity, "keys": [str(k) for k in cache.keys()]})


@bp_level.route("/api/level/cache", methods=["DELETE"])
def cache_clear():
    return jsonify({"cleared": _synthesizer().clear_cache()})
