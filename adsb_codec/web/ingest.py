"""Decode API — accepts hex frames over HTTP and returns decoded messages.

Endpoints:
  POST /api/v1/decode     Decode a batch of hex frames (stateful, per app)
  POST /api/v1/reference  Set the receiver reference position for local CPR
  POST /api/v1/reset      Drop CPR cache and tracked aircraft
  GET  /api/v1/aircraft   List tracked aircraft

Authentication: Bearer token in Authorization header (optional, set via
create_app(api_key=...)).
"""

from __future__ import annotations

import logging
from numbers import Real

from flask import Blueprint, current_app, jsonify, request

from ..decoder import now_ms
from ..frame_parser import is_icao

logger = logging.getLogger(__name__)

ingest = Blueprint("ingest", __name__, url_prefix="/api/v1")


def _state():
    return current_app.extensions["adsb_codec"]


def _check_auth() -> bool:
    """Validate bearer token if API key is configured."""
    required_key = current_app.config.get("API_KEY", "")
    if not required_key:
        return True  # No auth configured
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:] == required_key
    return False


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


@ingest.route("/decode", methods=["POST"])
def decode_frames():
    """Decode a batch of hex frames.

    Expected JSON body:
    {
        "frames": ["8D40621D58C382D690C8AC2863A7",
                   {"hex": "8D40621D58C386435CC412692AD6", "timestamp": 1500}],
        "timestamp": 1000,      # optional default for plain-string frames (ms)
        "icao": "40621D"        # optional address for 14-char ME-only frames
    }

    Each result is a DecodeResult dict, or null for rejected frames.
    """
    if not _check_auth():
        return jsonify({"error": "Unauthorized"}), 401

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("frames"), list):
        return jsonify({"error": "Missing 'frames' list in request body"}), 400

    default_ts = data.get("timestamp")
    if default_ts is not None and not _is_number(default_ts):
        return jsonify({"error": "'timestamp' must be a number (ms)"}), 400
    icao = data.get("icao")
    if icao is not None and not is_icao(icao):
        return jsonify({"error": "'icao' must be 6 hex characters"}), 400

    state = _state()
    results = []
    decoded = 0
    with state.lock:
        for item in data["frames"]:
            if isinstance(item, dict):
                hex_str = item.get("hex")
                ts = item.get("timestamp", default_ts)
            else:
                hex_str, ts = item, default_ts

            if not isinstance(hex_str, str) or (ts is not None and not _is_number(ts)):
                results.append(None)
                continue
            if ts is None:
                ts = now_ms()

            result = state.codec.decode(hex_str, float(ts), icao=icao)
            if result is None:
                results.append(None)
                continue
            state.tracker.update(result)
            decoded += 1
            results.append(result.to_dict())

    logger.debug("Decoded %d of %d frames", decoded, len(results))
    return jsonify({
        "accepted": len(results),
        "decoded": decoded,
        "results": results,
    })


@ingest.route("/reference", methods=["POST"])
def set_reference():
    """Set the receiver position used for local CPR decode."""
    if not _check_auth():
        return jsonify({"error": "Unauthorized"}), 401

    data = request.get_json(silent=True) or {}
    lat, lon = data.get("lat"), data.get("lon")
    if not _is_number(lat) or not _is_number(lon):
        return jsonify({"error": "'lat' and 'lon' must be numbers"}), 400
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        return jsonify({"error": "Reference position out of range"}), 400

    state = _state()
    with state.lock:
        state.codec.set_reference_position(float(lat), float(lon))
    return jsonify({"status": "ok", "lat": lat, "lon": lon})


@ingest.route("/reset", methods=["POST"])
def reset():
    """Drop all per-aircraft state. The reference position is kept."""
    if not _check_auth():
        return jsonify({"error": "Unauthorized"}), 401

    state = _state()
    with state.lock:
        state.codec.clear_cache()
        state.tracker.clear()
    return jsonify({"status": "ok"})


@ingest.route("/aircraft", methods=["GET"])
def list_aircraft():
    """List tracked aircraft, most recently seen first."""
    state = _state()
    with state.lock:
        aircraft = sorted(
            state.tracker.aircraft.values(), key=lambda ac: ac.last_seen, reverse=True
        )
        rows = [ac.to_dict() for ac in aircraft]
    return jsonify({"aircraft": rows, "count": len(rows)})
