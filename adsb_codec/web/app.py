"""Flask app factory for the adsb-codec decode API.

Creates app with:
- JSON decode API under /api/v1/ (see ingest.py)
- One shared MessageCodec + Tracker per app, guarded by a lock
- CORS headers for local development
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from flask import Flask

from ..decoder import MessageCodec
from ..tracker import Tracker
from .ingest import ingest


@dataclass
class DecoderState:
    """Codec and aircraft state shared by all requests of one app."""

    codec: MessageCodec
    tracker: Tracker
    lock: threading.Lock = field(default_factory=threading.Lock)


def create_app(codec: MessageCodec | None = None, api_key: str = "") -> Flask:
    """Create and configure the Flask application.

    Args:
        codec: Codec to decode with. A fresh one is created when omitted.
        api_key: If set, POST endpoints require ``Authorization: Bearer <key>``.
    """
    app = Flask(__name__)

    codec = codec or MessageCodec()
    app.extensions["adsb_codec"] = DecoderState(codec=codec, tracker=Tracker(codec))
    app.config["API_KEY"] = api_key

    # CORS for local dev
    @app.after_request
    def _cors(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        return response

    app.register_blueprint(ingest)
    return app
