"""WSGI entry point for production deployment."""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from adsb_codec.config import load_config, receiver_reference
from adsb_codec.decoder import MessageCodec
from adsb_codec.web.app import create_app

cfg = load_config()
codec = MessageCodec(max_pair_age_ms=float(cfg["cpr"]["max_pair_age_ms"]))
ref = receiver_reference(cfg)
if ref is not None:
    codec.set_reference_position(*ref)

app = create_app(codec=codec, api_key=os.environ.get("ADSB_API_KEY", ""))
