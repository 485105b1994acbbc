from __future__ import annotations

import logging

from flask import Blueprint, render_template

ui_bp = Blueprint("ui", __name__)
logger = logging.getLogger(__name__)


@ui_bp.get("/")
def index() -> str:
    """Static control page for manual testing from a browser."""
    return render_template("control.html")
