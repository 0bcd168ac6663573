"""Flask JSON API for lease mileage tracking."""

import hmac
import logging
import os
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from tracker import service
from tracker.errors import NotFound, StoreUnavailable, TrackerError
from tracker.chart import VIEW_MODES
from tracker.loader import lease_to_dict, reading_to_dict
from tracker.store import Store, YamlStore
from tracker.timeutil import parse_date, utcnow
from tracker.trip import TripInput

log = logging.getLogger(__name__)

# Path to the data file (relative to project root)
DEFAULT_DATA_FILE = Path(__file__).parent.parent / "data" / "lease.yaml"


def load_config() -> Dict[str, Any]:
    """Settings from the environment."""
    return {
        "SECRET_KEY": os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod"),
        "LEASE_DATA_FILE": os.environ.get("LEASE_DATA_FILE", str(DEFAULT_DATA_FILE)),
        "AUTH_TOKEN": os.environ.get("AUTH_TOKEN"),
        "ADMIN_PASSWORD": os.environ.get("ADMIN_PASSWORD"),
    }


def bearer_token_matches(header: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time check of an 'Authorization: Bearer <token>' header."""
    if not expected:
        log.error("AUTH_TOKEN is not configured")
        return False
    if not header or not header.startswith("Bearer "):
        return False
    token = header[len("Bearer "):]
    return hmac.compare_digest(token.encode(), expected.encode())


def create_app(store: Optional[Store] = None, config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Build the application.

    The store and secrets are injected here; nothing reads a global client.
    """
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)
    app.secret_key = app.config["SECRET_KEY"]
    if store is None:
        store = YamlStore(app.config["LEASE_DATA_FILE"])
    app.extensions["lease_store"] = store

    def get_store() -> Store:
        return app.extensions["lease_store"]

    def require_auth(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not bearer_token_matches(
                request.headers.get("Authorization"), app.config.get("AUTH_TOKEN")
            ):
                return jsonify({"error": "Unauthorized"}), 401
            return view(*args, **kwargs)

        return wrapped

    def json_body() -> Dict[str, Any]:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise TrackerError("Request body must be a JSON object")
        return body

    @app.errorhandler(TrackerError)
    def handle_tracker_error(error: TrackerError):
        status = 404 if isinstance(error, NotFound) else 400
        return jsonify(error.to_dict()), status

    @app.errorhandler(StoreUnavailable)
    def handle_store_unavailable(error: StoreUnavailable):
        log.error("Store unavailable: %s", error)
        return jsonify({"error": "Database not available"}), 503

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        """Exchange the admin password for the API token."""
        admin_password = app.config.get("ADMIN_PASSWORD")
        auth_token = app.config.get("AUTH_TOKEN")
        if not admin_password or not auth_token:
            log.error("Missing ADMIN_PASSWORD or AUTH_TOKEN configuration")
            return jsonify({"error": "Server configuration error"}), 500

        body = request.get_json(silent=True) or {}
        password = body.get("password")
        if isinstance(password, str) and hmac.compare_digest(
            password.encode(), admin_password.encode()
        ):
            return jsonify({"success": True, "token": auth_token})
        return jsonify({"error": "Invalid password"}), 401

    # -------------------------------------------------------------------------
    # Lease
    # -------------------------------------------------------------------------

    @app.route("/api/lease", methods=["GET"])
    def get_lease():
        return jsonify(lease_to_dict(service.get_lease(get_store(), utcnow())))

    @app.route("/api/lease", methods=["POST"])
    @require_auth
    def replace_lease():
        lease = service.replace_lease(get_store(), json_body(), utcnow())
        return jsonify(lease_to_dict(lease))

    @app.route("/api/lease", methods=["PUT"])
    @require_auth
    def update_lease():
        lease = service.update_lease(get_store(), json_body(), utcnow())
        return jsonify(lease_to_dict(lease))

    # -------------------------------------------------------------------------
    # Readings
    # -------------------------------------------------------------------------

    @app.route("/api/readings", methods=["GET"])
    def list_readings():
        readings = service.list_readings(get_store(), utcnow())
        return jsonify([reading_to_dict(r) for r in readings])

    @app.route("/api/readings", methods=["POST"])
    @require_auth
    def add_reading():
        body = json_body()
        reading = service.add_reading(
            get_store(),
            body.get("date"),
            body.get("mileage"),
            utcnow(),
            time=body.get("time"),
            note=body.get("note"),
        )
        return jsonify(reading_to_dict(reading))

    @app.route("/api/readings", methods=["PUT"])
    @require_auth
    def update_reading():
        body = json_body()
        if not body.get("id"):
            raise TrackerError("Reading ID required", field="id")
        reading = service.update_reading(
            get_store(),
            str(body["id"]),
            body.get("date"),
            body.get("mileage"),
            utcnow(),
            time=body.get("time"),
            note=body.get("note"),
        )
        return jsonify(reading_to_dict(reading))

    @app.route("/api/readings", methods=["DELETE"])
    @require_auth
    def delete_reading():
        reading_id = request.args.get("id")
        if not reading_id:
            raise TrackerError("Reading ID required", field="id")
        service.delete_reading(get_store(), reading_id, utcnow())
        return jsonify({"success": True})

    @app.route("/api/trips", methods=["POST"])
    @require_auth
    def add_trip():
        trip = TripInput.from_dict(json_body())
        created = service.add_trip(get_store(), trip, utcnow())
        return jsonify([reading_to_dict(r) for r in created]), 201

    # -------------------------------------------------------------------------
    # Derived data
    # -------------------------------------------------------------------------

    def date_arg(name: str) -> Optional[str]:
        value = request.args.get(name) or None
        if value is not None:
            try:
                parse_date(value)
            except ValueError:
                raise TrackerError("Date must be YYYY-MM-DD", field=name, value=value)
        return value

    @app.route("/api/stats", methods=["GET"])
    def stats():
        result = service.compute_stats(get_store(), utcnow(), date_arg("date"))
        return jsonify(result.to_dict())

    @app.route("/api/chart", methods=["GET"])
    def chart():
        view_mode = request.args.get("view", "total")
        include_preliminary = request.args.get("preliminary", "true").lower() != "false"
        if view_mode not in VIEW_MODES:
            raise TrackerError("Unknown view mode", field="view", value=view_mode)
        result = service.compute_chart_series(
            get_store(), utcnow(), date_arg("date"), include_preliminary, view_mode
        )
        return jsonify(result.to_dict())

    @app.route("/api/weekly", methods=["GET"])
    def weekly():
        week = date_arg("date")
        result = service.compute_weekly_stats(
            get_store(), utcnow(), parse_date(week) if week else None
        )
        return jsonify(result.to_dict())

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    create_app().run(debug=True, host="0.0.0.0", port=5001)
