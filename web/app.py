"""Flask web application for the fleet notification center."""

import logging
from datetime import datetime

from dateutil import tz
from flask import Flask, flash, jsonify, redirect, render_template, request, url_for

from fleet.labels import format_iso, format_local, format_relative
from fleet.loader import FleetDataError, load_fleet
from fleet.calculations import parse_timestamp
from fleet.projector import project_queue
from fleet.sent_log import load_log
from fleet.settings import configure_logging, get_settings

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = settings.secret_key
app.config["FLEET_DATA_FILE"] = settings.fleet_data_file
app.config["SENT_LOG_FILE"] = settings.sent_log_file
app.config["APP_TZ"] = settings.timezone


def request_now() -> datetime:
    """Current instant, or the ?now= override when it parses."""
    override = parse_timestamp(request.args.get("now"))
    return override or datetime.now(tz.UTC)


def reminder_badge_color(label: str) -> str:
    """Get Tailwind color classes for a reminder type badge."""
    if label == "EXPIRED" or "OVERDUE" in label:
        return "bg-red-50 border-red-100 text-red-600"
    return "bg-gray-50 border-gray-200 text-gray-600"


def local_time(dt):
    return format_local(dt, app.config["APP_TZ"])


# Register template filters
app.jinja_env.filters["local_time"] = local_time
app.jinja_env.filters["badge_color"] = reminder_badge_color


def build_queue(now: datetime):
    """Load the fleet file and project the upcoming queue."""
    path = app.config["FLEET_DATA_FILE"]
    fleet = load_fleet(path)
    return project_queue(
        now,
        fleet.upcoming_agreements(now),
        fleet.active_vehicles(),
        app.config["APP_TZ"],
    )


@app.route("/")
def index():
    return redirect(url_for("notifications"))


@app.route("/admin/notifications")
def notifications():
    """Notification center: sent log and upcoming queue."""
    now = request_now()
    queue = []
    try:
        queue = build_queue(now)
    except FileNotFoundError:
        flash(f"Fleet data file not found: {app.config['FLEET_DATA_FILE']}", "error")
    except FleetDataError as e:
        logger.warning("Cannot load fleet data: %s", e)
        flash(str(e), "error")

    logs = []
    try:
        logs = load_log(app.config["SENT_LOG_FILE"])
    except FleetDataError as e:
        logger.warning("Cannot load sent log: %s", e)
        flash(str(e), "error")

    rows = [
        {
            "item": item,
            "relative": format_relative(item.scheduled_for, now),
        }
        for item in queue
    ]
    return render_template("notifications.html", logs=logs, queue=rows, now=now)


@app.route("/admin/notifications/queue.json")
def notifications_queue_json():
    """Upcoming queue as JSON."""
    now = request_now()
    try:
        queue = build_queue(now)
    except FileNotFoundError:
        return jsonify({"ok": False, "error": "Fleet data file not found"}), 404
    except FleetDataError as e:
        return jsonify({"ok": False, "error": str(e)}), 500

    return jsonify({
        "ok": True,
        "now": format_iso(now),
        "items": [item.to_dict() for item in queue],
    })


if __name__ == "__main__":
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
