"""Flask application providing the entry and setup views."""

from __future__ import annotations

import atexit
import logging
from typing import Any, Mapping

from flask import (
    Flask,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from servicetracker.tracker.config import DEFAULTS, TrackerSettings
from servicetracker.tracker.entry import TENDERS
from servicetracker.tracker.errors import (
    AddError,
    DuplicateError,
    RemoveError,
    SubmissionError,
    ValidationError,
)
from servicetracker.tracker.system import ServiceTracker

logger = logging.getLogger(__name__)

CONFIRM_VALUES = {"1", "on", "true", "yes"}


def create_app(
    database_path: str = "service_tracker.db",
    config: Mapping[str, Any] | None = None,
    store: Any = None,
) -> Flask:
    """Create and configure the Flask application.

    Settings come from the defaults, then ``FLASK_*`` environment variables,
    then ``config``.
    """

    app = Flask(__name__, template_folder="templates")
    app.config.update(
        SECRET_KEY="service-tracker-secret",
        DATABASE_PATH=database_path,
        LOG_LEVEL="INFO",
        **DEFAULTS,
    )
    app.config.from_prefixed_env()
    if config:
        app.config.update(config)

    settings = TrackerSettings.from_mapping(app.config)
    tracker = ServiceTracker(store, db_path=app.config["DATABASE_PATH"], settings=settings)
    tracker.mount()
    atexit.register(tracker.close)
    app.extensions["service_tracker"] = tracker
    logger.info(
        "Service tracker ready (database=%s, therapists=%d)",
        app.config["DATABASE_PATH"],
        len(tracker.roster),
    )

    def render_entry(form_data: Mapping[str, Any], total: str, status: int = 200) -> Any:
        return (
            render_template(
                "entry.html",
                form=form_data,
                total=total,
                tenders=TENDERS,
                therapists=tracker.therapists,
                stats=tracker.stats,
                phone_required=settings.phone_required,
            ),
            status,
        )

    def render_setup(new_therapist: str = "", status: int = 200) -> Any:
        return (
            render_template(
                "setup.html",
                therapists=tracker.therapists,
                new_therapist=new_therapist,
            ),
            status,
        )

    @app.before_request
    def update_clock() -> None:
        if not tracker.ticker.running:
            tracker.tick()

    @app.context_processor
    def inject_navigation() -> dict[str, Any]:
        return {
            "clock": tracker.clock_display(),
            "theme": settings.theme,
            "money": tracker.format_amount,
            "loading": tracker.loading,
        }

    @app.get("/")
    def index() -> Any:
        return redirect(url_for("entry"))

    @app.get("/entry")
    def entry() -> Any:
        tracker.refresh()
        form = tracker.new_form()
        return render_entry(form.to_dict(), form.formatted_total)

    @app.post("/entry")
    def submit_entry() -> Any:
        form = tracker.new_form(request.form)
        action = request.form.get("action", "submit")
        if action.startswith("now:"):
            try:
                form.set_time_now(action[len("now:"):])
            except ValidationError as exc:
                flash(str(exc), "error")
            return render_entry(form.to_dict(), form.formatted_total)
        if action == "reset":
            form.reset()
            return render_entry(form.to_dict(), form.formatted_total)
        try:
            saved = form.submit()
        except ValidationError as exc:
            flash(str(exc), "error")
            return render_entry(form.to_dict(), form.formatted_total, 400)
        except SubmissionError as exc:
            flash(str(exc), "error")
            return render_entry(form.to_dict(), form.formatted_total, 502)
        if saved is not None:
            flash(f"Entry for bill {saved['bill_no']} saved successfully!", "success")
        return redirect(url_for("entry"))

    @app.post("/entry/total")
    def entry_total() -> Any:
        data = request.get_json(silent=True)
        if not isinstance(data, Mapping):
            data = request.form
        form = tracker.new_form({tender: data.get(tender) for tender in TENDERS})
        return jsonify(total=form.total_received, formatted=form.formatted_total)

    @app.get("/setup")
    def setup() -> Any:
        tracker.roster.load()
        return render_setup()

    @app.post("/setup/therapists")
    def add_therapist() -> Any:
        name = request.form.get("name", "")
        try:
            added = tracker.add_therapist(name)
        except DuplicateError:
            flash("This therapist already exists.", "error")
            return render_setup(name, 409)
        except AddError as exc:
            flash(str(exc), "error")
            return render_setup(name, 502)
        if added:
            flash(f'Therapist "{added}" saved.', "success")
        return redirect(url_for("setup"))

    @app.post("/setup/therapists/remove")
    def remove_therapist() -> Any:
        name = request.form.get("name", "")
        confirmed = request.form.get("confirm", "").lower() in CONFIRM_VALUES
        if not confirmed:
            flash(f"Tick the confirmation box to remove {name}.", "warning")
            return redirect(url_for("setup"))
        try:
            if tracker.remove_therapist(name, confirmed=True):
                flash(f"Removed {name}.", "success")
            else:
                flash(f"{name} is not on the roster.", "warning")
        except RemoveError as exc:
            flash(str(exc), "error")
        return redirect(url_for("setup"))

    @app.get("/api/stats")
    def stats() -> Any:
        tracker.aggregator.load()
        snapshot = tracker.stats
        payload = snapshot.as_dict()
        payload["cash_total_display"] = tracker.format_amount(snapshot.cash_total)
        payload["digital_total_display"] = tracker.format_amount(snapshot.digital_total)
        return jsonify(payload)

    return app


__all__ = ["create_app"]
