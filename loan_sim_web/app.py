import json
import logging
import os

import click
from flask import Flask, jsonify, redirect, render_template, request, session, url_for

from loan_sim.data_models import AnnuityTiming, AnnuityType, Frequency, RateKind
from loan_sim.engine import growth_curve, simulate_or_fallback
from loan_sim.formatter import (
    CURRENCY_OPTIONS,
    calculation_details,
    format_amount,
    format_percentage,
)
from loan_sim.main import build_spec_from_options

logging.basicConfig(level=os.environ.get("LOAN_SIM_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.config["DEFAULT_CURRENCY"] = os.environ.get("LOAN_SIM_DEFAULT_CURRENCY", "COP").upper()
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
app.jinja_env.filters["amount"] = format_amount
app.jinja_env.filters["percentage"] = format_percentage

PREVIEW_ROWS = 120
FORM_FIELDS = (
    "principal",
    "rate",
    "term",
    "rate_kind",
    "rate_frequency",
    "payment_frequency",
    "anticipated",
    "annuity_type",
    "annuity_timing",
    "currency",
)
DEFAULT_FORM = {
    "principal": "",
    "rate": "",
    "term": "",
    "rate_kind": RateKind.EFFECTIVE.value,
    "rate_frequency": Frequency.MONTHLY.value,
    "payment_frequency": Frequency.MONTHLY.value,
    "anticipated": "0",
    "annuity_type": AnnuityType.AMORTIZATION.value,
    "annuity_timing": AnnuityTiming.DUE.value,
}
SELECT_OPTIONS = {
    "rate_kind": [k.value for k in RateKind],
    "frequency": [f.value for f in Frequency],
    "annuity_type": [a.value for a in AnnuityType],
    "annuity_timing": [t.value for t in AnnuityTiming],
}


def _normalized_currency(form) -> str:
    code = str(form.get("currency", app.config["DEFAULT_CURRENCY"])).upper()
    return code if code in CURRENCY_OPTIONS else app.config["DEFAULT_CURRENCY"]


def _form_values(form) -> dict:
    values = dict(DEFAULT_FORM)
    for name in FORM_FIELDS:
        if name in form:
            values[name] = str(form.get(name)).strip()
    values["currency"] = _normalized_currency(form)
    return values


def _form_to_spec(values: dict):
    return build_spec_from_options(
        values.get("principal", ""),
        values.get("rate", ""),
        values.get("term", ""),
        rate_kind=values.get("rate_kind", DEFAULT_FORM["rate_kind"]),
        rate_frequency=values.get("rate_frequency", DEFAULT_FORM["rate_frequency"]),
        payment_frequency=values.get("payment_frequency") or None,
        anticipated=values.get("anticipated", "0"),
        annuity_type=values.get("annuity_type", DEFAULT_FORM["annuity_type"]),
        annuity_timing=values.get("annuity_timing", DEFAULT_FORM["annuity_timing"]),
    )


def _serialize_growth(result) -> list[dict]:
    """Convert the compound-growth curve into JSON-serialisable dictionaries for charts."""
    spec = result.specification
    return [
        {
            "period": period,
            "amount": float(amount),
            "interest": float(interest),
            "accumulated": float(accumulated),
        }
        for period, amount, interest, accumulated in growth_curve(
            result.effective_rate, spec.principal, spec.term
        )
    ]


@app.route("/", methods=["GET", "POST"])
def index():
    result = None
    fallback = False
    error = None
    show_full_schedule = False
    values = session.get("loan_form") or _form_values({})

    if request.method == "POST":
        values = _form_values(request.form)
        show_full_schedule = request.form.get("show_full_schedule") == "1"
        session["loan_form"] = values
        try:
            result, fallback = simulate_or_fallback(_form_to_spec(values))
        except click.BadParameter as exc:
            error = exc.message

    schedule = []
    growth = []
    details = []
    truncated = 0
    schedule_payload = "null"
    growth_payload = "null"
    if result is not None:
        schedule = result.schedule if show_full_schedule else result.schedule[:PREVIEW_ROWS]
        truncated = len(result.schedule) - len(schedule)
        growth = _serialize_growth(result)
        schedule_payload = json.dumps(result.to_dict()["schedule"])
        growth_payload = json.dumps(growth)
        if not show_full_schedule:
            growth = growth[: PREVIEW_ROWS + 1]
        if not fallback:
            details = calculation_details(result)

    currency_code = values.get("currency", app.config["DEFAULT_CURRENCY"])
    return render_template(
        "index.html",
        form=values,
        options=SELECT_OPTIONS,
        result=result,
        fallback=fallback,
        schedule=schedule,
        growth=growth,
        details=details,
        truncated=truncated,
        show_full_schedule=show_full_schedule,
        error=error,
        currency_code=currency_code,
        currency_options=CURRENCY_OPTIONS,
        asset_version=app.config["ASSET_VERSION"],
        schedule_payload=schedule_payload,
        growth_payload=growth_payload,
    )


@app.post("/reset")
def reset():
    session.pop("loan_form", None)
    return redirect(url_for("index"))


@app.post("/api/simulate")
def api_simulate():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    try:
        spec = _form_to_spec(_form_values(payload))
    except click.BadParameter as exc:
        return jsonify({"error": exc.message}), 400
    result, fallback = simulate_or_fallback(spec)
    data = result.to_dict()
    data["fallback"] = fallback
    data["growth"] = _serialize_growth(result)
    return jsonify(data)


if __name__ == "__main__":
    logger.info("Starting loan simulator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
