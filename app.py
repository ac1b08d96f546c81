"""
Peptide Dosing Toolkit Web API

JSON endpoints for the reconstitution calculator, the stack interaction
checker, vial inventory, half-life projections and titration plans.
Timestamps are stored and compared as naive UTC.
"""

from __future__ import annotations

import logging
import os
import threading
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from config import Config
from models import get_session, create_database
from database import PeptideDB
from seed_data import seed_common_peptides
from calculator import build_dose_input, calculate_dose, recommend_water_volume
from interactions import InvalidRuleError, evaluate, get_rules, all_peptides
from interaction_rules import PEPTIDE_CATEGORIES
from half_life import (
    CUSTOM, HALF_LIFE_PRESETS, MAX_PROJECTION_DAYS, DoseEvent, filter_events_for, project_active_levels,
)
from titration import TITRATION_PROTOCOLS, TitrationError, build_schedule, get_protocol, step_status
from units import (
    SYRINGES, DoseUnit, UnknownSyringeError, default_dose_from_hint, get_syringe, is_positive,
    parse_dose_unit, to_mcg,
)


# -----------------------------------------------------------------------------
# Flask app
# -----------------------------------------------------------------------------
app = Flask(__name__)
app.config["SECRET_KEY"] = Config.SECRET_KEY
app.config["DATABASE_URL"] = Config.DATABASE_URL
app.config["DEFAULT_SYRINGE"] = Config.DEFAULT_SYRINGE
app.config["INTERACTION_RULES_FILE"] = Config.INTERACTION_RULES_FILE
app.config["LOW_STOCK_THRESHOLD_MG"] = Config.LOW_STOCK_THRESHOLD_MG

_initialized_dbs: set = set()
_init_lock = threading.Lock()


class InvalidPayload(ValueError):
    """Request payload that cannot be used"""


@app.errorhandler(InvalidPayload)
def _invalid_payload(e):
    return jsonify({"error": str(e)}), 400


def _error(message: str, status: int):
    return jsonify({"error": message}), status


# ----------------------------
# Helpers
# ----------------------------
def _open_db():
    """Session on the configured database; creates and seeds it on first use."""
    db_url = app.config["DATABASE_URL"]
    if db_url not in _initialized_dbs:
        with _init_lock:
            if db_url not in _initialized_dbs:
                create_database(db_url)
                session = get_session(db_url)
                try:
                    seed_common_peptides(session, verbose=False)
                finally:
                    session.close()
                _initialized_dbs.add(db_url)
    return get_session(db_url)


def _peptide_db(session) -> PeptideDB:
    return PeptideDB(session, low_stock_threshold_mg=app.config["LOW_STOCK_THRESHOLD_MG"])


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidPayload("Expected a JSON object body")
    return data


def _number(data: Dict[str, Any], key: str, default: Optional[float] = 0.0) -> Optional[float]:
    """Numeric field; blank/missing means 'not filled in yet' (0)."""
    value = data.get(key)
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidPayload(f"'{key}' must be a number") from None


def _unit(value: Any, default: str = "mcg") -> DoseUnit:
    try:
        return parse_dose_unit(value or default)
    except ValueError as e:
        raise InvalidPayload(str(e)) from None


def _syringe(data: Dict[str, Any]):
    return get_syringe(data.get("syringe") or app.config["DEFAULT_SYRINGE"])


@lru_cache(maxsize=8)
def _rule_table(path: str):
    return get_rules(path or None)


def _int_arg(name: str, default: Optional[int], low: int, high: Optional[int] = None) -> Optional[int]:
    """Integer query parameter within [low, high]; 400 otherwise"""
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidPayload(f"'{name}' must be an integer") from None
    if value < low:
        raise InvalidPayload(f"'{name}' must be at least {low}")
    if high is not None and value > high:
        raise InvalidPayload(f"'{name}' must be at most {high}")
    return value


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """ISO timestamp to naive UTC; values without an offset are local time"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise InvalidPayload(f"Invalid timestamp: {value}") from None
    # astimezone() on a naive value assumes the server's local zone
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def _parse_date(value: Optional[str], default: date) -> date:
    if not value:
        return default
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidPayload(f"Invalid date: {value}") from None


# -----------------------------------------------------------------------------
# Calculator
# -----------------------------------------------------------------------------
@app.route("/api/syringes")
def api_syringes():
    return jsonify(
        [
            {"id": s.id, "label": s.label, "units_per_ml": s.units_per_ml, "max_units": s.max_units}
            for s in SYRINGES.values()
        ]
    )


@app.route("/api/calculate", methods=["POST"])
def api_calculate():
    """
    POST JSON: vial_mass_mg, diluent_volume_ml, dose_amount, dose_unit ("mcg"|"mg"),
    syringe ("u100"|"u50"|"u40"), optional doses_per_day.
    Returns: {result} where result is null until every amount is filled in.
    """
    data = _json_body()
    try:
        syringe = _syringe(data)
    except UnknownSyringeError as e:
        return _error(e.args[0], 404)

    try:
        dose_input = build_dose_input(
            _number(data, "vial_mass_mg"),
            _number(data, "diluent_volume_ml"),
            _number(data, "dose_amount"),
            _unit(data.get("dose_unit")),
            syringe,
        )
    except ValueError as e:
        raise InvalidPayload(str(e)) from None

    result = calculate_dose(dose_input)
    payload: Dict[str, Any] = {"syringe": syringe.id, "result": None}
    if result is None:
        return jsonify(payload)

    payload["result"] = result.for_display()

    doses_per_day = data.get("doses_per_day")
    if doses_per_day not in (None, ""):
        per_day = _number(data, "doses_per_day")
        if not is_positive(per_day):
            raise InvalidPayload("'doses_per_day' must be greater than 0")
        payload["result"]["doses_per_day"] = per_day
        payload["result"]["vial_lasts_days"] = round(result.doses_per_vial / per_day, 1)

    return jsonify(payload)


@app.route("/api/recommend-water", methods=["POST"])
def api_recommend_water():
    """POST JSON: vial_mass_mg, dose_amount, dose_unit, syringe."""
    data = _json_body()
    try:
        syringe = _syringe(data)
    except UnknownSyringeError as e:
        return _error(e.args[0], 404)

    unit = _unit(data.get("dose_unit"))
    if unit is DoseUnit.IU:
        raise InvalidPayload("Dose must be given in mcg or mg")

    dose_mcg = to_mcg(_number(data, "dose_amount"), unit)
    recommendation = recommend_water_volume(_number(data, "vial_mass_mg"), dose_mcg, syringe)
    return jsonify({"syringe": syringe.id, **recommendation.to_dict()})


# -----------------------------------------------------------------------------
# Stack builder
# -----------------------------------------------------------------------------
@app.route("/api/stack/peptides")
def api_stack_peptides():
    return jsonify({"categories": PEPTIDE_CATEGORIES, "all": all_peptides()})


@app.route("/api/stack/check", methods=["POST"])
def api_stack_check():
    """POST JSON: {"stack": ["BPC-157", "TB-500", ...]}"""
    data = _json_body()
    stack = data.get("stack") or []
    if not isinstance(stack, list) or not all(isinstance(s, str) for s in stack):
        raise InvalidPayload("'stack' must be a list of peptide names")

    try:
        rules = _rule_table(app.config.get("INTERACTION_RULES_FILE") or "")
    except (OSError, ValueError, InvalidRuleError):
        app.logger.exception("Failed to load interaction rules")
        return _error("Interaction rules are unavailable", 500)

    findings = evaluate(stack, rules)
    return jsonify({"stack": stack, "findings": [f.to_dict() for f in findings]})


# -----------------------------------------------------------------------------
# Reference peptides
# -----------------------------------------------------------------------------
@app.route("/api/peptides")
def api_peptides():
    category = (request.args.get("category") or "").strip() or None
    try:
        db = _open_db()
        try:
            peptides = [p.to_dict() for p in _peptide_db(db).list_peptides(category)]
        finally:
            db.close()
    except Exception:
        app.logger.exception("Failed to load peptides for API")
        return _error("Could not load peptides", 500)
    return jsonify(peptides)


@app.route("/api/peptides/<path:name>")
def api_peptide_detail(name: str):
    try:
        db = _open_db()
        try:
            peptide = _peptide_db(db).get_peptide_by_name(name)
            payload = peptide.to_dict() if peptide else None
        finally:
            db.close()
    except Exception:
        app.logger.exception("Failed to load peptide %s", name)
        return _error("Could not load peptide", 500)

    if payload is None:
        return _error(f"Peptide '{name}' not found", 404)

    default = default_dose_from_hint(payload.get("common_dosage"))
    payload["default_dose"] = {"amount": default[0], "unit": default[1].value} if default else None
    return jsonify(payload)


# -----------------------------------------------------------------------------
# Injection log + half-life
# -----------------------------------------------------------------------------
@app.route("/api/injections", methods=["GET", "POST"])
def api_injections():
    if request.method == "POST":
        data = _json_body()
        peptide_name = str(data.get("peptide_name") or "").strip()
        if not peptide_name:
            raise InvalidPayload("'peptide_name' is required")
        amount = _number(data, "dose_amount")
        if not is_positive(amount):
            raise InvalidPayload("'dose_amount' must be greater than 0")
        unit = _unit(data.get("dose_unit"))
        taken_at = _parse_datetime(data.get("timestamp"))

        try:
            db = _open_db()
            try:
                injection = _peptide_db(db).log_injection(
                    peptide_name=peptide_name,
                    dose_amount=amount,
                    dose_unit=unit.value,
                    timestamp=taken_at,
                    injection_site=(data.get("injection_site") or None),
                    notes=(data.get("notes") or None),
                )
                payload = injection.to_dict()
            finally:
                db.close()
        except Exception:
            app.logger.exception("Failed to log injection")
            return _error("Could not log injection", 500)
        return jsonify(payload), 201

    peptide = (request.args.get("peptide") or "").strip() or None
    days = _int_arg("days", None, 0)
    try:
        db = _open_db()
        try:
            pdb = _peptide_db(db)
            if days is not None:
                injections = pdb.get_recent_injections(days)
                if peptide:
                    injections = [i for i in injections if peptide.lower() in i.peptide_name.lower()]
            else:
                injections = pdb.list_injections(peptide)
            payload = [i.to_dict() for i in injections]
        finally:
            db.close()
    except Exception:
        app.logger.exception("Failed to load injections")
        return _error("Could not load injections", 500)
    return jsonify(payload)


def _half_life_hours(peptide: str) -> Tuple[Optional[float], str]:
    if peptide == CUSTOM:
        value = request.args.get("half_life", type=float)
        return (value if value is not None else HALF_LIFE_PRESETS[CUSTOM]), "custom"
    if peptide in HALF_LIFE_PRESETS:
        return HALF_LIFE_PRESETS[peptide], "preset"

    db = _open_db()
    try:
        ref = _peptide_db(db).get_peptide_by_name(peptide)
        return (ref.half_life_hours if ref else None), "reference"
    finally:
        db.close()


@app.route("/api/half-life")
def api_half_life():
    """GET ?peptide=Semaglutide&days=30&unit=mg[&half_life=24 for Custom]"""
    peptide = (request.args.get("peptide") or "").strip() or "Semaglutide"
    days = _int_arg("days", 30, 0, MAX_PROJECTION_DAYS)
    unit = _unit(request.args.get("unit"), default="mg")

    try:
        half_life, source = _half_life_hours(peptide)
    except Exception:
        app.logger.exception("Failed to look up half-life for %s", peptide)
        return _error("Could not load peptide", 500)
    if not is_positive(half_life):
        return _error(f"No half-life known for '{peptide}'", 404)

    try:
        db = _open_db()
        try:
            logged = [
                (i.peptide_name, DoseEvent(i.timestamp, i.dose_amount, parse_dose_unit(i.dose_unit)))
                for i in _peptide_db(db).list_injections()
            ]
        finally:
            db.close()
    except Exception:
        app.logger.exception("Failed to load injections for half-life chart")
        return _error("Could not load injections", 500)

    events = filter_events_for(peptide, logged)
    points = project_active_levels(
        events, half_life, days_to_project=days, dose_unit=unit, now=datetime.utcnow()
    )
    return jsonify(
        {
            "peptide": peptide,
            "half_life_hours": half_life,
            "half_life_source": source,
            "unit": unit.value,
            "points": [{"date": t.date().isoformat(), "level": round(level, 4)} for t, level in points],
        }
    )


# -----------------------------------------------------------------------------
# Vial inventory
# -----------------------------------------------------------------------------
def _vial_payload(vial) -> Dict[str, Any]:
    item = vial.to_dict()
    item["low_stock"] = 0 < vial.remaining_mg <= app.config["LOW_STOCK_THRESHOLD_MG"]
    return item


@app.route("/api/inventory", methods=["GET", "POST"])
def api_inventory():
    """
    GET ?peptide=&all=1 -> {vials, total_mg}
    POST JSON: peptide_name, quantity_mg, optional diluent_volume_ml,
    purchase_date, expiration_date, batch_number, source, notes
    """
    if request.method == "POST":
        data = _json_body()
        peptide_name = str(data.get("peptide_name") or "").strip()
        if not peptide_name:
            raise InvalidPayload("'peptide_name' is required")
        quantity = _number(data, "quantity_mg")
        if not is_positive(quantity):
            raise InvalidPayload("'quantity_mg' must be greater than 0")
        water = _number(data, "diluent_volume_ml", None)
        if water is not None and not is_positive(water):
            raise InvalidPayload("'diluent_volume_ml' must be greater than 0")
        purchased = _parse_datetime(data.get("purchase_date"))
        expires = _parse_datetime(data.get("expiration_date"))

        try:
            db = _open_db()
            try:
                vial = _peptide_db(db).add_vial(
                    peptide_name=peptide_name,
                    quantity_mg=quantity,
                    diluent_volume_ml=water,
                    purchase_date=purchased,
                    expiration_date=expires,
                    batch_number=(data.get("batch_number") or None),
                    source=(data.get("source") or None),
                    notes=(data.get("notes") or None),
                )
                payload = _vial_payload(vial)
            finally:
                db.close()
        except Exception:
            app.logger.exception("Failed to add vial")
            return _error("Could not add vial", 500)
        return jsonify(payload), 201

    peptide = (request.args.get("peptide") or "").strip() or None
    include_inactive = request.args.get("all") in ("1", "true", "yes")
    try:
        db = _open_db()
        try:
            pdb = _peptide_db(db)
            vials = [_vial_payload(v) for v in pdb.list_vials(peptide, include_inactive=include_inactive)]
            total = pdb.total_stock_mg(peptide)
        finally:
            db.close()
    except Exception:
        app.logger.exception("Failed to load inventory")
        return _error("Could not load inventory", 500)
    return jsonify({"vials": vials, "total_mg": total})


@app.route("/api/inventory/<int:vial_id>/reconstitute", methods=["POST"])
def api_reconstitute_vial(vial_id: int):
    """POST JSON: diluent_volume_ml"""
    water = _number(_json_body(), "diluent_volume_ml")
    if not is_positive(water):
        raise InvalidPayload("'diluent_volume_ml' must be greater than 0")

    db = _open_db()
    try:
        vial = _peptide_db(db).reconstitute_vial(vial_id, water)
        payload = _vial_payload(vial) if vial else None
    finally:
        db.close()
    if payload is None:
        return _error(f"Vial {vial_id} not found", 404)
    return jsonify(payload)


@app.route("/api/inventory/<int:vial_id>/deactivate", methods=["POST"])
def api_deactivate_vial(vial_id: int):
    db = _open_db()
    try:
        vial = _peptide_db(db).deactivate_vial(vial_id)
        payload = _vial_payload(vial) if vial else None
    finally:
        db.close()
    if payload is None:
        return _error(f"Vial {vial_id} not found", 404)
    return jsonify(payload)


@app.route("/api/inventory/alerts")
def api_inventory_alerts():
    """GET ?days=30 -> low-stock vials and vials expiring within ``days``"""
    days = _int_arg("days", 30, 0, 3650)
    try:
        db = _open_db()
        try:
            pdb = _peptide_db(db)
            payload = {
                "threshold_mg": pdb.low_stock_threshold_mg,
                "low_stock": [_vial_payload(v) for v in pdb.low_stock_vials()],
                "expiring": [_vial_payload(v) for v in pdb.expiring_vials(days)],
            }
        finally:
            db.close()
    except Exception:
        app.logger.exception("Failed to load inventory alerts")
        return _error("Could not load inventory alerts", 500)
    return jsonify(payload)


# -----------------------------------------------------------------------------
# Titration
# -----------------------------------------------------------------------------
@app.route("/api/titration/protocols")
def api_titration_protocols():
    return jsonify(
        {
            key: {
                "name": drug["name"],
                "category": drug["category"],
                "frequency": drug["frequency"],
                "protocols": [{"name": p["name"], "description": p["description"]} for p in drug["protocols"]],
            }
            for key, drug in TITRATION_PROTOCOLS.items()
        }
    )


@app.route("/api/titration/schedule", methods=["POST"])
def api_titration_schedule():
    """POST JSON: compound, protocol_index (default 0), start_date (ISO, default today)."""
    data = _json_body()
    today = _parse_date(data.get("today"), date.today())
    start = _parse_date(data.get("start_date"), today)
    try:
        index = int(data.get("protocol_index") or 0)
    except (TypeError, ValueError):
        raise InvalidPayload("'protocol_index' must be an integer") from None

    try:
        protocol = get_protocol(str(data.get("compound") or ""), index)
    except TitrationError as e:
        return _error(e.args[0], 404)

    steps = []
    for step in build_schedule(protocol["steps"], start):
        item = step.to_dict()
        item["status"] = step_status(step, today)
        steps.append(item)

    return jsonify({"protocol": protocol["name"], "start_date": start.isoformat(), "steps": steps})


# -----------------------------------------------------------------------------
# Run
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=Config.LOG_LEVEL)
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=Config.DEBUG)
