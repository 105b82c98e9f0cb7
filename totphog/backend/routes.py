"""
TOTPHOG API ROUTES - FLASK BLUEPRINT (/api/v1)

Thin layer over CredentialStore: pull input out of the request, call the
store, shape the JSON answer. No OTP logic lives here.

Every JSON answer has the form
    {"success": true, "data": ...}    or    {"success": false, "error": "..."}

Examples:
curl -X POST http://localhost:5000/api/v1/tokens -H "Content-Type: application/json" \
     -d '{"name": "alice@example.com", "secret": "JBSWY3DPEHPK3PXP", "issuer": "GitHub"}'
curl http://localhost:5000/api/v1/codes
"""
from contextlib import contextmanager
from datetime import datetime
import io
import logging

from flask import Blueprint, Response, current_app, jsonify, request
import qrcode

from totphog.core.errors import InvalidParameter, InvalidSecret, OtpError
from totphog.core.models import CredentialFields, DEFAULT_ALGORITHM, DEFAULT_DIGITS, DEFAULT_ISSUER, DEFAULT_PERIOD

logger = logging.getLogger(__name__)

api_bp = Blueprint("api_v1", __name__, url_prefix="/api/v1")


@contextmanager
def _locked_store():
    """Yield the app's store while holding its lock."""
    ext = current_app.extensions["totphog"]
    with ext["lock"]:
        yield ext["store"]


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _not_found():
    return _error("Token not found", 404)


def _field(data: dict, key: str, default):
    # JSON null counts as absent
    value = data.get(key)
    return default if value is None else value


def _int_field(data: dict, key: str, default: int):
    """Accept numeric strings ("8"); anything else is left for the store to reject."""
    value = _field(data, key, default)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value


@api_bp.errorhandler(InvalidSecret)
@api_bp.errorhandler(InvalidParameter)
def _cannot_generate(e):
    # stored credential whose secret / parameters cannot produce a code
    return _error(str(e), 422)


@api_bp.route("/tokens", methods=["GET"])
def list_tokens():
    """
    LIST ALL TOKENS

      curl http://localhost:5000/api/v1/tokens
    """
    with _locked_store() as store:
        tokens = [credential.to_dict() for credential in store.get_all()]
    return jsonify({"success": True, "data": tokens, "count": len(tokens)})


@api_bp.route("/tokens", methods=["POST"])
def create_token():
    """
    CREATE A TOKEN

    JSON body, either
      {"uri": "otpauth://totp/GitHub:alice?secret=JBSWY3DPEHPK3PXP&issuer=GitHub"}
    or
      {"name": "alice", "secret": "JBSWY3DPEHPK3PXP",
       "issuer": "GitHub", "digits": 6, "period": 30, "algorithm": "sha1"}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    if data.get("uri"):
        try:
            with _locked_store() as store:
                credential = store.add_from_uri(data["uri"])
        except OtpError as e:
            return _error(str(e), 400)
        logger.info("Created token %s from URI", credential.id)
        return jsonify({"success": True, "data": credential.to_dict()}), 201

    name = data.get("name")
    secret = data.get("secret")
    if not name or not secret:
        return _error("Name and secret are required", 400)

    fields = CredentialFields(
        name=name,
        secret=secret,
        issuer=_field(data, "issuer", DEFAULT_ISSUER),
        digits=_int_field(data, "digits", DEFAULT_DIGITS),
        period=_int_field(data, "period", DEFAULT_PERIOD),
        algorithm=_field(data, "algorithm", DEFAULT_ALGORITHM),
    )
    try:
        with _locked_store() as store:
            credential = store.add(fields)
    except OtpError as e:
        return _error(str(e), 400)

    logger.info("Created token %s", credential.id)
    return jsonify({"success": True, "data": credential.to_dict()}), 201


@api_bp.route("/tokens/<string:token_id>", methods=["GET"])
def get_token(token_id):
    with _locked_store() as store:
        credential = store.get(token_id)
    if credential is None:
        return _not_found()
    return jsonify({"success": True, "data": credential.to_dict()})


@api_bp.route("/tokens/<string:token_id>", methods=["DELETE"])
def delete_token(token_id):
    with _locked_store() as store:
        deleted = store.delete(token_id)
    if not deleted:
        return _not_found()
    logger.info("Deleted token %s", token_id)
    return jsonify({"success": True, "message": "Token deleted"})


@api_bp.route("/tokens", methods=["DELETE"])
def delete_all_tokens():
    with _locked_store() as store:
        count = store.delete_all()
    logger.info("Deleted all tokens (%d)", count)
    return jsonify({"success": True, "message": f"Deleted {count} tokens", "deleted_count": count})


@api_bp.route("/tokens/<string:token_id>/code", methods=["GET"])
def get_code(token_id):
    """
    CURRENT CODE FOR ONE TOKEN

      curl http://localhost:5000/api/v1/tokens/<id>/code

    Output:
      {"success": true, "data": {"code": "123456", "remaining_seconds": 17,
                                 "period": 30, "generated_at": "..."}}
    """
    with _locked_store() as store:
        result = store.generate_code(token_id)
    if result is None:
        return _not_found()
    return jsonify({"success": True, "data": result.to_dict()})


@api_bp.route("/codes", methods=["GET"])
def get_all_codes():
    """Every token with its current code under `current_code`."""
    with _locked_store() as store:
        pairs = store.generate_all_codes()
    data = [dict(credential.to_dict(), current_code=result.to_dict()) for credential, result in pairs]
    return jsonify({"success": True, "data": data})


@api_bp.route("/tokens/<string:token_id>/uri", methods=["GET"])
def get_provisioning_uri(token_id):
    with _locked_store() as store:
        uri = store.get_provisioning_uri(token_id)
    if uri is None:
        return _not_found()
    return jsonify({"success": True, "data": {"uri": uri}})


@api_bp.route("/tokens/<string:token_id>/qr", methods=["GET"])
def get_qr_code(token_id):
    """
    PROVISIONING QR CODE (PNG)

      curl -o token.png http://localhost:5000/api/v1/tokens/<id>/qr

    Scan with Google Authenticator / Microsoft Authenticator.
    """
    with _locked_store() as store:
        uri = store.get_provisioning_uri(token_id)
    if uri is None:
        return _not_found()

    qr = qrcode.QRCode(version=1, box_size=10, border=5)
    qr.add_data(uri)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return Response(buffer.getvalue(), status=200, mimetype="image/png")


@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "ok",
        "service": current_app.config["SERVICE_NAME"],
        "version": current_app.config["VERSION"],
        "timestamp": datetime.now().astimezone().isoformat(timespec="seconds"),
    })
