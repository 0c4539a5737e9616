from flask import Blueprint, request, jsonify
from database import SessionLocal
from config import get_config
from errors import HexGameError, MalformedRequest
from models.cell import Cell
from services.auth import resolve_caller
from services.game_service import GameService
from services.premium_service import PremiumService

router = Blueprint('game_controller', __name__)

premium_service = PremiumService.from_config(get_config())


@router.errorhandler(HexGameError)
def handle_game_error(e: HexGameError):
    return jsonify(e.to_dict()), e.status_code


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MalformedRequest("Request body must be a JSON object.")
    return data


@router.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@router.route("/games", methods=["POST"])
def create_game():
    data = _json_body()
    first_player, second_player = data.get("first_player"), data.get("second_player")
    if not isinstance(first_player, str) or not isinstance(second_player, str):
        raise MalformedRequest("first_player and second_player must be account ids.")
    size = data.get("size")
    if size is not None and (not isinstance(size, int) or isinstance(size, bool)):
        raise MalformedRequest("size must be an integer.")

    db = SessionLocal()
    try:
        service = GameService(db)
        index = service.create_game(first_player, second_player, size)
    finally:
        db.close()
    return jsonify({"game_created": True, "index": index}), 201


@router.route("/games/<int:index>", methods=["GET"])
def get_game(index):
    db = SessionLocal()
    try:
        service = GameService(db)
        game = service.get_game(index)
    finally:
        db.close()

    if game is None:
        return jsonify({"error": "Game doesn't exist.", "code": "GameNotFound"}), 404
    return jsonify(game), 200


@router.route("/games/<int:index>/move", methods=["POST"])
def make_move(index):
    caller = resolve_caller(request.headers)
    data = _json_body()
    cell = Cell.from_dict(data["cell"]) if data.get("cell") is not None else None

    db = SessionLocal()
    try:
        service = GameService(db)
        game = service.make_move(index, caller, data.get("move_type"), cell)
    finally:
        db.close()
    return jsonify(game), 200


@router.route("/premium/<account_id>", methods=["POST"])
def check_premium(account_id):
    check_id = premium_service.check_premium(account_id)
    return jsonify({"check_id": check_id}), 202


@router.route("/premium/checks/<check_id>", methods=["GET"])
def premium_status(check_id):
    status = premium_service.status(check_id)
    if status is None:
        return jsonify({"error": "Unknown premium check."}), 404
    return jsonify(status), 200
