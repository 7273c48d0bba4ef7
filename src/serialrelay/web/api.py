"""
REST API endpoints for the serial relay.
"""

from flask import Blueprint, g, jsonify, request

from serialrelay.serial.ports import COMMON_PORTS, list_ports, merge_ports

api_bp = Blueprint("api", __name__)


@api_bp.route("/ports", methods=["GET"])
def get_ports():
    """List serial ports.

    Detected ports come first, followed by common port names unless
    ?detected=1 is given.
    """
    ports = list_ports()
    if request.args.get("detected") not in ("1", "true", "yes"):
        ports = merge_ports(ports, COMMON_PORTS)

    return jsonify([p.to_dict() for p in ports])


@api_bp.route("/status", methods=["GET"])
def get_status():
    """Current link state and viewer count."""
    data = g.hub.link.state.to_dict()
    data["sessions"] = g.hub.session_count
    return jsonify(data)


@api_bp.route("/sessions", methods=["GET"])
def get_sessions():
    """Connected viewer sessions."""
    sessions = g.hub.registry.get_sessions_info()
    return jsonify({"sessions": sessions, "count": len(sessions)})


@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})
