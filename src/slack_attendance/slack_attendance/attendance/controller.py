from __future__ import annotations

from flask import Flask, current_app, jsonify, request

from ..common.datetime_utils import parse_edit_datetime
from ..common.validators import require_fields
from ..container import Container
from ..core.constants import EDIT_DATETIME_FORMAT
from ..core.exceptions import ConflictError, DomainError, NotFoundError, PersistenceError, ValidationError
from ..reports.service import NO_RECORDS_MESSAGE

API_PREFIX = "/api/v1/attendance"


def _status_for(exc: Exception) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    return 500


def _failure(prefix: str, exc: Exception, **extra):
    if isinstance(exc, ValidationError):
        # input problems are reported as-is
        message = str(exc)
    elif isinstance(exc, (DomainError, PersistenceError)):
        message = f"{prefix}: {exc}"
        if isinstance(exc, PersistenceError):
            current_app.logger.error("%s: %s", prefix, exc)
    else:
        current_app.logger.exception(prefix)
        message = f"{prefix}: internal error"
    return jsonify({"success": False, "message": message, **extra}), _status_for(exc)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid request format")
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return "OK", 200

    @app.route(f"{API_PREFIX}/check-in", methods=["POST"], endpoint="api_check_in")
    def api_check_in():
        try:
            ids = require_fields(_json_body(), "team_id", "channel_id", "user_id")
            log = container.attendance_service.check_in(**ids)
        except Exception as e:
            return _failure("Failed to check in", e)
        return jsonify({"success": True, "attendance_log": log.to_dict(), "message": f"{log.workplace_name}: 出勤"}), 200

    @app.route(f"{API_PREFIX}/check-out", methods=["POST"], endpoint="api_check_out")
    def api_check_out():
        try:
            ids = require_fields(_json_body(), "team_id", "channel_id", "user_id")
            log = container.attendance_service.check_out(**ids)
        except Exception as e:
            return _failure("Failed to check out", e)
        return jsonify({"success": True, "attendance_log": log.to_dict(), "message": f"{log.workplace_name}: 退勤"}), 200

    @app.route(f"{API_PREFIX}/workplace/subscribe", methods=["POST"], endpoint="api_subscribe_workplace")
    def api_subscribe_workplace():
        try:
            fields = require_fields(_json_body(), "team_id", "channel_id", "user_id", "workplace_name")
            binding = container.workplace_service.subscribe(**fields)
        except Exception as e:
            return _failure("Failed to subscribe workplace", e)
        return jsonify(
            {
                "success": True,
                "workplace_binding": binding.to_dict(),
                "message": f"職場登録完了: {binding.workplace_name}",
            }
        ), 200

    @app.route(f"{API_PREFIX}/monthly", methods=["GET"], endpoint="api_monthly_hours")
    def api_monthly_hours():
        try:
            ids = require_fields(request.args, "team_id", "channel_id", "user_id")
        except ValidationError:
            return jsonify({"success": False, "message": "team_id, channel_id, and user_id are required"}), 400

        try:
            report = container.report_service.monthly_report(**ids, year_month=request.args.get("year_month"))
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception as e:
            return _failure("Failed to get attendance log", e)

        if report.is_empty:
            return jsonify({"success": True, "attendance_logs": [], "message": NO_RECORDS_MESSAGE}), 200

        return jsonify(
            {
                "success": True,
                "attendance_logs": [log.to_dict() for log in report.logs],
                "formatted_data": report.formatted,
                "message": "Successfully retrieved attendance logs",
            }
        ), 200

    @app.route(f"{API_PREFIX}/edit", methods=["PUT"], endpoint="api_edit_attendance")
    def api_edit_attendance():
        try:
            fields = require_fields(_json_body(), "id", "new_datetime")
            new_time = parse_edit_datetime(fields["new_datetime"], container.tz)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        try:
            log = container.attendance_service.update_log(fields["id"], new_time)
        except Exception as e:
            return _failure("勤怠記録の更新に失敗しました", e)

        return jsonify(
            {
                "success": True,
                "attendance_log": log.to_dict(),
                "message": f"勤怠記録を更新しました ID: {log.log_id} 新しい時刻: {new_time.strftime(EDIT_DATETIME_FORMAT)}",
            }
        ), 200

    @app.route(f"{API_PREFIX}/<log_id>", methods=["DELETE"], endpoint="api_delete_attendance")
    def api_delete_attendance(log_id: str):
        try:
            container.attendance_service.delete_log(log_id)
        except Exception as e:
            return _failure("勤怠記録の削除に失敗しました", e)
        return jsonify({"success": True, "message": f"勤怠記録を削除しました ID: {log_id}"}), 200
