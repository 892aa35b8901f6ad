from __future__ import annotations

from typing import Callable

from flask import Flask, current_app, jsonify, request

from ..container import Container
from ..core.exceptions import DomainError, PersistenceError, ValidationError
from ..reports.service import NO_RECORDS_MESSAGE

DEV_SUFFIX = "-dev"

UNKNOWN_COMMAND_MESSAGE = "不明なコマンドです。"

HELP_MESSAGE = (
    "以下のコマンドが利用できます。\n"
    "/start-work: 出勤\n"
    "/end-work: 退勤\n"
    "/subscribe-workplace: 職場登録\n"
    "/monthly-hours: 月間出勤時間\n"
    "/help-attendance: ヘルプ"
)


def normalize_command(command: str) -> str:
    """``/start-work-dev`` is the same command as ``/start-work``."""
    command = (command or "").strip()
    if command.endswith(DEV_SUFFIX):
        return command[: -len(DEV_SUFFIX)]
    return command


class SlashCommandHandler:
    """Turns one slash command into the reply text."""

    def __init__(self, container: Container):
        self._c = container
        self._commands: dict[str, Callable[[dict], str]] = {
            "/start-work": self._start_work,
            "/end-work": self._end_work,
            "/subscribe-workplace": self._subscribe_workplace,
            "/monthly-hours": self._monthly_hours,
            "/help-attendance": lambda _form: HELP_MESSAGE,
        }

    def handle(self, form: dict) -> str:
        handler = self._commands.get(normalize_command(form.get("command", "")))
        if handler is None:
            return UNKNOWN_COMMAND_MESSAGE
        return handler(form)

    @staticmethod
    def _ids(form: dict) -> dict[str, str]:
        return {
            "team_id": form.get("team_id", ""),
            "channel_id": form.get("channel_id", ""),
            "user_id": form.get("user_id", ""),
        }

    def _start_work(self, form: dict) -> str:
        try:
            log = self._c.attendance_service.check_in(**self._ids(form))
        except (DomainError, PersistenceError) as e:
            current_app.logger.info("/start-work failed: %s", e)
            return f"Failed to check in: {e}"
        return f"{log.workplace_name}: 出勤"

    def _end_work(self, form: dict) -> str:
        try:
            log = self._c.attendance_service.check_out(**self._ids(form))
        except (DomainError, PersistenceError) as e:
            current_app.logger.info("/end-work failed: %s", e)
            return f"Failed to check out: {e}"
        return f"{log.workplace_name}: 退勤"

    def _subscribe_workplace(self, form: dict) -> str:
        try:
            binding = self._c.workplace_service.subscribe(**self._ids(form), workplace_name=form.get("text", ""))
        except (DomainError, PersistenceError) as e:
            current_app.logger.info("/subscribe-workplace failed: %s", e)
            return f"Failed to subscribe workplace: {e}"
        return f"職場登録完了: {binding.workplace_name}"

    def _monthly_hours(self, form: dict) -> str:
        try:
            report = self._c.report_service.monthly_report(
                **self._ids(form), year_month=(form.get("text") or "").strip() or None
            )
        except ValidationError as e:
            return str(e)
        except (DomainError, PersistenceError) as e:
            current_app.logger.info("/monthly-hours failed: %s", e)
            return f"Failed to get attendance log: {e}"

        if report.is_empty:
            return NO_RECORDS_MESSAGE
        return report.formatted


def register(app: Flask, container: Container) -> None:
    handler = SlashCommandHandler(container)

    @app.route("/slack/slash/attendance", methods=["POST"], endpoint="slack_slash_attendance")
    def slack_slash_attendance():
        # Slack shows any non-200 reply as a delivery failure, so errors travel in the text.
        form = request.form.to_dict()
        try:
            text = handler.handle(form)
        except Exception as e:
            current_app.logger.exception("slash command %s failed", form.get("command"))
            text = f"Error: {e}"
        return jsonify({"text": text}), 200
