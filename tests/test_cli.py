"""
End-to-end tests for the command line using file-backed adapters.
"""

import json

import pendulum
import pytest
from typer.testing import CliRunner

from docslots.cli.app import app

runner = CliRunner()

TIMEZONE = "America/Guayaquil"


@pytest.fixture
def workspace(tmp_path):
    """A config file with one bookable doctor, one hidden doctor and an empty store."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    every_day = {str(day): [{"startTime": "08:00", "endTime": "12:00"}] for day in range(7)}
    (data_dir / "doctors.json").write_text(
        json.dumps(
            [
                {
                    "id": "doc-1",
                    "name": "Dra. Test",
                    "slug": "dra-test",
                    "specialty": "Cardiología",
                    "city": "Quito",
                    "cost": 40,
                    "subscriptionStatus": "Active",
                    "availability": every_day,
                },
                {
                    "id": "doc-2",
                    "name": "Dr. Hidden",
                    "slug": "dr-hidden",
                    "subscriptionStatus": "Expired",
                    "availability": every_day,
                },
            ]
        ),
        encoding="utf-8",
    )
    (data_dir / "appointments.json").write_text("[]", encoding="utf-8")

    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"timezone: {TIMEZONE}\n"
        "scheduler:\n"
        "  interval_minutes: 30\n"
        "data:\n"
        "  doctors_file: data/doctors.json\n"
        "  appointments_file: data/appointments.json\n"
        "auth:\n"
        "  login_url: https://example.com/login\n"
        f"  session_file: {tmp_path / 'session'}\n"
        "  use_keyring: false\n",
        encoding="utf-8",
    )
    return tmp_path


def _invoke(workspace, *args):
    return runner.invoke(app, [*args, "--config", str(workspace / "config.yaml")])


def _stored(workspace):
    return json.loads((workspace / "data" / "appointments.json").read_text(encoding="utf-8"))


def _next_week():
    return pendulum.now(TIMEZONE).date().add(days=7).format("YYYY-MM-DD")


class TestDoctorsCommand:
    def test_lists_only_visible_doctors(self, workspace):
        result = _invoke(workspace, "doctors")

        assert result.exit_code == 0
        assert "dra-test" in result.output
        assert "dr-hidden" not in result.output

    def test_no_match_message(self, workspace):
        result = _invoke(workspace, "doctors", "--city", "Cuenca")

        assert result.exit_code == 0
        assert "No se encontraron doctores" in result.output


class TestSlotsAndCalendar:
    def test_slots_for_future_date(self, workspace):
        result = _invoke(workspace, "slots", "dra-test", "--date", _next_week())

        assert result.exit_code == 0
        assert "08:00" in result.output
        assert "11:30" in result.output
        assert "12:00" not in result.output

    def test_invalid_date_is_rejected(self, workspace):
        result = _invoke(workspace, "slots", "dra-test", "--date", "2026-13-01")

        assert result.exit_code == 1

    def test_unknown_doctor(self, workspace):
        result = _invoke(workspace, "slots", "nobody", "--date", _next_week())

        assert result.exit_code == 1
        assert "Unknown doctor" in result.output

    def test_calendar_with_deep_link(self, workspace):
        result = _invoke(workspace, "calendar", "dra-test", "--date", _next_week(), "--time", "09:30")

        assert result.exit_code == 0
        assert "Horarios para" in result.output
        assert "09:30" in result.output

    def test_calendar_ignores_malformed_time(self, workspace):
        result = _invoke(workspace, "calendar", "dra-test", "--date", "not-a-date", "--time", "25:99")

        assert result.exit_code == 0
        assert "Selecciona una fecha" in result.output


class TestBookCommand:
    def test_anonymous_booking_defers_to_login(self, workspace):
        result = _invoke(workspace, "book", "dra-test", "--date", _next_week(), "--time", "10:00")

        assert result.exit_code == 0
        assert "Inicia sesión" in result.output
        assert _stored(workspace) == []

    def test_signed_in_booking_is_stored_once(self, workspace):
        assert _invoke(workspace, "login", "patient-1").exit_code == 0

        first = _invoke(workspace, "book", "dra-test", "--date", _next_week(), "--time", "10:00")
        second = _invoke(workspace, "book", "dra-test", "--date", _next_week(), "--time", "10:00")

        assert first.exit_code == 0
        assert "Cita agendada" in first.output
        assert second.exit_code == 1
        assert "Intenta de nuevo" in second.output
        stored = _stored(workspace)
        assert len(stored) == 1
        assert stored[0]["patientId"] == "patient-1"
        assert stored[0]["doctorId"] == "doc-1"
        assert stored[0]["status"] == "Confirmed"

    def test_resume_from_callback_url(self, workspace):
        _invoke(workspace, "login", "patient-1")
        callback = f"/doctors/dra-test?date={_next_week()}&time=11:00"

        result = _invoke(workspace, "book", "dra-test", "--callback-url", callback)

        assert result.exit_code == 0
        assert len(_stored(workspace)) == 1

    def test_callback_with_past_date_is_rejected(self, workspace):
        """Resuming after login applies the same date check as a fresh booking."""
        _invoke(workspace, "login", "patient-1")

        result = _invoke(
            workspace, "book", "dra-test", "--callback-url", "/doctors/dra-test?date=2020-01-06&time=09:00"
        )

        assert result.exit_code == 1
        assert "La fecha ya pasó" in result.output
        assert _stored(workspace) == []

    def test_callback_with_time_not_offered_is_rejected(self, workspace):
        _invoke(workspace, "login", "patient-1")
        callback = f"/doctors/dra-test?date={_next_week()}&time=23:45"

        result = _invoke(workspace, "book", "dra-test", "--callback-url", callback)

        assert result.exit_code == 1
        assert "no está disponible" in result.output
        assert _stored(workspace) == []

    def test_past_date_is_rejected(self, workspace):
        _invoke(workspace, "login", "patient-1")

        result = _invoke(workspace, "book", "dra-test", "--date", "2020-01-06", "--time", "09:00")

        assert result.exit_code == 1
        assert "La fecha ya pasó" in result.output

    def test_time_not_offered_is_rejected(self, workspace):
        _invoke(workspace, "login", "patient-1")

        result = _invoke(workspace, "book", "dra-test", "--date", _next_week(), "--time", "15:00")

        assert result.exit_code == 1
        assert _stored(workspace) == []

    def test_missing_selection_is_rejected(self, workspace):
        _invoke(workspace, "login", "patient-1")

        result = _invoke(workspace, "book", "dra-test")

        assert result.exit_code == 1
        assert "No se pudo agendar" in result.output

    def test_doctor_cannot_book_themselves(self, workspace):
        _invoke(workspace, "login", "doc-1")

        result = _invoke(workspace, "book", "dra-test", "--date", _next_week(), "--time", "10:00")

        assert result.exit_code == 1
        assert _stored(workspace) == []

    def test_hidden_doctor_is_not_bookable(self, workspace):
        _invoke(workspace, "login", "patient-1")

        result = _invoke(workspace, "book", "dr-hidden", "--date", _next_week(), "--time", "10:00")

        assert result.exit_code == 1
        assert _stored(workspace) == []


class TestSessionCommands:
    def test_whoami_login_logout(self, workspace):
        assert _invoke(workspace, "whoami").exit_code == 1

        _invoke(workspace, "login", "patient-9")
        signed_in = _invoke(workspace, "whoami")
        _invoke(workspace, "logout")

        assert signed_in.exit_code == 0
        assert "patient-9" in signed_in.output
        assert _invoke(workspace, "whoami").exit_code == 1

    def test_appointments_lists_bookings(self, workspace):
        _invoke(workspace, "login", "patient-1")
        _invoke(workspace, "book", "dra-test", "--date", _next_week(), "--time", "08:30")

        result = _invoke(workspace, "appointments")

        assert result.exit_code == 0
        assert "08:30" in result.output
        assert "Confirmed" in result.output



class TestBrokenDataFiles:
    def test_corrupt_doctor_file_exits_cleanly(self, workspace):
        (workspace / "data" / "doctors.json").write_text("{not json", encoding="utf-8")

        result = _invoke(workspace, "doctors")

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Could not read doctors" in result.output

    def test_non_list_appointment_file_exits_cleanly(self, workspace):
        (workspace / "data" / "appointments.json").write_text("5", encoding="utf-8")
        _invoke(workspace, "login", "patient-1")

        result = _invoke(workspace, "appointments")

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error" in result.output


class TestLocale:
    def test_calendar_title_uses_configured_locale(self, workspace):
        config_path = workspace / "config.yaml"
        config_path.write_text(config_path.read_text(encoding="utf-8") + "locale: en\n", encoding="utf-8")
        expected = pendulum.now(TIMEZONE).format("MMMM YYYY", locale="en")

        result = _invoke(workspace, "calendar", "dra-test")

        assert result.exit_code == 0
        assert expected in result.output


class TestReviewCommands:
    def _complete_visit(self, workspace, patient_id="patient-1"):
        (workspace / "data" / "appointments.json").write_text(
            json.dumps(
                [
                    {
                        "id": "appt-1",
                        "doctorId": "doc-1",
                        "patientId": patient_id,
                        "startTime": "2026-01-05T09:00:00-05:00",
                        "endTime": "2026-01-05T09:30:00-05:00",
                        "status": "Completed",
                        "cost": 40,
                    }
                ]
            ),
            encoding="utf-8",
        )

    def test_review_after_completed_visit(self, workspace):
        self._complete_visit(workspace)
        _invoke(workspace, "login", "patient-1")

        first = _invoke(workspace, "review", "dra-test", "--rating", "5", "--comment", "Muy buena")
        second = _invoke(workspace, "review", "dra-test", "--rating", "4", "--comment", "Otra")
        listing = _invoke(workspace, "reviews", "dra-test")

        assert first.exit_code == 0
        assert second.exit_code == 1
        stored = json.loads((workspace / "data" / "ratings.json").read_text(encoding="utf-8"))
        assert len(stored) == 1
        assert stored[0]["appointmentId"] == "appt-1"
        assert listing.exit_code == 0
        assert "5.0" in listing.output
        assert "Muy buena" in listing.output

    def test_review_without_completed_visit_is_refused(self, workspace):
        self._complete_visit(workspace, patient_id="someone-else")
        _invoke(workspace, "login", "patient-1")

        result = _invoke(workspace, "review", "dra-test", "--rating", "5", "--comment", "Hola")

        assert result.exit_code == 1
        assert "No se puede enviar" in result.output
        assert not (workspace / "data" / "ratings.json").exists()


def test_missing_config_exits(tmp_path):
    result = runner.invoke(app, ["doctors", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output
