"""
Unit tests for the submission normalizer.

Checks the wire payload produced for each branch, the validation order and
the energy graph clock formatting.
"""
import dataclasses
from datetime import datetime, time, timedelta, timezone

import pytest

from questionnaire import (
    AnswerSet,
    StateError,
    ValidationError,
    format_time_interval,
    normalize_submission,
)
from questionnaire import options
from questionnaire.normalizer import NONE_TEXT, NOT_SPECIFIED, QUESTIONNAIRE_VERSION

from conftest import FIXED_NOW, build_answers

PAYLOAD_KEYS = {
    "userId",
    "timestamp",
    "dataType",
    "energyGraphPoints",
    "refreshmentLevel",
    "hasExcessiveFatigue",
    "crashTimeOfDay",
    "selectedSymptoms",
    "otherSymptomsDescription",
    "crashDuration",
    "crashDurationNumber",
    "crashTrigger",
    "crashSubTriggers",
    "crashTriggerDescription",
    "sleepQuality",
    "sleepDuration",
    "wakeUpHour",
    "completionStatus",
    "questionnaireVersion",
}


class TestFormatTimeInterval:
    """Energy graph index to 12-hour clock text."""

    @pytest.mark.parametrize(
        "index,expected",
        [
            (0, "8:00 AM"),
            (1, "8:30 AM"),
            (8, "12:00 PM"),
            (9, "12:30 PM"),
            (10, "1:00 PM"),
            (28, "10:00 PM"),
            (32, "12:00 AM"),
            (34, "1:00 AM"),
            (2.5, "9:15 AM"),
        ],
    )
    def test_format(self, index, expected):
        assert format_time_interval(index) == expected


class TestValidation:
    """Required fields are checked in a fixed order."""

    def test_missing_user_id_first(self):
        with pytest.raises(ValidationError, match="missing user id"):
            normalize_submission(AnswerSet(), "")

    def test_blank_user_id(self):
        with pytest.raises(ValidationError, match="missing user id"):
            normalize_submission(build_answers(True), "   ")

    def test_no_energy_data(self):
        answers = build_answers(True)
        answers.set_answer("energy_graph_points", [])
        with pytest.raises(ValidationError, match="no energy data"):
            normalize_submission(answers, "user-1")

    def test_crash_duration_required(self):
        answers = build_answers(True)
        answers.set_answer("crash_duration", "")
        with pytest.raises(ValidationError, match="crash duration required"):
            normalize_submission(answers, "user-1")

    def test_unanswered_fatigue_is_state_error(self):
        answers = build_answers(None)
        with pytest.raises(StateError):
            normalize_submission(answers, "user-1")


class TestFatigueBranch:
    """Payload of a questionnaire with a crash."""

    def test_payload(self, fatigue_answers):
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        payload = record.to_payload()

        assert set(payload) == PAYLOAD_KEYS
        assert payload["userId"] == "user-1"
        assert payload["timestamp"] == "2025-03-14T09:30:00+00:00"
        assert payload["dataType"] == "completeQuestionnaire"
        assert payload["completionStatus"] == "completed"
        assert payload["questionnaireVersion"] == QUESTIONNAIRE_VERSION
        assert payload["hasExcessiveFatigue"] is True
        assert payload["crashTimeOfDay"] == "Afternoon (14:00 - 16:59)"
        assert payload["crashDuration"] == "Stunden"
        assert payload["crashDurationNumber"] == 5
        assert payload["crashTrigger"] == ["Körperliche Anstrengung"]
        assert payload["crashSubTriggers"] == ["Treppen steigen"]
        assert payload["crashTriggerDescription"] == "Zwei Stockwerke ohne Pause"
        assert payload["otherSymptomsDescription"] == NONE_TEXT
        assert payload["sleepQuality"] == 6
        assert payload["wakeUpHour"] == 7
        assert payload["refreshmentLevel"] == 4

    def test_energy_points_formatted(self, fatigue_answers):
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        assert record.to_payload()["energyGraphPoints"] == [
            {"timeInterval": 0.0, "energyLevel": 60.0, "timestamp": "8:00 AM"},
            {"timeInterval": 8.0, "energyLevel": 35.0, "timestamp": "12:00 PM"},
            {"timeInterval": 16.0, "energyLevel": 20.0, "timestamp": "4:00 PM"},
        ]

    def test_symptoms_in_catalogue_order(self, fatigue_answers):
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        # "Erschöpfung" precedes "Brainfog" in the checklist
        assert record.selected_symptoms == ("Erschöpfung", "Brainfog")

    def test_clock_crash_time(self, fatigue_answers):
        fatigue_answers.set_answer("crash_time_of_day", "")
        fatigue_answers.set_answer("crash_time", time(15, 5))
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        assert record.crash_time_of_day == "15:05"

    def test_uncounted_duration_has_zero_number(self, fatigue_answers):
        fatigue_answers.set_answer("crash_duration", options.STILL_IN_CRASH)
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        assert record.crash_duration == options.STILL_IN_CRASH
        assert record.crash_duration_number == 0

    def test_empty_trigger_description_sentinel(self, fatigue_answers):
        fatigue_answers.set_answer("crash_trigger_description", "")
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        assert record.crash_trigger_description == NONE_TEXT

    def test_stale_other_symptoms_dropped(self, fatigue_answers):
        fatigue_answers.set_answer("other_symptoms_description", "from the other branch")
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        assert record.other_symptoms_description == NONE_TEXT


class TestNoFatigueBranch:
    """Payload of a questionnaire without a crash."""

    def test_headache_only(self, no_fatigue_answers):
        record = normalize_submission(no_fatigue_answers, "user-2", now=FIXED_NOW)
        payload = record.to_payload()

        assert set(payload) == PAYLOAD_KEYS
        assert payload["hasExcessiveFatigue"] is False
        assert payload["selectedSymptoms"] == ["Kopfschmerzen"]
        assert payload["crashDuration"] == NOT_SPECIFIED
        assert payload["crashTimeOfDay"] == NOT_SPECIFIED
        assert payload["crashDurationNumber"] == 0
        assert payload["crashTrigger"] == []
        assert payload["crashSubTriggers"] == []
        assert payload["crashTriggerDescription"] == NONE_TEXT
        assert payload["otherSymptomsDescription"] == NONE_TEXT
        assert payload["completionStatus"] == "completed"

    def test_other_symptoms_kept(self, no_fatigue_answers):
        no_fatigue_answers.set_answer("other_symptoms_description", "Leichter Tinnitus")
        record = normalize_submission(no_fatigue_answers, "user-2", now=FIXED_NOW)
        assert record.other_symptoms_description == "Leichter Tinnitus"

    def test_crash_answers_from_abandoned_branch_pruned(self):
        answers = build_answers(True)
        answers.set_answer("has_excessive_fatigue", False)
        record = normalize_submission(answers, "user-2", now=FIXED_NOW)
        assert record.crash_duration == NOT_SPECIFIED
        assert record.crash_trigger == ()
        assert record.crash_sub_triggers == ()


class TestSubmissionRecord:

    def test_record_is_immutable(self, fatigue_answers):
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.crash_duration = "Tage"

    def test_record_detached_from_answers(self, fatigue_answers):
        record = normalize_submission(fatigue_answers, "user-1", now=FIXED_NOW)
        fatigue_answers.toggle_symptom("Schwindel")
        assert "Schwindel" not in record.selected_symptoms

    def test_user_id_trimmed(self, fatigue_answers):
        record = normalize_submission(fatigue_answers, "  user-1 ", now=FIXED_NOW)
        assert record.user_id == "user-1"

    def test_naive_now_treated_as_utc(self, fatigue_answers):
        record = normalize_submission(fatigue_answers, "user-1", now=datetime(2025, 1, 2, 3, 4))
        assert record.timestamp == datetime(2025, 1, 2, 3, 4, tzinfo=timezone.utc)

    def test_timestamp_converted_to_utc(self, fatigue_answers):
        berlin = timezone(timedelta(hours=1))
        record = normalize_submission(
            fatigue_answers, "user-1", now=datetime(2025, 1, 2, 10, 0, tzinfo=berlin)
        )
        assert record.timestamp.utcoffset() == timedelta(0)
        assert record.timestamp.hour == 9

    def test_defaults_to_current_time(self, fatigue_answers):
        before = datetime.now(timezone.utc)
        record = normalize_submission(fatigue_answers, "user-1")
        assert before <= record.timestamp <= datetime.now(timezone.utc)
