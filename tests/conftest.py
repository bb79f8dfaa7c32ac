"""
Pytest fixtures for Daily Questionnaire tests.
"""
import sys
import asyncio
import pytest
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
from dotenv import load_dotenv

# Ensure the repo root and src/ are on sys.path so tests can import
# questionnaire and server.questionnaire_api.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
for path in (ROOT, SRC):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Load environment variables
load_dotenv()

from questionnaire import AnswerSet, TransportError  # noqa: E402

FIXED_NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


# ============================================================================
# Answer Fixtures
# ============================================================================

def build_answers(fatigue: Optional[bool] = True) -> AnswerSet:
    """Answer set that satisfies every step of the given branch."""
    answers = AnswerSet()
    answers.set_answer("refreshment_level", 4)
    answers.set_answer("wake_up_hour", 7)
    answers.set_answer("sleep_quality_slider", 6)
    answers.set_answer("energy_graph_points", [(0, 60), (8, 35), (16, 20)])
    answers.set_answer("has_excessive_fatigue", fatigue)

    if fatigue:
        answers.set_answer("crash_time_of_day", "Afternoon (14:00 - 16:59)")
        answers.toggle_symptom("Erschöpfung")
        answers.toggle_symptom("Brainfog")
        answers.set_answer("crash_duration", "Stunden")
        answers.set_answer("crash_duration_number", 5)
        answers.toggle_main_trigger("Körperliche Anstrengung")
        answers.toggle_sub_trigger("Treppen steigen")
        answers.set_answer("crash_trigger_description", "Zwei Stockwerke ohne Pause")
    elif fatigue is False:
        answers.toggle_symptom("Kopfschmerzen")
    return answers


@pytest.fixture
def fatigue_answers():
    """Complete answers on the crash branch (6 steps)."""
    return build_answers(fatigue=True)


@pytest.fixture
def no_fatigue_answers():
    """Complete answers on the no-crash branch (5 steps)."""
    return build_answers(fatigue=False)


def fill_flow(target, fatigue: bool) -> None:
    """Drive a flow or session from the welcome screen to its final step."""
    target.start()
    target.set_answer("refreshment_level", 4)
    target.advance()
    target.set_answer("energy_graph_points", [(0, 60), (8, 35), (16, 20)])
    target.advance()
    target.set_answer("has_excessive_fatigue", fatigue)
    target.advance()
    if fatigue:
        target.set_answer("crash_time_of_day", "Morning (06:00 - 09:59)")
        target.advance()
        target.toggle_symptom("Erschöpfung")
        target.advance()
        target.set_answer("crash_duration", "Tage")
    else:
        target.toggle_symptom("Kopfschmerzen")
        target.advance()


# ============================================================================
# Transport Fixtures
# ============================================================================

class FakeTransport:
    """
    In-memory SubmissionTransport.

    Set `gate` to an asyncio.Event to hold deliveries until it is set, and
    `fail_with` to a message to make the next deliveries fail.
    """

    def __init__(self):
        self.delivered = []
        self.calls = 0
        self.gate: Optional[asyncio.Event] = None
        self.fail_with: Optional[str] = None

    async def deliver(self, record) -> None:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise TransportError(self.fail_with, status_code=500)
        self.delivered.append(record)


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def api_settings(tmp_path):
    """Settings pointing at a throwaway database directory."""
    from server.questionnaire_api.config import Settings

    return Settings(data_path=str(tmp_path), default_limit=2, max_limit=3)


@pytest.fixture
def api_app(api_settings):
    from server.questionnaire_api.main import create_app

    return create_app(api_settings)


@pytest.fixture
def api_client(api_app):
    """Synchronous TestClient for the questionnaire API."""
    from fastapi.testclient import TestClient

    with TestClient(api_app) as client:
        yield client
