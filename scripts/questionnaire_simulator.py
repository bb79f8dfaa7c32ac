#!/usr/bin/env python3
"""
Daily Questionnaire Simulator.

Fills in the daily crash questionnaire with generated answers, walking the
same step flow a user would, and submits the result to the questionnaire API.

Usage:
    python scripts/questionnaire_simulator.py --branch fatigue
    python scripts/questionnaire_simulator.py --branch no-fatigue --user-id demo-user
    python scripts/questionnaire_simulator.py --branch random --count 5 --seed 42
    python scripts/questionnaire_simulator.py --dry-run
"""

import os
import sys
import json
import random
import asyncio
import argparse
import logging
from datetime import datetime, time, timezone
from typing import Optional

from dotenv import load_dotenv

from questionnaire import (
    HttpSubmissionTransport,
    QuestionnaireError,
    QuestionnaireSession,
    SleepMetrics,
    SubmissionStatusTracker,
    normalize_submission,
)
from questionnaire import options

# Load environment variables
load_dotenv()

logger = logging.getLogger("questionnaire_simulator")


def generate_energy_curve(rng: random.Random, points: int = 12) -> list[tuple[float, float]]:
    """Energy curve that starts moderate and dips in the afternoon."""
    curve = []
    level = rng.uniform(40, 70)
    for i in range(points):
        time_index = i * 2.5
        # afternoon slump around index 14 (15:00)
        level += rng.uniform(-12, 8) - (6 if 10 <= time_index <= 18 else 0)
        level = max(0.0, min(100.0, level))
        curve.append((time_index, round(level, 1)))
    return curve


def fill_session(session: QuestionnaireSession, fatigue: bool, rng: random.Random) -> None:
    """Answer every step on the chosen branch, advancing as a user would."""
    session.start()

    # Step 1: sleep and refreshment
    session.set_answer("refreshment_level", rng.randint(1, 10))
    session.set_answer("wake_up_hour", rng.randint(6, 10))
    session.set_answer("sleep_quality_slider", rng.randint(1, 10))
    session.apply_sleep_metrics(
        SleepMetrics(
            duration_hours=round(rng.uniform(4, 9), 2),
            stages={"Core": round(rng.uniform(2, 4), 2), "Deep": round(rng.uniform(0.5, 1.5), 2)},
        )
    )
    print(f"  {session.describe().hint}")
    session.advance()

    # Step 2: energy graph
    session.set_answer("energy_graph_points", generate_energy_curve(rng))
    session.advance()

    # Step 3: fatigue screening
    session.set_answer("has_excessive_fatigue", fatigue)
    session.advance()

    if fatigue:
        # Step 4: crash time
        if rng.random() < 0.7:
            session.set_answer("crash_time_of_day", rng.choice(options.CRASH_TIME_OPTIONS))
        else:
            session.set_answer("crash_time", time(rng.randint(6, 21), rng.choice([0, 15, 30, 45])))
        session.advance()

        # Step 5: symptoms
        for symptom in rng.sample(options.SYMPTOM_OPTIONS, rng.randint(1, 4)):
            session.toggle_symptom(symptom)
        session.advance()

        # Step 6: crash details
        duration = rng.choice(options.CRASH_DURATION_OPTIONS)
        session.set_answer("crash_duration", duration)
        if options.asks_duration_count(duration):
            session.set_answer(
                "crash_duration_number", rng.randint(1, options.duration_max_value(duration))
            )
        for trigger in rng.sample(options.MAIN_TRIGGERS, rng.randint(1, 2)):
            session.toggle_main_trigger(trigger)
            for sub_trigger in rng.sample(options.sub_triggers_for(trigger), 1):
                session.toggle_sub_trigger(sub_trigger)
        session.set_answer("crash_trigger_description", "Simulated crash after a busy day")
    else:
        # Step 4: symptom checklist (optional on this branch)
        for symptom in rng.sample(options.SYMPTOM_OPTIONS, rng.randint(0, 2)):
            session.toggle_symptom(symptom)
        session.advance()

        # Step 5: other symptoms
        if rng.random() < 0.5:
            session.set_answer("other_symptoms_description", "Leichte Kopfschmerzen am Abend")


async def run_once(
    session: QuestionnaireSession,
    fatigue: bool,
    rng: random.Random,
    dry_run: bool,
) -> bool:
    fill_session(session, fatigue, rng)
    print(f"  Step {session.current_step}/{session.total_steps} ({session.describe().kind.value})")

    if dry_run:
        record = normalize_submission(session.answers, session.user_id)
        print(json.dumps(record.to_payload(), indent=2, ensure_ascii=False))
        return True

    try:
        record = await session.proceed()
    except QuestionnaireError as e:
        logger.warning(f"[SIMULATOR] Submission failed for {session.user_id}: {e}")
        print(f"  ✗ Submission failed: {e}")
        return False

    if record is None:
        logger.warning(f"[SIMULATOR] Step {session.current_step} blocked, nothing submitted")
        print("  ✗ Questionnaire could not be completed")
        return False

    logger.info(f"[SIMULATOR] Submitted questionnaire for {record.user_id}")
    print(
        f"  ✓ Submitted for {record.user_id} at {record.timestamp.isoformat()} "
        f"(fatigue={record.has_excessive_fatigue}, crashDuration={record.crash_duration})"
    )
    return True


async def run(args: argparse.Namespace) -> int:
    rng = random.Random(args.seed)
    transport = HttpSubmissionTransport(base_url=args.api_url)
    tracker = SubmissionStatusTracker()

    session = QuestionnaireSession(args.user_id, transport, tracker=tracker)

    failures = 0
    for i in range(args.count):
        if args.branch == "random":
            fatigue = rng.random() < 0.5
        else:
            fatigue = args.branch == "fatigue"

        print(f"\n[{i + 1}/{args.count}] {'Crash' if fatigue else 'No crash'} questionnaire "
              f"({datetime.now(timezone.utc).strftime('%H:%M:%S')})")
        if not await run_once(session, fatigue, rng, args.dry_run):
            failures += 1
        session.retake()

    print(f"\nDone: {args.count - failures} succeeded, {failures} failed")
    return 1 if failures else 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Daily Questionnaire Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One questionnaire on the crash branch
  python scripts/questionnaire_simulator.py --branch fatigue

  # Five questionnaires, random branch, reproducible
  python scripts/questionnaire_simulator.py --branch random --count 5 --seed 42

  # Print the payload without sending it
  python scripts/questionnaire_simulator.py --dry-run
        """,
    )
    parser.add_argument(
        "--branch",
        choices=["fatigue", "no-fatigue", "random"],
        default="random",
        help="Which answer to give on the fatigue screening step",
    )
    parser.add_argument(
        "--user-id",
        default=os.getenv("SIMULATOR_USER_ID", "simulated-user"),
        help="User ID to submit as",
    )
    parser.add_argument(
        "--api-url",
        default=os.getenv("QUESTIONNAIRE_API_URL", "http://localhost:8083"),
        help="Base URL of the questionnaire API",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of questionnaires to submit",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible answers",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the normalized payload instead of sending it",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("Daily Questionnaire Simulator")
    print("=" * 60)
    print(f"API:    {args.api_url}{' (dry run)' if args.dry_run else ''}")
    print(f"User:   {args.user_id}")
    print(f"Branch: {args.branch}")

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
