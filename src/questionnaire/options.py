"""
Fixed option sets for the daily crash questionnaire.

Labels are the German strings shown to the user and stored verbatim in the
submission payload, so changing one is a wire-format change.
"""

from typing import Dict, List

CRASH_TIME_OPTIONS: List[str] = [
    "Morning (06:00 - 09:59)",
    "Late Morning (10:00 - 11:59)",
    "Midday (12:00 - 13:59)",
    "Afternoon (14:00 - 16:59)",
    "Evening (17:00 - 20:59)",
    "At night (21:00 - 05:59)",
]

STILL_IN_CRASH = "Ich bin aktuell noch in einem Crash"
NONE_OF_THESE = "Keine dieser Antworten"

CRASH_DURATION_OPTIONS: List[str] = [
    "Minuten",
    "Stunden",
    "Tage",
    "Wochen",
    "Monate",
    STILL_IN_CRASH,
    NONE_OF_THESE,
]

# Duration options that are not a unit, so no count is asked for
UNCOUNTED_DURATIONS = frozenset({STILL_IN_CRASH, NONE_OF_THESE})

DURATION_MAX_VALUES: Dict[str, int] = {
    "Minuten": 60,
    "Stunden": 24,
    "Tage": 30,
    "Wochen": 12,
    "Monate": 12,
}
DEFAULT_DURATION_MAX = 10

DURATION_QUESTION_TEXT: Dict[str, str] = {
    "Minuten": "Wie viele Minuten dauerte der Crash?",
    "Stunden": "Wie viele Stunden dauerte der Crash?",
    "Tage": "Wie viele Tage dauerte der Crash?",
    "Wochen": "Wie viele Wochen dauerte der Crash?",
    "Monate": "Wie viele Monate dauerte der Crash?",
}
DEFAULT_DURATION_QUESTION = "Wie lange dauerte der Crash?"

SYMPTOM_OPTIONS: List[str] = [
    "Allgemeine Schmerzen",
    "Muskelschmerzen",
    "Gelenkschmerzen",
    "Erschöpfung",
    "Konzentrationsprobleme",
    "Brainfog",
    "Kopfschmerzen",
    "Übelkeit",
    "Schwindel",
    "Herzrasen",
    "Grippeartige Symptome",
    "Geschwollene Lymphknoten",
    "Empfindlichkeit gegenüber Licht, Geräuschen oder Gerüchen",
    "Schlafstörungen",
    "Nervenkribbeln",
]

# Main trigger -> its sub-trigger options (insertion order is display order)
CRASH_TRIGGER_OPTIONS: Dict[str, List[str]] = {
    "Körperliche Anstrengung": [
        "Gehen/Laufen",
        "Stehen",
        "Treppen steigen",
        "Sportliche Aktivität",
        "Einkaufen gehen",
        "Haushalt (Staubsaugen, Kochen, Putzen, etc.)",
        "Körperpflege (Duschen, Zähne putzen, etc.)",
        "Sexuelle Aktivität",
        "Gartenarbeit",
    ],
    "Geistige Anstrengung": [
        "Lesen",
        "Schreiben",
        "Lernen",
        "Unterhalten",
        "Zuhören",
        "Nachdenken",
        "Autofahren",
        "Orientieren",
    ],
    "Emotionale Anstrengung": [
        "Freude",
        "Wut",
        "Trauer",
        "Stress",
        "Angst",
        "Auseinandersetzung (Streit, Diskussion, etc.)",
        "Grübeln",
        "Belastende Situation/Zustand (z.B. Einsamkeit)",
        "Panik",
    ],
    "Soziale Anstrengung": [
        "Treffen mit Freunden/Familie",
        "Besuch im Kino, Theater, Restaurant oder ähnliches",
        "Menschenmengen",
    ],
    "Reize": [
        "Geräusche/Lärm",
        "Visuelle Reize (Licht, Flackern, etc.)",
        "Geruch",
        "Vibration",
    ],
}

MAIN_TRIGGERS: List[str] = list(CRASH_TRIGGER_OPTIONS)


def sub_triggers_for(main_trigger: str) -> List[str]:
    """Return the sub-trigger options of a main trigger (empty if unknown)."""
    return list(CRASH_TRIGGER_OPTIONS.get(main_trigger, []))


def parent_trigger_of(sub_trigger: str) -> str | None:
    """Return the main trigger a sub-trigger belongs to, or None."""
    for main_trigger, subs in CRASH_TRIGGER_OPTIONS.items():
        if sub_trigger in subs:
            return main_trigger
    return None


def duration_max_value(crash_duration: str) -> int:
    """Upper bound for the crash duration count of the given unit."""
    return DURATION_MAX_VALUES.get(crash_duration, DEFAULT_DURATION_MAX)


def duration_question_text(crash_duration: str) -> str:
    return DURATION_QUESTION_TEXT.get(crash_duration, DEFAULT_DURATION_QUESTION)


def asks_duration_count(crash_duration: str) -> bool:
    """Whether a count follow-up applies to the chosen duration option."""
    return bool(crash_duration) and crash_duration not in UNCOUNTED_DURATIONS


def time_labels_from_wake_up(wake_up_hour: int, count: int = 8) -> List[str]:
    """
    Hour labels for the energy graph axis, every two hours from wake-up.

    Args:
        wake_up_hour: Hour the user woke up (0-23)
        count: Number of labels to generate

    Returns:
        List of hour strings, wrapping past midnight (e.g. ["22", "0", "2"])
    """
    labels = []
    hour = wake_up_hour
    for _ in range(count):
        labels.append(str(hour))
        hour = (hour + 2) % 24
    return labels
