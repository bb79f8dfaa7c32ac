"""Daily Questionnaire API: storage for completed questionnaires."""
