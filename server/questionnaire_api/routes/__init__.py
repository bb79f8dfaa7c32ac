"""API route modules."""
from .questionnaire import router as questionnaire_router

__all__ = [
    "questionnaire_router",
]
