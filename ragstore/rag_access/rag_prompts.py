"""
RAG-specific prompts for the query and suggestion layers.
"""

from typing import Dict, Optional


SUPPORTED_LANGUAGES: Dict[str, str] = {
    'en': 'English',
    'es': 'Spanish',
    'fr': 'French',
    'de': 'German',
    'it': 'Italian',
    'pt': 'Portuguese',
    'nl': 'Dutch',
    'pl': 'Polish',
    'tr': 'Turkish',
    'ru': 'Russian',
    'ar': 'Arabic',
    'hi': 'Hindi',
    'zh': 'Chinese',
    'ja': 'Japanese',
    'ko': 'Korean',
}

QUERY_LANGUAGE_FALLBACK = "the user's query language"
SUGGESTION_LANGUAGE_FALLBACK = "English"


def resolve_language(language_code: Optional[str], fallback: str = QUERY_LANGUAGE_FALLBACK) -> str:
    """
    Resolve a language code to a language name.

    Accepts region-qualified codes such as ``pt-BR`` by falling back to the
    primary subtag. Unknown or empty codes resolve to ``fallback``.
    """
    if not language_code:
        return fallback

    code = language_code.strip().lower().replace('_', '-')
    if code in SUPPORTED_LANGUAGES:
        return SUPPORTED_LANGUAGES[code]
    return SUPPORTED_LANGUAGES.get(code.split('-', 1)[0], fallback)


class RAGPrompts:
    """Collection of prompts for grounded queries."""

    @staticmethod
    def build_query_prompt(query: str, language_code: Optional[str]) -> str:
        """Augment a user question with language and answer-style directives."""
        language_name = resolve_language(language_code)
        return (
            f"{query}\n\n"
            f"IMPORTANT: Please respond in {language_name}. "
            "DO NOT ASK THE USER TO READ THE MANUAL, pinpoint the relevant sections in the response itself."
        )

    @staticmethod
    def build_suggestion_prompt(language_code: Optional[str], questions_per_topic: int = 4) -> str:
        """Ask for example questions per document topic as a fenced JSON array."""
        language_name = resolve_language(language_code, fallback=SUGGESTION_LANGUAGE_FALLBACK)
        return (
            "You are provided with Standard Operating Procedure (SOP) documents from a manufacturing "
            f"environment. For each document, generate {questions_per_topic} short and practical example "
            f"questions a user might ask about the procedures in {language_name}. "
            "Return the questions as a JSON array of objects. Each object should have a 'topic' key "
            "(representing the SOP topic, e.g., 'Machine Calibration') and a 'questions' key with an "
            f"array of {questions_per_topic} question strings. Wrap the array in a ```json fenced code block. "
            "For example: ```json\n"
            '[{"topic": "Machine Calibration SOP", "questions": ["What is the first step in calibration?", '
            '"How often should this machine be calibrated?"]}, '
            '{"topic": "Assembly Line Safety", "questions": ["What personal protective equipment is required?", '
            '"What is the emergency shutdown procedure?"]}]\n'
            "```"
        )
