"""AI exclusion enforcement for attentiontower.

Items whose text begins with a period (`.`) must never be sent to the
text-generation collaborator, neither at capture time nor for explanations.
This must be checked BEFORE any AI call.
"""


def is_ai_excluded(text: str) -> bool:
    """Check if a piece of item text is excluded from AI processing.

    Args:
        text: Raw capture text or item text

    Returns:
        True if the text should never be sent to AI
    """
    if not text:
        return False
    return text.lstrip().startswith('.')
