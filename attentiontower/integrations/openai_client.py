"""OpenAI API integration for attentiontower.

This module provides the text-generation collaborator used at the edges of
the system: splitting a free-text brain dump into proto tower items, and
optionally phrasing a "why this?" explanation. Neither call ever raises; on
any failure they return a value the caller treats as "fall back".
"""

import os
import json
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from openai import OpenAI, APIError
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Cheap, fast model; parsing output is a short JSON array
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# Brain dump parsing prompt template
CAPTURE_PROMPT_TEMPLATE = """You are parsing a brain dump into structured tasks. Extract ALL distinct tasks mentioned.

Today: {day_of_week}, {today}

INPUT: "{text}"

Extract as JSON array - one object per task:
[
  {{
    "text": "core task in 2-6 words (verb + object)",
    "status": "active" | "waiting" | "someday",
    "waitingOn": "person/thing if waiting, else omit",
    "expectsBy": "YYYY-MM-DD if date mentioned for THIS task, else omit",
    "effort": "quick" | "medium" | "deep",
    "isEvent": true | false
  }}
]

Status rules:
- "waiting" = blocked on someone else (waiting on X, need response from, their turn)
- "someday" = low priority (someday, maybe, eventually, when I have time)
- "active" = I can act now (default)

isEvent rules:
- false = ACTION (something you DO): call, email, send, buy, prepare, submit, pay, cancel, fix, write, review, book
- true = EVENT (something you SHOW UP to): appointment, meeting, dentist, doctor, flight, dinner, birthday, concert, interview, wedding

Key distinction:
- "dentist friday" -> isEvent: true (you show up at appointment)
- "call dentist" -> isEvent: false (you make the call)
- "prepare for meeting" -> isEvent: false (you do the prep)
- "buy mom birthday gift" -> isEvent: false (action to complete)

Date parsing (today is {today}):
- tomorrow = {tomorrow}
- day names = next occurrence of that day
- "by friday", "before friday", "due friday" -> deadline (isEvent should be false)
- "friday", "on friday", "friday 3pm" with event noun -> isEvent: true

Important:
- Each task gets its own object in the array
- Even single tasks return an array with one item
- Default isEvent to false if unclear

Return ONLY the JSON array."""

# Explanation prompt template
EXPLAIN_PROMPT_TEMPLATE = """A personal task tool surfaced this item for the user's attention.

Item: "{text}"
Reason it surfaced: "{reason}"

Rewrite the reason as one or two short, plain sentences addressed to the user.
Keep the facts (dates, day counts) exactly as given. Respond with only the sentences."""


def _strip_code_fence(content: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


class OpenAIClient:
    """Client for OpenAI API integration."""

    def __init__(self, api_key: Optional[str] = None):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key. If None, reads from OPENAI_API_KEY environment variable.

        Note:
            If no API key is available the client still initializes, and every
            call degrades to its fallback value. This keeps capture working
            when the collaborator is unconfigured.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.client = None

        if self.api_key:
            self.client = OpenAI(api_key=self.api_key)
        else:
            logger.warning("OPENAI_API_KEY not found in environment. AI capture parsing will not be available.")

    @property
    def available(self) -> bool:
        return self.client is not None

    def parse_brain_dump(self, text: str, today: date) -> Optional[List[Dict[str, Any]]]:
        """Split free text into loosely structured item dicts using OpenAI API.

        The returned dicts are untrusted and must be validated by the caller.

        Args:
            text: Raw capture text
            today: Calendar date used to resolve relative dates

        Returns:
            List of raw item dicts, or None if:
            - API key is not configured
            - API call fails
            - Response is not JSON
        """
        if not self.client:
            logger.debug("OpenAI client not initialized. Skipping brain dump parsing.")
            return None

        if not text or not text.strip():
            logger.debug("Empty capture text provided. Skipping brain dump parsing.")
            return None

        try:
            prompt = CAPTURE_PROMPT_TEMPLATE.format(
                text=text,
                today=today.isoformat(),
                day_of_week=today.strftime("%A"),
                tomorrow=(today + timedelta(days=1)).isoformat(),
            )

            response = self.client.chat.completions.create(
                model=OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": "You extract tasks from notes. Respond only with a valid JSON array."},
                    {"role": "user", "content": prompt}
                ],
                temperature=0.2,
                max_tokens=500,
            )

            response_content = _strip_code_fence((response.choices[0].message.content or "").strip())

            try:
                parsed = json.loads(response_content)
            except json.JSONDecodeError as e:
                logger.warning(f"Failed to parse OpenAI JSON response: {e}")
                return None

            items = parsed if isinstance(parsed, list) else [parsed]
            logger.debug(f"OpenAI parsed brain dump into {len(items)} item(s)")
            return items

        except APIError as e:
            error_code = getattr(e, 'code', None)
            status_code = getattr(e, 'status_code', None)

            if error_code == 'insufficient_quota':
                logger.warning("OpenAI API quota insufficient. Please check billing/payment method in OpenAI dashboard.")
            elif status_code == 429:
                logger.warning("OpenAI API rate limit exceeded. Please wait before retrying.")
            else:
                logger.error(f"OpenAI API error: {status_code or 'unknown'} ({error_code or 'unknown'})")

            # Don't log full error message as it might contain sensitive info
            return None
        except Exception as e:
            logger.error(f"Error calling OpenAI API: {type(e).__name__}")
            return None

    def explain_item(self, text: str, reason: str, max_length: int = 240) -> str:
        """Phrase a surfacing reason for an item using OpenAI API.

        Args:
            text: Item text
            reason: Deterministic explanation to rephrase
            max_length: Maximum length of the returned text

        Returns:
            Explanation text, or empty string on any failure
        """
        if not self.client:
            return ""

        try:
            prompt = EXPLAIN_PROMPT_TEMPLATE.format(text=text, reason=reason)

            response = self.client.chat.completions.create(
                model=OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": "You write short, calm nudges. Respond with plain text only."},
                    {"role": "user", "content": prompt}
                ],
                temperature=0.5,
                max_tokens=80,
            )

            explanation = (response.choices[0].message.content or "").strip().strip('"').strip()
            if len(explanation) > max_length:
                explanation = explanation[:max_length].rstrip()
            return explanation

        except APIError as e:
            status_code = getattr(e, 'status_code', None)
            logger.warning(f"OpenAI API error during explanation: {status_code or 'unknown'}")
            return ""
        except Exception as e:
            logger.error(f"Error generating explanation with OpenAI API: {type(e).__name__}")
            return ""
