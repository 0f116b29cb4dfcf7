import asyncio
import logging
from typing import Optional

from completion import Completer, TransportError
from models import CATEGORIES, PRIORITIES
from prompts import CATEGORY_PROMPT, PRIORITY_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "other"
DEFAULT_PRIORITY = "medium"


async def _ask_choice(completer: Completer, prompt: str, choices: tuple[str, ...], default: str) -> str:
    """Single-word answer from a closed set; anything else becomes default."""
    try:
        answer = (await completer.complete(prompt)).strip().lower()
    except TransportError as e:
        logger.warning("Classification call failed, using %r: %s", default, e)
        return default
    except Exception as e:  # noqa: BLE001
        logger.exception("Unexpected classification failure, using %r: %s", default, e)
        return default
    if answer not in choices:
        logger.info("Unexpected classification answer %r, using %r", answer, default)
        return default
    return answer


async def categorize(completer: Completer, text: str) -> str:
    return await _ask_choice(completer, CATEGORY_PROMPT.format(text=text), CATEGORIES, DEFAULT_CATEGORY)


async def prioritize(completer: Completer, text: str) -> str:
    return await _ask_choice(completer, PRIORITY_PROMPT.format(text=text), PRIORITIES, DEFAULT_PRIORITY)


async def _given(value: str) -> str:
    return value


async def classify(
    completer: Completer,
    text: str,
    category: Optional[str] = None,
    priority: Optional[str] = None,
) -> tuple[str, str]:
    """
    Resolve (category, priority) for a new task.
    Explicit values win and their inference call is never made; the remaining
    inferences run concurrently.
    """
    return tuple(await asyncio.gather(
        _given(category) if category else categorize(completer, text),
        _given(priority) if priority else prioritize(completer, text),
    ))
