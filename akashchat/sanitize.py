import re

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"
RE = re.compile(re.escape(THINK_OPEN) + r"[\s\S]*?" + re.escape(THINK_CLOSE))


def sanitize(text):
    """Strip <think>...</think> reasoning spans from model output.

    Falls back to the untouched text when nothing would be left to show.
    """
    cleaned = RE.sub("", text).strip()
    if not cleaned and text:
        return text
    return cleaned
