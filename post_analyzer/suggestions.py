"""Rule-based suggestions for social-media ready text."""

import re

NO_TEXT_FOUND = "No text found in the document."

HASHTAG_PATTERN = re.compile(r"#\w+", re.ASCII)
MENTION_PATTERN = re.compile(r"@\w+", re.ASCII)
LINK_PATTERN = re.compile(r"https?://")

# (pattern, suggestion emitted when the pattern is absent), checked in order
PATTERN_CHECKS = (
    (HASHTAG_PATTERN, "Add 3–8 hashtags for better reach."),
    (MENTION_PATTERN, "Tag collaborators using @mentions."),
    (LINK_PATTERN, "Consider adding a call-to-action link."),
)

CLOSING_SUGGESTIONS = (
    "Add short sentences and a clear CTA.",
    "Include alt text for images.",
)


def word_count(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split())


def analyze(text: str) -> list[str]:
    """Return the ordered suggestion list for extracted text.

    The word count always comes first, followed by one line per missing
    hashtag / mention / link, and finally the style reminders.
    """
    if not text.strip():
        return [NO_TEXT_FOUND]

    suggestions = [f"Word count: {word_count(text)}"]
    for pattern, suggestion in PATTERN_CHECKS:
        if not pattern.search(text):
            suggestions.append(suggestion)
    suggestions.extend(CLOSING_SUGGESTIONS)
    return suggestions
