"""
Application Constants

Central location for all magic numbers and user-facing texts.
"""

# === Reveal Pacing ===
REVEAL_DEFAULT_UNIT_DELAY_MS = 40
REVEAL_TAG_MULTIPLIER = 2
REVEAL_SENTENCE_END_MULTIPLIER = 8
REVEAL_CLAUSE_MULTIPLIER = 4
REVEAL_LINE_BREAK_MULTIPLIER = 6
REVEAL_CHAR_MULTIPLIER = 1

SENTENCE_END_CHARS = frozenset(".!?")
CLAUSE_CHARS = frozenset(",;:")
LINE_BREAK_CHARS = frozenset("\n\r")

# === Markup ===
LINE_BREAK_MARKUP = "<br>"
ALLOWED_HTML_TAGS = frozenset({
    "a", "b", "blockquote", "br", "code", "em", "i", "pre", "s", "strong", "u",
})
ALLOWED_HTML_ATTRIBUTES = {
    "a": frozenset({"href"}),
}

# === Anagram API ===
ANAGRAM_API_PATH = "/api/anagram"
ANAGRAM_API_TIMEOUT_SECONDS = 30.0
DEVICE_ID_HEADER = "X-Device-ID"
ANAGRAM_INPUT_MAX_LENGTH = 20

# === Telegram ===
TELEGRAM_MESSAGE_LIMIT = 4096
TELEGRAM_EDIT_INTERVAL_SECONDS = 1.0
TELEGRAM_MAX_RATE_LIMIT_WAIT = 10.0

# === UI Texts ===
INPUT_PLACEHOLDER_TEXT = "Enter words (max 20 chars)"
LOADING_TEXT_TEMPLATE = "Anagramming {input}..."
WELCOME_TEXT = (
    "<b>Roachagram</b>\n\n"
    "Send me a word or a short phrase and I will find anagrams for it.\n"
    f"<i>{INPUT_PLACEHOLDER_TEXT}</i>"
)
CANCELLED_TEXT = "Stopped."
NOTHING_TO_CANCEL_TEXT = "Nothing is running."

# === Error Messages ===
ANAGRAM_FALLBACK_MESSAGE = "An error occurred while fetching anagrams. Please try again."
ERROR_INPUT_TOO_LONG = f"Please keep it to {ANAGRAM_INPUT_MAX_LENGTH} characters or less."
