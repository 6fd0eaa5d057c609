"""
Anagram response formatting.

Turns the raw, loosely structured text returned by the anagram API into
markup that is safe to reveal:
- Unicode escapes and HTML entities decoded
- newlines rendered as <br>
- **bold** markdown → <b>Bold</b> with capitalized words
- "### Heading:" lines → <b>Heading:</b>
- the user's phrase restored where the API squashed its spaces
- allow-list sanitizing (delegated)
- backticks and </script> escaped for embedding
"""

import html
import logging
import re

from domain.services.html_sanitizer import IHtmlSanitizer
from shared.constants import LINE_BREAK_MARKUP

logger = logging.getLogger(__name__)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "f": "\f",
    "v": "\v",
    "a": "\a",
    "e": "\x1b",
}

_ESCAPE_PATTERN = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.DOTALL)
_BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
_QUOTED_PATTERN = re.compile(r'"(.*?)"')
_SURROGATE_PATTERN = re.compile("[\ud800-\udfff]")
# A line starts at the beginning of the text, after a line terminator or after <br>
_HEADING_PATTERN = re.compile(
    r"(^|" + re.escape(LINE_BREAK_MARKUP) + r")###\s*((?:(?!" + re.escape(LINE_BREAK_MARKUP) + r")[^\r\n:])+:)",
    re.MULTILINE,
)


def _capitalize_words(text: str) -> str:
    """Upper-case the first letter and lower-case the rest of each space separated word"""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def _unescape_match(m: re.Match) -> str:
    token = m.group(1)
    if len(token) == 5 and token[0] == "u":
        return chr(int(token[1:], 16))
    if len(token) == 3 and token[0] == "x":
        return chr(int(token[1:], 16))
    return _SIMPLE_ESCAPES.get(token, token)


def unescape_sequences(text: str) -> str:
    """
    Resolve backslash escapes such as \\u00e9, \\x41 and \\n.

    A backslash before any other character yields that character.
    Escaped UTF-16 surrogate pairs are combined into one code point;
    a surrogate without its partner becomes U+FFFD.
    """
    decoded = _ESCAPE_PATTERN.sub(_unescape_match, text)
    if _SURROGATE_PATTERN.search(decoded):
        decoded = decoded.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return decoded


def decode_api_string(raw: str) -> str:
    """
    Decode a raw API string and render its newlines as line breaks.

    Args:
        raw: Raw text returned by the anagram API

    Returns:
        Text with escapes and HTML entities decoded and every
        newline replaced with <br>
    """
    if raw is None:
        raise ValueError("raw must not be None")

    unicode_decoded = unescape_sequences(raw)
    html_decoded = html.unescape(unicode_decoded)
    return html_decoded.replace("\n", LINE_BREAK_MARKUP)


def replace_markdown_bold(text: str) -> str:
    """
    Replace **text** with <b>Text</b>, capitalizing each enclosed word.

    Matching is non-greedy, so the shortest span between two pairs of
    asterisks wins. Unpaired markers stay in the text as-is.
    """
    if text is None:
        raise ValueError("text must not be None")
    return _BOLD_PATTERN.sub(lambda m: f"<b>{_capitalize_words(m.group(1))}</b>", text)


def capitalize_words_in_quotes(text: str) -> str:
    """
    Capitalize each word inside double quotes: 'said "hello world"' → 'said "Hello World"'

    Not a stage of ResponseFormatter.format. Kept as a standalone helper
    alongside the pipeline stages for callers that want quoted phrases
    title-cased.
    """
    if text is None:
        raise ValueError("text must not be None")
    return _QUOTED_PATTERN.sub(lambda m: f'"{_capitalize_words(m.group(1))}"', text)


def bold_section_after_hashes(text: str) -> str:
    """
    Turn "### Section Title:" line openings into "<b>Section Title:</b>".

    The phrase runs up to the first colon of the line and never crosses
    a line terminator or a <br>.
    """
    if text is None:
        raise ValueError("text must not be None")
    return _HEADING_PATTERN.sub(lambda m: f"{m.group(1)}<b>{m.group(2)}</b>", text)


def restore_original_input(original_input: str, text: str) -> str:
    """
    Put the user's phrase back where the API echoed it without spaces.

    "new york" is searched as "newyork" and every occurrence is replaced.
    Plain substring replacement: no word boundaries, case-sensitive.
    """
    if original_input is None or text is None:
        raise ValueError("original_input and text must not be None")

    lookup = original_input.replace(" ", "").strip()
    if not lookup:
        return text
    return text.replace(lookup, original_input)


def escape_for_embedding(text: str) -> str:
    """Escape backticks and split </script> so the markup can sit inside a script or template literal"""
    if text is None:
        raise ValueError("text must not be None")
    return text.replace("`", "\\`").replace("</script>", "<\\/script>")


class ResponseFormatter:
    """
    Formats raw anagram API responses into safe display markup.

    Pure apart from the injected sanitizer: same input, same output.
    """

    def __init__(self, sanitizer: IHtmlSanitizer):
        self._sanitizer = sanitizer

    def format(self, raw: str, original_input: str) -> str:
        """
        Run the full formatting pipeline.

        Args:
            raw: Raw API response
            original_input: Phrase the user asked anagrams for

        Returns:
            Sanitized, embedding-safe markup

        Raises:
            ValueError: raw or original_input is None
        """
        if raw is None:
            raise ValueError("raw must not be None")
        if original_input is None:
            raise ValueError("original_input must not be None")

        result = decode_api_string(raw)
        result = replace_markdown_bold(result)
        result = bold_section_after_hashes(result)
        result = restore_original_input(original_input, result)
        result = self._sanitizer.sanitize(result)
        result = escape_for_embedding(result)

        logger.debug(f"Formatted API response: {len(raw)}ch raw -> {len(result)}ch markup")
        return result
