"""Domain services"""

from domain.services.anagram_source import IAnagramSource, AnagramSourceError
from domain.services.html_sanitizer import IHtmlSanitizer
from domain.services.reveal_sink import IRevealSink
from domain.services.reveal_tokenizer import iter_reveal_units, tokenize_markup, unit_delay_ms
from domain.services.response_formatter import ResponseFormatter

__all__ = [
    "IAnagramSource",
    "AnagramSourceError",
    "IHtmlSanitizer",
    "IRevealSink",
    "iter_reveal_units",
    "tokenize_markup",
    "unit_delay_ms",
    "ResponseFormatter",
]
