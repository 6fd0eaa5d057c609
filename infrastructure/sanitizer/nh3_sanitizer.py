import logging
import re
from typing import Iterable, Mapping, Optional

import nh3

from domain.services.html_sanitizer import IHtmlSanitizer
from shared.constants import ALLOWED_HTML_ATTRIBUTES, ALLOWED_HTML_TAGS

logger = logging.getLogger(__name__)

# Lone UTF-16 surrogates cannot be encoded for nh3
_SURROGATE_PATTERN = re.compile("[\ud800-\udfff]")


class Nh3HtmlSanitizer(IHtmlSanitizer):
    """HTML sanitizer backed by nh3 (ammonia)

    Only the tags and attributes passed in survive; script and style
    elements are dropped together with their content.
    """

    def __init__(
        self,
        allowed_tags: Optional[Iterable[str]] = None,
        allowed_attributes: Optional[Mapping[str, Iterable[str]]] = None,
    ):
        self._tags = set(allowed_tags if allowed_tags is not None else ALLOWED_HTML_TAGS)
        attributes = allowed_attributes if allowed_attributes is not None else ALLOWED_HTML_ATTRIBUTES
        self._attributes = {
            tag: set(attrs) for tag, attrs in attributes.items() if tag in self._tags
        }

    @property
    def allowed_tags(self) -> frozenset:
        return frozenset(self._tags)

    def sanitize(self, markup: str) -> str:
        if not markup:
            return ""
        markup = _SURROGATE_PATTERN.sub("\ufffd", markup)

        cleaned = nh3.clean(
            markup,
            tags=self._tags,
            attributes=self._attributes,
            link_rel=None,
        )
        if len(cleaned) != len(markup):
            logger.debug(f"Sanitizer changed markup: {len(markup)}ch -> {len(cleaned)}ch")
        return cleaned
