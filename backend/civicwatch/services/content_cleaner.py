from __future__ import annotations

import html
import re

TAG_PATTERN = re.compile(r"<[^>]+>")
PUNCTUATION_PATTERN = re.compile(r"[^\w\s]")
WHITESPACE_PATTERN = re.compile(r"\s+")


class ContentCleaner:
    def __init__(self, keyword_limit: int = 10, min_word_length: int = 4) -> None:
        self.keyword_limit = keyword_limit
        self.min_word_length = min_word_length

    def strip_markup(self, text: str | None) -> str:
        if not text:
            return ""
        no_html = TAG_PATTERN.sub(" ", html.unescape(text))
        return WHITESPACE_PATTERN.sub(" ", no_html).strip()

    def extract_keywords(self, text: str | None) -> list[str]:
        """First ``keyword_limit`` distinct words longer than three characters, in reading order."""
        keywords: list[str] = []
        for token in self._tokenize(self.strip_markup(text)):
            if len(token) < self.min_word_length or token in keywords:
                continue
            keywords.append(token)
            if len(keywords) == self.keyword_limit:
                break
        return keywords

    @staticmethod
    def _tokenize(text: str) -> list[str]:
        if not text:
            return []
        return PUNCTUATION_PATTERN.sub("", text.lower()).split()
