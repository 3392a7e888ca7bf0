"""
Completion sanitizing.

Models often wrap code in markdown fences despite being told not to.
This strips the fences so the remainder can be used as file content.
"""

import re


# An opening fence may carry a language tag (js, python3, c++, ...)
_FENCE_WITH_TAG = re.compile(r"```[\w+#.-]*[ \t]*\n?")
_BARE_FENCE = re.compile(r"```")


def sanitize_completion(text: str) -> str:
    """
    Remove every code fence and trim surrounding whitespace.

    Pure text transform with no knowledge of the source language; the
    result is not checked for syntactic validity.
    """
    if not text:
        return ""
    cleaned = _FENCE_WITH_TAG.sub("", text)
    cleaned = _BARE_FENCE.sub("", cleaned)
    return cleaned.strip()


class CompletionSanitizer:
    """Object wrapper around sanitize_completion for injection into the pipeline."""

    def sanitize(self, text: str) -> str:
        return sanitize_completion(text)
