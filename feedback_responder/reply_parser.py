"""Parser for the labeled sections of a generated reply.

The generated text is expected to look like::

    RESPONSE: <reply to the customer>
    KEY_INSIGHTS: <insight>; <insight>; ...
    KEYWORDS: <keyword>, <keyword>, ...

Every section is optional and may appear in any order. A section runs from
the end of its label to the start of the next label found in the text, or
to the end of the text. Only the first occurrence of each label counts.
"""
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

RESPONSE_LABEL = "RESPONSE:"
INSIGHTS_LABEL = "KEY_INSIGHTS:"
KEYWORDS_LABEL = "KEYWORDS:"

LABELS = (RESPONSE_LABEL, INSIGHTS_LABEL, KEYWORDS_LABEL)


class ParsedReply(BaseModel):
    """Sections recovered from generated text.

    An absent section is empty: ``response == ""`` or an empty list.
    """

    model_config = ConfigDict(frozen=True)

    response: str = ""
    key_insights: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)


def _locate_labels(text: str) -> List[Tuple[int, str]]:
    """Return (position, label) for each label present, in text order."""
    found = []
    for label in LABELS:
        position = text.find(label)
        if position != -1:
            found.append((position, label))
    return sorted(found)


def split_sections(text: str) -> Dict[str, str]:
    """Map each label present in ``text`` to its raw section body."""
    located = _locate_labels(text)
    sections = {}
    for index, (position, label) in enumerate(located):
        start = position + len(label)
        end = located[index + 1][0] if index + 1 < len(located) else len(text)
        sections[label] = text[start:end]
    return sections


def _split_items(body: str, separator: str) -> List[str]:
    return [item.strip() for item in body.split(separator) if item.strip()]


def parse_reply(text: str) -> ParsedReply:
    """Parse generated text into a ParsedReply."""
    sections = split_sections(text)
    return ParsedReply(
        response=sections.get(RESPONSE_LABEL, "").strip(),
        key_insights=_split_items(sections.get(INSIGHTS_LABEL, ""), ";"),
        keywords=_split_items(sections.get(KEYWORDS_LABEL, ""), ","),
    )
