"""
Sanitization boundary.

Anything sent to a third-party model (rerank prompt, embeddings) is built
here from the free-text fields only. Owner, partner, data source, title and
URLs never leave this module, not even when a description repeats them.
The record id is removed where it stands as a number of its own; digits
inside longer numbers are kept.
"""

import re

from pydantic import BaseModel

from atio_search.db.models import InnovationRecord

URL_PATTERN = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
# No letters, so a short value like "ACT" can never reappear inside it.
REDACTED = "[-]"
MIN_REDACT_LENGTH = 3


class SanitizedDocument(BaseModel):
    handle: str
    text: str

    model_config = {"frozen": True}


def _identifying_pattern(record: InnovationRecord) -> re.Pattern:
    values = [record.title, record.owner_text, record.partner_text, record.data_source]
    values = {v.strip() for v in values if v and len(v.strip()) >= MIN_REDACT_LENGTH}
    # Longest first so a title containing the owner's name is removed whole.
    alternatives = [re.escape(v) for v in sorted(values, key=len, reverse=True)]
    alternatives.append(rf"(?<!\d){record.id}(?!\d)")
    return re.compile("|".join(alternatives), re.IGNORECASE)


def sanitize_text(record: InnovationRecord) -> str:
    """Short and long description, trimmed, joined by a blank line, scrubbed."""
    parts = [
        p.strip() for p in (record.short_description, record.long_description) if p and p.strip()
    ]
    text = "\n\n".join(parts)
    if not text:
        return ""

    text = URL_PATTERN.sub("", text)
    # One pass, so a replacement is never rescanned for another value.
    text = _identifying_pattern(record).sub(REDACTED, text)
    return text.strip()


def sanitize(
    records: list[InnovationRecord],
) -> tuple[list[SanitizedDocument], dict[str, int]]:
    """
    Build anonymous documents ("Doc 1", "Doc 2", ...) numbered by input position.

    Records without any free text are skipped, so handles can have gaps.
    The returned handle -> id mapping must stay in memory for one rerank call.
    """
    documents: list[SanitizedDocument] = []
    handle_to_id: dict[str, int] = {}

    for index, record in enumerate(records, start=1):
        text = sanitize_text(record)
        if not text:
            continue
        handle = f"Doc {index}"
        documents.append(SanitizedDocument(handle=handle, text=text))
        handle_to_id[handle] = record.id

    return documents, handle_to_id
