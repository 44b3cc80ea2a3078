"""Bullet summary prompt."""

BULLETS_SYSTEM_PROMPT = (
    "Summarize the following agricultural innovation description into exactly 3 bullet "
    "points. Each bullet must be one concise sentence, max 15 words. Focus on: (1) what "
    "the innovation is, (2) who it helps and how, (3) key impact or differentiator. "
    'Respond in JSON: {"bullets": ["...", "...", "..."]}. No numbering or markdown.'
)
