"""Query normalization prompts."""

TRANSLATE_SYSTEM_PROMPT = (
    "Translate the following text to English. Return ONLY the English translation, nothing else."
)

SPELLING_SYSTEM_PROMPT = (
    "You correct typos and spelling mistakes in search queries about agricultural "
    "innovations. Keep domain vocabulary (crop names, farming practices, technical "
    "terms, local names) exactly as written when it is already correct. Do not "
    "rephrase, expand, or answer the query. Return ONLY the corrected query, nothing else."
)

EXPANSION_SYSTEM_PROMPT = (
    "You help with search for agricultural innovations. Output 5-8 comma-separated "
    "keywords or short phrases that capture the same intent as the user query "
    "(synonyms, related terms). Output ONLY the list, nothing else."
)
