"""Instructions sent to the proxy for the editor's built-in AI actions."""

REWRITE_SYSTEM = "You edit text precisely. Only return the rewritten selection without extra commentary."

CONTINUE_SYSTEM = "You continue the user's document seamlessly in the same tone and style."

IMPROVE_INSTRUCTION = (
    "Correct only grammar, spelling, and basic punctuation errors. "
    "Keep the wording and tone as close to the original as possible. "
    "Preserve all existing line breaks and blank lines; do not merge paragraphs "
    "or change the surrounding spacing. Return only the corrected text, with no "
    "quotes, brackets, markers, or additional commentary."
)

SHORTEN_INSTRUCTION = (
    "Rewrite this so it is more concise but keeps all important information and "
    "the same tone. Preserve the current paragraph and line-break structure; do not "
    "remove blank lines between paragraphs or change surrounding spacing. Return "
    "only the rewritten text, with no quotes, brackets, markers, or additional commentary."
)

EXPAND_INSTRUCTION = (
    "Expand this text with more detail and explanation while keeping the same tone "
    "and key ideas. Preserve all existing line breaks and blank lines so the spacing "
    "between this and surrounding paragraphs stays the same. Return only the expanded "
    "text, with no quotes, brackets, markers, or additional commentary."
)
