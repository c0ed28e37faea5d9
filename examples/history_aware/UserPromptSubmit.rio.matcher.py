"""Example: conversation-aware matcher (protocol 2.0, async).

Adds signals from the transcript to the prompt's keyword count.  The
transcript accessors are cached for the whole invocation, so only the
first matcher to ask pays for parsing.
"""

KEYWORDS = ("typescript", "type", "compile", "tsc", "build")
ERROR_MARKERS = ("type error", "compilation error", "TypeScript error")


def _mentions(text):
    lowered = text.lower()
    return any(keyword in lowered for keyword in KEYWORDS)


async def match(context):
    prompt_matches = sum(1 for keyword in KEYWORDS if keyword in context.prompt.lower())

    history = await context.transcript.history()
    recent = history[-10:]
    score = min(sum(1 for message in recent if _mentions(message.content)), 3)

    if any(
        message.role == "assistant" and any(marker in message.content for marker in ERROR_MARKERS)
        for message in history
    ):
        score += 2

    if any(_mentions(message.content) for message in history[-5:]):
        score += 1

    return {"version": "2.0", "matchCount": prompt_matches + score, "kind": "capability"}
