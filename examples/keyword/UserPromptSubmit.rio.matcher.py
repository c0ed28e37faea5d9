"""Example: keyword matcher (protocol 2.0).

Counts how many of a skill's keywords appear in the prompt.  This is the
fastest and most common pattern: no I/O, no awaiting.

Install as ``.claude/skills/docker-helper/rio/UserPromptSubmit.rio.matcher.py``.

    "Why is my docker container not starting?"  -> matchCount 2
    "Fix my React component"                    -> matchCount 0
"""

KEYWORDS = (
    "docker",
    "container",
    "dockerfile",
    "docker-compose",
    "compose",
    "image",
    "containerize",
)


def match(context):
    prompt = context.prompt.lower()
    match_count = sum(1 for keyword in KEYWORDS if keyword in prompt)
    return {"version": "2.0", "matchCount": match_count, "kind": "capability"}
