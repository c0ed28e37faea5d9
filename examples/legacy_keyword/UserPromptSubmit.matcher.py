"""Example: keyword matcher for the legacy protocol (1.0).

Legacy matchers report a relevance flag plus priority and confidence
tiers instead of a match count.  Run with ``PROMPT_ROUTER_PROTOCOL=1.0``.
"""

KEYWORDS = ("git", "commit", "branch", "merge", "rebase", "pull request")


def match(context):
    prompt = context.prompt.lower()
    hits = [keyword for keyword in KEYWORDS if keyword in prompt]
    return {
        "version": "1.0",
        "relevant": bool(hits),
        "priority": "high" if len(hits) > 1 else "medium" if hits else "low",
        "relevance": "high" if hits else "low",
        "kind": "capability",
    }
