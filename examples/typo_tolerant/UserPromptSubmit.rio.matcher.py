"""Example: typo-tolerant matcher (protocol 2.0).

Compares each prompt word with the keywords using difflib, so
"kubernets" or "kubectl" still count.  Exported as an object with a
``match`` method to show the second export style.
"""
import difflib
import re

KEYWORDS = ("kubernetes", "kubectl", "helm", "deployment", "pod", "cluster")


class KubernetesMatcher:
    cutoff = 0.8

    def match(self, context):
        words = re.findall(r"[a-z0-9-]+", context.prompt.lower())
        hits = {
            keyword
            for word in words
            for keyword in difflib.get_close_matches(word, KEYWORDS, n=1, cutoff=self.cutoff)
        }
        return {"version": "2.0", "matchCount": len(hits), "kind": "capability"}


matcher = KubernetesMatcher()
