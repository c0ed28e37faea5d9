"""Example: configuration-driven matcher (protocol 2.0).

Keywords live in ``keywords.yaml`` next to this file, so a team can tune
them without touching code.  A project may override any key in
``<project>/.claude/docker-helper.yaml``.  A missing or malformed file
is skipped, leaving the settings below it in place.

Recognised keys::

    enabled: true
    keywords: [docker, container, dockerfile]
    negative_keywords: [kubernetes]

A prompt containing a negative keyword never matches.
"""
from pathlib import Path

import yaml

SKILL_NAME = "docker-helper"

DEFAULTS = {
    "enabled": True,
    "keywords": ["docker", "container", "dockerfile"],
    "negative_keywords": [],
}


def _valid(key, value):
    if key == "enabled":
        return isinstance(value, bool)
    return isinstance(value, list) and all(isinstance(word, str) for word in value)


def _read(path):
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    settings = {key: data[key] for key in DEFAULTS if key in data}
    if not all(_valid(key, value) for key, value in settings.items()):
        return {}
    return settings


def load_settings(working_dir):
    settings = dict(DEFAULTS)
    settings.update(_read(Path(__file__).with_name("keywords.yaml")))
    settings.update(_read(Path(working_dir) / ".claude" / f"{SKILL_NAME}.yaml"))
    return settings


def match(context):
    settings = load_settings(context.working_dir)
    prompt = context.prompt.lower()

    if not settings["enabled"] or any(word.lower() in prompt for word in settings["negative_keywords"]):
        return {"version": "2.0", "matchCount": 0, "kind": "capability"}

    match_count = sum(1 for word in settings["keywords"] if word.lower() in prompt)
    return {"version": "2.0", "matchCount": match_count, "kind": "capability"}
