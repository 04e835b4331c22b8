from __future__ import annotations

import json

import pytest

from patentos.services import prompt_store
from patentos.services.prompt_store import clear_prompt_cache, render_prompt


@pytest.fixture
def custom_catalog(tmp_path, monkeypatch):
    path = tmp_path / "prompts.json"
    path.write_text(json.dumps({"search": {"prompt": "Custom scan for $query"}}), encoding="utf-8")
    monkeypatch.setattr(prompt_store, "PROMPTS_PATH", path)
    clear_prompt_cache()
    yield path
    clear_prompt_cache()


def test_render_prompt_substitutes_template_values():
    prompt = render_prompt("search.prompt", query="solid-state battery", count=6)
    assert '"solid-state battery"' in prompt
    assert "Search for 6 REAL" in prompt


def test_render_prompt_joins_multiline_entries():
    prompt = render_prompt(
        "prior_art.prompt",
        patent_id="US7654321B2",
        title="Separator",
        abstract="A ceramic separator.",
    )
    assert "ID: US7654321B2" in prompt
    assert "\n**STRATEGIC RECOMMENDATION**\n" in prompt


def test_render_prompt_raises_for_missing_value():
    with pytest.raises(KeyError):
        render_prompt("deep_dive.prompt", patent_id="US1")


def test_render_prompt_raises_for_unknown_key():
    with pytest.raises(KeyError):
        render_prompt("missing.prompt.key")


def test_clear_prompt_cache_reloads_catalog(custom_catalog):
    assert render_prompt("search.prompt", query="graphene") == "Custom scan for graphene"

    custom_catalog.write_text(json.dumps({"search": {"prompt": "Edited $query"}}), encoding="utf-8")
    clear_prompt_cache()

    assert render_prompt("search.prompt", query="graphene") == "Edited graphene"
