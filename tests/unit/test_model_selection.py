from __future__ import annotations

from typing import List, Sequence

import pytest

from codebuff.exceptions import NoQualifyingModel
from codebuff.models.selection import ModelSelector, filter_catalog, parse_model_version
from codebuff.shared import ModelDescriptor


def _catalog(*names: str) -> List[dict]:
    return [{"name": n, "displayName": n.upper()} for n in names]


def test_parse_model_version_reads_major_minor() -> None:
    assert parse_model_version("gemini-2.5-flash") == (2, 5)
    assert parse_model_version("models/gemini-1.5-pro-002") == (1, 5)
    assert parse_model_version("gemini-2.10-x") == (2, 10)


def test_parse_model_version_rejects_non_matching_identifiers() -> None:
    assert parse_model_version("gemini-exp-1206") is None
    assert parse_model_version("text-embedding-004") is None
    assert parse_model_version("") is None


def test_parse_model_version_family_filter() -> None:
    assert parse_model_version("models/veo-3.0-generate", family="gemini") is None
    assert parse_model_version("models/veo-3.0-generate") == (3, 0)


def test_versions_compare_numerically() -> None:
    assert parse_model_version("gemini-2.10-x") > parse_model_version("gemini-2.9-x")


def test_filter_keeps_only_models_at_or_above_floor() -> None:
    catalog = _catalog("gemini-2.0-pro", "gemini-2.5-flash", "gemini-3.1-x")
    survivors = filter_catalog(catalog, (2, 5), family="gemini")
    assert [d.identifier for d in survivors] == ["gemini-2.5-flash", "gemini-3.1-x"]


def test_select_with_no_survivors_raises() -> None:
    selector = ModelSelector((2, 5), choose=lambda models: models[0])
    with pytest.raises(NoQualifyingModel):
        selector.select(_catalog("gemini-1.5-pro", "gemini-2.0-flash", "embedding-001"))


def test_select_single_survivor_skips_prompt() -> None:
    def never(models: Sequence[ModelDescriptor]) -> ModelDescriptor:
        raise AssertionError("should not prompt")

    selector = ModelSelector((2, 5), choose=never)
    chosen = selector.select(_catalog("gemini-2.0-pro", "models/gemini-2.5-pro"))
    assert chosen.identifier == "models/gemini-2.5-pro"
    assert chosen.label == "MODELS/GEMINI-2.5-PRO (models/gemini-2.5-pro)"


def test_select_returns_chosen_identifier_verbatim() -> None:
    offered: List[str] = []

    def pick_last(models: Sequence[ModelDescriptor]) -> ModelDescriptor:
        offered.extend(m.identifier for m in models)
        return models[-1]

    selector = ModelSelector((2, 5), choose=pick_last)
    chosen = selector.select(_catalog("models/gemini-2.5-flash", "models/gemini-2.10-pro"))
    assert offered == ["models/gemini-2.5-flash", "models/gemini-2.10-pro"]
    assert chosen.identifier == "models/gemini-2.10-pro"
    assert chosen.version == (2, 10)


def test_entries_without_names_are_ignored() -> None:
    catalog = [{"displayName": "nameless"}, {"name": "gemini-2.5-flash"}]
    survivors = filter_catalog(catalog, (2, 5))
    assert [d.display_name for d in survivors] == ["gemini-2.5-flash"]
