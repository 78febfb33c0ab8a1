from __future__ import annotations

from tax_simulator.models.common import ActivityType, Annex
from tax_simulator.reference_data import load_tables
from tax_simulator.services.cnae import (
    CATALOGUE,
    activity_for_cnae,
    cnaes_for_activity,
    find_cnae,
    is_prohibited_in_simples,
    normalize_code,
    search_cnae,
)


def test_lookup_ignores_punctuation():
    assert normalize_code("62.01-5-01") == "6201501"
    assert find_cnae("6201501") == find_cnae("62.01-5-01")
    assert activity_for_cnae("62.01-5-01") is ActivityType.TECNOLOGIA


def test_unknown_code_returns_nothing():
    assert find_cnae("00.00-0-00") is None
    assert activity_for_cnae("00.00-0-00") is None
    assert not is_prohibited_in_simples("00.00-0-00")


def test_financial_codes_are_barred_from_simples():
    entry = find_cnae("64.21-2-00")

    assert entry.activity is ActivityType.FINANCEIRO
    assert entry.annex is None
    assert is_prohibited_in_simples("64.21-2-00")


def test_catalogue_annexes_agree_with_activity_tables():
    tables = load_tables()

    for entry in CATALOGUE:
        if entry.annex is not None:
            assert tables.annex_for_activity(entry.activity) is entry.annex, entry.code


def test_search_by_description_and_code_fragment():
    by_text = search_cnae("software")
    by_word = search_cnae("programas")
    by_code = search_cnae("62.01")

    assert by_text == []
    assert {entry.code for entry in by_word} >= {"62.01-5-01", "62.02-3-00"}
    assert [entry.code for entry in by_code] == ["62.01-5-01"]
    assert search_cnae("   ") == []


def test_cnaes_for_activity():
    entries = cnaes_for_activity(ActivityType.CONSTRUCAO_CIVIL)

    assert entries
    assert all(entry.annex is Annex.IV for entry in entries)
