from __future__ import annotations

import random

import pytest

from filamenthub.core.filtering import facet_values, filter_and_sort, matches
from filamenthub.domain.profile import FilterSelection, SortKey


@pytest.fixture
def catalog(make_profile):
    return [
        make_profile("a", name="PLA Red", producer="Acme", material="PLA", printers=["X1 Carbon", "P1S"],
                     upvotes=3, downvotes=1, download_count=10),
        make_profile("b", name="ABS Blue", producer="Acme", material="ABS", printers=["A1 mini"],
                     upvotes=5, downvotes=0, download_count=2),
        make_profile("c", name="PETG Clear", producer="Polymaker", material="PETG",
                     upvotes=2, downvotes=0, download_count=10),
        make_profile("d", name="Silk Gold", producer="eSun", material="PLA", printers=["X1 Carbon"],
                     upvotes=0, downvotes=4, download_count=7),
    ]


def ids(profiles):
    return [p.id for p in profiles]


def test_default_selection_keeps_fetch_order(catalog):
    assert ids(filter_and_sort(catalog, FilterSelection())) == ["a", "b", "c", "d"]


def test_result_is_new_list_and_input_untouched(catalog):
    before = list(catalog)
    result = filter_and_sort(catalog, FilterSelection(sort=SortKey.VOTES))
    assert result is not catalog
    assert catalog == before


def test_empty_input_and_empty_result():
    assert filter_and_sort([], FilterSelection(producer="Acme")) == []


def test_no_match_yields_empty_list(catalog):
    assert filter_and_sort(catalog, FilterSelection(producer="Nobody")) == []


def test_producer_facet_is_exact_and_case_sensitive(catalog):
    assert ids(filter_and_sort(catalog, FilterSelection(producer="Acme"))) == ["a", "b"]
    assert filter_and_sort(catalog, FilterSelection(producer="acme")) == []


def test_facets_are_conjunctive(catalog):
    selection = FilterSelection(producer="Acme", material="PLA")
    assert ids(filter_and_sort(catalog, selection)) == ["a"]


def test_printer_facet(catalog):
    assert ids(filter_and_sort(catalog, FilterSelection(printer="X1 Carbon"))) == ["a", "d"]


def test_search_is_case_insensitive_substring(catalog):
    assert ids(filter_and_sort(catalog, FilterSelection(search="red"))) == ["a"]
    assert ids(filter_and_sort(catalog, FilterSelection(search="POLY"))) == ["c"]


def test_search_matches_printer_tokens(catalog):
    assert ids(filter_and_sort(catalog, FilterSelection(search="a1 mini"))) == ["b"]


def test_search_does_not_look_at_material(catalog):
    assert filter_and_sort(catalog, FilterSelection(search="petg", producer="Acme")) == []


def test_blank_search_is_ignored(catalog):
    assert len(filter_and_sort(catalog, FilterSelection(search="   "))) == 4


def test_sort_by_net_votes(catalog):
    assert ids(filter_and_sort(catalog, FilterSelection(sort=SortKey.VOTES))) == ["b", "a", "c", "d"]


def test_sort_by_downloads_is_stable(catalog):
    # a and c both have 10 downloads and keep their input order
    assert ids(filter_and_sort(catalog, FilterSelection(sort=SortKey.DOWNLOADS))) == ["a", "c", "d", "b"]


def test_filter_applies_before_sort(catalog):
    selection = FilterSelection(material="PLA", sort=SortKey.VOTES)
    assert ids(filter_and_sort(catalog, selection)) == ["a", "d"]


def test_scenario_same_producer_newest(make_profile):
    older = make_profile("t1", name="PLA Red", producer="Acme")
    newer = make_profile("t2", name="ABS Blue", producer="Acme")
    fetched = [newer, older]
    result = filter_and_sort(fetched, FilterSelection.from_params({"producer": "Acme", "material": "all", "search": ""}))
    assert ids(result) == ["t2", "t1"]


def test_from_params_treats_all_as_no_filter():
    selection = FilterSelection.from_params({"producer": "all", "material": "ALL", "printer": "", "sort": "bogus"})
    assert selection == FilterSelection()


def test_votes_sort_stability_randomized(make_profile):
    rng = random.Random(7)
    profiles = [make_profile(f"r{i}", upvotes=rng.randint(0, 3), downvotes=rng.randint(0, 3)) for i in range(60)]
    result = filter_and_sort(profiles, FilterSelection(sort=SortKey.VOTES))
    position = {p.id: i for i, p in enumerate(profiles)}
    for left, right in zip(result, result[1:]):
        assert left.net_score >= right.net_score
        if left.net_score == right.net_score:
            assert position[left.id] < position[right.id]


def test_filter_conjunction_randomized(make_profile):
    rng = random.Random(11)
    producers, materials = ["Acme", "eSun", "Bambu"], ["PLA", "ABS", "PETG"]
    names = ["Red", "Blue", "Matte Black", "Galaxy"]
    profiles = [
        make_profile(
            f"q{i}",
            name=f"{rng.choice(materials)} {rng.choice(names)}",
            producer=rng.choice(producers),
            material=rng.choice(materials),
            printers=rng.sample(["A1", "P1S", "X1E"], k=rng.randint(0, 2)),
        )
        for i in range(80)
    ]
    for _ in range(40):
        selection = FilterSelection(
            producer=rng.choice(producers + [None]),
            material=rng.choice(materials + [None]),
            printer=rng.choice(["A1", "X1E", None]),
            search=rng.choice(["", "red", "ACME", "x1", "zzz"]),
        )
        result = filter_and_sort(profiles, selection)
        expected = [
            p for p in profiles
            if (selection.producer is None or p.producer == selection.producer)
            and (selection.material is None or p.material == selection.material)
            and (selection.printer is None or selection.printer in p.printers)
            and (
                not selection.search
                or selection.search.lower() in p.name.lower()
                or selection.search.lower() in p.producer.lower()
                or any(selection.search.lower() in x.lower() for x in p.printers)
            )
        ]
        assert result == expected
        assert all(matches(p, selection) for p in result)


def test_facet_values(catalog):
    assert facet_values(catalog) == {
        "producers": ["Acme", "Polymaker", "eSun"],
        "materials": ["ABS", "PETG", "PLA"],
        "printers": ["A1 mini", "P1S", "X1 Carbon"],
    }
