"""Tests unitaires pour PersonResolver."""

import pytest

from src.core.entities.details import Person
from src.core.value_objects.metadata import CreditInfo
from src.services.person_resolver import PersonResolver


@pytest.fixture
def resolver(person_repo) -> PersonResolver:
    return PersonResolver(person_repo)


class TestResolve:
    """Find-or-create par identifiants puis par nom."""

    def test_creates_unknown_person(self, resolver, person_repo) -> None:
        person, created = resolver.resolve(CreditInfo(name="Bryan Cranston", tmdb_id=17419))

        assert created is True
        assert person.id is not None
        assert person_repo.find_by_tmdb_id(17419).name == "Bryan Cranston"

    def test_same_credit_twice_gives_one_person(self, resolver) -> None:
        first, _ = resolver.resolve(CreditInfo(name="Bryan Cranston", tmdb_id=17419))
        second, created = resolver.resolve(CreditInfo(name="Bryan Cranston", tmdb_id=17419))

        assert created is False
        assert second.id == first.id

    def test_imdb_id_takes_precedence_over_name(self, resolver, person_repo) -> None:
        existing = person_repo.save(Person(name="B. Cranston", imdb_id="nm0186505"))

        person, created = resolver.resolve(CreditInfo(name="Bryan Cranston", imdb_id="nm0186505"))

        assert created is False
        assert person.id == existing.id

    def test_match_across_providers_fills_missing_ids(self, resolver, person_repo) -> None:
        from_tmdb, _ = resolver.resolve(CreditInfo(name="Bryan Cranston", tmdb_id=17419))

        from_tvdb, created = resolver.resolve(CreditInfo(name="Bryan Cranston", tvdb_id=290357))

        assert created is False
        assert from_tvdb.id == from_tmdb.id
        assert person_repo.get_by_id(from_tmdb.id).tvdb_id == 290357
        assert person_repo.get_by_id(from_tmdb.id).tmdb_id == 17419

    def test_different_names_stay_distinct(self, resolver) -> None:
        walter, _ = resolver.resolve(CreditInfo(name="Bryan Cranston"))
        jesse, created = resolver.resolve(CreditInfo(name="Aaron Paul"))

        assert created is True
        assert jesse.id != walter.id
