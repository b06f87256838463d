from __future__ import annotations

import pytest

from prospector.prospects.models import Prospect, ProspectCandidate, ProspectStatus, ProspectUpdate
from prospector.prospects.service import (
    delete_prospect,
    delete_prospects_by_city,
    list_cities,
    list_prospects,
    update_prospect,
)
from prospector.storage.errors import DocumentNotFound
from prospector.storage.memory_store import InMemoryProspectStore


@pytest.fixture
def store() -> InMemoryProspectStore:
    s = InMemoryProspectStore()
    s.insert_many([
        ProspectCandidate(name="Chez Paul", city="Lyon", created_at=1).to_document(),
        ProspectCandidate(name="Chez Marie", city=" Lyon ", created_at=3).to_document(),
        ProspectCandidate(name="Boulangerie Dupont", city="Paris", lat=48.85, lon=2.35, created_at=2).to_document(),
    ])
    return s


def test_list_prospects_newest_first(store):
    names = [p.name for p in list_prospects(store)]
    assert names == ["Chez Marie", "Boulangerie Dupont", "Chez Paul"]


def test_list_prospects_by_city(store):
    assert {p.name for p in list_prospects(store, "Lyon")} == {"Chez Paul", "Chez Marie"}


def test_list_prospects_round_trips_coordinates(store):
    (paris,) = list_prospects(store, "Paris")
    assert isinstance(paris, Prospect)
    assert (paris.lat, paris.lon) == (48.85, 2.35)
    (paul,) = [p for p in list_prospects(store, "Lyon") if p.name == "Chez Paul"]
    assert paul.lat is None and paul.lon is None


def test_list_cities_trims_and_sorts(store):
    assert list_cities(store) == ["Lyon", "Paris"]


def test_update_prospect(store):
    prospect = list_prospects(store, "Paris")[0]
    updated = update_prospect(store, prospect.id, ProspectUpdate(status=ProspectStatus.CALL_LATER))
    assert updated.status is ProspectStatus.CALL_LATER
    assert updated.created_at == 2
    assert store.get(prospect.id)["status"] == "CALL_LATER"


def test_update_missing_prospect(store):
    with pytest.raises(DocumentNotFound):
        update_prospect(store, "missing", ProspectUpdate(notes="x"))


def test_delete_prospect(store):
    prospect = list_prospects(store, "Paris")[0]
    delete_prospect(store, f" {prospect.id} ")
    assert store.get(prospect.id) is None
    with pytest.raises(DocumentNotFound):
        delete_prospect(store, prospect.id)


def test_delete_prospect_blank_id(store):
    with pytest.raises(DocumentNotFound):
        delete_prospect(store, "   ")


def test_delete_by_city(store):
    assert delete_prospects_by_city(store, "Paris") == 1
    assert list_cities(store) == ["Lyon"]


def test_delete_by_city_falls_back_to_addr_city():
    s = InMemoryProspectStore()
    s.insert_many([{"name": "Old import", "addr:city": "Nantes", "createdAt": 1}])
    assert delete_prospects_by_city(s, "Nantes") == 1
    assert s.count() == 0


def test_delete_by_city_nothing_found(store):
    assert delete_prospects_by_city(store, "Marseille") == 0
    assert store.count() == 3


def test_listing_uses_addr_city_and_skips_unusable_documents(caplog):
    s = InMemoryProspectStore()
    s.insert_many([
        {"name": "Old import", "addr:city": "Nantes", "createdAt": 1},
        {"name": "   ", "city": "Nantes", "createdAt": 2},
        {"phone": "0102030405", "createdAt": 3},
        ProspectCandidate(name="Chez Paul", city="Lyon", created_at=4).to_document(),
    ])

    with caplog.at_level("WARNING", logger="prospector.prospects.service"):
        prospects = list_prospects(s)

    assert [(p.name, p.city) for p in prospects] == [("Chez Paul", "Lyon"), ("Old import", "Nantes")]
    assert [p.name for p in list_prospects(s, "Nantes")] == ["Old import"]
    assert "Skipping malformed prospect" in caplog.text
    assert list_cities(s) == ["Lyon", "Nantes"]
