"""Tests for the patient record store endpoints."""
import pytest

BASE = "/api/v1/patients/"

MARIA = {
    "name": "Maria Souza",
    "classification": "MA",
    "procedures": ["Profilaxia (polimento coronário)", "Urgência"],
    "notes": "Sensibilidade no 21",
}


@pytest.fixture()
def created(client, auth_headers):
    resp = client.post(BASE, json=MARIA, headers=auth_headers)
    assert resp.status_code == 201
    return resp.json()


def test_requires_authentication(client):
    assert client.get(BASE).status_code == 401
    assert client.post(BASE, json=MARIA).status_code == 401


def test_create_assigns_id_and_created_at(created):
    assert created["id"]
    assert created["created_at"]
    assert created["name"] == "Maria Souza"
    assert created["procedures"] == MARIA["procedures"]


def test_create_rejects_unknown_classification(client, auth_headers):
    resp = client.post(BASE, json={**MARIA, "classification": "ZZ"}, headers=auth_headers)
    assert resp.status_code == 422


@pytest.mark.parametrize("override", [
    {"name": "   "},
    {"procedures": []},
    {"procedures": ["Clareamento caseiro"]},
])
def test_create_rejects_invalid_record(client, auth_headers, override):
    resp = client.post(BASE, json={**MARIA, **override}, headers=auth_headers)
    assert resp.status_code == 422
    assert client.get(BASE, headers=auth_headers).json() == []


def test_update_rejects_unknown_procedure(client, auth_headers, created):
    url = f"{BASE}{created['id']}"
    resp = client.patch(url, json={"procedures": ["Clareamento caseiro"]}, headers=auth_headers)
    assert resp.status_code == 422
    assert client.get(url, headers=auth_headers).json()["procedures"] == MARIA["procedures"]


def test_list_is_newest_first(client, auth_headers):
    ids = []
    for name in ["Primeiro", "Segundo", "Terceiro"]:
        resp = client.post(BASE, json={**MARIA, "name": name}, headers=auth_headers)
        ids.append(resp.json()["id"])
    listed = client.get(BASE, headers=auth_headers).json()
    created_at = [p["created_at"] for p in listed]
    assert created_at == sorted(created_at, reverse=True)
    assert {p["id"] for p in listed} == set(ids)


def test_get_single(client, auth_headers, created):
    resp = client.get(f"{BASE}{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == created


def test_get_missing(client, auth_headers):
    assert client.get(f"{BASE}missing", headers=auth_headers).status_code == 404


def test_partial_update_leaves_other_fields(client, auth_headers, created):
    resp = client.patch(f"{BASE}{created['id']}", json={"classification": "DD"}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["classification"] == "DD"
    assert body["name"] == created["name"]
    assert body["procedures"] == created["procedures"]
    assert body["notes"] == created["notes"]
    assert body["id"] == created["id"]
    assert body["created_at"] == created["created_at"]


def test_update_can_clear_notes(client, auth_headers, created):
    resp = client.patch(f"{BASE}{created['id']}", json={"notes": None}, headers=auth_headers)
    assert resp.json()["notes"] is None


def test_update_missing(client, auth_headers):
    resp = client.patch(f"{BASE}missing", json={"name": "x"}, headers=auth_headers)
    assert resp.status_code == 404


def test_delete_is_idempotent(client, auth_headers, created):
    url = f"{BASE}{created['id']}"
    assert client.delete(url, headers=auth_headers).status_code == 204
    assert client.get(url, headers=auth_headers).status_code == 404
    assert client.delete(url, headers=auth_headers).status_code == 204


def test_delete_with_wrong_confirmation_name(client, auth_headers, created):
    url = f"{BASE}{created['id']}"
    resp = client.delete(url, params={"confirm_name": "maria souza"}, headers=auth_headers)
    assert resp.status_code == 409
    assert client.get(url, headers=auth_headers).status_code == 200


def test_delete_with_matching_confirmation_name(client, auth_headers, created):
    url = f"{BASE}{created['id']}"
    resp = client.delete(url, params={"confirm_name": "Maria Souza"}, headers=auth_headers)
    assert resp.status_code == 204
    assert client.get(url, headers=auth_headers).status_code == 404
