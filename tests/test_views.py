"""
Tests for the /identify endpoint.
"""

import pytest
from rest_framework.test import APIClient

from identity.exceptions import StoreError
from identity.models import Contact
from identity.resolver import ClusterResolver
from identity.store import InMemoryContactStore
from identity.views import IdentifyAPIView

pytestmark = pytest.mark.django_db


@pytest.fixture
def client():
    return APIClient()


def identify(client, **body):
    return client.post("/identify", body, format="json")


class TestIdentifyEndpoint:

    def test_first_sighting(self, client):
        response = identify(client, email="new@x.com", phoneNumber="123456")

        assert response.status_code == 200
        contact = Contact.objects.get()
        assert response.json() == {
            "contact": {
                "primaryContatctId": contact.id,
                "emails": ["new@x.com"],
                "phoneNumbers": ["123456"],
                "secondaryContactIds": [],
            }
        }

    def test_numeric_phone_number(self, client):
        response = identify(client, phoneNumber=123456)

        assert response.status_code == 200
        assert response.json()["contact"]["phoneNumbers"] == ["123456"]

    def test_novel_fragment(self, client):
        first = identify(client, email="lorraine@hillvalley.edu", phoneNumber="123456")
        primary_id = first.json()["contact"]["primaryContatctId"]

        response = identify(client, email="mcfly@hillvalley.edu", phoneNumber="123456")

        body = response.json()["contact"]
        assert body["primaryContatctId"] == primary_id
        assert body["emails"] == ["lorraine@hillvalley.edu", "mcfly@hillvalley.edu"]
        assert body["phoneNumbers"] == ["123456"]
        assert len(body["secondaryContactIds"]) == 1
        assert Contact.objects.count() == 2

    def test_merges_two_primaries(self, client):
        george = identify(client, email="george@hillvalley.edu", phoneNumber="919191").json()
        biff = identify(client, email="biffsucks@hillvalley.edu", phoneNumber="717171").json()

        response = identify(client, email="george@hillvalley.edu", phoneNumber="717171")

        body = response.json()["contact"]
        george_id = george["contact"]["primaryContatctId"]
        biff_id = biff["contact"]["primaryContatctId"]
        assert body["primaryContatctId"] == george_id
        assert body["emails"] == ["george@hillvalley.edu", "biffsucks@hillvalley.edu"]
        assert body["phoneNumbers"] == ["919191", "717171"]
        assert body["secondaryContactIds"] == [biff_id]

        demoted = Contact.objects.get(pk=biff_id)
        assert demoted.link_precedence == Contact.LinkPrecedence.SECONDARY
        assert demoted.linked_id == george_id

    def test_resubmission_is_idempotent(self, client):
        first = identify(client, email="a@x.com", phoneNumber="111")
        second = identify(client, email="a@x.com", phoneNumber="111")

        assert second.json() == first.json()
        assert Contact.objects.count() == 1

    def test_missing_both_fields(self, client):
        response = identify(client)

        assert response.status_code == 400
        assert response.json() == {"error": "Either email or phoneNumber must be provided."}
        assert Contact.objects.count() == 0

    def test_null_and_blank_fields(self, client):
        response = identify(client, email=None, phoneNumber="")

        assert response.status_code == 400
        assert Contact.objects.count() == 0

    def test_any_string_is_accepted_as_email(self, client):
        response = identify(client, email="lorraine")

        assert response.status_code == 200
        assert response.json()["contact"]["emails"] == ["lorraine"]

    def test_long_formatted_phone_number(self, client):
        phone = "+44 (0) 20 7946 0958 ext 12"

        response = identify(client, phoneNumber=phone)

        assert response.status_code == 200
        assert response.json()["contact"]["phoneNumbers"] == [phone]
        assert Contact.objects.get().phone_number == phone

    @pytest.mark.parametrize(
        "body",
        [
            {"email": True},
            {"email": {"address": "a@x.com"}},
            {"phoneNumber": False},
            {"phoneNumber": ["111"]},
        ],
    )
    def test_wrong_json_types_are_rejected(self, client, body):
        response = client.post("/identify", body, format="json")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body."
        assert Contact.objects.count() == 0

    def test_store_failure_is_opaque(self, client, monkeypatch):
        class BrokenStore(InMemoryContactStore):
            def find_matching(self, email, phone_number):
                raise StoreError("database is locked")

        monkeypatch.setattr(
            IdentifyAPIView, "get_resolver", lambda self: ClusterResolver(BrokenStore())
        )

        response = identify(client, email="a@x.com")

        assert response.status_code == 500
        assert response.json() == {"error": "An internal server error occurred."}


def test_index(client):
    response = client.get("/")

    assert response.status_code == 200
    assert b"POST /identify" in response.content
