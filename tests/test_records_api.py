import uuid

from app.models.user import SurveyStatus


def test_user_crud_round_trip(client, organization):
    response = client.post(
        "/api/v1/users",
        json={
            "username": "newbie",
            "email": "Newbie@Example.com",
            "firstname": "New",
            "organization_id": str(organization.id),
            "survey_status": "pending",
        },
    )
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["email"] == "newbie@example.com"
    assert created["reminder_count"] == 0

    fetched = client.get(f"/api/v1/users/{created['id']}")
    assert fetched.json()["username"] == "newbie"

    updated = client.patch(f"/api/v1/users/{created['id']}", json={"lastname": "Person"})
    assert updated.json()["lastname"] == "Person"

    listing = client.get("/api/v1/users", params={"search": "newb"})
    body = listing.json()
    assert body["count"] == 1
    assert body["limit"] == 50
    assert body["items"][0]["id"] == created["id"]

    deleted = client.delete(f"/api/v1/users/{created['id']}")
    assert deleted.status_code == 204
    assert client.get(f"/api/v1/users/{created['id']}").status_code == 404


def test_create_user_validation_error(client):
    response = client.post("/api/v1/users", json={"username": "x", "email": "not-an-email"})
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["details"]


def test_remind_user_endpoint(client, make_user, outbox):
    user = make_user("reminded", survey_status=SurveyStatus.in_progress)
    response = client.post(f"/api/v1/users/{user.id}/remind")
    assert response.status_code == 200
    assert response.json()["reminder_count"] == 1
    assert outbox.recipients == ["reminded@example.com"]


def test_remind_user_delivery_failure_is_502(client, make_user, outbox):
    user = make_user("bouncing")
    outbox.failing.add(user.email)
    response = client.post(f"/api/v1/users/{user.id}/remind")
    assert response.status_code == 502
    assert response.json()["code"] == "reminder_delivery_failed"


def test_organization_crud_and_remind(client, make_user):
    response = client.post(
        "/api/v1/organizations",
        json={"name": "Riverside School", "org_type": "school", "city": "Mombasa"},
    )
    assert response.status_code == 201
    org_id = response.json()["id"]

    listing = client.get("/api/v1/organizations", params={"org_type": "school"})
    assert [item["name"] for item in listing.json()["items"]] == ["Riverside School"]

    patched = client.patch(f"/api/v1/organizations/{org_id}", json={"denomination": "None"})
    assert patched.json()["denomination"] == "None"

    empty = client.post(f"/api/v1/organizations/{org_id}/remind")
    assert empty.status_code == 409

    assert client.delete(f"/api/v1/organizations/{org_id}").status_code == 204
    assert client.get(f"/api/v1/organizations/{uuid.uuid4()}").status_code == 404


def test_remind_organization_endpoint(client, make_user, organization, outbox):
    make_user("member-one", organization=organization)
    make_user("member-two", organization=organization)
    response = client.post(f"/api/v1/organizations/{organization.id}/remind")
    assert response.status_code == 200
    assert response.json()["sent"] == 2
    assert len(outbox.messages) == 2


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
