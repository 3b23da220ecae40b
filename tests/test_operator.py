import json

from portal.models.application_model import Application


def test_pagination_over_five_applications(client, submit):
    for i in range(5):
        submit(user_email=f"user{i}@example.com")

    resp = client.get("/api/operator/applications", params={"page": 1, "limit": 2, "search": ""})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["applications"]) == 2
    assert body["totalCount"] == 5
    assert body["totalPages"] == 3
    assert body["currentPage"] == 1
    assert [a["userEmail"] for a in body["applications"]] == ["user4@example.com", "user3@example.com"]

    last = client.get("/api/operator/applications", params={"page": 3, "limit": 2}).json()
    assert [a["userEmail"] for a in last["applications"]] == ["user0@example.com"]


def test_pagination_defaults(client, submit):
    submit()
    body = client.get("/api/operator/applications", params={"page": 0, "limit": -3}).json()
    assert body["currentPage"] == 1
    assert body["totalPages"] == 1
    assert len(body["applications"]) == 1


def test_empty_store_has_zero_pages(client, store):
    body = client.get("/api/operator/applications").json()
    assert body == {"applications": [], "totalCount": 0, "currentPage": 1, "totalPages": 0}


def test_search_is_case_insensitive_across_fields(client, submit):
    submit(user_email="Priya@Example.com", type="E-Stamp")
    submit(user_email="amit@example.com", type="Notary")
    submit(user_email="neha@example.com", type="Bulk Order", data=json.dumps({"firstParty": ["Sharma Traders"]}))

    def emails(term):
        body = client.get("/api/operator/applications", params={"search": term}).json()
        return sorted(a["userEmail"] for a in body["applications"]), body["totalCount"]

    assert emails("priya") == (["Priya@Example.com"], 1)
    assert emails("NOTARY") == (["amit@example.com"], 1)
    assert emails("sharma") == (["neha@example.com"], 1)
    assert emails("example.com")[1] == 3
    assert emails("nothing-matches") == ([], 0)


def test_search_treats_wildcards_literally(client, submit):
    submit(user_email="a@example.com")
    body = client.get("/api/operator/applications", params={"search": "%"}).json()
    assert body["totalCount"] == 0


def test_update_status_overwrites_without_validation(client, submit, db_session):
    app_id = submit()
    resp = client.post("/api/operator/update-status", json={"applicationId": app_id, "status": "Processing"})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Status updated successfully"
    assert db_session.get(Application, app_id).status == "Processing"

    client.post("/api/operator/update-status", json={"applicationId": app_id, "status": "On Hold"})
    db_session.expire_all()
    assert db_session.get(Application, app_id).status == "On Hold"


def test_update_payment_status_is_independent(client, submit, db_session):
    app_id = submit()
    resp = client.post(
        "/api/operator/update-payment-status",
        json={"applicationId": app_id, "payment_status": "Paid"},
    )
    assert resp.status_code == 200
    stored = db_session.get(Application, app_id)
    assert stored.payment_status == "Paid"
    assert stored.status == "Pending"


def test_updates_on_unknown_application(client, store):
    assert client.post(
        "/api/operator/update-status", json={"applicationId": 404, "status": "Completed"}
    ).status_code == 404
    assert client.post(
        "/api/operator/update-payment-status", json={"applicationId": 404, "payment_status": "Paid"}
    ).status_code == 404
    assert client.post(
        "/api/operator/update-billing", data={"applicationId": "404", "billAmount": "10"}
    ).status_code == 404


def test_update_billing_attachment_kept_unless_replaced(client, submit, db_session):
    app_id = submit()

    resp = client.post(
        "/api/operator/update-billing",
        data={"applicationId": str(app_id), "billAmount": "1500", "billNumber": "INV-1", "billOn": "Acme"},
        files={"billAttachment": ("bill.pdf", b"bill one", "application/pdf")},
    )
    assert resp.status_code == 200
    first_path = resp.json()["billAttachment"]
    assert first_path.startswith("/uploads/")
    assert resp.json()["message"] == "Billing updated successfully"

    resp = client.post(
        "/api/operator/update-billing",
        data={"applicationId": str(app_id), "billAmount": "1750", "billNumber": "INV-2", "billOn": "Acme Ltd"},
    )
    assert resp.status_code == 200
    assert resp.json()["billAttachment"] is None
    stored = db_session.get(Application, app_id)
    assert stored.bill_amount == "1750"
    assert stored.bill_number == "INV-2"
    assert stored.bill_on == "Acme Ltd"
    assert stored.bill_attachment == first_path

    resp = client.post(
        "/api/operator/update-billing",
        data={"applicationId": str(app_id), "billAmount": "1750", "billNumber": "INV-2"},
        files={"billAttachment": ("bill2.pdf", b"bill two", "application/pdf")},
    )
    second_path = resp.json()["billAttachment"]
    assert second_path != first_path
    db_session.expire_all()
    stored = db_session.get(Application, app_id)
    assert stored.bill_attachment == second_path
    assert stored.bill_on is None


def test_search_matches_non_ascii_text(client, submit):
    submit(
        user_email="ram@example.com",
        type="Bulk Order",
        data=json.dumps({"firstParty": ["राम ट्रेडर्स"]}, ensure_ascii=False),
    )
    submit(user_email="other@example.com")

    body = client.get("/api/operator/applications", params={"search": "राम"}).json()
    assert body["totalCount"] == 1
    assert body["applications"][0]["userEmail"] == "ram@example.com"
    assert body["applications"][0]["data"]["firstParty"] == ["राम ट्रेडर्स"]


def test_whitespace_search_is_a_real_filter(client, submit):
    submit(user_email="ab@example.com")
    submit(user_email="a b@example.com")

    body = client.get("/api/operator/applications", params={"search": " "}).json()
    assert body["totalCount"] == 1
    assert body["applications"][0]["userEmail"] == "a b@example.com"

    body = client.get("/api/operator/applications", params={"search": "a b"}).json()
    assert body["totalCount"] == 1
