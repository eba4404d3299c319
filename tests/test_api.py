import pytest
from fastapi.testclient import TestClient

from config import Settings
from ledger import ExpenseLedger
from main import create_app


@pytest.fixture
def client():
    app = create_app(settings=Settings(log_level="WARNING"), ledger=ExpenseLedger())
    return TestClient(app)


def post_expense(client, **overrides):
    payload = {
        "description": "Dinner out",
        "amount": 300,
        "paid_by": "alice",
        "participants": ["alice", "bob", "carol"],
        "split_type": "equal",
    }
    payload.update(overrides)
    return client.post("/expenses/", json=payload)


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Expense Sharing System API"}


def test_preview_equal_split(client):
    response = client.post("/splits/", json={"amount": 100, "participants": ["user1", "user2", "user3"]})

    assert response.status_code == 200
    assert [s["amount"] for s in response.json()] == ["33.34", "33.33", "33.33"]


def test_preview_split_errors_are_bad_requests(client):
    response = client.post(
        "/splits/",
        json={
            "amount": 1000,
            "split_type": "percentage",
            "percentage_splits": [{"participant": "a", "weight": 50}, {"participant": "b", "weight": 40}],
        },
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Percentages must sum to 100%. Current total: 90.00%"}

    response = client.post("/splits/", json={"amount": 0, "participants": ["a"]})
    assert response.status_code == 400
    assert response.json() == {"detail": "Total amount must be greater than 0"}


def test_create_and_fetch_expense(client):
    response = post_expense(client)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == "1"
    assert body["split_type"] == "equal"
    assert [s["amount"] for s in body["shares"]] == ["100.00", "100.00", "100.00"]
    assert "is_deleted" not in body

    fetched = client.get(f"/expenses/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body


def test_create_expense_validation(client):
    assert post_expense(client, description="ab").status_code == 422
    assert post_expense(client, amount=10.555).status_code == 422
    assert post_expense(client, participants=[]).status_code == 422

    response = post_expense(client, paid_by="dave")
    assert response.status_code == 400
    assert response.json() == {"detail": "Payer must be included in participants"}

    response = post_expense(
        client,
        amount=100,
        participants=["alice", "bob"],
        split_type="exact",
        shares=[{"participant": "alice", "amount": 50}, {"participant": "bob", "amount": 40}],
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Split amounts (90.00) must equal total amount (100.00)"}


def test_balances_plan(client):
    post_expense(client)
    post_expense(client, amount=150, paid_by="bob", participants=["bob", "carol"])

    response = client.get("/balances/")

    assert response.status_code == 200
    assert response.json() == {
        "balances": {"alice": "200.00", "bob": "-25.00", "carol": "-175.00"},
        "settlements": [
            {"from": "carol", "to": "alice", "amount": "175.00"},
            {"from": "bob", "to": "alice", "amount": "25.00"},
        ],
    }


def test_balances_for_user(client):
    post_expense(client)
    post_expense(client, amount=150, paid_by="bob", participants=["bob", "carol"])

    response = client.get("/balances/", params={"user_id": "alice"})

    assert response.status_code == 200
    assert response.json() == {
        "net_balance": "200.00",
        "owes": [],
        "owed_by": [
            {"from": "carol", "to": "alice", "amount": "175.00"},
            {"from": "bob", "to": "alice", "amount": "25.00"},
        ],
    }


def test_balances_empty(client):
    assert client.get("/balances/").json() == {"balances": {}, "settlements": []}


def test_update_and_delete_expense(client):
    expense_id = post_expense(client).json()["id"]

    response = client.patch(f"/expenses/{expense_id}", json={"amount": 90, "participants": ["alice", "bob"]})
    assert response.status_code == 200
    assert [s["amount"] for s in response.json()["shares"]] == ["45.00", "45.00"]

    response = client.delete(f"/expenses/{expense_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Expense deleted successfully"}

    assert client.get(f"/expenses/{expense_id}").status_code == 404
    assert client.get("/expenses/").json() == []
    assert client.get("/balances/").json() == {"balances": {}, "settlements": []}


def test_patch_with_percentages_switches_split_type(client):
    expense_id = post_expense(client, amount=100, participants=["alice", "bob"]).json()["id"]

    response = client.patch(
        f"/expenses/{expense_id}",
        json={"percentage_splits": [{"participant": "alice", "weight": 80}, {"participant": "bob", "weight": 20}]},
    )

    assert response.status_code == 200
    assert response.json()["split_type"] == "percentage"
    assert [s["amount"] for s in response.json()["shares"]] == ["80.00", "20.00"]

    response = client.patch(
        f"/expenses/{expense_id}",
        json={"split_type": "equal", "shares": [{"participant": "alice", "amount": 100}]},
    )
    assert response.status_code == 400


def test_list_expenses_by_user(client):
    post_expense(client)
    post_expense(client, amount=20, paid_by="dave", participants=["dave", "erin"])

    response = client.get("/expenses/", params={"user_id": "erin"})

    assert response.status_code == 200
    assert [e["paid_by"] for e in response.json()] == ["dave"]


def test_missing_expense(client):
    response = client.get("/expenses/99")

    assert response.status_code == 404
    assert response.json() == {"detail": "Expense not found"}
