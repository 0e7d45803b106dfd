"""
Tests for the transactions endpoints.

Run with: pytest tests/test_transactions_api.py -v
"""

import pytest

UNKNOWN_ID = "3f2504e0-4f89-11d3-9a0c-0305e82c3301"


@pytest.fixture
def transaction(transactions_repo, member, plan):
    return transactions_repo.create({
        "member_id": member["id"],
        "plan_id": plan["id"],
        "amount": 59.0,
        "payment_method": "card",
        "transaction_date": "2024-03-01",
        "status": "completed",
        "notes": None,
    })


class TestCreateTransaction:
    """Tests for POST /api/transactions."""

    def test_create_embeds_summaries(self, client, admin_headers, member, plan):
        payload = {
            "member_id": member["id"],
            "plan_id": plan["id"],
            "amount": 59,
            "payment_method": "Cash",
            "transaction_date": "2024-03-15",
        }
        response = client.post("/api/transactions", json=payload, headers=admin_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["payment_method"] == "cash"
        assert data["member"] == {
            "id": member["id"],
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
            "phone": "+1 555-123-4567",
        }
        assert data["plan"] == {"id": plan["id"], "name": "Gold", "price": 59.0, "duration_days": 30}

    def test_zero_amount(self, client, admin_headers, member):
        payload = {"member_id": member["id"], "amount": 0, "payment_method": "card", "transaction_date": "2024-03-15"}
        response = client.post("/api/transactions", json=payload, headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Amount must be greater than 0"}

    @pytest.mark.parametrize("literal", ["NaN", "Infinity"])
    def test_non_finite_amount(self, client, admin_headers, member, transactions_repo, literal):
        body = (
            '{"member_id": "%s", "amount": %s, "payment_method": "card", "transaction_date": "2024-03-15"}'
            % (member["id"], literal)
        )
        response = client.post(
            "/api/transactions",
            content=body,
            headers={**admin_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Amount must be greater than 0"}
        assert transactions_repo.records == {}

    def test_unknown_member(self, client, admin_headers):
        payload = {"member_id": UNKNOWN_ID, "amount": 10, "payment_method": "card", "transaction_date": "2024-03-15"}
        response = client.post("/api/transactions", json=payload, headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Member not found"}

    def test_unknown_plan(self, client, admin_headers, member):
        payload = {
            "member_id": member["id"],
            "plan_id": UNKNOWN_ID,
            "amount": 10,
            "payment_method": "card",
            "transaction_date": "2024-03-15",
        }
        response = client.post("/api/transactions", json=payload, headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Pricing plan not found"}

    def test_invalid_status(self, client, admin_headers, member):
        payload = {
            "member_id": member["id"],
            "amount": 10,
            "payment_method": "card",
            "transaction_date": "2024-03-15",
            "status": "refunded",
        }
        response = client.post("/api/transactions", json=payload, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid status")

    def test_missing_fields(self, client, admin_headers):
        response = client.post("/api/transactions", json={"amount": 10}, headers=admin_headers)
        assert response.status_code == 400
        assert sorted(response.json()["missing"]) == ["member_id", "payment_method", "transaction_date"]

    def test_member_cannot_create(self, client, member, member_headers):
        payload = {"member_id": member["id"], "amount": 10, "payment_method": "card", "transaction_date": "2024-03-15"}
        assert client.post("/api/transactions", json=payload, headers=member_headers).status_code == 401


class TestReadTransaction:
    """Tests for GET /api/transactions/{id} ownership rules."""

    def test_admin(self, client, admin_headers, transaction):
        response = client.get(f"/api/transactions/{transaction['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["member"]["id"] == transaction["member_id"]

    def test_owner(self, client, member_headers, transaction):
        response = client.get(f"/api/transactions/{transaction['id']}", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == transaction["id"]

    def test_other_member(self, client, other_member_headers, transaction):
        response = client.get(f"/api/transactions/{transaction['id']}", headers=other_member_headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Access denied. Admin access or transaction ownership required"}

    def test_anonymous(self, client, transaction):
        response = client.get(f"/api/transactions/{transaction['id']}")
        assert response.status_code == 401

    def test_missing(self, client, admin_headers):
        response = client.get(f"/api/transactions/{UNKNOWN_ID}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Transaction not found"}

    def test_deleted_plan_leaves_no_summary(self, client, admin_headers, transaction, plans_repo):
        plans_repo.delete(transaction["plan_id"])
        response = client.get(f"/api/transactions/{transaction['id']}", headers=admin_headers)
        assert response.json()["data"]["plan"] is None


class TestListTransactions:
    """Tests for GET /api/transactions filters."""

    @pytest.fixture
    def history(self, transactions_repo, member, other_member):
        rows = [
            (member["id"], "2024-01-05", "completed", "card"),
            (member["id"], "2024-02-05", "pending", "cash"),
            (member["id"], "2024-03-05", "completed", "card"),
            (other_member["id"], "2024-02-10", "failed", "card"),
        ]
        for member_id, day, status, method in rows:
            transactions_repo.create({
                "member_id": member_id,
                "plan_id": None,
                "amount": 20.0,
                "payment_method": method,
                "transaction_date": day,
                "status": status,
                "notes": None,
            })

    def test_member_and_status(self, client, admin_headers, history, member):
        response = client.get(
            "/api/transactions",
            params={"member_id": member["id"], "status": "completed"},
            headers=admin_headers,
        )
        assert response.json()["pagination"]["total"] == 2

    def test_date_range_inclusive(self, client, admin_headers, history):
        response = client.get(
            "/api/transactions",
            params={"date_from": "2024-02-05", "date_to": "2024-03-05", "sort": "transaction_date", "order": "asc"},
            headers=admin_headers,
        )
        dates = [t["transaction_date"] for t in response.json()["data"]]
        assert dates == ["2024-02-05", "2024-02-10", "2024-03-05"]

    def test_payment_method(self, client, admin_headers, history):
        response = client.get("/api/transactions", params={"payment_method": "CASH"}, headers=admin_headers)
        assert response.json()["pagination"]["total"] == 1

    def test_reversed_range(self, client, admin_headers):
        response = client.get(
            "/api/transactions",
            params={"date_from": "2024-03-01", "date_to": "2024-01-01"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_invalid_member_filter(self, client, admin_headers):
        response = client.get("/api/transactions", params={"member_id": "42"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid member ID format"}

    def test_requires_admin(self, client, member_headers):
        assert client.get("/api/transactions", headers=member_headers).status_code == 401


class TestUpdateTransaction:
    """Tests for PUT /api/transactions/{id}."""

    def test_mark_completed(self, client, admin_headers, transaction):
        response = client.put(
            f"/api/transactions/{transaction['id']}",
            json={"status": "cancelled", "notes": "Refunded at desk"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "cancelled"
        assert data["notes"] == "Refunded at desk"
        assert data["amount"] == 59.0

    def test_reassign_to_unknown_member(self, client, admin_headers, transaction):
        response = client.put(
            f"/api/transactions/{transaction['id']}", json={"member_id": UNKNOWN_ID}, headers=admin_headers
        )
        assert response.status_code == 404

    def test_member_cannot_update(self, client, member_headers, transaction):
        response = client.put(
            f"/api/transactions/{transaction['id']}", json={"status": "completed"}, headers=member_headers
        )
        assert response.status_code == 401
