import pytest

from amortization_web.app import create_app


@pytest.fixture()
def client(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "HISTORY_DATABASE_URL": f"sqlite:///{tmp_path / 'history.sqlite3'}",
            "HISTORY_MAX_ITEMS": 3,
        }
    )
    return app.test_client()


LOAN = {"principal": "100000", "annual_rate": "6", "years": "30", "frequency": "monthly"}


def test_calculate_from_json(client):
    response = client.post("/api/amortization", json=LOAN)
    assert response.status_code == 200
    data = response.get_json()
    assert data["result"]["payment"] == "599.55"
    assert len(data["schedule"]) == 360
    assert data["summary"]["scheduled_periods"] == 360
    assert data["history_timestamp"] > 0


def test_calculate_from_form_with_extra(client):
    response = client.post(
        "/api/amortization",
        data={"principal": "50000", "annual_rate": "4", "years": "10", "extra_payment": "500"},
    )
    assert response.status_code == 200
    data = response.get_json()
    assert len(data["schedule"]) < 120
    assert data["schedule"][-1]["balance"] == 0.0
    assert data["summary"]["interest_saved"] > 0


def test_validation_errors(client):
    response = client.post("/api/amortization", json={"principal": "-5", "annual_rate": "abc", "years": "10"})
    assert response.status_code == 400
    assert response.get_json()["errors"] == [
        "Please enter a valid principal amount (number > 0)",
        "Please enter a valid annual interest rate (number > 0)",
    ]
    assert client.get("/api/history").get_json() == []


def test_history_is_capped_and_most_recent_first(client):
    for principal in (1000, 2000, 3000, 4000):
        client.post("/api/amortization", json={**LOAN, "principal": principal})
    history = client.get("/api/history").get_json()
    assert [item["principal"] for item in history] == ["4000", "3000", "2000"]
    assert history[0]["frequency"] == "monthly"


def test_delete_and_clear_history(client):
    timestamp = client.post("/api/amortization", json=LOAN).get_json()["history_timestamp"]
    client.post("/api/amortization", json=LOAN)

    assert client.delete(f"/api/history/{timestamp}").status_code == 204
    assert client.delete(f"/api/history/{timestamp}").status_code == 404
    assert len(client.get("/api/history").get_json()) == 1

    assert client.delete("/api/history").status_code == 204
    assert client.get("/api/history").get_json() == []


def test_export_csv(client):
    response = client.post(
        "/api/amortization/export.csv",
        json={"principal": "10000", "annual_rate": "5", "years": "1", "frequency": "yearly"},
    )
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert "loan-amortization.csv" in response.headers["Content-Disposition"]
    assert response.get_data(as_text=True).splitlines()[1] == "1,10000.00,0.00,500.00,10500.00,0.00"


def test_oversized_principal_is_a_validation_error(client):
    response = client.post("/api/amortization", json={**LOAN, "principal": "1e1000000"})
    assert response.status_code == 400
    assert response.get_json()["errors"] == ["Please enter a valid principal amount (number > 0)"]


def test_export_pdf(client):
    response = client.post("/api/amortization/export.pdf", json=LOAN)
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert "loan-amortization.pdf" in response.headers["Content-Disposition"]
    assert response.data.startswith(b"%PDF")


def test_export_pdf_validation_error(client):
    response = client.post("/api/amortization/export.pdf", json={**LOAN, "years": "0"})
    assert response.status_code == 400


def test_app_sets_no_secret_key(tmp_path):
    app = create_app({"HISTORY_DATABASE_URL": f"sqlite:///{tmp_path / 'h.sqlite3'}"})
    assert app.secret_key is None
