"""
Worker shift API tests: today's state, preview, settlement save and VR tally.
"""

from conftest import full_checklist


def _payload(**overrides):
    data = {
        "final_tokens": 20,
        "vr_uses": 3,
        "arcade_coupons": 2,
        "vr_coupons": 1,
        "has_nequi": True,
        "nequi_deposits": 20000,
        "closing_notes": "Sin novedad",
        "products": [{"index": 0, "sold_quantity": 2}],
        "checklist": full_checklist(),
    }
    data.update(overrides)
    return data


class TestToday:

    def test_no_config_is_empty_state(self, client, worker_headers):
        resp = client.get("/api/shift/today", headers=worker_headers)

        assert resp.status_code == 200
        assert resp.json["config"] is None
        assert resp.json["products"] == []
        assert resp.json["has_settlement"] is False

    def test_with_config(self, client, worker_headers, today_config):
        resp = client.get("/api/shift/today", headers=worker_headers)

        assert resp.status_code == 200
        assert resp.json["date"] == today_config.config_date.isoformat()
        assert resp.json["config"]["initial_tokens"] == 100
        assert [p["product_name"] for p in resp.json["products"]] == ["Gaseosa", "Papas"]
        assert resp.json["products"][0]["remaining"] == 5

    def test_exposes_coupon_promo(self, client, worker_headers):
        resp = client.get("/api/shift/today", headers=worker_headers)
        assert resp.json["promo_games_per_coupon"] == 6


class TestPreview:

    def test_breakdown(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/preview", json=_payload(), headers=worker_headers)

        assert resp.status_code == 200
        assert resp.json["breakdown"]["arcade_sales"] == 273000
        assert resp.json["breakdown"]["product_sales"] == 6000
        assert resp.json["breakdown"]["net_profit"] == 297000
        assert resp.json["can_save"] is True

    def test_incomplete_form_cannot_save(self, client, worker_headers, today_config):
        checklist = full_checklist()
        checklist["sign_collected"] = False
        resp = client.post(
            "/api/shift/preview",
            json=_payload(final_tokens=None, checklist=checklist),
            headers=worker_headers,
        )

        assert resp.status_code == 200
        assert resp.json["breakdown"]["tokens_consumed"] == 0
        assert resp.json["checklist_complete"] is False
        assert resp.json["can_save"] is False

    def test_without_nequi_ignores_amount(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/preview", json=_payload(has_nequi=False), headers=worker_headers)
        assert resp.json["breakdown"]["nequi_deposits"] == 0

    def test_has_nequi_must_be_boolean(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/preview", json=_payload(has_nequi="false"), headers=worker_headers)
        assert resp.status_code == 400

    def test_body_must_be_object(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/preview", json=[1, 2], headers=worker_headers)
        assert resp.status_code == 400

    def test_no_config(self, client, worker_headers):
        resp = client.post("/api/shift/preview", json=_payload(), headers=worker_headers)
        assert resp.status_code == 404


class TestSaveSettlement:

    def test_create(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/settlement", json=_payload(), headers=worker_headers)

        assert resp.status_code == 201
        settlement = resp.json["settlement"]
        assert settlement["settlement_date"] == today_config.config_date.isoformat()
        assert settlement["net_profit"] == 297000
        assert settlement["checklist"]["sign_collected"] is True
        assert {p["product_name"]: p["final_quantity"] for p in settlement["products"]} == {
            "Gaseosa": 3,
            "Papas": 3,
        }

        today = client.get("/api/shift/today", headers=worker_headers)
        assert today.json["has_settlement"] is True

    def test_second_save_conflicts(self, client, worker_headers, today_config):
        assert client.post("/api/shift/settlement", json=_payload(), headers=worker_headers).status_code == 201

        resp = client.post("/api/shift/settlement", json=_payload(), headers=worker_headers)
        assert resp.status_code == 409

    def test_missing_final_tokens(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/settlement", json=_payload(final_tokens=None), headers=worker_headers)
        assert resp.status_code == 400

    def test_incomplete_checklist(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/settlement", json=_payload(checklist={}), headers=worker_headers)
        assert resp.status_code == 400

    def test_oversold_product(self, client, worker_headers, today_config):
        resp = client.post(
            "/api/shift/settlement",
            json=_payload(products=[{"product_name": "Papas", "sold_quantity": 4}]),
            headers=worker_headers,
        )
        assert resp.status_code == 400

    def test_negative_counter(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/settlement", json=_payload(vr_uses=-1), headers=worker_headers)
        assert resp.status_code == 400

    def test_decimal_counter(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/settlement", json=_payload(final_tokens=12.5), headers=worker_headers)
        assert resp.status_code == 400

    def test_body_must_be_object(self, client, worker_headers, today_config):
        resp = client.post("/api/shift/settlement", json="settle", headers=worker_headers)
        assert resp.status_code == 400

    def test_no_config(self, client, worker_headers):
        resp = client.post("/api/shift/settlement", json=_payload(), headers=worker_headers)
        assert resp.status_code == 404


class TestVrCounter:

    def test_increment_decrement_floor(self, client, worker_headers):
        assert client.get("/api/shift/vr-counter", headers=worker_headers).json["count"] == 0
        assert client.post("/api/shift/vr-counter/increment", headers=worker_headers).json["count"] == 1
        assert client.post("/api/shift/vr-counter/increment", headers=worker_headers).json["count"] == 2
        assert client.post("/api/shift/vr-counter/decrement", headers=worker_headers).json["count"] == 1
        assert client.post("/api/shift/vr-counter/decrement", headers=worker_headers).json["count"] == 0
        assert client.post("/api/shift/vr-counter/decrement", headers=worker_headers).json["count"] == 0

    def test_per_worker(self, client, worker_headers, admin_headers):
        client.post("/api/shift/vr-counter/increment", headers=worker_headers)

        assert client.get("/api/shift/vr-counter", headers=admin_headers).json["count"] == 0
