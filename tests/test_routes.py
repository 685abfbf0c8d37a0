"""
HTTP-level tests: app wiring, auth guards and a few end-to-end routes.
"""

import pytest

from app.config import settings


class TestAppWiring:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_ready(self, client):
        assert client.get("/ready").json() == {"status": "ready"}

    def test_routes_are_versioned(self, client):
        paths = {route.path for route in client.app.routes}

        assert any(p.startswith("/api/v1/activities") for p in paths)
        assert any(p.startswith("/api/v1/extraction") for p in paths)
        assert any(p.startswith("/api/v1/admin/analytics") for p in paths)


class TestAuthGuards:
    def test_missing_token(self, client):
        response = client.get("/api/v1/saved/collections")
        assert response.status_code in (401, 403)

    def test_non_admin_is_forbidden(self, client, supabase, as_user):
        supabase.queue("profiles", [{"role": "user"}])

        response = client.get("/api/v1/settings")

        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_admin_reads_settings(self, client, supabase, as_admin):
        supabase.queue("profiles", [{"role": "admin"}])

        response = client.get("/api/v1/settings")

        assert response.status_code == 200
        assert response.json()["site_name"] == "QzVert"

    def test_admin_report_stats(self, client, supabase, as_admin):
        supabase.queue("profiles", [{"role": "admin"}])
        for count in (2, 0, 1, 0):
            supabase.queue("reports", count=count)

        response = client.get("/api/v1/reports/stats")

        assert response.status_code == 200
        assert response.json()["total"] == 3


    def test_wrongly_typed_single_setting_is_bad_request(self, client, supabase, as_admin):
        supabase.queue("profiles", [{"role": "admin"}])

        response = client.patch("/api/v1/settings/key", json={"key": "maintenance_mode", "value": "nope"})

        assert response.status_code == 400


class TestPublicRoutes:
    def test_public_site_settings(self, client):
        response = client.get("/api/v1/settings/public")

        assert response.status_code == 200
        assert response.json()["maintenance_mode"] is False

    def test_detect_needs_no_auth(self, client):
        response = client.post("/api/v1/extraction/detect", json={"input": "https://youtu.be/abc123"})

        assert response.status_code == 200
        assert response.json()["type"] == "youtube"

    def test_guest_can_report(self, client, supabase):
        supabase.queue("reports", [{"id": "r1"}])

        response = client.post("/api/v1/reports", json={"content_id": "a1", "reason": "spam"})

        assert response.status_code in (200, 201)
        assert response.json()["report_id"] == "r1"


    @pytest.mark.parametrize("query", ["limit=0", "limit=-1", "page=0"])
    def test_category_paging_rejects_non_positive_values(self, client, query):
        response = client.get(f"/api/v1/categories/science/activities?{query}")
        assert response.status_code == 422

    def test_results_paging_rejects_zero_page_size(self, client, as_user):
        response = client.get("/api/v1/activities/me/results?page_size=0")
        assert response.status_code == 422


class TestExtractionRoutes:
    def test_extract_text(self, client, as_user):
        response = client.post("/api/v1/extraction/extract", json={"input": "Cells divide by mitosis"})

        assert response.status_code == 200
        assert response.json()["metadata"]["word_count"] == 4

    def test_file_upload_extraction(self, client, as_user):
        response = client.post(
            "/api/v1/extraction/file",
            files={"file": ("terms.csv", b"word,definition\nion,charged atom\n", "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["type"] == "excel"
        assert "ion,charged atom" in body["content"]

    def test_unsupported_upload(self, client, as_user):
        response = client.post(
            "/api/v1/extraction/file",
            files={"file": ("archive.zip", b"PK\x03\x04", "application/zip")},
        )
        assert response.status_code == 400

    def test_oversized_upload_is_refused(self, client, as_user, monkeypatch):
        monkeypatch.setattr(settings, "max_extraction_file_mb", 0)

        for path in ("/api/v1/extraction/file", "/api/v1/extraction/upload"):
            response = client.post(path, files={"file": ("notes.pdf", b"%PDF-1.4", "application/pdf")})
            assert response.status_code == 400
            assert response.json()["detail"] == "File exceeds 0MB limit"

    def test_svg_upload_is_refused(self, client, as_user):
        response = client.post(
            "/api/v1/extraction/file",
            files={"file": ("diagram.svg", b"<svg/>", "image/svg+xml")},
        )
        assert response.status_code == 400

    def test_history_delete_missing(self, client, as_user):
        response = client.delete("/api/v1/extraction/history/e404")
        assert response.status_code == 404


class TestCreditAndUsageRoutes:
    def test_guest_credit_preview(self, client):
        response = client.post("/api/v1/settings/credits/preview", json={"content": "a" * 400, "mode": "summarize"})

        assert response.status_code == 200
        body = response.json()
        assert body["user_role"] == "user"
        assert body["tokens"]["input_tokens"] == 100
        assert body["credits_required"] >= 1

    def test_admin_adds_credits(self, client, supabase, as_admin):
        supabase.queue("profiles", [{"role": "admin"}])
        supabase.queue("profiles", [{"id": "user-2", "role": "user", "ai_credits": 5}])

        response = client.post("/api/v1/settings/credits/add", json={"user_id": "user-2", "amount": 10})

        assert response.status_code == 200
        assert response.json() == {"success": True, "new_balance": 15}

    def test_usage_stats_are_admin_only(self, client, supabase, as_user):
        supabase.queue("profiles", [{"role": "user"}])

        response = client.get("/api/v1/settings/ai-usage/stats")

        assert response.status_code == 403

    def test_clear_ai_usage_needs_positive_days(self, client, supabase, as_admin):
        supabase.queue("profiles", [{"role": "admin"}])

        response = client.post("/api/v1/settings/maintenance/clear-ai-usage?days_old=0")

        assert response.status_code == 400
