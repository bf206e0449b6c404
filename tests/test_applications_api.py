"""End-to-end tests for the application endpoints."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.api.deps import get_lifecycle_service
from app.main import app
from app.models import Application, Invoice

PDF = ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")


def _base(job, user):
    return f"/api/v1/applications/{job.id}/{user.id}"


async def _apply_and_pay(client, headers, job, user):
    response = await client.post(f"{_base(job, user)}/initiate", files={"resume": PDF}, headers=headers)
    assert response.status_code == 201
    response = await client.post(f"{_base(job, user)}/payment", headers=headers)
    assert response.status_code == 200
    intent_id = response.json()["paymentIntentId"]
    response = await client.post(
        f"{_base(job, user)}/confirm-payment",
        json={"paymentIntentId": intent_id},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()["application_id"]


class TestSeekerFlow:
    async def test_apply_pay_and_get_reviewed(self, client, auth_headers, open_job, seeker, employer):
        seeker_headers = auth_headers(seeker)

        response = await client.post(
            f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=seeker_headers
        )
        assert response.status_code == 201
        body = response.json()
        assert body["payment_required"] is True
        assert body["payment_amount"] == 100
        assert body["application"]["status"] == "pending_payment"
        assert body["application"]["is_paid"] is False

        response = await client.post(f"{_base(open_job, seeker)}/payment", headers=seeker_headers)
        assert response.status_code == 200
        payment = response.json()
        assert payment["amount"] == 100
        assert payment["clientSecret"].startswith(payment["paymentIntentId"])

        response = await client.post(
            f"{_base(open_job, seeker)}/confirm-payment",
            json={"paymentIntentId": payment["paymentIntentId"]},
            headers=seeker_headers,
        )
        assert response.status_code == 200
        application_id = response.json()["application_id"]
        assert response.json()["amount"] == 100

        # Employer sees and accepts the paid application
        employer_headers = auth_headers(employer)
        response = await client.get(f"/api/v1/applications/job/{open_job.id}", headers=employer_headers)
        assert response.status_code == 200
        listed = response.json()
        assert len(listed) == 1
        assert listed[0]["applicant"]["full_name"] == "Jane Seeker"
        assert listed[0]["status"] == "pending"

        response = await client.put(
            f"/api/v1/applications/{application_id}/status",
            json={"status": "accepted"},
            headers=employer_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "accepted"

        response = await client.get(f"/api/v1/applications/{application_id}", headers=seeker_headers)
        assert response.status_code == 200
        details = response.json()
        assert details["status"] == "accepted"
        assert details["payment_status"] == "paid"
        assert details["payment_amount"] == 100
        assert details["invoice"]["payment_amount"] == 100
        assert details["job"]["title"] == "Backend Engineer"

    async def test_replayed_confirmation_succeeds(self, client, auth_headers, open_job, seeker, count_rows):
        headers = auth_headers(seeker)
        await client.post(f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=headers)
        intent_id = (await client.post(f"{_base(open_job, seeker)}/payment", headers=headers)).json()["paymentIntentId"]

        for _ in range(2):
            response = await client.post(
                f"{_base(open_job, seeker)}/confirm-payment",
                json={"paymentIntentId": intent_id},
                headers=headers,
            )
            assert response.status_code == 200
        assert await count_rows(Invoice) == 1

    async def test_identity_mismatch(self, client, auth_headers, open_job, seeker, make_user):
        other = await make_user()

        response = await client.post(
            f"{_base(open_job, other)}/initiate", files={"resume": PDF}, headers=auth_headers(seeker)
        )
        assert response.status_code == 403
        assert response.json()["error"] == "identity_mismatch"

    async def test_employee_cannot_apply(self, client, auth_headers, open_job, employer):
        response = await client.post(
            f"{_base(open_job, employer)}/initiate", files={"resume": PDF}, headers=auth_headers(employer)
        )
        assert response.status_code == 403

    async def test_requires_authentication(self, client, open_job, seeker):
        response = await client.post(f"{_base(open_job, seeker)}/payment")
        assert response.status_code in (401, 403)

    async def test_bad_resume_type(self, client, auth_headers, open_job, seeker, count_rows):
        response = await client.post(
            f"{_base(open_job, seeker)}/initiate",
            files={"resume": ("cv.exe", b"MZ", "application/octet-stream")},
            headers=auth_headers(seeker),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_resume_file"
        assert await count_rows(Application) == 0

    async def test_missing_resume(self, client, auth_headers, open_job, seeker):
        response = await client.post(f"{_base(open_job, seeker)}/initiate", headers=auth_headers(seeker))
        assert response.status_code == 400

    async def test_closed_job_discards_resume(self, client, auth_headers, make_job, employer, seeker, resume_storage):
        closed = await make_job(employer, status="closed")

        response = await client.post(
            f"{_base(closed, seeker)}/initiate", files={"resume": PDF}, headers=auth_headers(seeker)
        )
        assert response.status_code == 404
        assert response.json()["error"] == "job_not_open"
        assert list(resume_storage.storage_dir.glob("*")) == []

    async def test_unexpected_error_discards_resume(self, client, auth_headers, open_job, seeker, resume_storage):
        lifecycle = MagicMock()
        lifecycle.initiate = AsyncMock(side_effect=RuntimeError("connection reset"))
        app.dependency_overrides[get_lifecycle_service] = lambda: lifecycle

        # The transport re-raises errors the app turned into a 500
        with pytest.raises(RuntimeError):
            await client.post(f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=auth_headers(seeker))

        lifecycle.initiate.assert_awaited_once()
        assert list(resume_storage.storage_dir.glob("*")) == []

    async def test_duplicate_application(self, client, auth_headers, open_job, seeker):
        headers = auth_headers(seeker)
        await client.post(f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=headers)

        response = await client.post(f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=headers)
        assert response.status_code == 400
        assert response.json() == {
            "detail": "You have already applied for this job",
            "error": "duplicate_application",
        }

    async def test_declined_payment(self, client, auth_headers, gateway, open_job, seeker, load_application):
        headers = auth_headers(seeker)
        await client.post(f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=headers)
        intent_id = (await client.post(f"{_base(open_job, seeker)}/payment", headers=headers)).json()["paymentIntentId"]
        gateway.decline.add(intent_id)

        response = await client.post(
            f"{_base(open_job, seeker)}/confirm-payment",
            json={"paymentIntentId": intent_id},
            headers=headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "payment_not_confirmed"
        assert (await load_application(open_job.id, seeker.id)).is_paid is False

    async def test_stale_intent(self, client, auth_headers, open_job, seeker):
        headers = auth_headers(seeker)
        await client.post(f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=headers)
        first = (await client.post(f"{_base(open_job, seeker)}/payment", headers=headers)).json()["paymentIntentId"]
        await client.post(f"{_base(open_job, seeker)}/payment", headers=headers)

        response = await client.post(
            f"{_base(open_job, seeker)}/confirm-payment",
            json={"paymentIntentId": first},
            headers=headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "intent_not_found"

    async def test_payment_after_confirmation(self, client, auth_headers, open_job, seeker):
        headers = auth_headers(seeker)
        await _apply_and_pay(client, headers, open_job, seeker)

        response = await client.post(f"{_base(open_job, seeker)}/payment", headers=headers)
        assert response.status_code == 400
        assert response.json()["error"] == "already_paid"


class TestReviewEndpoints:
    async def test_other_employer_gets_not_found(self, client, auth_headers, open_job, seeker, other_employer):
        application_id = await _apply_and_pay(client, auth_headers(seeker), open_job, seeker)
        headers = auth_headers(other_employer)

        response = await client.get(f"/api/v1/applications/job/{open_job.id}", headers=headers)
        assert response.status_code == 404

        response = await client.put(
            f"/api/v1/applications/{application_id}/status", json={"status": "accepted"}, headers=headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Application not found or unauthorized"

    @pytest.mark.parametrize("status", ["pending", "pending_payment", "maybe"])
    async def test_invalid_status(self, client, auth_headers, open_job, seeker, employer, status):
        application_id = await _apply_and_pay(client, auth_headers(seeker), open_job, seeker)

        response = await client.put(
            f"/api/v1/applications/{application_id}/status",
            json={"status": status},
            headers=auth_headers(employer),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_status"

    async def test_unpaid_application_not_reviewable(self, client, auth_headers, open_job, seeker, employer):
        response = await client.post(
            f"{_base(open_job, seeker)}/initiate", files={"resume": PDF}, headers=auth_headers(seeker)
        )
        application_id = response.json()["application"]["id"]

        response = await client.put(
            f"/api/v1/applications/{application_id}/status",
            json={"status": "accepted"},
            headers=auth_headers(employer),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "not_reviewable"

    async def test_seeker_cannot_review(self, client, auth_headers, open_job, seeker):
        application_id = await _apply_and_pay(client, auth_headers(seeker), open_job, seeker)

        response = await client.put(
            f"/api/v1/applications/{application_id}/status",
            json={"status": "accepted"},
            headers=auth_headers(seeker),
        )
        assert response.status_code == 403

    async def test_employer_application_list(self, client, auth_headers, open_job, seeker, employer):
        await _apply_and_pay(client, auth_headers(seeker), open_job, seeker)

        response = await client.get("/api/v1/applications/user/applications", headers=auth_headers(employer))
        assert response.status_code == 200
        items = response.json()
        assert len(items) == 1
        assert items[0]["payment_status"] == "paid"
        assert items[0]["invoice"]["payment_amount"] == 100

    async def test_unknown_application(self, client, auth_headers, employer):
        response = await client.get(f"/api/v1/applications/{uuid.uuid4()}", headers=auth_headers(employer))
        assert response.status_code == 404
