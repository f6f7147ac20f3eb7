from unittest.mock import patch

import pytest

from common.enums import LoanStatus, LoanType, LoanTypeAssociation
from tests.conftest import create_card, create_card_type, create_loan, create_user

APPLICATION = {
    "loan_type": "personal",
    "amount_requested": 250000,
    "tenure_months_requested": 24,
    "purpose": "Home renovation",
    "documents_submitted": {"pan_card": "user_documents/3/pan_card/pan.pdf"},
}

APPROVAL = {"approved_amount": 200000, "interest_rate": 12.5, "tenure_months": 24, "processing_fee": 1500}


def test_apply_without_membership_is_forbidden(client, customer_headers):
    response = client.post("/loans/apply", headers=customer_headers, json=APPLICATION)

    assert response.status_code == 403
    assert response.json()["message"] == "An active membership card is required to apply for a loan"


def test_member_can_apply(client, member, customer_headers):
    response = client.post("/loans/apply", headers=customer_headers, json=APPLICATION)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "submitted"
    assert data["user_id"] == member.id
    assert data["application_uid"]
    assert data["amount_approved"] is None
    assert data["documents_submitted"] == {"pan_card": "user_documents/3/pan_card/pan.pdf"}


def test_card_for_other_loan_type_cannot_apply(client, database, customer, customer_headers):
    create_card(database, customer, create_card_type(database, association=LoanTypeAssociation.business))

    response = client.post("/loans/apply", headers=customer_headers, json=APPLICATION)

    assert response.status_code == 403
    assert response.json()["message"] == "Your membership card does not support this loan type"


@pytest.mark.parametrize("override", [
    {"amount_requested": 500},
    {"tenure_months_requested": 120},
    {"loan_type": "mortgage"},
])
def test_apply_validation(client, member, customer_headers, override):
    response = client.post("/loans/apply", headers=customer_headers, json={**APPLICATION, **override})

    assert response.status_code == 400


def test_list_only_own_loans(client, database, customer, other_customer, customer_headers):
    own = create_loan(database, customer)
    create_loan(database, other_customer)

    response = client.get("/loans", headers=customer_headers)

    assert response.status_code == 200
    assert [loan["id"] for loan in response.json()["data"]] == [own.id]


def test_other_users_loan_is_not_found(client, database, other_customer, customer_headers):
    loan = create_loan(database, other_customer)

    assert client.get(f"/loans/{loan.id}", headers=customer_headers).status_code == 404
    assert client.post(f"/loans/{loan.id}/cancel", headers=customer_headers).status_code == 404


def test_details_list_customer_actions(client, database, customer, customer_headers):
    loan = create_loan(database, customer, status=LoanStatus.under_review)

    response = client.get(f"/loans/{loan.id}", headers=customer_headers)

    assert response.json()["data"]["allowed_actions"] == ["cancel"]


def test_update_editable_loan(client, database, customer, customer_headers):
    loan = create_loan(database, customer, status=LoanStatus.requires_documents,
                       documents_submitted={"pan_card": "a.pdf"})

    response = client.put(f"/loans/{loan.id}", headers=customer_headers,
                          json={"purpose": "Wedding", "documents_submitted": {"salary_slip": "b.pdf"}})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["purpose"] == "Wedding"
    assert data["status"] == "requires_documents"
    assert data["documents_submitted"] == {"pan_card": "a.pdf", "salary_slip": "b.pdf"}


def test_update_loan_under_review_is_forbidden(client, database, customer, customer_headers):
    loan = create_loan(database, customer, status=LoanStatus.under_review)

    response = client.put(f"/loans/{loan.id}", headers=customer_headers, json={"purpose": "Changed"})

    assert response.status_code == 403
    assert response.json()["message"] == "This loan application cannot be updated"


def test_cancel_and_cancel_again(client, database, customer, customer_headers):
    loan = create_loan(database, customer)

    first = client.post(f"/loans/{loan.id}/cancel", headers=customer_headers)
    second = client.post(f"/loans/{loan.id}/cancel", headers=customer_headers)

    assert first.status_code == 200
    assert first.json()["data"]["status"] == "cancelled"
    assert second.status_code == 400


@patch("services.loan_service.admin_loan.notify_loan_decision")
def test_admin_approves_loan_under_review(notify, client, database, customer, admin_headers):
    loan = create_loan(database, customer, status=LoanStatus.under_review)

    response = client.post(f"/admin/loans/{loan.id}/approve", headers=admin_headers,
                           json={**APPROVAL, "remarks": "Good credit"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "approved"
    assert data["amount_approved"] == 200000
    assert data["interest_rate_final"] == 12.5
    assert data["tenure_months_final"] == 24
    assert data["approved_date"] is not None
    notify.assert_called_once()
    assert notify.call_args.args[2] is True


def test_approve_submitted_loan_is_rejected(client, database, customer, admin_headers):
    loan = create_loan(database, customer, status=LoanStatus.submitted)

    response = client.post(f"/admin/loans/{loan.id}/approve", headers=admin_headers, json=APPROVAL)

    assert response.status_code == 400
    assert response.json()["message"] == "Loan application cannot be approved in its current status"


def test_approve_after_rejection_is_rejected(client, database, customer, admin_headers):
    loan = create_loan(database, customer, status=LoanStatus.rejected, rejection_reason="Low score")

    response = client.post(f"/admin/loans/{loan.id}/approve", headers=admin_headers, json=APPROVAL)

    assert response.status_code == 400
    detail = client.get(f"/admin/loans/{loan.id}", headers=admin_headers).json()["data"]
    assert detail["status"] == "rejected"
    assert detail["amount_approved"] is None


@patch("services.loan_service.admin_loan.notify_loan_decision")
def test_admin_rejects_with_reason(notify, client, database, customer, admin_headers):
    loan = create_loan(database, customer, status=LoanStatus.requires_documents)

    response = client.post(f"/admin/loans/{loan.id}/reject", headers=admin_headers, json={"reason": "Incomplete KYC"})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "rejected"
    assert response.json()["data"]["rejection_reason"] == "Incomplete KYC"
    assert notify.call_args.args[2] is False


def test_reject_stands_when_email_notification_fails(client, database, customer, admin_headers):
    loan = create_loan(database, customer, status=LoanStatus.under_review)

    with patch("services.loan_service.admin_loan.EmailService.send_email",
               side_effect=RuntimeError("smtp down")) as send_email:
        response = client.post(f"/admin/loans/{loan.id}/reject", headers=admin_headers,
                               json={"reason": "Low credit score"})

    assert response.status_code == 200
    send_email.assert_called_once()
    detail = client.get(f"/admin/loans/{loan.id}", headers=admin_headers).json()["data"]
    assert detail["status"] == "rejected"
    assert detail["rejection_reason"] == "Low credit score"


def test_approval_stands_when_sms_notification_fails(client, database, admin_headers):
    applicant = create_user(database, "9811111111")
    loan = create_loan(database, applicant, status=LoanStatus.under_review)

    with patch("services.loan_service.admin_loan.SMSService.send_sms",
               side_effect=RuntimeError("gateway timeout")) as send_sms:
        response = client.post(f"/admin/loans/{loan.id}/approve", headers=admin_headers, json=APPROVAL)

    assert response.status_code == 200
    send_sms.assert_called_once()
    assert send_sms.call_args.args[0] == "9811111111"
    detail = client.get(f"/admin/loans/{loan.id}", headers=admin_headers).json()["data"]
    assert detail["status"] == "approved"
    assert detail["amount_approved"] == 200000


def test_admin_walks_loan_through_review_to_disbursal(client, database, customer, admin_headers):
    loan = create_loan(database, customer)

    assert client.put(f"/admin/loans/{loan.id}/status", headers=admin_headers,
                      json={"action": "start_review"}).json()["data"]["status"] == "under_review"
    with patch("services.loan_service.admin_loan.notify_loan_decision"):
        client.post(f"/admin/loans/{loan.id}/approve", headers=admin_headers, json=APPROVAL)
    disbursed = client.put(f"/admin/loans/{loan.id}/status", headers=admin_headers, json={"action": "disburse"})

    assert disbursed.status_code == 200
    assert disbursed.json()["data"]["status"] == "disbursed"
    assert disbursed.json()["data"]["disbursed_date"] is not None


def test_status_endpoint_refuses_decision_actions(client, database, customer, admin_headers):
    loan = create_loan(database, customer, status=LoanStatus.under_review)

    response = client.put(f"/admin/loans/{loan.id}/status", headers=admin_headers, json={"action": "approve"})

    assert response.status_code == 400


def test_admin_lists_and_searches_loans(client, database, customer, other_customer, admin_headers):
    create_loan(database, customer)
    create_loan(database, other_customer, loan_type=LoanType.business, status=LoanStatus.under_review)

    everything = client.get("/admin/loans", headers=admin_headers).json()["data"]
    reviewing = client.get("/admin/loans", headers=admin_headers,
                           params={"status_filter": "under_review"}).json()["data"]
    by_email = client.get("/admin/loans", headers=admin_headers, params={"search": "other@"}).json()["data"]

    assert everything["pagination"]["total"] == 2
    assert [loan["user_id"] for loan in reviewing["loan_applications"]] == [other_customer.id]
    assert [loan["user_id"] for loan in by_email["loan_applications"]] == [other_customer.id]


def test_admin_loan_list_rejects_bad_date(client, admin_headers):
    response = client.get("/admin/loans", headers=admin_headers, params={"start_date": "31-01-2024"})

    assert response.status_code == 400
