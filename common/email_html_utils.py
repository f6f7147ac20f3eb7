from common.utils import enum_value


def _applied_at(loan) -> str:
    return loan.application_date.strftime('%d-%m-%Y %I:%M %p') if loan.application_date else "N/A"


def build_loan_email_bodies(loan, applicant) -> tuple[str, str]:
    plain_body = (
        f"Information:\n"
        f"A new loan application has been submitted.\n\n"
        f"Applicant Details:\n"
        f"Name: {applicant.full_name}\n"
        f"Email: {applicant.email or 'N/A'}\n"
        f"Phone: {applicant.phone_number}\n"
        f"Application No: {loan.application_uid}\n"
        f"Loan Type: {enum_value(loan.loan_type)}\n"
        f"Requested Amount: Rs.{loan.amount_requested}\n"
        f"Applied At: {_applied_at(loan)}\n\n"
        f"Thanks & Regards,\n"
        f"Loan Processing Team"
    )

    html_body = f"""
    <html>
        <body>
            <p>A new loan application has been submitted.</p>
            <h4>Applicant Details:</h4>
            <ul>
                <li><strong>Name:</strong> {applicant.full_name}</li>
                <li><strong>Email :</strong> {applicant.email or "N/A"}</li>
                <li><strong>Phone:</strong> {applicant.phone_number}</li>
                <li><strong>Application No:</strong> {loan.application_uid}</li>
                <li><strong>Loan Type:</strong> {enum_value(loan.loan_type)}</li>
                <li><strong>Requested Amount:</strong> Rs.{loan.amount_requested}</li>
                <li><strong>Applied At:</strong> {_applied_at(loan)}</li>
            </ul>
            <p>Kindly review the application from the admin panel.</p>
            <p>Thanks & Regards,<br/>Blumiq Loan Processing Team</p>
        </body>
    </html>
    """

    return plain_body, html_body


def build_loan_decision_email_bodies(loan, applicant, approved: bool) -> tuple[str, str, str]:
    if approved:
        subject = f"Your loan application {loan.application_uid} has been approved"
        details = (
            f"Approved Amount: Rs.{loan.amount_approved}\n"
            f"Interest Rate: {loan.interest_rate_final}% p.a.\n"
            f"Tenure: {loan.tenure_months_final} months\n"
            f"Processing Fee: Rs.{loan.processing_fee or 0}\n"
        )
        html_details = (
            f"<li><strong>Approved Amount:</strong> Rs.{loan.amount_approved}</li>"
            f"<li><strong>Interest Rate:</strong> {loan.interest_rate_final}% p.a.</li>"
            f"<li><strong>Tenure:</strong> {loan.tenure_months_final} months</li>"
            f"<li><strong>Processing Fee:</strong> Rs.{loan.processing_fee or 0}</li>"
        )
    else:
        subject = f"Update on your loan application {loan.application_uid}"
        details = f"Reason: {loan.rejection_reason}\n"
        html_details = f"<li><strong>Reason:</strong> {loan.rejection_reason}</li>"

    plain_body = (
        f"Dear {applicant.full_name},\n\n"
        f"{subject}.\n\n"
        f"{details}\n"
        f"Thanks & Regards,\n"
        f"Blumiq Team"
    )
    html_body = f"""
    <html>
        <body>
            <p>Dear {applicant.full_name},</p>
            <p>{subject}.</p>
            <ul>{html_details}</ul>
            <p>Thanks & Regards,<br/>Blumiq Team</p>
        </body>
    </html>
    """
    return subject, plain_body, html_body


def build_membership_email_bodies(card, card_type, applicant) -> tuple[str, str, str]:
    subject = f"Your {card_type.name} membership is active"
    expiry = card.expiry_date.strftime('%d-%m-%Y') if card.expiry_date else "N/A"
    plain_body = (
        f"Dear {applicant.full_name},\n\n"
        f"Thank you for purchasing the {card_type.name} membership card.\n"
        f"Amount Paid: Rs.{card_type.price}\n"
        f"Valid Until: {expiry}\n\n"
        f"Thanks & Regards,\n"
        f"Blumiq Team"
    )
    html_body = f"""
    <html>
        <body>
            <p>Dear {applicant.full_name},</p>
            <p>Thank you for purchasing the <b>{card_type.name}</b> membership card.</p>
            <ul>
                <li><strong>Amount Paid:</strong> Rs.{card_type.price}</li>
                <li><strong>Valid Until:</strong> {expiry}</li>
            </ul>
            <p>Thanks & Regards,<br/>Blumiq Team</p>
        </body>
    </html>
    """
    return subject, plain_body, html_body


def build_email_verification_bodies(user, verification_link: str) -> tuple[str, str, str]:
    subject = "Verify your email address"
    plain_body = (
        f"Dear {user.full_name},\n\n"
        f"Please confirm your email address by opening the link below:\n"
        f"{verification_link}\n\n"
        f"Thanks & Regards,\n"
        f"Blumiq Team"
    )
    html_body = f"""
    <html>
        <body>
            <p>Dear {user.full_name},</p>
            <p>Please confirm your email address by clicking <a href="{verification_link}">this link</a>.</p>
            <p>Thanks & Regards,<br/>Blumiq Team</p>
        </body>
    </html>
    """
    return subject, plain_body, html_body
