# routes/email.py
from fastapi import APIRouter, Depends, Header, HTTPException

import config
from models.email import EmailSend
from utils.email_client import get_email_client

router = APIRouter()


def check_internal_token(x_internal_token: str = Header(None, alias="X-Internal-Token")):
    if config.EMAIL_ENDPOINT_TOKEN and x_internal_token != config.EMAIL_ENDPOINT_TOKEN:
        raise HTTPException(401, "Invalid internal token")


# === POST: Relay a transactional email over SMTP ===
@router.post("/send", dependencies=[Depends(check_internal_token)])
def send_email(email_in: EmailSend, client=Depends(get_email_client)):
    recipients = email_in.recipients()
    if not recipients:
        raise HTTPException(400, "At least one recipient is required")
    if not email_in.text and not email_in.html:
        raise HTTPException(400, "Email body is empty")
    if client is None:
        raise HTTPException(503, "Email is not configured")

    if not client.send_email(config.EMAIL_SENDER, recipients, email_in.subject,
                             email_in.text or "", email_in.html):
        raise HTTPException(502, "Email could not be sent")
    return {"message": "Email sent", "recipients": recipients}
