# config.py
from dotenv import load_dotenv
import os

load_dotenv()

# Database
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "al_mutamir")

# Paystack
PAYSTACK_SECRET_KEY = os.getenv("PAYSTACK_SECRET_KEY", "")
PAYSTACK_BASE_URL = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")
PAYSTACK_CURRENCY = os.getenv("PAYSTACK_CURRENCY", "NGN")
PAYSTACK_CALLBACK_URL = os.getenv("PAYSTACK_CALLBACK_URL")
PAYSTACK_VERIFY_PAYMENTS = os.getenv("PAYSTACK_VERIFY_PAYMENTS", "true").lower() == "true"

# Webhook URL per event category (empty = not sent)
WEBHOOK_URLS = {
    "agency": os.getenv("AGENCY_WEBHOOK_URL", ""),
    "agency_creation": os.getenv("AGENCY_CREATION_WEBHOOK_URL", ""),
    "package": os.getenv("PACKAGE_WEBHOOK_URL", ""),
    "payment": os.getenv("PAYMENT_WEBHOOK_URL", ""),
    "booking": os.getenv("BOOKING_WEBHOOK_URL", ""),
}
WEBHOOK_USERNAME = os.getenv("WEBHOOK_USERNAME", "Mutamir Notifications")

# Email
EMAIL_ENDPOINT_URL = os.getenv("EMAIL_ENDPOINT_URL", "")
EMAIL_ENDPOINT_TOKEN = os.getenv("EMAIL_ENDPOINT_TOKEN")
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_SSL = os.getenv("SMTP_USE_SSL", "False").lower() == "true"
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "no-reply@al-mutamir.com")

# General
PLATFORM_NAME = os.getenv("PLATFORM_NAME", "Al-Mutamir")
APP_URL = os.getenv("APP_URL", "http://localhost:3000")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", 10))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
