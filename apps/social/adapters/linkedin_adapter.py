from typing import Optional

import requests

from .http import ProviderResponse, post_json

LINKEDIN_MAILBOX_URL = "https://api.linkedin.com/v1/people/~/mailbox"


def mailbox_payload(linkedin_id: str, subject: str, body: str) -> dict:
    return {
        "recipients": {
            "values": [
                {"person": {"_path": f"/people/{linkedin_id}"}},
            ]
        },
        "subject": subject,
        "body": body,
    }


class LinkedInAdapter:
    def __init__(self, access_token: str, timeout: float, session: Optional[requests.Session] = None):
        self.access_token = access_token
        self.timeout = timeout
        self.session = session

    def send_message(self, linkedin_id: str, subject: str, body: str) -> ProviderResponse:
        return post_json(
            "linkedin",
            LINKEDIN_MAILBOX_URL,
            mailbox_payload(linkedin_id, subject, body),
            params={"oauth2_access_token": self.access_token},
            timeout=self.timeout,
            session=self.session,
        )
