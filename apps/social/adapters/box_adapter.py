from typing import Optional

import requests

from .http import ProviderResponse, post_json

BOX_VIEW_API_URL = "https://view-api.box.com/1"
SESSION_DURATION_MINUTES = 60


class BoxViewAdapter:
    def __init__(self, token: str, timeout: float, session: Optional[requests.Session] = None):
        self.token = token
        self.timeout = timeout
        self.session = session

    @property
    def headers(self):
        return {"Authorization": f"Token {self.token}"}

    def create_document(self, url: str) -> ProviderResponse:
        return post_json("box", f"{BOX_VIEW_API_URL}/documents", {"url": url},
                         headers=self.headers, timeout=self.timeout, session=self.session)

    def create_session(self, document_id: str, duration: int = SESSION_DURATION_MINUTES) -> ProviderResponse:
        body = {"document_id": document_id, "duration": duration}
        return post_json("box", f"{BOX_VIEW_API_URL}/sessions", body,
                         headers=self.headers, timeout=self.timeout, session=self.session)
