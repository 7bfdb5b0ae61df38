import matplotlib
import requests

matplotlib.use("Agg")


class FakeResponse:
    def __init__(self, payload, status_code=200, content_type="application/json"):
        self._payload = payload
        self.status_code = status_code
        self.headers = {"Content-Type": content_type}
        self.text = str(payload)

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Answers GETs with ``respond(params)``; keeps every params dict it saw."""

    def __init__(self, respond):
        self.respond = respond
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(dict(params))
        return self.respond(params)


def rec(code, title, period, value):
    return {"ptCode": code, "ptTitle": title, "period": period, "TradeValue": value}
