import hashlib, hmac, json, urllib.parse

from app.pricing_client import PricingBackendError

BOT_TOKEN = "test-secret"


def sign(fields, token=BOT_TOKEN):
    # computed independently of app.security
    check = "\n".join(f"{k}={v}" for k, v in sorted(fields, key=lambda kv: kv[0]))
    key = hmac.new(b"WebAppData", token.encode(), hashlib.sha256).digest()
    return hmac.new(key, check.encode(), hashlib.sha256).hexdigest()


def make_init_data(user_id=42, token=BOT_TOKEN, extra=None, user=None):
    fields = [("auth_date", "1700000000"), ("query_id", "AA")]
    if user is not None:
        fields.append(("user", user))
    elif user_id is not None:
        fields.append(("user", json.dumps({"id": user_id, "first_name": "Op"}, separators=(",", ":"))))
    fields.extend(extra or [])
    return urllib.parse.urlencode(fields + [("hash", sign(fields, token))])


class FakePricing:
    def __init__(self, error=None, body=None, healthy=True):
        self.calls = []
        self.error = error
        self.body = body
        self.healthy = healthy

    def _record(self, kind, payload):
        self.calls.append((kind, payload))
        if self.error:
            raise self.error
        if self.body is not None:
            return self.body
        return {"success": True, "message": f"{kind} request sent"}

    def send_rate_request(self, payload):
        return self._record("rate", payload)

    def send_coms_request(self, payload):
        return self._record("coms", payload)

    def health_check(self):
        if not self.healthy:
            raise PricingBackendError("Pricing backend health check failed")
        return {"status": "ok"}


def backend_down():
    return FakePricing(error=PricingBackendError("Pricing backend unavailable"))
