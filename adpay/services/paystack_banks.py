import requests

from adpay.errors import UpstreamError

PAYSTACK_BANKS_URL = "https://api.paystack.co/bank"


def fetch_banks(secret_key: str):
    headers = {"Authorization": f"Bearer {secret_key}"}

    try:
        r = requests.get(PAYSTACK_BANKS_URL, headers=headers, params={"country": "nigeria"}, timeout=30)
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise UpstreamError("Failed to fetch banks") from e

    if not r.ok or not data.get("status"):
        raise UpstreamError("Failed to fetch banks")

    # return only active Nigerian banks
    banks = [
        {
            "name": b["name"],
            "code": b["code"]
        }
        for b in data.get("data") or []
        if b.get("active") and b.get("currency") == "NGN"
    ]

    banks.sort(key=lambda x: x["name"].lower())
    return banks
