import os
import requests

DEFAULT_TIMEOUT = 10


def send_push(
    device_token: str,
    title: str,
    body: str,
    data: dict | None = None,
    *,
    gateway_url: str | None = None,
    api_key: str | None = None,
) -> dict:
    """Relay one notification to the push gateway (FCM-compatible HTTP endpoint).

    Credentials resolve from explicit args, then env. Raises RuntimeError with
    the gateway's error details on failure.
    """
    gateway_url = gateway_url or os.getenv("PUSH_GATEWAY_URL")
    api_key = api_key or os.getenv("PUSH_GATEWAY_KEY")
    if not gateway_url:
        raise RuntimeError("Push gateway is not configured")
    if not device_token:
        raise RuntimeError("Recipient has no registered device token")

    message = {
        "to": device_token,
        "notification": {"title": title, "body": body},
        # Gateway requires string values in the data map
        "data": {k: str(v) for k, v in (data or {}).items() if v is not None},
        "priority": "high",
    }
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"key={api_key}"
    resp = requests.post(gateway_url, json=message, headers=headers, timeout=DEFAULT_TIMEOUT)
    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        try:
            payload = resp.json()
            err = payload.get("error") or payload
            details = f"Push gateway error: {err}"
        except ValueError:
            details = f"HTTP {resp.status_code}: {resp.text[:500]}"
        raise RuntimeError(details) from e
    try:
        return resp.json()
    except ValueError:
        return {}
