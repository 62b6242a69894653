import os
import sys
import json
import requests

BASE_URL = os.environ.get("SMOKE_URL") or os.environ.get("DEV_URL", "http://127.0.0.1:5002")
API = f"{BASE_URL.rstrip('/')}/api"
HEADERS = {"X-API-Key": os.environ["API_KEY"]} if os.environ.get("API_KEY") else {}


def get(path: str):
    r = requests.get(f"{API}{path}", headers=HEADERS, timeout=10)
    r.raise_for_status()
    return r


def post(path: str, payload: dict):
    r = requests.post(f"{API}{path}", json=payload, headers=HEADERS, timeout=20)
    r.raise_for_status()
    return r


def main():
    print(f"[smoke] Target: {API}")
    print("[smoke] /health:", get("/health").status_code)
    print("[smoke] /version:", get("/version").status_code)

    r = post("/plan", {"query": "בראשית 1:1"})
    print("[smoke] /plan:", r.status_code, r.json()["plan"]["intent"])

    r = post("/ask", {"query": "איפה מופיעה המילה \"אור\" בנביאים", "format": "text"})
    print("[smoke] /ask:", r.status_code, r.json().get("text", "")[:300])

    sample = "רבי עקיבא אומר שנאמר ואהבת לרעך כמוך. זה כלל גדול בתורה"
    r = post("/quotes/detect", {"text": sample})
    print("[smoke] /quotes/detect:", r.status_code, json.dumps(r.json(), ensure_ascii=False)[:300])


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print("[smoke] FAILED:", e)
        sys.exit(1)
