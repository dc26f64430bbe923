"""
Lightweight mock destination endpoint for manual end-to-end runs.

Endpoints:
- POST /hook            -> stores headers + payload, answers with the configured status
- GET  /_last           -> returns last delivery (and whether its signature verified)
- POST /_status/<code>  -> sets the status code returned by /hook
- POST /_reset          -> clears stored delivery and status
- GET  /_health         -> returns 200

Set ROUTE_SECRET in the environment to verify x-webhookhub-signature.
"""
import json
import os
import sys
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from deliveries.services.signing import verify  # noqa: E402


LAST_REQUEST: Optional[dict] = None
RESPONSE_STATUS = 200
ROUTE_SECRET = os.getenv("ROUTE_SECRET", "")


class Handler(BaseHTTPRequestHandler):
    def _send_json(self, status_code: int, payload: dict) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):  # noqa: N802
        if self.path == "/_health":
            return self._send_json(200, {"status": "ok"})

        if self.path == "/_last":
            return self._send_json(200, {"last": LAST_REQUEST})

        return self._send_json(404, {"error": "not_found"})

    def do_POST(self):  # noqa: N802
        global LAST_REQUEST, RESPONSE_STATUS

        if self.path == "/_reset":
            LAST_REQUEST = None
            RESPONSE_STATUS = 200
            return self._send_json(200, {"status": "reset"})

        if self.path.startswith("/_status/"):
            try:
                RESPONSE_STATUS = int(self.path.rsplit("/", 1)[-1])
            except ValueError:
                return self._send_json(400, {"error": "invalid_status"})
            return self._send_json(200, {"status": RESPONSE_STATUS})

        if self.path.startswith("/hook"):
            length = int(self.headers.get("Content-Length", "0"))
            raw = self.rfile.read(length) if length else b""
            try:
                payload = json.loads(raw.decode("utf-8")) if raw else {}
            except json.JSONDecodeError:
                payload = {"_raw": raw.decode("utf-8", errors="replace")}

            headers = {k.lower(): v for k, v in self.headers.items()}
            signature_valid = None
            if ROUTE_SECRET:
                signature_valid = verify(ROUTE_SECRET, raw, headers.get("x-webhookhub-signature", ""))

            LAST_REQUEST = {
                "path": self.path,
                "headers": headers,
                "payload": payload,
                "signature_valid": signature_valid,
            }
            return self._send_json(RESPONSE_STATUS, {"status": "received"})

        return self._send_json(404, {"error": "not_found"})

    def log_message(self, format, *args):  # noqa: A003
        # Silence default logging to keep output clean.
        return


def main() -> None:
    port = int(os.getenv("MOCK_DESTINATION_PORT", "8080"))
    server = HTTPServer(("0.0.0.0", port), Handler)
    server.serve_forever()


if __name__ == "__main__":
    main()
