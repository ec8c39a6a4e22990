"""
Fake /getProdStats server for testing without the game running.

    prodexporter fake-server --port 8080
    prodexporter --url http://localhost:8080
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import List, Optional

from prodexporter.metrics import ProductionDetail
from prodexporter.mock.generator import FactorySimulator


def render_payload(details: List[ProductionDetail]) -> str:
    """Serialize records the way the game mod does: camelCase keys and a
    trailing comma after the last element."""
    objects = [
        json.dumps({
            "itemName": d.item_name,
            "productionCapacity": d.production_capacity,
            "productionPercent": d.production_percent,
            "consumptionCapacity": d.consumption_capacity,
            "consumptionPercent": d.consumption_percent,
            "currentProduction": d.current_production,
            "currentConsumption": d.current_consumption,
        })
        for d in details
    ]
    if not objects:
        return "[]"
    return "[" + ",".join(objects) + ",]"


class _StatsHandler(BaseHTTPRequestHandler):
    # Set per server; see make_server()
    simulator: Optional[FactorySimulator] = None
    body_override: Optional[bytes] = None
    status: int = 200

    def do_GET(self):
        if self.path != "/getProdStats":
            self.send_response(404)
            self.end_headers()
            return

        if self.body_override is not None:
            body = self.body_override
        else:
            body = render_payload(self.simulator.snapshot()).encode()

        self.send_response(self.status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def make_server(host: str = "127.0.0.1", port: int = 8080, seed: int = 42) -> HTTPServer:
    """Build a server with its own simulator so tests don't share state."""
    handler = type("StatsHandler", (_StatsHandler,), {"simulator": FactorySimulator(seed=seed)})
    return HTTPServer((host, port), handler)


def run_fake_server(host: str = "127.0.0.1", port: int = 8080, seed: int = 42):
    server = make_server(host, port, seed)
    print(f"Fake production stats server running at http://{host}:{port}/getProdStats")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
