import json
import os
import socket
import time
import urllib.error
import urllib.request

TIMEOUT = int(os.getenv("TIMEOUT_S", "120"))
DB_TRIGGER_URL = os.getenv("DB_HEALTH_URL", "http://localhost:8081/")
GRPC_SERVER_ADDR = os.getenv("GRPC_SERVER_ADDR", "127.0.0.1:50051")
KAFKA_BROKERS = os.getenv("KAFKA_BROKERS", "127.0.0.1:9092")


def http_ok(url: str) -> bool:
    try:
        with urllib.request.urlopen(url, timeout=2) as r:
            return 200 <= r.status < 500
    except urllib.error.HTTPError as e:
        return e.code < 500
    except Exception:
        return False


def tcp_ok(addr: str) -> bool:
    host, _, port = addr.rpartition(":")
    try:
        s = socket.create_connection((host, int(port)), timeout=2)
        s.close()
        return True
    except Exception:
        return False


def check() -> dict:
    return {
        "db": http_ok(DB_TRIGGER_URL),
        "grpc": tcp_ok(GRPC_SERVER_ADDR),
        "kafka": any(tcp_ok(b.strip()) for b in KAFKA_BROKERS.split(",") if b.strip()),
    }


def main() -> int:
    deadline = time.time() + TIMEOUT
    status = check()
    while time.time() < deadline:
        if all(status.values()):
            print(json.dumps({"ready": True, **status}))
            return 0
        time.sleep(2)
        status = check()
    print(json.dumps({"ready": False, **status}))
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
