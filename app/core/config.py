from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "triggerhub"
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    PORT_HTTP: int = 8084

    # Downstream addresses (defaults mirror the local demo stack)
    PORT_DB: int = 8081
    DB_TRIGGER_HOST: str = "localhost"
    GRPC_SERVER_ADDR: str = "127.0.0.1:50051"
    HTTP_REST_PROBE_URL: str = "https://jsonplaceholder.typicode.com/posts"

    GRPC_ECHO_SERVICE: str = "proto.EchoService"
    GRPC_SAY_MESSAGE: str = "hello"
    GRPC_STREAM_FROM: int = 3
    GRPC_STREAM_TO: int = 7

    # Comma-separated bootstrap servers (e.g. "kafka-1:9092,kafka-2:9092")
    KAFKA_BROKERS: str = "127.0.0.1:9092"
    TOPIC_A: str = "orders"
    TOPIC_B: str = "payments"
    # Read by the external consumer service; published here so both share one .env
    GROUP_ID: str = "demo-consumers"

    HTTP_PROBE_TIMEOUT_S: float = 10.0
    GRPC_UNARY_TIMEOUT_S: float = 5.0
    GRPC_STREAM_TIMEOUT_S: float = 10.0
    KAFKA_PRODUCE_TIMEOUT_S: float = 5.0

    FANOUT_MAX_CONCURRENCY: int = 4

    # Comma-separated "name=address" overrides applied by the target registry
    TARGET_ADDRESSES: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"

    def kafka_brokers(self) -> list[str]:
        return [b.strip() for b in self.KAFKA_BROKERS.split(",") if b.strip()]


settings = Settings()
