"""Forwarding of store events to a RabbitMQ queue."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict

import pika
from circuitbreaker import circuit

logger = logging.getLogger(__name__)


class RabbitMQPublisher:
    """Store listener that publishes each event as a persistent JSON message.

    Publishing goes through a per-instance circuit breaker: after
    ``failure_threshold`` consecutive broker errors further events fail fast
    with ``CircuitBreakerError`` until ``recovery_timeout`` seconds pass.
    Errors propagate to the event channel, which logs them without affecting
    other listeners.
    """

    def __init__(self, host: str, queue: str, failure_threshold: int = 5, recovery_timeout: int = 60) -> None:
        self.host = host
        self.queue = queue
        self._publish = circuit(
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
            name=f"rabbitmq-{host}-{queue}-{id(self)}",
        )(self._publish_once)

    def __call__(self, event: Dict[str, Any]) -> None:
        self._publish(event)

    def _publish_once(self, event: Dict[str, Any]) -> None:
        connection = pika.BlockingConnection(pika.ConnectionParameters(host=self.host))
        try:
            channel = connection.channel()
            channel.queue_declare(queue=self.queue, durable=True)
            channel.basic_publish(
                exchange="",
                routing_key=self.queue,
                body=json.dumps(event),
                properties=pika.BasicProperties(delivery_mode=2),
            )
        finally:
            connection.close()
        logger.info("[RabbitMQ] Published %s to queue %s", event.get("type"), self.queue)
