import logging
from dataclasses import dataclass

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .constants import SNS_MAX_ATTEMPTS, SNS_RETRY_MAX_WAIT_SECONDS, SNS_RETRY_WAIT_SECONDS
from .envelope import MessageEnvelope
from .errors import PublishError, TransientError
from .services import BrokerClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishReceipt:
    message_id: str
    attempts: int


def _log_retry(retry_state):
    exc = retry_state.outcome.exception()
    logger.warning(
        "Transient SNS error on attempt %s, retrying in %.2fs: %s",
        retry_state.attempt_number,
        retry_state.next_action.sleep if retry_state.next_action else 0,
        exc,
    )


class Publisher:
    """
    Publica o envelope no tópico, com retry limitado apenas para erros transitórios.
    Erros permanentes sobem na primeira tentativa.
    """

    def __init__(self, client: BrokerClient, max_attempts: int = SNS_MAX_ATTEMPTS,
                 wait_seconds: float = SNS_RETRY_WAIT_SECONDS,
                 max_wait_seconds: float = SNS_RETRY_MAX_WAIT_SECONDS):
        self.client = client
        self.max_attempts = max(1, max_attempts)
        self.wait_seconds = wait_seconds
        self.max_wait_seconds = max_wait_seconds

    def _retrying(self) -> Retrying:
        return Retrying(
            reraise=True,
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.wait_seconds, max=self.max_wait_seconds),
            retry=retry_if_exception_type(TransientError),
            before_sleep=_log_retry,
        )

    def publish(self, topic: str, envelope: MessageEnvelope, subject: str) -> PublishReceipt:
        body = envelope.to_json()
        attempts = 0
        try:
            for attempt in self._retrying():
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    message_id = self.client.publish(topic, body, subject)
        except PublishError as exc:
            exc.attempts = attempts
            raise
        return PublishReceipt(message_id=message_id, attempts=attempts)
