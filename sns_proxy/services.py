import logging
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from .constants import AWS_SNS_REGION, SNS_TIMEOUT_SECONDS, SNS_TRANSIENT_ERROR_CODES
from .errors import PermanentError, TransientError

logger = logging.getLogger(__name__)


class BrokerClient(Protocol):
    """Interface mínima do broker: publica e devolve o message id."""

    def publish(self, topic: str, body: str, subject: str) -> str:
        ...


def create_sns_client(region: Optional[str] = AWS_SNS_REGION, timeout: float = SNS_TIMEOUT_SECONDS):
    # Retries do botocore desligados: a política de retry fica no Publisher
    config = Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )
    return boto3.session.Session().client("sns", region_name=region, config=config)


def classify_client_error(exc: ClientError):
    error = exc.response.get("Error", {})
    code = error.get("Code") or "Unknown"
    message = error.get("Message") or str(exc)
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 0
    if code in SNS_TRANSIENT_ERROR_CODES or status >= 500 or status == 429:
        return TransientError(f"{code}: {message}", code=code)
    return PermanentError(f"{code}: {message}", code=code)


class SNSBrokerClient:
    def __init__(self, client=None):
        self.client = client if client is not None else create_sns_client()

    def publish(self, topic: str, body: str, subject: str) -> str:
        try:
            resp = self.client.publish(
                TopicArn=topic,
                Message=body,
                Subject=subject,
                MessageStructure="json",
            )
        except ClientError as exc:
            raise classify_client_error(exc) from exc
        except (BotoConnectionError, ConnectTimeoutError, ReadTimeoutError) as exc:
            raise TransientError(str(exc), code=type(exc).__name__) from exc
        except BotoCoreError as exc:
            # credenciais ausentes, parâmetros inválidos etc.
            raise PermanentError(str(exc), code=type(exc).__name__) from exc

        logger.debug("SNS response: %s", resp)
        return resp["MessageId"]
