import json
import re
from types import MappingProxyType
from typing import Mapping, Tuple

from .constants import DEFAULT_PROTOCOL, SUBJECT_MAX_LENGTH
from .models import AlertGroupNotification

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]+")


class MessageEnvelope(Mapping[str, str]):
    """
    Mensagem multi-protocolo do SNS (MessageStructure=json).
    Cada valor é o texto final do protocolo, não JSON aninhado.
    """

    def __init__(self, messages: Mapping[str, str]):
        if DEFAULT_PROTOCOL not in messages:
            raise ValueError(f"envelope requires a '{DEFAULT_PROTOCOL}' message")
        self._messages = MappingProxyType(dict(messages))

    def __getitem__(self, protocol: str) -> str:
        return self._messages[protocol]

    def __iter__(self):
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        return f"MessageEnvelope(protocols={list(self._messages)})"

    def to_json(self) -> str:
        return json.dumps(dict(self._messages), ensure_ascii=False)


def sanitize_subject(subject: str, max_length: int = SUBJECT_MAX_LENGTH) -> str:
    # SNS não aceita quebras de linha nem caracteres de controle no subject
    subject = _CONTROL_CHARS.sub(" ", subject)
    if len(subject) <= max_length:
        return subject
    if max_length <= 3:
        return subject[:max_length]
    return subject[: max_length - 3] + "..."


def build_subject(notification: AlertGroupNotification, max_length: int = SUBJECT_MAX_LENGTH) -> str:
    subject = f"[{notification.status.value.upper()}:{len(notification.alerts)}] {notification.alertname}"
    return sanitize_subject(subject, max_length)


def build(rendered: Mapping[str, str], notification: AlertGroupNotification,
          max_subject_length: int = SUBJECT_MAX_LENGTH) -> Tuple[MessageEnvelope, str]:
    return MessageEnvelope(rendered), build_subject(notification, max_subject_length)
