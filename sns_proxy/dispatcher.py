"""Orquestração de uma requisição: valida, renderiza, monta o envelope e publica.

Received -> Validated -> Rendered -> Enveloped -> Published | Failed

O Dispatcher não faz log nem escreve resposta HTTP; devolve um DispatchResult
para o controller decidir o status e o que registrar.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .constants import DEFAULT_PROTOCOL, SUBJECT_MAX_LENGTH
from .envelope import MessageEnvelope, build
from .errors import ParseError, PublishError, RenderError
from .models import parse
from .publisher import Publisher
from .renderer import TemplateSet


class DispatchState(str, Enum):
    PUBLISHED = "published"
    FAILED = "failed"


class FailureKind(str, Enum):
    BAD_REQUEST = "bad_request"
    RENDER_FAILURE = "render_failure"
    PUBLISH_FAILURE = "publish_failure"
    CANCELLED = "cancelled"


_HTTP_STATUS = {
    FailureKind.BAD_REQUEST: 400,
    FailureKind.RENDER_FAILURE: 500,
    FailureKind.PUBLISH_FAILURE: 500,
    FailureKind.CANCELLED: 499,
}


@dataclass(frozen=True)
class DispatchResult:
    state: DispatchState
    topic: str
    failure: Optional[FailureKind] = None
    reason: str = ""
    group_key: str = ""
    subject: str = ""
    envelope: Optional[MessageEnvelope] = None
    message_id: Optional[str] = None
    attempts: int = 0
    transient: bool = False
    protocol: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is DispatchState.PUBLISHED

    @property
    def http_status(self) -> int:
        if self.ok:
            return 202
        return _HTTP_STATUS.get(self.failure, 500)


@dataclass(frozen=True)
class DispatchConfig:
    """Estado compartilhado entre requisições; imutável depois da inicialização."""

    templates: TemplateSet
    publisher: Publisher
    protocols: Tuple[str, ...]
    max_subject_length: int = SUBJECT_MAX_LENGTH

    def __post_init__(self):
        protocols = tuple(self.protocols)
        if DEFAULT_PROTOCOL not in protocols:
            raise ValueError(f"protocol list must include '{DEFAULT_PROTOCOL}': {protocols}")
        if len(set(protocols)) != len(protocols):
            raise ValueError(f"duplicate protocols: {protocols}")
        object.__setattr__(self, "protocols", protocols)


class Dispatcher:
    def __init__(self, config: DispatchConfig):
        self.config = config

    def dispatch(self, topic: str, raw: bytes, cancel_event: Optional[threading.Event] = None) -> DispatchResult:
        """
        Processa uma notificação e devolve o resultado tipado.

        cancel_event é opcional, para chamadores que detectam desconexão do
        cliente (o servidor Flask não detecta e não passa). Se estiver setado
        antes da publicação, o resultado é Failed(CANCELLED) com status 499;
        uma publicação já iniciada nunca é interrompida.
        """
        def cancelled():
            return cancel_event is not None and cancel_event.is_set()

        try:
            notification = parse(raw)
        except ParseError as exc:
            return DispatchResult(DispatchState.FAILED, topic, FailureKind.BAD_REQUEST, reason=exc.reason)

        group_key = notification.group_key
        rendered = {}
        for protocol in self.config.protocols:
            if cancelled():
                return DispatchResult(DispatchState.FAILED, topic, FailureKind.CANCELLED,
                                      reason="request cancelled before publish", group_key=group_key)
            try:
                rendered[protocol] = self.config.templates.render(protocol, notification)
            except RenderError as exc:
                return DispatchResult(DispatchState.FAILED, topic, FailureKind.RENDER_FAILURE,
                                      reason=exc.cause, group_key=group_key, protocol=exc.protocol)

        envelope, subject = build(rendered, notification, self.config.max_subject_length)

        # depois deste ponto a publicação não é interrompida
        if cancelled():
            return DispatchResult(DispatchState.FAILED, topic, FailureKind.CANCELLED,
                                  reason="request cancelled before publish", group_key=group_key,
                                  subject=subject, envelope=envelope)
        try:
            receipt = self.config.publisher.publish(topic, envelope, subject)
        except PublishError as exc:
            return DispatchResult(DispatchState.FAILED, topic, FailureKind.PUBLISH_FAILURE,
                                  reason=str(exc), group_key=group_key, subject=subject,
                                  envelope=envelope, attempts=exc.attempts, transient=exc.transient)

        return DispatchResult(DispatchState.PUBLISHED, topic, group_key=group_key, subject=subject,
                              envelope=envelope, message_id=receipt.message_id, attempts=receipt.attempts)
