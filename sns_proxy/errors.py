from typing import Optional


class ProxyError(Exception):
    """Base de todos os erros do pipeline alerta -> SNS."""


class ParseError(ProxyError):
    """Payload do webhook inválido (resposta 400, nunca publicado)."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TemplateLoadError(ProxyError):
    """Template ilegível ou inválido na inicialização; aborta o processo."""


class RenderError(ProxyError):
    """Falha ao renderizar o template de um protocolo."""

    def __init__(self, protocol: str, cause: str):
        super().__init__(f"{protocol}: {cause}")
        self.protocol = protocol
        self.cause = cause


class PublishError(ProxyError):
    """Falha ao publicar no SNS. transient=True se os retries se esgotaram."""

    transient = False

    def __init__(self, message: str, code: Optional[str] = None, attempts: int = 1):
        super().__init__(message)
        self.code = code
        self.attempts = attempts


class TransientError(PublishError):
    transient = True


class PermanentError(PublishError):
    transient = False
