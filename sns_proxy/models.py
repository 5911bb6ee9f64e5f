"""Modelos pydantic do payload de webhook do Alertmanager.

Formato: https://prometheus.io/docs/alerting/latest/configuration/#webhook_config
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ParseError


class AlertStatus(str, Enum):
    FIRING = "firing"
    RESOLVED = "resolved"


class AlertEntry(BaseModel):
    """Alerta individual dentro de uma notificação de grupo."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    status: AlertStatus
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    # endsAt = 0001-01-01T00:00:00Z significa "ainda aberto"; repassado sem interpretação
    starts_at: Optional[datetime] = Field(default=None, alias="startsAt")
    ends_at: Optional[datetime] = Field(default=None, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")
    fingerprint: Optional[str] = None

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def _null_as_empty(cls, v):
        return {} if v is None else v


class AlertGroupNotification(BaseModel):
    """Notificação de um grupo de alertas enviada pelo Alertmanager."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    schema_version: str = Field(default="4", alias="version")
    group_key: str = Field(default="", alias="groupKey")
    status: AlertStatus
    receiver: str = ""
    group_labels: Dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: Dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: Dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field(default="", alias="externalURL")
    alerts: List[AlertEntry] = Field(default_factory=list)

    # null no JSON equivale a campo ausente
    @field_validator("group_labels", "common_labels", "common_annotations", mode="before")
    @classmethod
    def _null_map_as_empty(cls, v):
        return {} if v is None else v

    @field_validator("alerts", mode="before")
    @classmethod
    def _null_list_as_empty(cls, v):
        return [] if v is None else v

    @property
    def alertname(self) -> str:
        return self.common_labels.get("alertname", "")

    def template_context(self) -> dict:
        """Campos expostos aos templates, com os nomes do JSON original."""
        context = self.model_dump(by_alias=True)
        context["status"] = self.status.value
        for alert in context["alerts"]:
            alert["status"] = alert["status"].value
        context["notification"] = self
        return context


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors()[:5]:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse(raw: bytes) -> AlertGroupNotification:
    """Valida o corpo bruto da requisição. Levanta ParseError se inválido."""
    if not raw:
        raise ParseError("empty request body")
    try:
        return AlertGroupNotification.model_validate_json(raw)
    except ValidationError as exc:
        raise ParseError(_describe(exc)) from exc
    except (ValueError, UnicodeDecodeError) as exc:
        raise ParseError(f"invalid JSON body: {exc}") from exc
