import logging
import os
from typing import Dict, Iterable, Iterator, Mapping, Optional

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from .errors import RenderError, TemplateLoadError
from .models import AlertGroupNotification

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".tpl"


def _format_time(value, fmt="%Y-%m-%d %H:%M:%S UTC"):
    if value is None:
        return "N/A"
    return value.strftime(fmt)


def build_environment() -> Environment:
    env = Environment(
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["time"] = _format_time
    return env


class TemplateSet(Mapping[str, Template]):
    """
    Templates compilados por protocolo (protocolo -> Template).
    Carregado uma vez na inicialização e somente leitura depois disso.
    """

    def __init__(self, templates: Dict[str, Template]):
        self._templates = dict(templates)

    @classmethod
    def from_sources(cls, sources: Mapping[str, str], env: Optional[Environment] = None) -> "TemplateSet":
        env = env or build_environment()
        compiled = {}
        for protocol, source in sources.items():
            try:
                compiled[protocol] = env.from_string(source)
            except TemplateError as exc:
                raise TemplateLoadError(f"invalid template for protocol '{protocol}': {exc}") from exc
        return cls(compiled)

    def __getitem__(self, protocol: str) -> Template:
        return self._templates[protocol]

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def render(self, protocol: str, notification: AlertGroupNotification) -> str:
        template = self._templates.get(protocol)
        if template is None:
            raise RenderError(protocol, "no template configured")
        try:
            return template.render(**notification.template_context())
        except TemplateError as exc:
            raise RenderError(protocol, str(exc)) from exc
        except Exception as exc:
            # qualquer erro de filtro/expressão durante a substituição
            raise RenderError(protocol, f"{type(exc).__name__}: {exc}") from exc


def template_path(protocol: str, templates_dir: str, overrides: Optional[Mapping[str, str]] = None) -> str:
    if overrides and overrides.get(protocol):
        return overrides[protocol]
    return os.path.join(templates_dir, f"{protocol}{TEMPLATE_SUFFIX}")


def load_templates(protocols: Iterable[str], templates_dir: str, overrides: Optional[Mapping[str, str]] = None) -> TemplateSet:
    """
    Lê e compila o template de cada protocolo.
    Levanta TemplateLoadError se algum arquivo não puder ser lido ou compilado.
    """
    sources = {}
    for protocol in protocols:
        path = template_path(protocol, templates_dir, overrides)
        try:
            with open(path, "r", encoding="utf-8") as fp:
                sources[protocol] = fp.read()
        except OSError as exc:
            raise TemplateLoadError(f"cannot read template for protocol '{protocol}' at {path}: {exc}") from exc
        logger.debug("Loaded template for protocol %s from %s", protocol, path)
    return TemplateSet.from_sources(sources)
