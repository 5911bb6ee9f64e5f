import os

# Configurações globais de ambiente
APP_PORT = int(os.getenv("APP_PORT", "9876"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").strip().lower()
SERVICE_NAME = "alertmanager-sns-proxy"

# Definidas no build da imagem
BUILD_VERSION = os.getenv("BUILD_VERSION", "undefined")
BUILD_TIME = os.getenv("BUILD_TIME", "undefined")

# Integração com AWS SNS
AWS_SNS_REGION = os.getenv("AWS_SNS_REGION") or None
SNS_TOPIC_ARN = os.getenv("SNS_TOPIC_ARN") or None
SNS_MAX_ATTEMPTS = max(1, int(os.getenv("SNS_MAX_ATTEMPTS", "3")))
SNS_RETRY_WAIT_SECONDS = float(os.getenv("SNS_RETRY_WAIT_SECONDS", "0.2"))
SNS_RETRY_MAX_WAIT_SECONDS = float(os.getenv("SNS_RETRY_MAX_WAIT_SECONDS", "2"))
SNS_TIMEOUT_SECONDS = float(os.getenv("SNS_TIMEOUT_SECONDS", "5"))

# Tamanho máximo do subject: o SNS rejeita subjects com 100 caracteres ou mais
SUBJECT_MAX_LENGTH = min(99, int(os.getenv("SUBJECT_MAX_LENGTH", "99")))

# Protocolos do envelope, na ordem de renderização ('default' é obrigatório)
DEFAULT_PROTOCOL = "default"
_protocols_env = os.getenv("SNS_PROTOCOLS", "default,email,sms").strip()
SNS_PROTOCOLS = tuple(p.strip().lower() for p in _protocols_env.split(",") if p.strip())

# Templates: um arquivo <protocolo>.tpl por protocolo, sobrescrevível via TEMPLATE_<PROTOCOLO>
PACKAGE_TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
TEMPLATES_DIR = os.getenv("TEMPLATES_DIR") or PACKAGE_TEMPLATES_DIR
TEMPLATE_OVERRIDES = {
    p: os.environ[f"TEMPLATE_{p.upper()}"]
    for p in SNS_PROTOCOLS
    if os.getenv(f"TEMPLATE_{p.upper()}")
}

# Erros do SNS tratados como transitórios (retry); o resto é permanente
SNS_TRANSIENT_ERROR_CODES = {
    "Throttling",
    "ThrottlingException",
    "ThrottledException",
    "RequestThrottled",
    "RequestThrottledException",
    "TooManyRequestsException",
    "RequestLimitExceeded",
    "KMSThrottling",
    "InternalError",
    "InternalFailure",
    "ServiceUnavailable",
    "RequestTimeout",
    "RequestTimeoutException",
}
