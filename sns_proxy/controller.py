import logging
from typing import Optional

from flask import Flask, request

from .constants import (
    BUILD_TIME,
    BUILD_VERSION,
    SERVICE_NAME,
    SNS_PROTOCOLS,
    SNS_TOPIC_ARN,
    SUBJECT_MAX_LENGTH,
    TEMPLATE_OVERRIDES,
    TEMPLATES_DIR,
)
from .dispatcher import DispatchConfig, Dispatcher, DispatchResult, FailureKind
from .publisher import Publisher
from .renderer import load_templates
from .services import SNSBrokerClient
from .utils import short

logger = logging.getLogger(__name__)


def build_dispatcher(client=None) -> Dispatcher:
    """
    Monta o Dispatcher a partir do ambiente. Templates ilegíveis levantam
    TemplateLoadError aqui, antes do servidor aceitar requisições.
    """
    templates = load_templates(SNS_PROTOCOLS, TEMPLATES_DIR, TEMPLATE_OVERRIDES)
    logger.info("Loaded %d templates (%s) from %s", len(templates), ", ".join(templates), TEMPLATES_DIR)
    publisher = Publisher(SNSBrokerClient(client))
    config = DispatchConfig(
        templates=templates,
        publisher=publisher,
        protocols=SNS_PROTOCOLS,
        max_subject_length=SUBJECT_MAX_LENGTH,
    )
    return Dispatcher(config)


def _log_result(result: DispatchResult):
    if result.ok:
        logger.info(
            "Published group %s to %s: message_id=%s attempts=%d subject=%r",
            result.group_key, result.topic, result.message_id, result.attempts, result.subject,
        )
        if result.envelope is not None:
            for protocol, text in result.envelope.items():
                logger.debug("Rendered %s message: %s", protocol, short(text, 1000))
        return

    if result.failure is FailureKind.BAD_REQUEST:
        logger.warning("Rejected alert for topic %s: %s", result.topic, result.reason)
    elif result.failure is FailureKind.RENDER_FAILURE:
        logger.error(
            "Render failure for topic %s group %s protocol %s: %s",
            result.topic, result.group_key, result.protocol, result.reason,
        )
    elif result.failure is FailureKind.PUBLISH_FAILURE:
        logger.error(
            "Publish failure (%s) for topic %s group %s after %d attempt(s): %s",
            "transient" if result.transient else "permanent",
            result.topic, result.group_key, result.attempts, result.reason,
        )
    else:
        logger.warning("Dispatch for topic %s group %s ended as %s: %s",
                       result.topic, result.group_key, result.failure.value, result.reason)


def _response(result: DispatchResult):
    if result.ok:
        return {'status': 'accepted', 'messageId': result.message_id}, result.http_status
    body = {'status': 'error', 'error': result.failure.value, 'reason': result.reason}
    if result.failure is FailureKind.PUBLISH_FAILURE:
        body['transient'] = result.transient
        body['attempts'] = result.attempts
    return body, result.http_status


def create_app(dispatcher: Optional[Dispatcher] = None, default_topic: Optional[str] = SNS_TOPIC_ARN):
    app = Flask(__name__)
    if dispatcher is None:
        dispatcher = build_dispatcher()
    app.config['DISPATCHER'] = dispatcher
    app.config['DEFAULT_TOPIC'] = default_topic

    def handle_alert(topic_arn):
        logger.info("Handling alert for topic %s", topic_arn)
        try:
            result = dispatcher.dispatch(topic_arn, request.get_data(cache=False))
        except Exception:
            logger.exception("Unexpected error handling alert for topic %s", topic_arn)
            return {'status': 'error', 'error': 'internal_error', 'reason': 'unexpected error'}, 500
        _log_result(result)
        return _response(result)

    @app.route('/health', methods=['GET'])
    def health():
        logger.debug("Health-check from %s", request.remote_addr)
        return {'status': 'ok', 'service': SERVICE_NAME, 'version': BUILD_VERSION}, 200

    @app.route('/topics/<path:topic_arn>', methods=['POST'])
    def alert_for_topic(topic_arn):
        return handle_alert(topic_arn)

    @app.route('/alert', methods=['POST'])
    def alert():
        topic_arn = app.config['DEFAULT_TOPIC']
        if not topic_arn:
            logger.error("Alert received on /alert but SNS_TOPIC_ARN is not configured")
            return {'status': 'error', 'error': 'no_topic', 'reason': 'SNS_TOPIC_ARN is not configured'}, 500
        return handle_alert(topic_arn)

    @app.errorhandler(404)
    def not_found(_exc):
        logger.debug("Route %s is not handled", request.path)
        return 'Not Found', 404

    logger.info("Build time: %s", BUILD_TIME)
    logger.info("Build version: %s", BUILD_VERSION)
    return app
