#!/usr/bin/env python3
import json
import unittest
from unittest.mock import patch

from sns_proxy.controller import create_app
from sns_proxy.dispatcher import DispatchConfig, Dispatcher
from sns_proxy.errors import PermanentError
from sns_proxy.publisher import Publisher
from sns_proxy.renderer import TemplateSet

from samples import SIMPLE_TEMPLATES, TOPIC, FakeBroker, raw


class TestController(unittest.TestCase):
    def setUp(self):
        self.broker = FakeBroker()
        config = DispatchConfig(
            templates=TemplateSet.from_sources(SIMPLE_TEMPLATES),
            publisher=Publisher(self.broker, max_attempts=3, wait_seconds=0, max_wait_seconds=0),
            protocols=("default", "email", "sms"),
        )
        self.app = create_app(Dispatcher(config), default_topic=TOPIC)
        self.client = self.app.test_client()

    def test_health(self):
        resp = self.client.get('/health')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['status'], 'ok')

    def test_not_found(self):
        resp = self.client.get('/nope')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_data(as_text=True), 'Not Found')

    def test_publish_to_path_topic(self):
        resp = self.client.post(f'/topics/{TOPIC}', data=raw(), content_type='application/json')
        self.assertEqual(resp.status_code, 202)
        self.assertEqual(resp.get_json(), {'status': 'accepted', 'messageId': 'msg-1'})
        topic, body, subject = self.broker.calls[0]
        self.assertEqual(topic, TOPIC)
        self.assertEqual(subject, "[FIRING:3] HighCPU")
        self.assertIn("default", json.loads(body))

    def test_publish_to_default_topic(self):
        resp = self.client.post('/alert', data=raw())
        self.assertEqual(resp.status_code, 202)
        self.assertEqual(self.broker.calls[0][0], TOPIC)

    def test_default_topic_not_configured(self):
        self.app.config['DEFAULT_TOPIC'] = None
        resp = self.client.post('/alert', data=raw())
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()['error'], 'no_topic')
        self.assertEqual(self.broker.calls, [])

    def test_bad_request(self):
        resp = self.client.post(f'/topics/{TOPIC}', data=b'{"status": "firing", "alerts": "x"}')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['error'], 'bad_request')
        self.assertEqual(self.broker.calls, [])

    def test_publish_failure(self):
        self.broker.outcomes.append(PermanentError("NotFound: Topic does not exist", code="NotFound"))
        with self.assertLogs('sns_proxy.controller', level='ERROR') as logs:
            resp = self.client.post(f'/topics/{TOPIC}', data=raw())
        self.assertEqual(resp.status_code, 500)
        body = resp.get_json()
        self.assertEqual(body['error'], 'publish_failure')
        self.assertFalse(body['transient'])
        self.assertEqual(body['attempts'], 1)
        # contexto suficiente no log, sem o conteúdo do alerta
        self.assertIn(TOPIC, logs.output[0])
        self.assertIn('HighCPU', logs.output[0])
        self.assertNotIn('CPU usage above 90%', logs.output[0])

    def test_unexpected_error_returns_500(self):
        with patch.object(Dispatcher, 'dispatch', side_effect=RuntimeError("boom")):
            resp = self.client.post(f'/topics/{TOPIC}', data=raw())
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()['error'], 'internal_error')


if __name__ == '__main__':
    unittest.main()
