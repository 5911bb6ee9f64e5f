#!/usr/bin/env python3
import unittest
from unittest.mock import Mock

import boto3
from botocore.exceptions import EndpointConnectionError, NoCredentialsError, ReadTimeoutError
from botocore.stub import Stubber

from sns_proxy.errors import PermanentError, TransientError
from sns_proxy.services import SNSBrokerClient

from samples import TOPIC


def make_client():
    return boto3.session.Session().client(
        "sns",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


class TestSNSBrokerClient(unittest.TestCase):
    def setUp(self):
        self.client = make_client()
        self.stubber = Stubber(self.client)
        self.broker = SNSBrokerClient(self.client)

    def test_publish_uses_json_message_structure(self):
        self.stubber.add_response(
            "publish",
            {"MessageId": "abc-123"},
            {
                "TopicArn": TOPIC,
                "Message": '{"default": "d"}',
                "Subject": "[FIRING:1] X",
                "MessageStructure": "json",
            },
        )
        with self.stubber:
            message_id = self.broker.publish(TOPIC, '{"default": "d"}', "[FIRING:1] X")
        self.assertEqual(message_id, "abc-123")
        self.stubber.assert_no_pending_responses()

    def test_throttling_is_transient(self):
        self.stubber.add_client_error("publish", service_error_code="Throttling",
                                      service_message="Rate exceeded", http_status_code=400)
        with self.stubber:
            with self.assertRaises(TransientError) as ctx:
                self.broker.publish(TOPIC, '{"default": "d"}', "s")
        self.assertEqual(ctx.exception.code, "Throttling")

    def test_server_error_is_transient(self):
        self.stubber.add_client_error("publish", service_error_code="InternalError",
                                      http_status_code=500)
        with self.stubber:
            with self.assertRaises(TransientError):
                self.broker.publish(TOPIC, '{"default": "d"}', "s")

    def test_not_found_is_permanent(self):
        self.stubber.add_client_error("publish", service_error_code="NotFound",
                                      service_message="Topic does not exist", http_status_code=404)
        with self.stubber:
            with self.assertRaises(PermanentError) as ctx:
                self.broker.publish(TOPIC, '{"default": "d"}', "s")
        self.assertEqual(ctx.exception.code, "NotFound")

    def test_authorization_is_permanent(self):
        self.stubber.add_client_error("publish", service_error_code="AuthorizationError",
                                      http_status_code=403)
        with self.stubber:
            with self.assertRaises(PermanentError):
                self.broker.publish(TOPIC, '{"default": "d"}', "s")

    def test_connection_errors_are_transient(self):
        client = Mock()
        client.publish.side_effect = EndpointConnectionError(endpoint_url="https://sns.us-east-1.amazonaws.com")
        with self.assertRaises(TransientError):
            SNSBrokerClient(client).publish(TOPIC, "{}", "s")

        client.publish.side_effect = ReadTimeoutError(endpoint_url="https://sns.us-east-1.amazonaws.com")
        with self.assertRaises(TransientError):
            SNSBrokerClient(client).publish(TOPIC, "{}", "s")

    def test_missing_credentials_is_permanent(self):
        client = Mock()
        client.publish.side_effect = NoCredentialsError()
        with self.assertRaises(PermanentError):
            SNSBrokerClient(client).publish(TOPIC, "{}", "s")


if __name__ == '__main__':
    unittest.main()
