"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import json
import unittest

try:
    from ._env import ensure_test_env
except ImportError:
    from tests._env import ensure_test_env

ensure_test_env()

import httpx

from services.kibana.errors import MappingError, VersionError
from services.kibana.version_gate import VersionGate, parse_version
from services.kibana_alert_service import KibanaAlertResource


class FakeKibana:
    def __init__(self, version='7.8.0', responses=None):
        self.version = version
        self.responses = responses or {}
        self.calls = []
        self.version_timeouts = []

    async def discover_server_version(self, timeout=None):
        self.version_timeouts.append(timeout)
        return parse_version(self.version)

    async def perform_request(self, method, path, body=None, timeout=None):
        self.calls.append({'method': method, 'path': path, 'body': json.loads(body) if body else None, 'timeout': timeout})
        response = self.responses.get((method, path), b'')
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(body)
        return response


def _echo_with_id(alert_id):
    def respond(body):
        payload = json.loads(body)
        payload['id'] = alert_id
        payload.setdefault('alertTypeId', '.index-threshold')
        payload.setdefault('consumer', 'alerts')
        payload.setdefault('enabled', True)
        return json.dumps(payload).encode()
    return respond


def _not_found(path):
    request = httpx.Request('GET', f'http://kibana.test{path}')
    return httpx.HTTPStatusError('not found', request=request, response=httpx.Response(404, request=request))


SCENARIO_A = {
    'name': 'cpu-high',
    'schedule': [{'interval': '1m'}],
    'alert_type_id': '.index-threshold',
    'notify_when': 'onActiveAlert',
    'conditions': [{
        'threshold_comparator': '>',
        'time_window_size': 5,
        'time_window_unit': 'm',
        'time_field': '@timestamp',
        'index': ['metrics-*'],
        'threshold': [80],
    }],
}

STORED_ALERT = {
    'id': 'abc-123',
    'name': 'cpu-high',
    'tags': ['prod'],
    'alertTypeId': '.index-threshold',
    'schedule': {'interval': '1m'},
    'throttle': None,
    'notifyWhen': None,
    'enabled': True,
    'consumer': 'alerts',
    'params': {
        'thresholdComparator': '>',
        'timeWindowSize': 5,
        'timeWindowUnit': 'm',
        'timeField': '@timestamp',
        'index': ['metrics-*'],
        'threshold': [80],
        'aggType': 'count',
        'groupBy': 'all',
    },
    'actions': [{'id': 'action-1', 'group': 'default', 'actionTypeId': '.slack', 'params': {'message': 'hi'}}],
}


class KibanaAlertResourceTests(unittest.IsolatedAsyncioTestCase):
    def _handler(self, kibana):
        return KibanaAlertResource(
            transport=kibana,
            version_gate=VersionGate.from_strings('7.7.0', '7.11.0'),
            space_id='',
        )

    async def test_create_posts_alert_and_records_id(self):
        kibana = FakeKibana('7.8.0', {('POST', '/api/alerts/alert'): _echo_with_id('abc-123')})
        handler = self._handler(kibana)
        resource = handler.new_resource_data(SCENARIO_A)

        await handler.create(resource)

        self.assertEqual(resource.id, 'abc-123')
        self.assertEqual(len(kibana.calls), 1)
        body = kibana.calls[0]['body']
        self.assertNotIn('notifyWhen', body)
        self.assertEqual(body['params']['thresholdComparator'], '>')
        self.assertEqual(body['params']['index'], ['metrics-*'])
        self.assertEqual(body['params']['threshold'], [80])

    async def test_create_sends_notify_when_on_newer_kibana(self):
        kibana = FakeKibana('7.11.0', {('POST', '/api/alerts/alert'): _echo_with_id('abc-123')})
        handler = self._handler(kibana)
        await handler.create(handler.new_resource_data(SCENARIO_A))
        self.assertEqual(kibana.calls[0]['body']['notifyWhen'], 'onActiveAlert')

    async def test_create_failure_leaves_identity_unset(self):
        request = httpx.Request('POST', 'http://kibana.test/api/alerts/alert')
        error = httpx.HTTPStatusError('bad', request=request, response=httpx.Response(400, request=request))
        handler = self._handler(FakeKibana('7.8.0', {('POST', '/api/alerts/alert'): error}))
        resource = handler.new_resource_data(SCENARIO_A)

        with self.assertRaises(httpx.HTTPStatusError):
            await handler.create(resource)
        self.assertEqual(resource.id, '')

    async def test_create_with_malformed_action_makes_no_alert_call(self):
        kibana = FakeKibana('7.8.0')
        handler = self._handler(kibana)
        resource = handler.new_resource_data(dict(SCENARIO_A, actions=['oops']))

        with self.assertRaises(MappingError):
            await handler.create(resource)
        self.assertEqual(kibana.calls, [])
        self.assertEqual(resource.id, '')

    async def test_read_flattens_alert_into_state(self):
        kibana = FakeKibana('7.8.0', {('GET', '/api/alerts/alert/abc-123'): json.dumps(STORED_ALERT).encode()})
        handler = self._handler(kibana)
        resource = handler.new_resource_data(resource_id='abc-123')

        await handler.read(resource)

        self.assertEqual(resource.id, 'abc-123')
        self.assertEqual(resource.get('name'), 'cpu-high')
        self.assertEqual(resource.get('tags'), ['prod'])
        self.assertEqual(resource.get('schedule'), [{'interval': '1m'}])
        self.assertEqual(resource.get('conditions'), [{
            'threshold_comparator': '>',
            'time_window_size': 5,
            'time_window_unit': 'm',
            'time_field': '@timestamp',
            'index': ['metrics-*'],
            'threshold': [80.0],
            'aggregation_type': 'count',
            'group_by': 'all',
        }])
        self.assertEqual(resource.get('actions'), [
            {'id': 'action-1', 'group': 'default', 'action_type_id': '.slack', 'params': {'message': 'hi'}},
        ])

    async def test_read_missing_alert_clears_identity(self):
        path = '/api/alerts/alert/gone'
        kibana = FakeKibana('7.8.0', {('GET', path): _not_found(path)})
        handler = self._handler(kibana)
        resource = handler.new_resource_data(SCENARIO_A, resource_id='gone')

        await handler.read(resource)

        self.assertEqual(resource.id, '')
        self.assertEqual(len(kibana.calls), 1)

    async def test_import_state_reads_by_id(self):
        kibana = FakeKibana('7.8.0', {('GET', '/api/alerts/alert/abc-123'): json.dumps(STORED_ALERT).encode()})
        resource = await self._handler(kibana).import_state('abc-123')
        self.assertEqual(resource.id, 'abc-123')
        self.assertEqual(resource.get('consumer'), 'alerts')

    async def test_update_puts_alert(self):
        kibana = FakeKibana('7.8.0', {('PUT', '/api/alerts/alert/abc-123'): _echo_with_id('abc-123')})
        handler = self._handler(kibana)
        resource = handler.new_resource_data(SCENARIO_A, resource_id='abc-123').snapshot()
        resource.set('schedule', [{'interval': '5m'}])

        await handler.update(resource)

        self.assertEqual(len(kibana.calls), 1)
        call = kibana.calls[0]
        self.assertEqual((call['method'], call['path']), ('PUT', '/api/alerts/alert/abc-123'))
        self.assertEqual(call['body']['schedule'], {'interval': '5m'})
        self.assertNotIn('alertTypeId', call['body'])
        self.assertNotIn('enabled', call['body'])
        self.assertEqual(resource.get('schedule'), [{'interval': '5m'}])

    async def test_update_toggles_enabled_when_changed(self):
        kibana = FakeKibana('7.8.0', {('PUT', '/api/alerts/alert/abc-123'): _echo_with_id('abc-123')})
        handler = self._handler(kibana)
        resource = handler.new_resource_data(SCENARIO_A, resource_id='abc-123').snapshot()
        resource.set('enabled', False)

        await handler.update(resource)

        self.assertEqual([c['path'] for c in kibana.calls], [
            '/api/alerts/alert/abc-123',
            '/api/alerts/alert/abc-123/_disable',
        ])
        self.assertFalse(resource.get('enabled'))

    async def test_update_disables_alert_without_prior_state(self):
        kibana = FakeKibana('7.8.0', {('PUT', '/api/alerts/alert/abc-123'): _echo_with_id('abc-123')})
        handler = self._handler(kibana)
        resource = handler.new_resource_data(dict(SCENARIO_A, enabled=False), resource_id='abc-123')

        await handler.update(resource)

        self.assertEqual([c['path'] for c in kibana.calls], [
            '/api/alerts/alert/abc-123',
            '/api/alerts/alert/abc-123/_disable',
        ])
        self.assertFalse(resource.get('enabled'))

    async def test_update_skips_toggle_when_server_already_matches(self):
        kibana = FakeKibana('7.8.0', {('PUT', '/api/alerts/alert/abc-123'): _echo_with_id('abc-123')})
        handler = self._handler(kibana)
        resource = handler.new_resource_data(SCENARIO_A, resource_id='abc-123')

        await handler.update(resource)

        self.assertEqual([c['path'] for c in kibana.calls], ['/api/alerts/alert/abc-123'])
        self.assertTrue(resource.get('enabled'))

    async def test_delete_clears_identity(self):
        kibana = FakeKibana('7.8.0')
        handler = self._handler(kibana)
        resource = handler.new_resource_data(SCENARIO_A, resource_id='abc-123')

        await handler.delete(resource, timeout=3.0)

        self.assertEqual(resource.id, '')
        self.assertEqual(kibana.calls, [{'method': 'DELETE', 'path': '/api/alerts/alert/abc-123', 'body': None, 'timeout': 3.0}])
        self.assertEqual(kibana.version_timeouts, [3.0])

    async def test_delete_failure_keeps_identity(self):
        error = httpx.ConnectError('refused')
        handler = self._handler(FakeKibana('7.8.0', {('DELETE', '/api/alerts/alert/abc-123'): error}))
        resource = handler.new_resource_data(SCENARIO_A, resource_id='abc-123')

        with self.assertRaises(httpx.ConnectError):
            await handler.delete(resource)
        self.assertEqual(resource.id, 'abc-123')

    async def test_every_operation_rejects_old_kibana_without_alert_calls(self):
        kibana = FakeKibana('7.5.0')
        handler = self._handler(kibana)
        for operation in ('create', 'read', 'update', 'delete'):
            with self.subTest(operation=operation):
                resource = handler.new_resource_data(SCENARIO_A, resource_id='abc-123')
                with self.assertRaises(VersionError) as ctx:
                    await getattr(handler, operation)(resource)
                self.assertIn('7.7.0', str(ctx.exception))
                self.assertIn('7.5.0', str(ctx.exception))
                self.assertEqual(resource.id, 'abc-123')
        self.assertEqual(kibana.calls, [])

    async def test_space_prefix_is_applied(self):
        kibana = FakeKibana('8.0.0', {('POST', '/s/ops/api/alerts/alert'): _echo_with_id('abc-123')})
        handler = KibanaAlertResource(transport=kibana, version_gate=VersionGate.from_strings('7.7.0', '7.11.0'), space_id='ops')
        resource = handler.new_resource_data(SCENARIO_A)
        await handler.create(resource)
        self.assertEqual(resource.id, 'abc-123')


if __name__ == '__main__':
    unittest.main()
