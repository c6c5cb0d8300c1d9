import json

import pytest
import requests
from click.testing import CliRunner

import longbow_labels
from conftest import FakeResponse
from conftest import FakeSession
from longbow_labels import labels
from longbow_labels.config import Config
from longbow_labels.scripts import create_labels
from longbow_labels.scripts.label_toolkit import cli


@pytest.fixture
def fake_session(monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(requests, 'Session', lambda: session)
    return session


def run(*args, **kwargs):
    return CliRunner().invoke(cli, ['--hide-progress', *args], **kwargs)


def test_existing_key_is_skipped_and_new_key_created(isolated_env, fake_session):
    (isolated_env / 'labels.txt').write_text('sev,High,Medium,Low\ncwe')
    fake_session.get_responses = [FakeResponse(200, 'false'), FakeResponse(200, 'true')]
    fake_session.post_responses = [FakeResponse(201, '{}')]

    result = run('--api-key', 'lb-secret', '--tenant-id', 'con_test')

    assert result.exit_code == 0
    assert 'Key already exists: sev' in result.stdout
    assert 'Created key: cwe\nCreated values: []' in result.stdout
    assert [call[1]['params'] for call in fake_session.get_calls] == [{'key': 'sev'}, {'key': 'cwe'}]
    assert json.loads(fake_session.post_calls[0][1]['data'])['availableValues'] == []


def test_failed_creation_does_not_stop_the_run(isolated_env, fake_session, monkeypatch):
    monkeypatch.setenv('LONGBOW_API_KEY', 'lb-secret')
    monkeypatch.setenv('LONGBOW_TENANT_ID', 'con_test')
    label_file = isolated_env / 'my_labels.txt'
    label_file.write_text('first,a\nsecond,b\n')
    fake_session.get_responses = [FakeResponse(200, 'true'), FakeResponse(200, 'true')]
    fake_session.post_responses = [FakeResponse(500, 'server on fire'), FakeResponse(201)]

    result = run(str(label_file))

    assert result.exit_code == 0
    assert 'Failed to create label first. HTTP status: 500\nserver on fire' in result.stdout
    assert 'Created key: second' in result.stdout
    assert len(fake_session.post_calls) == 2


def test_requests_go_to_selected_region(isolated_env, fake_session):
    (isolated_env / 'labels.txt').write_text('sev\n')
    fake_session.get_responses = [FakeResponse(200, 'false')]

    result = run('--api-key', 'lb-secret', '--tenant-id', 'con_test', '--region', 'eu')

    assert result.exit_code == 0
    assert fake_session.get_calls[0][0] == 'https://api.eu.longbow.security:443/v1/labels/name-valid'
    assert fake_session.get_calls[0][1]['headers']['X-Alta-Tenant'] == 'con_test'


def test_empty_lines_are_skipped_unless_kept(isolated_env, fake_session):
    (isolated_env / 'labels.txt').write_text(' \nsev\n')
    fake_session.get_responses = [FakeResponse(200, 'false')]

    result = run('--api-key', 'lb-secret', '--tenant-id', 'con_test')

    assert result.exit_code == 0
    assert [call[1]['params'] for call in fake_session.get_calls] == [{'key': 'sev'}]

    fake_session.get_calls.clear()
    fake_session.get_responses = [FakeResponse(200, 'false'), FakeResponse(200, 'false')]

    result = run('--api-key', 'lb-secret', '--tenant-id', 'con_test', '--keep-empty')

    assert result.exit_code == 0
    assert [call[1]['params'] for call in fake_session.get_calls] == [{'key': ''}, {'key': 'sev'}]


def test_missing_api_key_exits_before_any_request(isolated_env, fake_session):
    (isolated_env / 'labels.txt').write_text('sev,High\n')

    result = run('--tenant-id', 'con_test')

    assert result.exit_code == 1
    assert fake_session.get_calls == []
    assert fake_session.post_calls == []


def test_missing_label_file_exits(isolated_env, fake_session):
    result = run('--api-key', 'lb-secret', '--tenant-id', 'con_test', 'does_not_exist.txt')

    assert result.exit_code == 1
    assert fake_session.get_calls == []


def test_unreadable_label_file_exits(isolated_env, fake_session, monkeypatch):
    (isolated_env / 'labels.txt').write_text('sev,High\n')

    def deny(*args, **kwargs):
        raise PermissionError(13, 'Permission denied')

    monkeypatch.setattr(labels, 'open', deny, raising=False)

    result = run('--api-key', 'lb-secret', '--tenant-id', 'con_test')

    assert result.exit_code == 1
    assert fake_session.get_calls == []


def test_each_line_gets_its_own_framed_block(isolated_env, make_client, monkeypatch, capsys):
    (isolated_env / 'labels.txt').write_text('sev,High,Medium,Low\ncwe')
    config = Config()
    config.override_config({'globals': {'api_key': 'lb-secret', 'tenant_id': 'con_test', 'hide_progress': True}})
    client, _ = make_client(
        get_responses=[FakeResponse(200, 'false'), FakeResponse(200, 'true')],
        post_responses=[FakeResponse(201)],
    )
    monkeypatch.setattr(longbow_labels, 'config', config, raising=False)
    monkeypatch.setattr(longbow_labels, 'api', client, raising=False)

    summary = create_labels.main()

    assert capsys.readouterr().out == (
        '\n'
        'Key already exists: sev\n'
        '\n'
        'Created key: cwe\n'
        'Created values: []\n'
        '\n'
        '\n'
    )
    assert str(summary) == 'created: 1, already existing: 1, failed: 0, skipped: 0'
