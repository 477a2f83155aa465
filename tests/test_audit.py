import json

from audit import AuditEventType, AuditLogger


def test_log_event(tmp_path):
    logger = AuditLogger(tmp_path)
    logger.log_event(AuditEventType.BACKUP, 'traefik', {'file': 'a.tar.gz'})

    event = json.loads((tmp_path / 'logs' / 'audit' / 'audit.log').read_text())
    assert event['event_type'] == 'BACKUP'
    assert event['target'] == 'traefik'
    assert event['details'] == {'file': 'a.tar.gz'}

    daily = list((tmp_path / 'logs' / 'audit' / 'daily').glob('*.txt'))
    assert len(daily) == 1
    assert 'BACKUP traefik (file=a.tar.gz)' in daily[0].read_text()


def test_recent_events_newest_first(tmp_path):
    logger = AuditLogger(tmp_path)
    logger.log_event(AuditEventType.START, 'traefik')
    logger.log_event(AuditEventType.STOP, 'traefik')
    logger.log_event(AuditEventType.START, 'traefik')

    events = logger.get_recent_events()
    assert [e['event_type'] for e in events] == ['START', 'STOP', 'START']
    assert len(logger.get_recent_events(limit=1)) == 1
    assert len(logger.get_recent_events(event_type=AuditEventType.START)) == 2


def test_corrupt_lines_skipped(tmp_path):
    logger = AuditLogger(tmp_path)
    logger.log_event(AuditEventType.RESTORE, 'traefik')
    with open(logger.log_file, 'a') as f:
        f.write('{not json\n\n')

    assert [e['event_type'] for e in logger.get_recent_events()] == ['RESTORE']


def test_disabled(tmp_path):
    AuditLogger(tmp_path, enabled=False).log_event(AuditEventType.START, 'traefik')
    assert not (tmp_path / 'logs').exists()
    assert AuditLogger(tmp_path).get_recent_events() == []


def test_write_failure_is_not_fatal(tmp_path):
    (tmp_path / 'logs').write_text('a file where the directory should be')
    AuditLogger(tmp_path).log_event(AuditEventType.START, 'traefik')


def test_trail_lives_under_logs(tmp_path):
    AuditLogger(tmp_path).log_event(AuditEventType.BACKUP, 'traefik')
    assert (tmp_path / 'logs' / 'audit' / 'audit.log').is_file()
    assert not (tmp_path / 'audit').exists()
