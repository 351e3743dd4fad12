import json
import logging
import os
from datetime import datetime, timedelta

from kaleereads import db
from kaleereads.models import AccessLink
from kaleereads.services import access_links
from kaleereads.services.access_links import create_access_link, generate_token
from kaleereads.utils import scheduler as scheduler_module
from kaleereads.utils.audit_log import audit_logger


def test_cleanup_job_deletes_expired_links(app, reader, book):
    db.session.add(AccessLink(token=generate_token(), user_id=reader.id, book_id=book.id,
                              expires_at=datetime.utcnow() - timedelta(hours=1)))
    db.session.commit()

    assert scheduler_module.cleanup_access_links(app) == 1
    assert AccessLink.query.count() == 0


def test_cleanup_job_logs_and_survives_errors(app, monkeypatch, caplog):
    def boom():
        raise RuntimeError('db down')

    monkeypatch.setattr(access_links, 'cleanup_expired_links', boom)
    with caplog.at_level(logging.ERROR):
        assert scheduler_module.cleanup_access_links(app) is None
    assert 'db down' in caplog.text


def test_init_scheduler_registers_interval_job(app, monkeypatch):
    started = []

    class DummyScheduler:
        running = False

        def configure(self, **kwargs):
            self.config = kwargs

        def add_job(self, func, trigger, **kwargs):
            self.job = (func, trigger, kwargs)

        def start(self):
            started.append(True)
            self.running = True

        def shutdown(self):
            self.running = False

    monkeypatch.setattr(scheduler_module, 'BackgroundScheduler', DummyScheduler)
    monkeypatch.setattr(scheduler_module, 'scheduler', None)
    app.config['ACCESS_LINK_CLEANUP_MINUTES'] = 7

    scheduler_module.init_scheduler(app)
    func, trigger, kwargs = scheduler_module.scheduler.job
    assert func is scheduler_module.cleanup_access_links
    assert trigger == 'interval'
    assert kwargs['minutes'] == 7
    assert kwargs['args'] == [app]
    assert started == [True]

    # second call is a no-op
    scheduler_module.init_scheduler(app)
    assert started == [True]

    scheduler_module.shutdown_scheduler()
    assert scheduler_module.scheduler is None


def test_audit_entries_are_json_and_mask_tokens(app, reader, book):
    link = create_access_link(reader.id, book.id, 1)
    for handler in audit_logger.handlers:
        handler.flush()

    path = os.path.join(app.config['AUDIT_LOG_DIR'], 'audit.log')
    with open(path, encoding='utf-8') as f:
        entries = [json.loads(line) for line in f if line.strip()]

    created = [e for e in entries if e['action'] == 'ACCESS_LINK_CREATED']
    assert created
    assert created[-1]['subject_id'] == link.id
    assert created[-1]['details']['book_id'] == book.id
    assert link.token not in json.dumps(entries)
