"""
Audit logging for access grants and secure-view decisions.

Records are written as JSON lines (one file per day) through the ``audit``
logger so they can be shipped to whatever log pipeline the deployment uses.
"""

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime
from flask import request, has_request_context
from flask_login import current_user
from pythonjsonlogger import jsonlogger


audit_logger = logging.getLogger('kaleereads.audit')

MASKED_KEYS = ('password', 'token', 'secret')


def init_audit_logger(app):
    """Attach a daily-rotated JSON handler writing into AUDIT_LOG_DIR."""
    logs_root = app.config.get('AUDIT_LOG_DIR')
    for handler in list(audit_logger.handlers):
        audit_logger.removeHandler(handler)
        handler.close()

    audit_logger.setLevel(logging.INFO)
    if not logs_root:
        return

    os.makedirs(logs_root, exist_ok=True)
    handler = TimedRotatingFileHandler(os.path.join(logs_root, 'audit.log'), when='midnight',
                                       backupCount=30, encoding='utf-8', utc=True)
    handler.setFormatter(jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(message)s'))
    audit_logger.addHandler(handler)


def _mask(additional_info):
    masked = {}
    for k, v in additional_info.items():
        if k.lower() in MASKED_KEYS:
            masked[k] = '***'
        else:
            masked[k] = v
    return masked


def _build_log_record(action: str, subject=None, additional_info: dict = None):
    record = {
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'action': action,
        'actor': None,
        'subject_type': None,
        'subject_id': None,
        'ip': None,
        'details': None,
    }

    if has_request_context():
        record['ip'] = request.remote_addr

    if current_user and getattr(current_user, 'is_authenticated', False):
        record['actor'] = {'id': current_user.id, 'role': getattr(current_user, 'role', None)}

    if subject is not None:
        record['subject_type'] = subject.__class__.__name__
        record['subject_id'] = getattr(subject, 'id', None)

    if additional_info:
        record['details'] = _mask(additional_info)

    return record


def log_action(action: str, description: str, subject=None, additional_info: dict = None):
    """Write one audit entry. Failures are logged and never raised.

    Example: log_action('ACCESS_LINK_REVOKED', 'Access link revoked', subject=link)
    """
    try:
        audit_logger.info(description, extra=_build_log_record(action, subject, additional_info))
    except Exception:
        logging.getLogger(__name__).exception('Failed to write audit entry for %s', action)
