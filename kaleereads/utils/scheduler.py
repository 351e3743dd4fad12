"""Background task scheduler for periodic cleanup tasks"""
from apscheduler.schedulers.background import BackgroundScheduler
import logging

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def init_scheduler(app):
    """Initialize APScheduler with Flask app context"""
    global scheduler

    if scheduler is not None:
        return  # Already initialized

    scheduler = BackgroundScheduler()
    scheduler.configure(
        jobstores={'default': {'type': 'memory'}},
        job_defaults={'coalesce': True, 'max_instances': 1}
    )

    scheduler.add_job(
        cleanup_access_links,
        'interval',
        minutes=app.config.get('ACCESS_LINK_CLEANUP_MINUTES', 15),
        args=[app],
        id='cleanup_access_links',
        name='Delete expired access links',
        replace_existing=True
    )

    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started")


def cleanup_access_links(app):
    """Delete expired access links; errors are logged and retried on the next run."""
    with app.app_context():
        from kaleereads.services.access_links import cleanup_expired_links

        try:
            return cleanup_expired_links()
        except Exception as e:
            logger.error(f"Error during access link cleanup: {e}")
            return None


def shutdown_scheduler():
    """Shutdown the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped")
    scheduler = None
