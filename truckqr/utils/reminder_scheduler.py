from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from truckqr.utils.logging_config import get_logger

logger = get_logger(__name__)


class ReminderScheduler:
    def __init__(self, app=None):
        if app is None:
            from truckqr import create_app
            app = create_app()
        self.app = app
        self.scheduler = BackgroundScheduler(timezone=app.config['ALERT_TIMEZONE'])

    def start(self):
        """Start the daily expiration sweep unless disabled by configuration."""
        if not self.app.config.get('SCHEDULER_ENABLED', True):
            logger.info("Reminder scheduler disabled")
            return False

        self.scheduler.add_job(
            func=self.daily_expiration_sweep,
            trigger=CronTrigger(
                hour=self.app.config['ALERT_HOUR'],
                minute=self.app.config['ALERT_MINUTE'],
                timezone=self.app.config['ALERT_TIMEZONE'],
            ),
            id='daily_expiration_sweep',
            name='Daily document expiration sweep',
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.start()
        logger.info("Reminder scheduler started")
        return True

    def stop(self):
        """Stop the reminder scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Reminder scheduler stopped")

    def daily_expiration_sweep(self):
        from truckqr.services.alerts import AlertService

        with self.app.app_context():
            result = AlertService.run_sweep()
            logger.info(
                f"Daily sweep finished: {len(result.documents)} due, "
                f"notified={result.notified}, reason={result.skipped_reason}"
            )
            return result
