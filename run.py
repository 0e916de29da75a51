import os
from truckqr import create_app
from truckqr.utils.logging_config import get_logger
from truckqr.utils.reminder_scheduler import ReminderScheduler

logger = get_logger('truckqr.run')


if __name__ == '__main__':
    # Determine the environment
    env = os.getenv('FLASK_ENV', 'development')

    # Create the Flask app with appropriate configuration
    app = create_app(env)

    # Initialize and start the expiration sweep scheduler
    scheduler = ReminderScheduler(app)
    scheduler.start()

    port = int(os.getenv('PORT', 5000))
    logger.info(f"Starting TruckQR in {env} mode on {app.config.get('BASE_URL') or f'http://localhost:{port}'}")

    try:
        # The reloader would start a second scheduler in the child process
        app.run(debug=env == 'development', host='0.0.0.0', port=port, use_reloader=False)
    finally:
        scheduler.stop()
