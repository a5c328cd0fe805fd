from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=flask_app.config.get('CORS_ORIGINS') or '*')

    from putt_trainer.main import main
    flask_app.register_blueprint(main)

    from putt_trainer.api.sessions import sessions
    # Mount session routes under /api/session to match the client's storage calls
    flask_app.register_blueprint(sessions, url_prefix='/api/session')

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates all tables."""
        import putt_trainer.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            click.echo('Database has been reset!')

    @click.command('prune-history')
    @click.option('--keep', default=50, show_default=True, help='Finished sessions to keep.')
    def prune_history_command(keep):
        """Deletes the oldest finished sessions beyond --keep."""
        from putt_trainer.store import SessionStore
        with flask_app.app_context():
            store = SessionStore()
            excess = store.count_finished() - keep
            if excess <= 0:
                click.echo('Nothing to prune.')
                return
            deleted = store.delete_oldest(excess)
            flask_app.logger.info(f"[prune] deleted={deleted} keep={keep}")
            click.echo(f'Deleted {deleted} session(s).')

    @click.command('history')
    @click.option('--limit', default=10, show_default=True)
    def history_command(limit):
        """Lists the most recent finished sessions."""
        from putt_trainer.store import SessionStore
        from putt_trainer.services.practice.sessions import format_duration, format_score
        with flask_app.app_context():
            for s in SessionStore().history(limit):
                summary = s.session_summary
                duration = format_duration(summary.duration) if summary else '-'
                penalties = ','.join(str(n) for n in summary.penalty_positions) if summary else ''
                click.echo(f"{s.session_id}  score={format_score(s.final_score or 0)}  "
                           f"time={duration}  penalties=[{penalties}]")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(prune_history_command)
    flask_app.cli.add_command(history_command)

    return flask_app
