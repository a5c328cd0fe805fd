import os

class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///putt-trainer.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Origins allowed to call the API (comma separated)
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173').split(',') if o.strip()]
    # Default number of sessions returned by the history endpoint
    HISTORY_DEFAULT_LIMIT = int(os.environ.get('HISTORY_DEFAULT_LIMIT', '50'))
