import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated; '*' allows any origin
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', '*').split(',') if o.strip()]
    # Defaults applied to new games when the client sends no options
    MAX_TEAMS = int(os.environ.get('MAX_TEAMS', '4'))
    MAX_PLAYERS_PER_TEAM = int(os.environ.get('MAX_PLAYERS_PER_TEAM', '6'))
    MAX_ROUNDS = int(os.environ.get('MAX_ROUNDS', '10'))
    # Advertised to clients only; the server runs no round timers
    ROUND_TIME_LIMIT_SEC = int(os.environ.get('ROUND_TIME_LIMIT_SEC', '60'))
    PORT = int(os.environ.get('PORT', '3000'))
