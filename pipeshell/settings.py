import os

CONFIG_PATH = os.getenv('CONFIG_PATH', os.path.join(os.getcwd(), 'data', 'config.json'))
SCRIPTS_DIR = os.getenv('SCRIPTS_DIR', os.path.join(os.getcwd(), 'scripts'))
SECRET_KEY = os.getenv('SECRET_KEY')

HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '8080'))

# Only used when the config file is created for the first time.
ADMIN_USERNAME = os.getenv('ADMIN_USERNAME', 'admin')
ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', 'admin123')

SESSION_HOURS = 24


def as_config():
    return {
        'CONFIG_PATH': CONFIG_PATH,
        'SCRIPTS_DIR': SCRIPTS_DIR,
        'SECRET_KEY': SECRET_KEY,
        'ADMIN_USERNAME': ADMIN_USERNAME,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
    }
