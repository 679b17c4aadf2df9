"""
Centralized path configuration for the git execution engine
Keeps log files and the audit database on the volume-mounted data directory
"""

import os

# The /app/data directory is mounted as a volume when running in a container
DATA_DIR = os.getenv('GITEXEC_DATA_DIR', '/app/data')

# Audit database (repository state captures)
DATABASE_PATH = os.path.join(DATA_DIR, 'gitexec.db')
DATABASE_URL = f'sqlite:///{DATABASE_PATH}'

LOG_DIR = os.path.join(DATA_DIR, 'logs')


# For development/testing outside a container
if not os.path.exists('/app') and 'GITEXEC_DATA_DIR' not in os.environ:
    DATA_DIR = './data'
    DATABASE_PATH = os.path.join(DATA_DIR, 'gitexec.db')
    DATABASE_URL = f'sqlite:///{DATABASE_PATH}'
    LOG_DIR = os.path.join(DATA_DIR, 'logs')
