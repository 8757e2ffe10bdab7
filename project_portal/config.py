"""
Configuration management for the Student Project Portal backend
"""
import os
from pathlib import Path


class Config:
    """Base configuration"""

    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # CORS
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:3000,http://localhost:5000').split(',')

    # Project database
    DATA_DIR = Path(os.environ.get('DATA_DIR', './data')).resolve()
    PROJECTS_DB_FILE = os.environ.get('PROJECTS_DB_FILE', 'projects.json')
    PROJECTS_BACKUP_FILE = os.environ.get('PROJECTS_BACKUP_FILE', 'projects_backup.json')
    STORE_BACKEND = os.environ.get('STORE_BACKEND', 'file')  # or 'memory'

    # Submissions
    DEFAULT_SAVE_PATH = Path(os.environ.get('DEFAULT_SAVE_PATH', './project-2025')).resolve()
    # reject | suffix | merge - what to do when two submissions share a folder name
    FOLDER_COLLISION_POLICY = os.environ.get('FOLDER_COLLISION_POLICY', 'reject')

    # Upload settings
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # 50MB max file size
    UPLOAD_FOLDER = Path(os.environ.get('UPLOAD_FOLDER', './uploads/temp'))


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    STORE_BACKEND = 'memory'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment"""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
