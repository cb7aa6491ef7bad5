"""CLI configuration. Settings are read once; the database is bound on first use."""

from loguru import logger

_config = None
_db_initialized = False


def get_config() -> dict:
    global _config, _db_initialized
    if _config is None:
        from pomopoint.settings import load_config
        _config = load_config()
    if not _db_initialized:
        from storage.database.base import init_db
        init_db(_config['database_url'])
        _db_initialized = True
        logger.debug("CLI user={} home={}", _config['user_id'], _config['home'])
    return _config


def get_cli_user_id() -> str:
    return get_config()['user_id']


def get_api_url() -> str:
    return get_config()['api_url'].rstrip('/')
