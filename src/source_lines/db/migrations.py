from alembic.config import Config

from alembic import command


def run_migrations(db_url: str, ini_path: str = "alembic.ini") -> None:
    alembic_cfg = Config(ini_path)
    alembic_cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(alembic_cfg, "head")
