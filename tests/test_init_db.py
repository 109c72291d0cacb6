from werkzeug.security import check_password_hash

from app.riel.models import Base, User
from app.riel.modules.site_settings.models import SiteSettings
from scripts._db_utils import create_script_engine, script_session
from scripts.init_db import seed_only


def test_seed_is_idempotent(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path/'seed.db'}"
    Base.metadata.create_all(bind=create_script_engine(url))
    monkeypatch.setenv("ADMIN_EMAIL", "Owner@RielFilms.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "first-password")

    seed_only(database_url=url)
    monkeypatch.setenv("ADMIN_PASSWORD", "second-password")
    seed_only(database_url=url)

    with script_session(url) as s:
        [admin] = s.query(User).all()
        assert admin.email == "owner@rielfilms.com"
        assert admin.role == "admin"
        assert check_password_hash(admin.password_hash, "first-password")
        assert s.query(SiteSettings).count() == 1


def test_sqlite_engines_can_cross_threads():
    from app.riel.db import engine_options

    assert engine_options("sqlite:///x.db")["connect_args"]["check_same_thread"] is False
    assert "connect_args" not in engine_options("postgresql://u:p@db/riel")
