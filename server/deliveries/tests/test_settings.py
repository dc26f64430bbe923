"""
Tests for the test-database switch in the project settings.
"""
import importlib

import webhookhub.settings as project_settings


def reload_settings(monkeypatch, **env):
    """Reload the project settings module under the given environment."""
    with monkeypatch.context() as m:
        m.setattr('dotenv.load_dotenv', lambda *args, **kwargs: False)
        m.delenv('USE_SQLITE_FOR_TESTS', raising=False)
        m.delenv('PYTEST_CURRENT_TEST', raising=False)
        for key, value in env.items():
            m.setenv(key, value)
        reloaded = importlib.reload(project_settings)
        values = {
            'engine': reloaded.DATABASES['default']['ENGINE'],
            'broker': reloaded.CELERY_BROKER_URL,
            'testing': reloaded.TESTING,
        }
    importlib.reload(project_settings)
    return values


class TestDatabaseSwitch:
    """Tests for TESTING in webhookhub.settings."""

    def test_postgres_without_explicit_flag(self, monkeypatch):
        """Test importing pytest alone does not switch the database."""
        values = reload_settings(monkeypatch)

        assert values['testing'] is False
        assert values['engine'] == 'django.db.backends.postgresql'
        assert values['broker'] != 'memory://'

    def test_sqlite_with_flag(self, monkeypatch):
        values = reload_settings(monkeypatch, USE_SQLITE_FOR_TESTS='true')

        assert values['testing'] is True
        assert values['engine'] == 'django.db.backends.sqlite3'
        assert values['broker'] == 'memory://'

    def test_sqlite_during_a_test_run(self, monkeypatch):
        values = reload_settings(monkeypatch, PYTEST_CURRENT_TEST='test_x.py::test_y (call)')

        assert values['engine'] == 'django.db.backends.sqlite3'

    def test_test_settings_enable_flag(self, settings):
        assert settings.TESTING is True
        assert settings.DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3'
