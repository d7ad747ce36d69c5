"""Tests for application config loading."""

from pathlib import Path

from summaryr.config.app_config import clear_config_cache, get_config_path, load_app_config


class TestLoadAppConfig:
    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SUMMARYR_CONFIG", str(tmp_path / "missing.yaml"))
        clear_config_cache()

        config = load_app_config()

        assert config.llm.chat_model == "gpt-4o-mini"
        assert config.transcription.model == "whisper-1"
        assert config.transcription.min_chunk_bytes == 10240
        assert config.processing.document_chunk_size == 5000
        assert config.processing.max_document_flashcards == 50
        assert config.db_path == Path("data/summaryr.db")

    def test_partial_override(self, tmp_path, monkeypatch):
        """Sections in the YAML file replace only the keys they name."""
        path = tmp_path / "custom.yaml"
        path.write_text("llm:\n  chat_model: gpt-4o\nprocessing:\n  default_question_count: 10\n")
        monkeypatch.setenv("SUMMARYR_CONFIG", str(path))
        clear_config_cache()

        config = load_app_config()

        assert config.llm.chat_model == "gpt-4o"
        assert config.llm.temperature == 0.7
        assert config.processing.default_question_count == 10
        assert config.processing.generation_chunk_size == 10000

    def test_env_var_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SUMMARYR_CONFIG", str(tmp_path / "x.yaml"))
        assert get_config_path() == tmp_path / "x.yaml"

    def test_uses_fixture_paths(self, isolated_env):
        config = load_app_config()
        assert config.uploads_dir == isolated_env / "data" / "uploads"

    def test_cached(self):
        assert load_app_config() is load_app_config()
        assert load_app_config(force_reload=True) is not None

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-abc")
        assert load_app_config().llm.get_api_key() == "sk-abc"
