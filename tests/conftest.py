"""Shared fixtures: isolated config and database, mock OpenAI client, seeded sources."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from summaryr.config.app_config import clear_config_cache
from summaryr.db.database import init_db
from summaryr.db.documents_repository import ChunkRecord, create_document, replace_chunks, update_document
from summaryr.db.videos_repository import create_video, replace_segments, update_video
from summaryr.web.api import create_app
from summaryr.web.deps import get_llm

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run every test against its own config file, uploads dir and database."""
    config_path = tmp_path / "summaryr.yaml"
    config_path.write_text(
        f"""
paths:
  data_dir: {tmp_path / "data"}
  db_path: {tmp_path / "data" / "summaryr.db"}
  uploads_dir: {tmp_path / "data" / "uploads"}
"""
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SUMMARYR_CONFIG", str(config_path))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    clear_config_cache()

    init_db(tmp_path / "data" / "summaryr.db")
    yield tmp_path
    clear_config_cache()


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def mock_llm_client():
    """Mock OpenAI wrapper that never calls the network."""
    client = MagicMock()
    client.config = MagicMock()
    client.config.model = "test-model"
    client.simple_chat.return_value = "en"
    client.simple_json.return_value = {"flashcards": []}
    client.transcribe.return_value = {"text": "Hello from the recording."}
    return client


@pytest.fixture
def ready_video():
    """Factory for a ready video with transcript segments."""

    def _make(texts: list[str] | None = None, user: str = USER_ID):
        texts = texts or [
            "Photosynthesis converts light into chemical energy.",
            "It takes place in the chloroplasts of plant cells.",
        ]
        video = create_video(user_id=user, title="Biology 101", status="ready")
        replace_segments(
            video.id,
            [
                {"text": text, "start": index * 5.0, "end": (index + 1) * 5.0}
                for index, text in enumerate(texts)
            ],
        )
        update_video(video.id, duration=len(texts) * 5.0)
        return video

    return _make


@pytest.fixture
def ready_document():
    """Factory for a ready document with extracted text."""

    def _make(text: str = "Cells are the basic unit of life. " * 20, user: str = USER_ID, language: str = "en"):
        document = create_document(user_id=user, title="Cells.pdf", file_type="pdf", status="ready")
        replace_chunks(document.id, [ChunkRecord(chunk_index=0, content=text, page_number=1)])
        update_document(document.id, extracted_text=text, page_count=1, language=language)
        return document

    return _make


@pytest.fixture
def app(isolated_env, mock_llm_client):
    """API app wired to the test database and the mock OpenAI client."""
    app = create_app(db_path=isolated_env / "data" / "summaryr.db")
    app.dependency_overrides[get_llm] = lambda: mock_llm_client
    return app


@pytest.fixture
def client(app):
    """Test client authenticated as USER_ID."""
    with TestClient(app, headers={"X-User-Id": USER_ID}) as test_client:
        yield test_client
