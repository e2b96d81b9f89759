"""Tests for the HTTP surface."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

import podcast_video.main as main_module
from podcast_video.api.routes_podcast import get_pipeline
from podcast_video.core.config import get_settings
from podcast_video.core.errors import ScriptGenerationError
from podcast_video.models.schemas import PipelineRun, RunState, Speaker, VideoOption
from podcast_video.services.resource_janitor import ResourceJanitor

VALID_FORM = {
    "apiKey": "key-1",
    "topicText": "Volcanoes",
    "manVoice": "en-US-Chirp3-HD-Charon",
    "womanVoice": "en-US-Chirp3-HD-Aoede",
}


@pytest.fixture
def pipeline(settings, logger):
    pipeline = MagicMock()
    pipeline.janitor = ResourceJanitor(settings, logger)
    final_path = Path(settings.output_dir) / "podcast_x.mp4"
    pipeline.run.return_value = PipelineRun(run_id="run_x", state=RunState.SUCCEEDED, final_path=final_path)
    pipeline.download_url.return_value = "/downloads/podcast_x.mp4"
    return pipeline


@pytest.fixture
def client(settings, pipeline, monkeypatch):
    monkeypatch.setattr(main_module, "settings", settings)
    monkeypatch.setattr(main_module, "get_pipeline", lambda: pipeline)
    main_module.app.dependency_overrides[get_settings] = lambda: settings
    main_module.app.dependency_overrides[get_pipeline] = lambda: pipeline
    with TestClient(main_module.app) as client:
        yield client
    main_module.app.dependency_overrides.clear()


def uploaded_files(settings):
    return [p for p in Path(settings.upload_dir).iterdir() if p.is_file()]


def test_missing_api_key_is_rejected(client, pipeline):
    form = dict(VALID_FORM, apiKey="")

    response = client.post("/generate-podcast", data=form)

    assert response.status_code == 400
    assert response.json() == {"error": "Google Cloud API key is required."}
    pipeline.run.assert_not_called()


def test_voice_outside_chirp_family_is_rejected(client, pipeline):
    form = dict(VALID_FORM, manVoice="en-US-Chirp-Man", womanVoice="plain-voice")

    response = client.post("/generate-podcast", data=form)

    assert response.status_code == 400
    assert response.json() == {"error": "Both voices must be selected from the Chirp family."}
    pipeline.run.assert_not_called()


def test_successful_generation_returns_download_url(client, pipeline):
    response = client.post("/generate-podcast", data=VALID_FORM)

    assert response.status_code == 200
    assert response.json() == {"downloadUrl": "/downloads/podcast_x.mp4"}
    pipeline.finalize.assert_called_once()


def test_request_defaults_are_applied(client, pipeline, settings):
    form = dict(VALID_FORM, podcastLength="abc", manVideoOption="library", manLibraryVideo="studio")

    client.post("/generate-podcast", data=form)

    request = pipeline.run.call_args.args[0]
    assert request.podcast_length_minutes == 5.0
    assert request.language_code == settings.default_language_code
    assert request.voices == {Speaker.MAN: VALID_FORM["manVoice"], Speaker.WOMAN: VALID_FORM["womanVoice"]}
    assert request.selections[Speaker.MAN].option == VideoOption.LIBRARY
    assert request.selections[Speaker.MAN].library_key == "studio"
    assert request.selections[Speaker.WOMAN].option == VideoOption.DEFAULT


def test_uploads_are_saved_and_registered_with_the_run(client, pipeline, settings):
    files = {
        "topicFile": ("my notes.txt", b"lava facts", "text/plain"),
        "womanVideoFile": ("me.mp4", b"video-bytes", "video/mp4"),
    }
    form = dict(VALID_FORM, womanVideoOption="custom")

    response = client.post("/generate-podcast", data=form, files=files)

    assert response.status_code == 200
    request, registry = pipeline.run.call_args.args
    assert request.topic_file_path.read_bytes() == b"lava facts"
    assert request.topic_file_path.name.endswith("_my_notes.txt")
    assert request.selections[Speaker.WOMAN].upload_path.read_bytes() == b"video-bytes"
    assert request.topic_file_path in registry
    assert request.selections[Speaker.WOMAN].upload_path in registry


def test_oversized_upload_is_rejected_and_removed(client, pipeline, settings):
    settings.max_upload_bytes = 4
    files = {"topicFile": ("notes.txt", b"far too long", "text/plain")}

    response = client.post("/generate-podcast", data=VALID_FORM, files=files)

    assert response.status_code == 400
    assert uploaded_files(settings) == []
    pipeline.run.assert_not_called()


def test_pipeline_failure_returns_error_body(client, pipeline):
    pipeline.run.side_effect = ScriptGenerationError("API key not valid. Please pass a valid API key.")

    response = client.post("/generate-podcast", data=VALID_FORM)

    assert response.status_code == 500
    assert response.json() == {"error": "API key not valid. Please pass a valid API key."}
    pipeline.finalize.assert_not_called()


def test_video_library_lists_keys_per_speaker(client, settings):
    response = client.get("/video-library")

    assert response.status_code == 200
    assert response.json() == {
        "man": sorted(settings.video_library["man"]),
        "woman": sorted(settings.video_library["woman"]),
    }


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_shutdown_flushes_pipeline(settings, pipeline, monkeypatch):
    monkeypatch.setattr(main_module, "settings", settings)
    monkeypatch.setattr(main_module, "get_pipeline", lambda: pipeline)

    with TestClient(main_module.app):
        pass

    pipeline.shutdown.assert_called_once()
