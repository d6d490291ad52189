from feels.core.config import settings
from feels.vibe.artifacts import ImageModerationResult, ModerationResult

FLAGGED = ModerationResult(safe=False, flagged=True, categories=["harassment"])


def test_vibe_routes_require_auth(client):
    r = client.post("/api/vibe/analyze-text", json={"text": "hello"})
    assert r.status_code == 401


def test_invalid_token_is_rejected(client):
    r = client.post(
        "/api/vibe/analyze-text",
        json={"text": "hello"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert r.status_code == 401


def test_analyze_text_requires_text(client, login, vibe):
    _, headers = login()
    r = client.post("/api/vibe/analyze-text", json={}, headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Text is required"
    assert vibe.calls == []


def test_analyze_text_moderates_then_analyzes(client, login, vibe):
    _, headers = login()
    r = client.post("/api/vibe/analyze-text", json={"text": "feeling great"}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"emotion": "funny", "confidence": 0.8, "mood": "coping", "intensity": 6}
    assert vibe.calls == ["moderate_content", "analyze_text_emotion"]


def test_flagged_text_is_rejected_before_analysis(client, login, vibe):
    _, headers = login()
    vibe.text_moderation = FLAGGED
    r = client.post("/api/vibe/analyze-text", json={"text": "mean words"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == {"message": "Content not appropriate", "flagged": ["harassment"]}
    assert vibe.calls == ["moderate_content"]


def test_upstream_failure_is_a_generic_500(client, login, vibe):
    _, headers = login()
    vibe.fail_with = "analyze_text_emotion"
    r = client.post("/api/vibe/analyze-text", json={"text": "hi"}, headers=headers)
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to analyze emotion"


def test_analyze_image(client, login, vibe):
    _, headers = login()
    r = client.post(
        "/api/vibe/analyze-image",
        files={"image": ("selfie.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["emotion"] == "funny"
    assert vibe.calls == ["moderate_image", "analyze_image_emotion"]


def test_flagged_image_is_rejected_before_analysis(client, login, vibe):
    _, headers = login()
    vibe.image_moderation = ImageModerationResult(safe=False, description="not allowed")
    r = client.post(
        "/api/vibe/analyze-image",
        files={"image": ("selfie.jpg", b"\xff\xd8\xff", "image/jpeg")},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["detail"] == {
        "message": "Image content not appropriate",
        "description": "not allowed",
    }
    assert vibe.calls == ["moderate_image"]


def test_analyze_image_requires_a_file(client, login, vibe):
    _, headers = login()
    r = client.post("/api/vibe/analyze-image", headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Image is required"


def test_oversized_upload_is_rejected(client, login, vibe):
    _, headers = login()
    too_big = b"\x00" * (settings.MAX_UPLOAD_SIZE + 1)
    r = client.post(
        "/api/vibe/analyze-image",
        files={"image": ("huge.jpg", too_big, "image/jpeg")},
        headers=headers,
    )
    assert r.status_code == 413
    assert vibe.calls == []


def test_transcribe_audio_runs_text_pipeline(client, login, vibe):
    _, headers = login()
    r = client.post(
        "/api/vibe/transcribe-audio",
        files={"audio": ("clip.webm", b"fake audio", "audio/webm")},
        headers=headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["transcription"] == vibe.transcript
    assert body["emotion"]["mood"] == "coping"
    assert vibe.calls == ["transcribe_audio", "moderate_content", "analyze_text_emotion"]


def test_flagged_transcript_is_rejected(client, login, vibe):
    _, headers = login()
    vibe.text_moderation = FLAGGED
    r = client.post(
        "/api/vibe/transcribe-audio",
        files={"audio": ("clip.webm", b"fake audio", "audio/webm")},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "Audio content not appropriate"
    assert "analyze_text_emotion" not in vibe.calls


def test_generate_meme_requires_fields(client, login, vibe):
    _, headers = login()
    r = client.post(
        "/api/vibe/generate-meme",
        json={"emotion": "funny", "mood": "coping"},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing required fields"
    assert vibe.calls == []


def test_flagged_meme_text_never_reaches_generation(client, login, vibe):
    _, headers = login()
    vibe.text_moderation = FLAGGED
    r = client.post(
        "/api/vibe/generate-meme",
        json={"emotion": "angry", "mood": "heated", "user_text": "mean words"},
        headers=headers,
    )
    assert r.status_code == 400
    assert "generate_meme" not in vibe.calls


def test_generate_meme_failure_is_a_generic_500(client, login, vibe):
    _, headers = login()
    vibe.fail_with = "generate_meme"
    r = client.post(
        "/api/vibe/generate-meme",
        json={"emotion": "funny", "mood": "coping", "user_text": "lol"},
        headers=headers,
    )
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to generate meme"


def test_exam_vibe_end_to_end(client, login, vibe):
    _, headers = login(first_name="Sam")
    text = "I bombed my exam but I'm laughing about it 😂"

    r = client.post("/api/vibe/analyze-text", json={"text": text}, headers=headers)
    assert r.status_code == 200
    emotion = r.json()
    assert emotion == {"emotion": "funny", "mood": "coping", "confidence": 0.8, "intensity": 6}

    r = client.post(
        "/api/vibe/generate-meme",
        json={"emotion": emotion["emotion"], "mood": emotion["mood"], "user_text": text},
        headers=headers,
    )
    assert r.status_code == 200
    meme = r.json()
    assert meme["image_url"]
    assert "😂" in meme["caption"] or "#" in meme["caption"]

    r = client.post(
        "/api/posts/",
        json={
            "content": text,
            "ai_prompt": meme["prompt"],
            "media_url": meme["image_url"],
            "media_type": "meme",
            "detected_emotion": emotion["emotion"],
            "mood": emotion["mood"],
            "caption": meme["caption"],
        },
        headers=headers,
    )
    assert r.status_code == 200
    post_id = r.json()["id"]

    r = client.get("/api/posts/feed", headers=headers)
    assert r.status_code == 200
    feed = r.json()
    assert [p["id"] for p in feed] == [post_id]
    assert feed[0]["likes_count"] == 0
    assert feed[0]["is_liked"] is False
    assert feed[0]["user"]["first_name"] == "Sam"
