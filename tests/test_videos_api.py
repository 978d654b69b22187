"""HTTP-level tests for /api/videos: ownership scoping, upload validation, download redirects, delete."""
from datetime import datetime, timedelta

from app.models import Video

TEN_MB = 10 * 1024 * 1024


def _video_part(name: str, data: bytes = b"\x00" * 1024, content_type: str = "video/mp4"):
    return ("videos", (name, data, content_type))


def _upload(client, headers, *parts):
    return client.post("/api/videos/upload", headers=headers, files=list(parts))


def test_end_to_end_upload_list_download_delete(client, user, auth_headers, media):
    headers = auth_headers(user)

    res = _upload(client, headers, _video_part("clip.mp4", b"\x00" * TEN_MB))
    assert res.status_code == 200
    body = res.json()
    assert body["message"]
    assert len(body["videos"]) == 1
    video_id = body["videos"][0]["id"]

    res = client.get("/api/videos", headers=headers)
    assert res.status_code == 200
    listed = res.json()
    assert len(listed) == 1
    assert listed[0]["originalName"] == "clip.mp4"
    assert listed[0]["size"] == 10485760
    assert listed[0]["userId"] == user.id

    res = client.get(f"/api/videos/download/{video_id}?quality=medium", headers=headers, follow_redirects=False)
    assert res.status_code == 302
    assert "/q_60/" in res.headers["location"]
    assert res.headers["content-disposition"] == 'attachment; filename="clip.mp4"'

    res = client.delete(f"/api/videos/{video_id}", headers=headers)
    assert res.status_code == 200
    assert res.json()["message"]

    assert client.get("/api/videos", headers=headers).json() == []
    assert media.assets == {}


def test_video_json_uses_camel_case_fields(client, user, auth_headers):
    res = _upload(client, auth_headers(user), _video_part("a.mp4"))
    video = res.json()["videos"][0]
    assert set(video) == {
        "id", "originalName", "filename", "url", "size", "format", "userId", "uploadDate", "publicId",
    }
    assert video["filename"] == video["publicId"]
    assert video["format"] == "mp4"


def test_upload_multiple_files_creates_one_record_each(client, user, auth_headers, db_session, media):
    res = _upload(
        client,
        auth_headers(user),
        _video_part("a.mp4", b"a" * 10),
        _video_part("b.webm", b"b" * 20, "video/webm"),
        _video_part("c.mov", b"c" * 30, "video/quicktime"),
    )
    assert res.status_code == 200
    rows = db_session.query(Video).filter(Video.user_id == user.id).all()
    assert sorted((v.original_name, v.size) for v in rows) == [("a.mp4", 10), ("b.webm", 20), ("c.mov", 30)]
    assert len(media.assets) == 3


def test_upload_without_files_is_400_and_writes_nothing(client, user, auth_headers, db_session):
    res = client.post("/api/videos/upload", headers=auth_headers(user))
    assert res.status_code == 400
    assert res.json() == {"message": "No files uploaded"}
    assert db_session.query(Video).count() == 0


def test_upload_rejects_non_video_before_transfer(client, user, auth_headers, media, db_session):
    res = _upload(client, auth_headers(user), _video_part("a.mp4"), _video_part("notes.txt", b"hi", "text/plain"))
    assert res.status_code == 415
    assert media.assets == {}
    assert db_session.query(Video).count() == 0


def test_upload_rejects_too_many_files(client, user, auth_headers, media):
    parts = [_video_part(f"{i}.mp4") for i in range(4)]
    res = _upload(client, auth_headers(user), *parts)
    assert res.status_code == 400
    assert media.assets == {}


def test_upload_rejects_oversized_file(client, user, auth_headers, media, settings):
    res = _upload(client, auth_headers(user), _video_part("big.mp4", b"\x00" * (settings.max_file_size_bytes + 1)))
    assert res.status_code == 413
    assert media.assets == {}


def test_upload_failure_persists_no_metadata(client, user, auth_headers, media, db_session):
    media.fail_uploads.add("bad.mp4")
    res = _upload(client, auth_headers(user), _video_part("good.mp4"), _video_part("bad.mp4"))
    assert res.status_code == 500
    body = res.json()
    assert "bad.mp4" in body["message"]
    assert body["error"]
    assert db_session.query(Video).count() == 0


def test_upload_requires_token(client, media):
    res = _upload(client, {}, _video_part("a.mp4"))
    assert res.status_code == 401
    assert media.assets == {}


def test_list_is_newest_first_and_scoped_to_owner(client, user, other_user, auth_headers, db_session):
    base = datetime(2024, 1, 1)
    for i, owner in enumerate([user, user, other_user, user]):
        db_session.add(Video(
            original_name=f"v{i}.mp4",
            filename=f"videos/v{i}",
            url=f"https://res.cloudinary.com/demo/video/upload/v1/videos/v{i}.mp4",
            size=i,
            format="mp4",
            user_id=owner.id,
            public_id=f"videos/v{i}",
            upload_date=base + timedelta(days=i),
        ))
    db_session.commit()

    names = [v["originalName"] for v in client.get("/api/videos", headers=auth_headers(user)).json()]
    assert names == ["v3.mp4", "v1.mp4", "v0.mp4"]

    names = [v["originalName"] for v in client.get("/api/videos", headers=auth_headers(other_user)).json()]
    assert names == ["v2.mp4"]


def test_list_requires_token(client):
    assert client.get("/api/videos").status_code == 401


def test_foreign_video_is_not_found_for_download_and_delete(client, user, other_user, auth_headers, media, db_session):
    res = _upload(client, auth_headers(user), _video_part("mine.mp4"))
    video_id = res.json()["videos"][0]["id"]
    intruder = auth_headers(other_user)

    assert client.get(f"/api/videos/download/{video_id}", headers=intruder, follow_redirects=False).status_code == 404
    res = client.delete(f"/api/videos/{video_id}", headers=intruder)
    assert res.status_code == 404
    assert res.json() == {"message": "Video not found"}

    assert db_session.query(Video).filter(Video.id == video_id).count() == 1
    assert media.destroyed == []
    assert len(client.get("/api/videos", headers=auth_headers(user)).json()) == 1


def test_missing_video_is_not_found(client, user, auth_headers):
    headers = auth_headers(user)
    assert client.get("/api/videos/download/does-not-exist", headers=headers, follow_redirects=False).status_code == 404
    assert client.delete("/api/videos/does-not-exist", headers=headers).status_code == 404


def test_download_original_redirects_to_stored_url(client, user, auth_headers):
    headers = auth_headers(user)
    video = _upload(client, headers, _video_part("a.mp4")).json()["videos"][0]
    res = client.get(f"/api/videos/download/{video['id']}", headers=headers, follow_redirects=False)
    assert res.status_code == 302
    assert res.headers["location"] == video["url"]


def test_download_rejects_unknown_quality(client, user, auth_headers):
    headers = auth_headers(user)
    video = _upload(client, headers, _video_part("a.mp4")).json()["videos"][0]
    res = client.get(f"/api/videos/download/{video['id']}?quality=ultra", headers=headers, follow_redirects=False)
    assert res.status_code == 422


def test_delete_keeps_record_when_media_delete_fails(client, user, auth_headers, media, db_session):
    headers = auth_headers(user)
    video_id = _upload(client, headers, _video_part("a.mp4")).json()["videos"][0]["id"]
    media.fail_destroy = True

    res = client.delete(f"/api/videos/{video_id}", headers=headers)
    assert res.status_code == 500
    assert db_session.query(Video).filter(Video.id == video_id).count() == 1

    media.fail_destroy = False
    assert client.delete(f"/api/videos/{video_id}", headers=headers).status_code == 200
    assert db_session.query(Video).filter(Video.id == video_id).count() == 0


def test_media_connectivity_check(client):
    res = client.get("/api/videos/test-cloudinary")
    assert res.status_code == 200
    assert res.json()["cloudinary"] == {"status": "ok"}


def test_pages_and_health_routes(client):
    assert client.get("/").status_code == 200
    assert client.get("/dashboard").status_code == 200
    assert client.get("/static/js/auth.js").status_code == 200
    assert client.get("/favicon.ico").status_code == 204
    assert client.get("/api/test").json()["message"]


def test_upload_refuses_declared_body_beyond_limits_before_parsing(client, user, auth_headers, media, settings, db_session):
    from app.config import get_settings
    from app.main import app

    small = settings.model_copy(update={"max_file_size_bytes": 1024, "max_files_per_upload": 2})
    app.dependency_overrides[get_settings] = lambda: small
    # Declared length exceeds 2 files * (1 KiB + part overhead).
    res = _upload(client, auth_headers(user), _video_part("big.mp4", b"\x00" * (64 * 1024)))
    assert res.status_code == 413
    assert res.json() == {"message": "Upload too large"}
    assert media.assets == {}
    assert db_session.query(Video).count() == 0


def test_upload_checks_token_before_reading_body(client, media):
    res = client.post(
        "/api/videos/upload",
        content=b"not a multipart body",
        headers={"Content-Type": "multipart/form-data; boundary=xyz"},
    )
    assert res.status_code == 401
    assert media.assets == {}


def test_upload_date_is_serialized_with_utc_offset(client, user, auth_headers):
    headers = auth_headers(user)
    uploaded = _upload(client, headers, _video_part("a.mp4")).json()["videos"][0]
    assert uploaded["uploadDate"].endswith("+00:00")

    listed = client.get("/api/videos", headers=headers).json()[0]
    assert datetime.fromisoformat(listed["uploadDate"]).utcoffset() == timedelta(0)
