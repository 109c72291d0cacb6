import io

from app.riel.modules.media.service import MAX_UPLOAD_BYTES, StoredUpload, upload_key

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _upload(c, data, filename="poster.png", content_type="image/png"):
    return c.post(
        "/api/upload",
        data={"file": (io.BytesIO(data), filename, content_type)},
        content_type="multipart/form-data",
    )


def test_upload_stores_file_and_serves_it(admin):
    r = _upload(admin, PNG)
    assert r.status_code == 200
    body = r.json
    assert body["message"] == "File uploaded successfully"
    assert body["url"].startswith("/media/riel-films/")
    assert body["url"].endswith("-poster.png")
    assert not body["public_id"].endswith(".png")

    served = admin.get(body["url"])
    assert served.status_code == 200
    assert served.data == PNG


def test_upload_requires_a_file(admin):
    r = admin.post("/api/upload", data={}, content_type="multipart/form-data")
    assert r.status_code == 400
    assert r.json["error"] == "No file uploaded."


def test_upload_rejects_wrong_type(admin):
    r = _upload(admin, b"%PDF-1.4", filename="doc.pdf", content_type="application/pdf")
    assert r.status_code == 400
    assert r.json["error"] == "Invalid file type. Only JPG, PNG, GIF, WEBP allowed."


def test_upload_rejects_oversize(admin):
    r = _upload(admin, b"\x00" * (MAX_UPLOAD_BYTES + 1))
    assert r.status_code == 400
    assert r.json["error"] == "File size exceeds 5MB limit."


def test_upload_requires_login(client):
    assert _upload(client, PNG).status_code == 401


def test_upload_key_is_dated_and_safe():
    key = upload_key("riel-films/", "../../etc/My Poster.PNG")
    folder, day, name = key.split("/")
    assert folder == "riel-films"
    assert len(day) == 10
    assert name.endswith("-etc_My_Poster.PNG")
    assert StoredUpload(key=key, url="/media/" + key).public_id == key[: -len(".PNG")]


def test_missing_media_is_404(client):
    assert client.get("/media/riel-films/none.png").status_code == 404
