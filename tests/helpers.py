# tests/helpers.py
from app.core.file_security import AttachmentBlob
from app.core.security import create_access_token

# PNG 시그니처 흉내 (내용은 검사하지 않음)
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def auth_headers(user_id: str) -> dict:
    token = create_access_token({"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


def diary_form(**overrides) -> dict:
    form = {
        "title": "Seoul trip",
        "content": "경복궁 다녀옴",
        "mood": "happy",
        "weather": "sunny",
        "diary_date": "2024-10-01",
        "is_public": "true",
        "state": "서울",
        "latitude": "37.57",
        "longitude": "126.97",
    }
    form.update(overrides)
    return form


def blobs(count: int) -> list[AttachmentBlob]:
    return [
        AttachmentBlob(filename=f"photo{i}.png", content_type="image/png", data=PNG_BYTES)
        for i in range(count)
    ]


def image_files(count: int) -> list[tuple]:
    """TestClient multipart용 파일 목록"""
    return [("images", (f"photo{i}.png", PNG_BYTES, "image/png")) for i in range(count)]
